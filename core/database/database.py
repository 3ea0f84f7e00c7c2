"""
Database connection and session management.
"""
from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from core.config import Settings, get_settings


class DatabaseManager:
    """Manager for datamart connections and sessions."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker] = None

    def initialize(self):
        """Initialize database engine and session factory."""
        if self.engine is not None:
            return

        if self.settings is None:
            self.settings = get_settings()
        settings = self.settings

        execution_options: Dict[str, Any] = {}
        if settings.schema_name:
            # Models are declared schema-less; route them to the datamart schema
            execution_options["schema_translate_map"] = {None: settings.schema_name}

        if settings.database_url.startswith("sqlite"):
            # SQLite configuration for development and tests
            self.engine = create_engine(
                settings.database_url,
                connect_args={
                    "check_same_thread": False,
                    "timeout": 20,
                },
                poolclass=StaticPool,
                echo=settings.debug,
                execution_options=execution_options,
            )
        else:
            # PostgreSQL datamart
            self.engine = create_engine(
                settings.database_url,
                pool_size=settings.database_pool_size,
                max_overflow=settings.database_max_overflow,
                pool_pre_ping=True,
                echo=settings.debug,
                execution_options=execution_options,
            )

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine
        )

    def create_tables(self):
        """Create the datamart tables (local development and tests only)."""
        if self.engine is None:
            self.initialize()

        from .models import Base
        Base.metadata.create_all(bind=self.engine)

    def get_session(self) -> Generator[Session, None, None]:
        """Get a database session."""
        if self.engine is None:
            self.initialize()

        session = self.SessionLocal()  # type: ignore
        try:
            yield session
        finally:
            session.close()

    def dispose(self):
        """Release pooled connections."""
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            self.SessionLocal = None


# Global database manager instance
db_manager = DatabaseManager()


def get_db_session() -> Generator[Session, None, None]:
    """Dependency function to get database session."""
    yield from db_manager.get_session()


def initialize_database(settings: Settings):
    """Initialize the engine, creating tables only when bootstrapping is enabled."""
    db_manager.settings = settings
    db_manager.initialize()
    if settings.database_bootstrap:
        db_manager.create_tables()
