from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    allowed_origins: str = Field(default="http://localhost:9999")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Datamart connection
    database_url: str = Field(default="sqlite:///./datamart.db")
    database_schema: str = Field(default="")
    database_pool_size: int = Field(default=5)
    database_max_overflow: int = Field(default=10)
    database_bootstrap: bool = Field(default=False)  # create tables, local development only

    # Panel limits
    application_summary_limit: int = Field(default=50)
    panel_limit: int = Field(default=20)
    trend_months: int = Field(default=6)
    iso_trend_limit: int = Field(default=10)

    # Seeds the trend synthesizer when set
    synthetic_seed: Optional[int] = Field(default=None)

    @property
    def allowed_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    @property
    def schema_name(self) -> Optional[str]:
        return self.database_schema.strip() or None

    def validate(self) -> None:
        errors = []
        if not self.database_url:
            errors.append("DATABASE_URL is required")
        if self.application_summary_limit < 1:
            errors.append("APPLICATION_SUMMARY_LIMIT must be positive")
        if self.panel_limit < 1:
            errors.append("PANEL_LIMIT must be positive")
        if not 1 <= self.trend_months <= 60:
            errors.append("TREND_MONTHS must be between 1 and 60")
        if self.iso_trend_limit < 1:
            errors.append("ISO_TREND_LIMIT must be positive")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")


@lru_cache
def get_settings() -> Settings:
    """Build the process-wide settings once; injected wherever they are needed."""
    return Settings()
