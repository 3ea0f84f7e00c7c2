import os
from datetime import datetime

import pytest
from unittest.mock import patch

# Set test environment variables before importing app modules
os.environ["ALLOWED_ORIGINS"] = "http://localhost:3000"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SYNTHETIC_SEED"] = "7"

from core.config import Settings
from core.database import (
    DatabaseManager,
    DimSnapshot,
    DimApplication,
    AppHealthScore,
    AppSizingMeasure,
    AppViolationsMeasure,
    get_db_session,
)


@pytest.fixture(autouse=True)
def mock_settings():
    """Mock settings for all tests."""
    with patch.dict(os.environ, {
        "ALLOWED_ORIGINS": "http://localhost:3000",
        "DATABASE_URL": "sqlite://",
        "SYNTHETIC_SEED": "7",
    }):
        yield


@pytest.fixture
def manager():
    """In-memory datamart with the schema created."""
    manager = DatabaseManager(Settings(database_url="sqlite://"))
    manager.create_tables()
    yield manager
    manager.dispose()


@pytest.fixture
def db_session(manager):
    session = manager.SessionLocal()
    yield session
    session.close()


@pytest.fixture
def add_snapshot(db_session):
    """Insert one snapshot with its scores, sizing and violations."""

    def _add(snapshot_id, application_id, application_name, analysis_date, is_latest=True,
             scores=None, compliance=None, sizing=None, violations=()):
        snapshot = DimSnapshot(
            snapshot_id=snapshot_id,
            application_id=application_id,
            application_name=application_name,
            analysis_date=analysis_date,
            is_latest=is_latest,
            year=analysis_date.year,
            year_month=analysis_date.strftime("%Y-%m"),
        )
        db_session.add(snapshot)

        scores = scores or {}
        compliance = compliance or {}
        for criterion in sorted(set(scores) | set(compliance)):
            db_session.add(AppHealthScore(
                snapshot_id=snapshot_id,
                business_criterion_name=criterion,
                score=scores.get(criterion),
                compliance_score=compliance.get(criterion),
            ))

        if sizing is not None:
            db_session.add(AppSizingMeasure(snapshot_id=snapshot_id, **sizing))

        for technology, rule_name, count, critical in violations:
            db_session.add(AppViolationsMeasure(
                snapshot_id=snapshot_id,
                technology=technology,
                rule_name=rule_name,
                nb_violations=count,
                critical_contributions=critical,
            ))
        db_session.commit()
        return snapshot

    return _add


@pytest.fixture
def seeded_session(db_session, add_snapshot):
    """Two applications: Billing (healthy, with history) and Payments (critical)."""
    add_snapshot(
        "s1-old", 1, "Billing", datetime(2024, 1, 15), is_latest=False,
        scores={"Total Quality Index": 2.4},
    )
    add_snapshot(
        "s1", 1, "Billing", datetime(2024, 3, 10),
        scores={
            "Total Quality Index": 3.2,
            "Architectural Design": 3.0,
            "Security": 3.4,
            "Performance Efficiency": 2.9,
            "Changeability": 3.1,
            "Robustness": 3.3,
            "ISO-5055-Security": 3.4,
        },
        compliance={"ISO-5055-Security": 0.97, "ISO-5055-Maintainability": 0.92},
        sizing={
            "nb_code_lines": 120000, "nb_files": 400, "nb_artifacts": 900,
            "technical_debt_total": 5000.0,
            "nb_complexity_high": 20, "nb_complexity_medium": 30, "nb_complexity_low": 10,
        },
        violations=[
            ("Java", "Avoid empty catch blocks", 40, 2),
            ("Java", "Avoid unused imports", 10, 0),
            ("SQL", "Avoid SELECT *", 5, 1),
        ],
    )
    add_snapshot(
        "s2", 2, "Payments", datetime(2024, 2, 20),
        scores={
            "Total Quality Index": 1.8,
            "Architectural Design": 2.2,
            "Security": 1.5,
            "Performance Efficiency": 2.1,
        },
        sizing={
            "nb_code_lines": 50000, "nb_files": 250, "nb_artifacts": 300,
            "technical_debt_total": 8000.0,
            "nb_complexity_high": 5, "nb_complexity_medium": 5, "nb_complexity_low": 5,
        },
        violations=[("Java", "Avoid SQL injection", 100, 7)],
    )
    db_session.add(DimApplication(application_name="Billing", business_unit="Finance", country="FR"))
    db_session.commit()
    return db_session


def _client_for(manager):
    from fastapi.testclient import TestClient
    from main import app

    def override_session():
        yield from manager.get_session()

    app.dependency_overrides[get_db_session] = override_session
    return app, TestClient(app)


@pytest.fixture
def client(manager, seeded_session):
    """Test client bound to the seeded datamart."""
    app, test_client = _client_for(manager)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def empty_client(manager):
    """Test client bound to a datamart with tables but no rows."""
    app, test_client = _client_for(manager)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def broken_client():
    """Test client bound to a datamart whose tables were never created."""
    broken = DatabaseManager(Settings(database_url="sqlite://"))
    app, test_client = _client_for(broken)
    yield test_client
    app.dependency_overrides.clear()
    broken.dispose()
