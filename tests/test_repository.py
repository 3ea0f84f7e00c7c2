from datetime import datetime

import pytest

from core.config import Settings
from core.dashboard import ById, ByName
from core.database import DatabaseManager, DatamartRepository
from core.exceptions import DatamartUnavailableError


@pytest.fixture
def repository(seeded_session):
    return DatamartRepository(seeded_session)


def test_ping(repository):
    assert repository.ping() is True


def test_portfolio_rows_only_latest_snapshots(repository):
    """Test that historical snapshots are excluded from the latest-snapshot views."""
    rows = repository.portfolio_rows()
    assert sorted(row["application_name"] for row in rows) == ["Billing", "Payments"]
    assert sorted(row["score"] for row in rows) == [1.8, 3.2]


def test_health_history_includes_old_snapshots(repository):
    rows = repository.health_history_rows()
    assert [row["score"] for row in rows] == [2.4, 1.8, 3.2]


def test_application_summary_rows_carry_business_unit(repository):
    rows = {row["application_name"]: row for row in repository.application_summary_rows()}
    assert rows["Billing"]["business_unit"] == "Finance"
    assert rows["Payments"]["business_unit"] is None


def test_security_rows_sum_violations(repository):
    rows = repository.security_rows()
    assert [row["application_name"] for row in rows] == ["Payments", "Billing"]
    assert rows[1]["total_violations"] == 55
    assert rows[1]["critical_violations"] == 3


def test_criterion_names_are_sorted(repository):
    names = repository.criterion_names()
    assert names == sorted(names)
    assert "Performance Efficiency" in names


def test_performance_rows(repository):
    rows = repository.performance_rows("Performance Efficiency")
    assert [(row["application_name"], row["performance_score"]) for row in rows] == [
        ("Payments", 2.1),
        ("Billing", 2.9),
    ]
    assert rows[0]["efficiency_score"] == 2.1


def test_find_latest_snapshot_by_id_and_name(repository):
    assert repository.find_latest_snapshot(ById(1))["snapshot_id"] == "s1"
    assert repository.find_latest_snapshot(ByName("Payments"))["application_id"] == 2
    assert repository.find_latest_snapshot(ByName("Ghost")) is None


def test_application_violation_rows_skip_empty_rules(repository, add_snapshot):
    add_snapshot("s3", 3, "Quiet", datetime(2024, 3, 1), violations=[("Java", "Clean rule", 0, 0)])
    assert repository.application_violation_rows(ByName("Quiet")) == []
    assert len(repository.application_violation_rows(ById(1))) == 3


def test_iso_trend_rows_newest_first(repository):
    rows = repository.iso_trend_rows(ById(1))
    assert [row["analysis_date"] for row in rows] == [datetime(2024, 3, 10), datetime(2024, 1, 15)]
    assert rows[0]["security"] == 0.97
    assert rows[0]["maintainability"] == 0.92
    assert rows[0]["performance"] is None
    assert rows[1]["security"] is None


def test_iso_trend_rows_respect_limit(repository):
    assert len(repository.iso_trend_rows(ById(1), limit=1)) == 1
    assert repository.iso_trend_rows(ByName("Ghost")) == []


def test_query_failure_raises_datamart_unavailable():
    """Test that driver errors surface as DatamartUnavailableError."""
    manager = DatabaseManager(Settings(database_url="sqlite://"))
    session = next(manager.get_session())
    try:
        with pytest.raises(DatamartUnavailableError) as exc_info:
            DatamartRepository(session).portfolio_rows()
        assert exc_info.value.operation == "portfolio"
    finally:
        session.close()
        manager.dispose()
