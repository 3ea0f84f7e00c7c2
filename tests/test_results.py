from datetime import datetime

from core.dashboard import ByName, DashboardResult, collect
from core.dashboard.models import HealthTrendPoint, TrendSeries
from core.dashboard.results import failure, to_payload
from core.exceptions import (
    ApplicationNotFoundError,
    DatamartUnavailableError,
    InvalidApplicationKeyError,
)


def _raise(error):
    def operation():
        raise error
    return operation


def test_success_envelope():
    """Test that records are flattened into plain data."""
    result = collect(lambda: [HealthTrendPoint(period="2024-01", avg_score=3.1)])
    assert result.status_code == 200
    assert result.to_dict() == {"success": True, "data": [{"period": "2024-01", "avg_score": 3.1}]}


def test_synthetic_results_are_flagged():
    series = TrendSeries(points=[HealthTrendPoint(period="2024-01", avg_score=3.1)], synthetic=True)
    result = collect(lambda: series)
    assert result.synthetic is True
    assert result.to_dict()["synthetic"] is True


def test_not_found_maps_to_404():
    result = collect(_raise(ApplicationNotFoundError(ByName("Ghost"))))
    assert result.status_code == 404
    assert result.to_dict() == {"success": False, "error": "Application not found"}


def test_invalid_key_maps_to_400():
    result = collect(_raise(InvalidApplicationKeyError("Application identifier must not be empty")))
    assert result.status_code == 400
    assert result.error == "Application identifier must not be empty"


def test_datamart_failure_maps_to_500_without_data():
    result = collect(_raise(DatamartUnavailableError("portfolio", RuntimeError("connection refused"))))
    assert result.status_code == 500
    assert "connection refused" in result.error
    assert "data" not in result.to_dict()


def test_unexpected_errors_stay_in_the_envelope():
    """Test that any other error becomes a 500 failure without data."""
    result = collect(_raise(KeyError("missing")))
    assert result.status_code == 500
    assert result.success is False
    assert "missing" in result.error
    assert "data" not in result.to_dict()


def test_payload_conversion():
    assert to_payload({"when": datetime(2024, 3, 10), "values": (1, 2)}) == {
        "when": "2024-03-10T00:00:00",
        "values": [1, 2],
    }


def test_failure_defaults_to_server_error():
    assert failure("boom") == DashboardResult(success=False, error="boom", status_code=500)
