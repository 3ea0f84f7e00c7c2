import random
from datetime import datetime

import pytest

from core.dashboard import MetricsAggregator, RandomTrendSynthesizer
from core.dashboard.aggregator import month_of


def _aggregator(seed=1):
    return MetricsAggregator(synthesizer=RandomTrendSynthesizer(seed=seed))


def _no_rows():
    return []


class TestPortfolioMetrics:
    """Tests for the executive KPIs."""

    def test_kpis(self):
        rows = [
            {"application_name": "A", "score": 3.2, "technical_debt_total": 5000.0,
             "nb_code_lines": 1000, "analysis_date": datetime(2024, 3, 10)},
            {"application_name": "B", "score": 1.8, "technical_debt_total": 8000.0,
             "nb_code_lines": 500, "analysis_date": datetime(2024, 2, 20)},
        ]
        metrics = _aggregator().portfolio_metrics(rows)

        assert metrics.total_applications == 2
        assert metrics.avg_health_score == 2.5
        assert metrics.total_technical_debt == 13000.0
        assert metrics.total_loc == 1500
        assert metrics.critical_risk_apps == 1
        assert metrics.last_analysis_date == datetime(2024, 3, 10)
        assert metrics.health_grade == "C"

    def test_empty_portfolio(self):
        """Test that an empty datamart yields zeros instead of failing."""
        metrics = _aggregator().portfolio_metrics([])
        assert metrics.to_dict() == {
            "total_applications": 0,
            "avg_health_score": 0.0,
            "total_technical_debt": 0.0,
            "total_loc": 0,
            "critical_risk_apps": 0,
            "last_analysis_date": None,
            "health_grade": "N/A",
        }


class TestRiskDistribution:
    """Tests for the risk buckets."""

    def test_counts_partition_the_portfolio(self):
        rows = [{"score": s} for s in (1.5, 1.9, 2.2, 2.7, 2.8, 3.1, 3.5, 3.9)]
        buckets = _aggregator().risk_distribution(rows)

        assert [b.label for b in buckets] == ["Critical", "High", "Medium", "Low"]
        assert [b.application_count for b in buckets] == [2, 1, 2, 3]
        assert sum(b.application_count for b in buckets) == len(rows)
        assert buckets[0].percentage == 25.0

    def test_empty_buckets_are_omitted(self):
        buckets = _aggregator().risk_distribution([{"score": 3.5}, {"score": 3.0}])
        assert len(buckets) == 1
        assert buckets[0].label == "Low"
        assert buckets[0].percentage == 100.0

    def test_no_rows(self):
        assert _aggregator().risk_distribution([]) == []


class TestApplicationSummaries:
    """Tests for the recent application list."""

    def test_latest_first_and_capped(self):
        rows = [
            {"application_name": f"App{i}", "score": 3.0, "technical_debt_total": 10.0,
             "analysis_date": datetime(2024, 1, 1 + i)}
            for i in range(10)
        ]
        summaries = _aggregator().application_summaries(rows, limit=3)
        assert [s.application_name for s in summaries] == ["App9", "App8", "App7"]

    def test_one_row_per_application(self):
        rows = [
            {"application_name": "A", "score": 2.1, "analysis_date": datetime(2024, 1, 1)},
            {"application_name": "A", "score": 3.4, "analysis_date": datetime(2024, 2, 1)},
        ]
        summaries = _aggregator().application_summaries(rows)
        assert len(summaries) == 1
        assert summaries[0].health_score == 3.4
        assert summaries[0].risk_level == "Low"
        assert summaries[0].business_unit is None


def test_technology_health_is_sorted_best_first():
    """Test that technologies are ordered by average score, descending."""
    rows = [
        {"technology": "COBOL", "application_name": "A", "score": 1.2},
        {"technology": "Java", "application_name": "B", "score": 3.8},
        {"technology": "SQL", "application_name": "C", "score": 2.5},
    ]
    result = _aggregator().technology_health(rows)
    assert [t.avg_score for t in result] == [3.8, 2.5, 1.2]
    assert [t.technology_name for t in result] == ["Java", "SQL", "COBOL"]


class TestPanels:
    """Tests for the architecture, security and performance panels."""

    @pytest.fixture
    def sizing_rows(self):
        rng = random.Random(3)
        return [
            {
                "application_name": f"App{i:02d}",
                "nb_code_lines": 1000 * (i + 1),
                "nb_complexity_high": rng.randint(0, 40),
                "nb_complexity_medium": rng.randint(0, 40),
                "nb_complexity_low": rng.randint(0, 40),
                "architecture_score": 2.0 + (i % 3) * 0.5,
            }
            for i in range(25)
        ]

    def test_architecture_summary_covers_every_application(self, sizing_rows):
        report = _aggregator().architecture_complexity(sizing_rows)
        summary = report.summary

        assert summary.total_applications == 25
        assert summary.high_complexity_apps + summary.medium_complexity_apps + summary.low_complexity_apps == 25
        assert len(report.applications) == 20
        assert report.applications[0].application_name == "App24"
        assert report.to_dict().keys() == {"summary", "applications"}

    def test_security_worst_first(self):
        rows = [
            {"application_name": "A", "security_score": 3.4, "critical_violations": 3, "total_violations": 55},
            {"application_name": "B", "security_score": 1.5, "critical_violations": 7, "total_violations": 100},
            {"application_name": "C", "security_score": 2.5, "critical_violations": None, "total_violations": None},
        ]
        report = _aggregator().security_metrics(rows)

        assert [a.application_name for a in report.applications] == ["B", "C", "A"]
        assert report.summary.total_critical_violations == 10
        assert report.summary.high_risk_applications == 1
        assert report.summary.medium_risk_applications == 1
        assert report.summary.low_risk_applications == 1
        assert report.applications[0].security_grade == "Poor"

    def test_performance_criterion_resolution(self):
        names = ["Architectural Design", "Performance Efficiency", "Security"]
        assert MetricsAggregator.resolve_performance_criterion(names) == "Performance Efficiency"
        assert MetricsAggregator.resolve_efficiency_criterion(names) == "Performance Efficiency"
        assert MetricsAggregator.resolve_performance_criterion(["Security"]) is None

    def test_performance_fallback_keeps_low_scores(self):
        rows = [
            {"application_name": "A", "score": 3.5, "nb_code_lines": 10},
            {"application_name": "B", "score": 2.9, "nb_code_lines": 20},
            {"application_name": "C", "score": 1.4, "nb_code_lines": 30},
        ]
        report = _aggregator().performance_metrics(rows, None)

        assert report.fallback is True
        assert [a.application_name for a in report.applications] == ["C", "B"]
        assert report.to_dict()["criterion"] is None
        assert report.summary.poor_performance_apps == 1


class TestTrends:
    """Tests for the monthly trend series."""

    def test_history_is_bucketed_by_month(self):
        rows = [
            {"analysis_date": datetime(2024, 1, 5), "score": 2.0},
            {"analysis_date": datetime(2024, 1, 25), "score": 3.0},
            {"analysis_date": "2024-02-11", "score": 3.2},
        ]
        series = _aggregator().health_trends(rows, 6, _no_rows)

        assert series.synthetic is False
        assert series.to_dict() == [
            {"period": "2024-01", "avg_score": 2.5},
            {"period": "2024-02", "avg_score": 3.2},
        ]

    def test_history_keeps_most_recent_months(self):
        rows = [{"analysis_date": datetime(2024, m, 1), "score": 3.0} for m in range(1, 13)]
        series = _aggregator().health_trends(rows, 6, _no_rows)
        assert [p.period for p in series.points] == [f"2024-{m:02d}" for m in range(7, 13)]

    def test_missing_history_is_synthesized(self):
        current = [{"score": 3.6}, {"score": 3.2}]
        series = _aggregator().health_trends([], 6, lambda: current)

        assert series.synthetic is True
        assert len(series.points) == 6
        assert all(1.0 <= p.avg_score <= 4.0 for p in series.points)

    def test_current_rows_only_fetched_without_history(self):
        def fail():
            raise AssertionError("current rows should not be fetched")

        rows = [{"analysis_date": datetime(2024, 1, 5), "score": 2.0}]
        assert _aggregator().health_trends(rows, 6, fail).synthetic is False

    def test_code_quality_history(self):
        rows = [
            {"analysis_date": datetime(2024, 3, 1), "business_criterion_name": "Changeability", "score": 3.0},
            {"analysis_date": datetime(2024, 3, 9), "business_criterion_name": "Changeability", "score": 2.0},
            {"analysis_date": datetime(2024, 3, 9), "business_criterion_name": "Robustness", "score": 3.3},
        ]
        series = _aggregator().code_quality_trends(rows, 6, _no_rows)

        assert series.synthetic is False
        point = series.points[0]
        assert point.maintainability_score == 2.5
        assert point.reliability_score == 3.3
        assert point.security_score == 0.0

    def test_code_quality_synthesized_without_maintainability_history(self):
        series = _aggregator().code_quality_trends([], 4, _no_rows)
        assert series.synthetic is True
        assert len(series.points) == 4

    def test_zero_months_yields_no_points(self):
        rows = [{"analysis_date": datetime(2024, 1, 5), "score": 2.0,
                 "business_criterion_name": "Changeability"}]
        assert _aggregator().health_trends(rows, 0, _no_rows).points == []
        assert _aggregator().code_quality_trends(rows, 0, _no_rows).points == []


@pytest.mark.parametrize("value, expected", [
    (datetime(2024, 3, 10), "2024-03"),
    ("2024-03-10T00:00:00", "2024-03"),
    (None, None),
    ("2024", None),
])
def test_month_of(value, expected):
    assert month_of(value) == expected
