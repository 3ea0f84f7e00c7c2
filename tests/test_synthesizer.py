import random
from datetime import date

import pytest

from core.dashboard import RandomTrendSynthesizer, SyntheticCweProvider
from core.dashboard.synthesizer import clamp, month_periods


def test_month_periods_end_at_current_month():
    """Test that periods are oldest first and cross year boundaries."""
    assert month_periods(4, today=date(2024, 2, 15)) == ["2023-11", "2023-12", "2024-01", "2024-02"]


def test_clamp():
    assert clamp(4.6) == 4.0
    assert clamp(0.2) == 1.0
    assert clamp(2.5) == 2.5


class TestHealthSeries:
    """Tests for synthesized health trends."""

    def test_shape_and_range(self):
        points = RandomTrendSynthesizer(seed=11).health_series(3.2, 6, today=date(2024, 6, 1))

        assert len(points) == 6
        assert points[0].period == "2024-01"
        assert points[-1].period == "2024-06"
        for point in points:
            assert 1.0 <= point.avg_score <= 4.0
            assert round(point.avg_score, 2) == point.avg_score

    def test_values_stay_near_anchor(self):
        points = RandomTrendSynthesizer(seed=5).health_series(3.0, 6)
        for point in points:
            assert 3.0 - 0.2 - 0.15 - 0.01 <= point.avg_score <= 3.0 + 0.15 + 0.01

    def test_clamped_at_the_ceiling(self):
        points = RandomTrendSynthesizer(seed=2).health_series(4.0, 6)
        assert max(p.avg_score for p in points) <= 4.0

    def test_missing_anchor_uses_default(self):
        points = RandomTrendSynthesizer(seed=9, jitter=0.0, drift=0.0).health_series(None, 3)
        assert [p.avg_score for p in points] == [3.0, 3.0, 3.0]

    def test_seed_is_repeatable(self):
        first = RandomTrendSynthesizer(seed=42).health_series(2.7, 6)
        second = RandomTrendSynthesizer(seed=42).health_series(2.7, 6)
        assert first == second

    def test_earlier_points_drift_lower(self):
        """Test that, on average over many draws, the oldest point sits below the newest."""
        rng = random.Random(1234)
        synthesizer = RandomTrendSynthesizer(rng=rng)
        oldest, newest = [], []
        for _ in range(500):
            points = synthesizer.health_series(3.0, 6)
            oldest.append(points[0].avg_score)
            newest.append(points[-1].avg_score)

        assert sum(oldest) / len(oldest) < sum(newest) / len(newest)


def test_quality_series_uses_each_anchor():
    """Test that each criterion follows its own anchor."""
    synthesizer = RandomTrendSynthesizer(seed=3, quality_jitter=0.0, quality_drift=0.0)
    points = synthesizer.quality_series({"maintainability_score": 3.5, "security_score": None}, 2)

    assert len(points) == 2
    assert points[0].maintainability_score == 3.5
    assert points[0].security_score == 2.9
    assert points[0].reliability_score == 3.1
    assert points[0].performance_score == 3.0


def test_cwe_catalogue():
    findings = SyntheticCweProvider().findings("Billing")
    assert [f.cwe_id for f in findings] == ["CWE-79", "CWE-89", "CWE-125", "CWE-190"]
    assert findings[1].total_violations == sum(r["violation_count"] for r in findings[1].rules)
