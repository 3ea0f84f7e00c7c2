"""
Score classification rules.

Health scores live on a 1.0-4.0 scale (higher is better); ISO compliance is shown as a
0-100 percentage. Each ladder below is a separate rule: panels pick the one they
display and the ladders are never substituted for each other.
"""
import math
from enum import Enum
from typing import Any


class RiskLevel(str, Enum):
    """Four-tier portfolio/application risk."""
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class SecurityRisk(str, Enum):
    """Three-tier risk used by the security panel."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class HealthGrade(str, Enum):
    """Good/Fair/Poor ladder used by scorecards, security and performance panels."""
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


class ComplianceBand(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    NEEDS_IMPROVEMENT = "Needs Improvement"


class ComplexityRating(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


RISK_COLORS = {
    RiskLevel.CRITICAL: "#ef4444",  # red
    RiskLevel.HIGH: "#f97316",  # orange
    RiskLevel.MEDIUM: "#f59e0b",  # amber
    RiskLevel.LOW: "#10b981",  # green
}

COMPLIANCE_COLORS = {
    ComplianceBand.EXCELLENT: "green",
    ComplianceBand.GOOD: "purple",
    ComplianceBand.NEEDS_IMPROVEMENT: "red",
}

# Weights applied to the high/medium/low complexity object counts
COMPLEXITY_WEIGHTS = (3, 2, 1)


def to_float(value: Any) -> float:
    """Coerce a column value to float; missing, non-numeric and NaN become 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def to_int(value: Any) -> int:
    """Coerce a column value to int the same way as ``to_float``."""
    return int(to_float(value))


def grade_from_score(score: Any) -> str:
    """A-F letter grade of a health score."""
    s = to_float(score)
    if s >= 3.5:
        return "A"
    if s >= 3.0:
        return "B"
    if s >= 2.5:
        return "C"
    if s >= 2.0:
        return "D"
    return "F"


def health_grade(score: Any) -> HealthGrade:
    """Good/Fair/Poor grade of a health score."""
    s = to_float(score)
    if s >= 3.0:
        return HealthGrade.GOOD
    if s >= 2.0:
        return HealthGrade.FAIR
    return HealthGrade.POOR


def risk_level_from_score(score: Any) -> RiskLevel:
    s = to_float(score)
    if s < 2.0:
        return RiskLevel.CRITICAL
    if s < 2.5:
        return RiskLevel.HIGH
    if s < 3.0:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def security_risk_level(score: Any) -> SecurityRisk:
    """Three tiers: below 2 is High, below 3 Medium, otherwise Low."""
    s = to_float(score)
    if s < 2.0:
        return SecurityRisk.HIGH
    if s < 3.0:
        return SecurityRisk.MEDIUM
    return SecurityRisk.LOW


def compliance_band(percentage: Any) -> ComplianceBand:
    pct = to_float(percentage)
    if pct >= 95:
        return ComplianceBand.EXCELLENT
    if pct >= 90:
        return ComplianceBand.GOOD
    return ComplianceBand.NEEDS_IMPROVEMENT


def round_half_up(value: Any) -> int:
    """Nearest integer, halves rounded up (2.5 -> 3)."""
    return int(math.floor(to_float(value) + 0.5))


def compliance_percentage(compliance_score: Any) -> int:
    """ISO compliance (0-1) as a whole percentage."""
    return round_half_up(to_float(compliance_score) * 100)


def complexity_score(high: Any, medium: Any, low: Any) -> int:
    high_weight, medium_weight, low_weight = COMPLEXITY_WEIGHTS
    return to_int(high) * high_weight + to_int(medium) * medium_weight + to_int(low) * low_weight


def complexity_rating(weighted_score: Any) -> ComplexityRating:
    s = to_float(weighted_score)
    if s > 100:
        return ComplexityRating.HIGH
    if s > 30:
        return ComplexityRating.MEDIUM
    return ComplexityRating.LOW


def overall_risk_rating(weighted_complexity: Any, critical_count: Any) -> ComplexityRating:
    """Either signal alone can raise the rating: complexity OR critical violations."""
    score = to_float(weighted_complexity)
    critical = to_float(critical_count)
    if score > 100 or critical > 50:
        return ComplexityRating.HIGH
    if score > 30 or critical > 10:
        return ComplexityRating.MEDIUM
    return ComplexityRating.LOW


def debt_impact(debt_ratio: Any) -> ComplexityRating:
    """Technical debt impact band of a debt-per-line ratio."""
    ratio = to_float(debt_ratio)
    if ratio > 0.10:
        return ComplexityRating.HIGH
    if ratio > 0.05:
        return ComplexityRating.MEDIUM
    return ComplexityRating.LOW
