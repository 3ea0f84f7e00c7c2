"""
Business criterion names as published in the datamart.
"""

TOTAL_QUALITY_INDEX = "Total Quality Index"
ARCHITECTURAL_DESIGN = "Architectural Design"
SECURITY = "Security"
CHANGEABILITY = "Changeability"
ROBUSTNESS = "Robustness"
PERFORMANCE_EFFICIENCY = "Performance Efficiency"

# Criteria averaged by the code quality trend, keyed by the trend field they feed
QUALITY_TREND_CRITERIA = {
    "maintainability_score": CHANGEABILITY,
    "reliability_score": ROBUSTNESS,
    "security_score": SECURITY,
    "performance_score": PERFORMANCE_EFFICIENCY,
}

# Criteria whose value is read from compliance_score (0-1) rather than score
ISO_MARKER = "iso"

ISO_SECURITY = "ISO-5055-Security"
ISO_MAINTAINABILITY = "ISO-5055-Maintainability"
ISO_RELIABILITY = "ISO-5055-Reliability"
ISO_PERFORMANCE = "ISO-5055-Performance-Efficiency"

ISO_TREND_CRITERIA = {
    "security": ISO_SECURITY,
    "maintainability": ISO_MAINTAINABILITY,
    "reliability": ISO_RELIABILITY,
    "performance": ISO_PERFORMANCE,
}

PERFORMANCE_MARKERS = ("performance", "efficiency")


def is_iso_criterion(name) -> bool:
    """True when a criterion is reported as an ISO compliance percentage."""
    return bool(name) and ISO_MARKER in str(name).lower()
