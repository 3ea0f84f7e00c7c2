"""
Synthetic providers for panels whose source data is missing.

The trend synthesizer pads a chart with plausible points anchored to the current
portfolio average when the datamart holds no history. It is display continuity,
not a forecast; aggregators call it on a separate path and flag the result.
"""
import random
from abc import ABC, abstractmethod
from datetime import date
from typing import Dict, List, Optional

from .models import CweFinding, HealthTrendPoint, QualityTrendPoint

SCORE_FLOOR = 1.0
SCORE_CEILING = 4.0
DEFAULT_HEALTH_ANCHOR = 3.0
DEFAULT_QUALITY_ANCHORS = {
    "maintainability_score": 2.8,
    "reliability_score": 3.1,
    "security_score": 2.9,
    "performance_score": 3.0,
}


def month_periods(months: int, today: Optional[date] = None) -> List[str]:
    """``months`` YYYY-MM labels ending at the current month, oldest first."""
    today = today or date.today()
    current = today.year * 12 + (today.month - 1)
    periods = []
    for back in range(months - 1, -1, -1):
        index = current - back
        periods.append(f"{index // 12:04d}-{index % 12 + 1:02d}")
    return periods


def clamp(value: float, floor: float = SCORE_FLOOR, ceiling: float = SCORE_CEILING) -> float:
    return max(floor, min(ceiling, value))


class TrendSynthesizer(ABC):
    """Strategy producing substitute trend series."""

    @abstractmethod
    def health_series(self, anchor: Optional[float], months: int,
                      today: Optional[date] = None) -> List[HealthTrendPoint]:
        """Total Quality Index points anchored to the current average."""
        pass

    @abstractmethod
    def quality_series(self, anchors: Dict[str, Optional[float]], months: int,
                       today: Optional[date] = None) -> List[QualityTrendPoint]:
        """Four-criterion quality points anchored to the current averages."""
        pass


class RandomTrendSynthesizer(TrendSynthesizer):
    """Anchor, minus a drift that grows with age, plus bounded uniform jitter.

    Every point is clamped to the 1.0-4.0 score range. Pass ``seed`` (or an
    ``rng``) for repeatable output.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        jitter: float = 0.15,
        drift: float = 0.2,
        quality_jitter: float = 0.1,
        quality_drift: float = 0.1,
    ):
        self.rng = rng or random.Random(seed)
        self.jitter = jitter
        self.drift = drift
        self.quality_jitter = quality_jitter
        self.quality_drift = quality_drift

    def _point(self, anchor: float, back: int, months: int, jitter: float, drift: float) -> float:
        age = back / months if months else 0.0
        value = anchor - drift * age + self.rng.uniform(-jitter, jitter)
        return round(clamp(value), 2)

    def health_series(self, anchor: Optional[float], months: int,
                      today: Optional[date] = None) -> List[HealthTrendPoint]:
        base = DEFAULT_HEALTH_ANCHOR if anchor is None else anchor
        periods = month_periods(months, today)
        return [
            HealthTrendPoint(
                period=period,
                avg_score=self._point(base, months - 1 - index, months, self.jitter, self.drift),
            )
            for index, period in enumerate(periods)
        ]

    def quality_series(self, anchors: Dict[str, Optional[float]], months: int,
                       today: Optional[date] = None) -> List[QualityTrendPoint]:
        bases = {
            name: default if anchors.get(name) is None else anchors[name]
            for name, default in DEFAULT_QUALITY_ANCHORS.items()
        }
        periods = month_periods(months, today)
        points = []
        for index, period in enumerate(periods):
            back = months - 1 - index
            values = {
                name: self._point(base, back, months, self.quality_jitter, self.quality_drift)
                for name, base in bases.items()
            }
            points.append(QualityTrendPoint(period=period, **values))
        return points


class CweProvider(ABC):
    """Source of CWE findings for one application."""

    @abstractmethod
    def findings(self, application_name: str) -> List[CweFinding]:
        pass


class SyntheticCweProvider(CweProvider):
    """Fixed sample catalogue; the datamart carries no CWE tables yet."""

    CATALOGUE = (
        CweFinding(
            cwe_id="CWE-79",
            cwe_name="Cross-site Scripting (XSS)",
            description="The application does not neutralize or incorrectly neutralizes user-controllable "
                        "input before it is placed in output that is used as a web page.",
            severity="High",
            total_violations=15,
            rules=[
                {"rule_name": "Avoid XSS vulnerabilities in JavaScript", "violation_count": 8},
                {"rule_name": "Sanitize user input in HTML output", "violation_count": 7},
            ],
        ),
        CweFinding(
            cwe_id="CWE-89",
            cwe_name="SQL Injection",
            description="The application constructs all or part of an SQL command using externally-influenced "
                        "input but does not neutralize special elements.",
            severity="High",
            total_violations=23,
            rules=[
                {"rule_name": "Use parameterized queries", "violation_count": 12},
                {"rule_name": "Avoid dynamic SQL construction", "violation_count": 11},
            ],
        ),
        CweFinding(
            cwe_id="CWE-125",
            cwe_name="Out-of-bounds Read",
            description="The application reads data past the end, or before the beginning, of the intended buffer.",
            severity="Medium",
            total_violations=5,
            rules=[
                {"rule_name": "Check array bounds before access", "violation_count": 3},
                {"rule_name": "Validate buffer size parameters", "violation_count": 2},
            ],
        ),
        CweFinding(
            cwe_id="CWE-190",
            cwe_name="Integer Overflow",
            description="The application performs a calculation that can produce an integer overflow or wraparound.",
            severity="Medium",
            total_violations=8,
            rules=[
                {"rule_name": "Check for integer overflow conditions", "violation_count": 5},
                {"rule_name": "Use safe arithmetic operations", "violation_count": 3},
            ],
        ),
    )

    def findings(self, application_name: str) -> List[CweFinding]:
        return list(self.CATALOGUE)
