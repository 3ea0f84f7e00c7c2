"""
Portfolio metric aggregation for the dashboard panels.

Each method reduces already-fetched datamart rows (plain dicts) to one derived record
or a short ordered series. Missing values degrade to 0, None or an empty list; the
aggregator never raises on sparse data.
"""
from collections import OrderedDict
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from ..criteria import PERFORMANCE_MARKERS, QUALITY_TREND_CRITERIA
from .models import (
    ApplicationSummary,
    ArchitectureApplication,
    ArchitectureSummary,
    HealthTrendPoint,
    PanelReport,
    PerformanceApplication,
    PerformanceSummary,
    PortfolioMetrics,
    QualityTrendPoint,
    RiskBucket,
    SecurityApplication,
    SecuritySummary,
    TechnologyHealth,
    TrendSeries,
)
from .scoring import (
    RISK_COLORS,
    ComplexityRating,
    HealthGrade,
    RiskLevel,
    SecurityRisk,
    complexity_rating,
    complexity_score,
    grade_from_score,
    health_grade,
    risk_level_from_score,
    security_risk_level,
    to_float,
    to_int,
)
from .synthesizer import RandomTrendSynthesizer, TrendSynthesizer

Row = Dict[str, Any]
RowSource = Callable[[], List[Row]]

# Portfolio "critical risk" threshold, coarser than RiskLevel.CRITICAL (< 2.0)
CRITICAL_RISK_THRESHOLD = 2.5
PERFORMANCE_FALLBACK_THRESHOLD = 3.0


def month_of(value: Any) -> Optional[str]:
    """YYYY-MM bucket of an analysis date."""
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y-%m")
    text = str(value)
    return text[:7] if len(text) >= 7 else None


def _average(values: Sequence[float], digits: int = 2) -> float:
    if not values:
        return 0.0
    return round(sum(values) / len(values), digits)


def _scores(rows: Iterable[Row], column: str) -> List[float]:
    """Non-null scores of a column; nulls are skipped the way SQL AVG skips them."""
    return [to_float(row.get(column)) for row in rows if row.get(column) is not None]


def _date_key(value: Any):
    return (value is not None, value if value is not None else "")


class MetricsAggregator:
    """Aggregates datamart rows into the portfolio-level dashboard records"""

    def __init__(self, synthesizer: Optional[TrendSynthesizer] = None, panel_limit: int = 20):
        self.synthesizer = synthesizer or RandomTrendSynthesizer()
        self.panel_limit = panel_limit

    # -- executive -----------------------------------------------------------

    def portfolio_metrics(self, rows: List[Row]) -> PortfolioMetrics:
        """Headline KPIs over latest Total Quality Index rows joined to sizing."""
        applications = {row.get("application_name") for row in rows}
        scores = _scores(rows, "score")
        dates = [row["analysis_date"] for row in rows if row.get("analysis_date") is not None]

        avg_score = _average(scores)
        return PortfolioMetrics(
            total_applications=len(applications),
            avg_health_score=avg_score,
            total_technical_debt=round(sum(to_float(row.get("technical_debt_total")) for row in rows), 2),
            total_loc=sum(to_int(row.get("nb_code_lines")) for row in rows),
            critical_risk_apps=len([s for s in scores if s < CRITICAL_RISK_THRESHOLD]),
            last_analysis_date=max(dates) if dates else None,
            health_grade=grade_from_score(avg_score) if applications else "N/A",
        )

    def risk_distribution(self, rows: List[Row]) -> List[RiskBucket]:
        """Applications per risk tier; empty tiers are omitted."""
        counts: Dict[RiskLevel, int] = {}
        for row in rows:
            level = risk_level_from_score(row.get("score"))
            counts[level] = counts.get(level, 0) + 1

        total = sum(counts.values())
        return [
            RiskBucket(
                label=level.value,
                application_count=counts[level],
                percentage=round(counts[level] / total * 100, 1),
                color=RISK_COLORS[level],
            )
            for level in RiskLevel
            if counts.get(level)
        ]

    def application_summaries(self, rows: List[Row], limit: int = 50) -> List[ApplicationSummary]:
        """Most recently analysed applications first, one row each, capped at ``limit``."""
        latest: Dict[Any, Row] = {}
        for row in rows:
            name = row.get("application_name")
            current = latest.get(name)
            if current is None or _date_key(row.get("analysis_date")) > _date_key(current.get("analysis_date")):
                latest[name] = row

        ordered = sorted(latest.values(), key=lambda r: _date_key(r.get("analysis_date")), reverse=True)
        return [
            ApplicationSummary(
                application_name=row.get("application_name"),
                health_score=to_float(row.get("score")),
                technical_debt=to_float(row.get("technical_debt_total")),
                analysis_date=row.get("analysis_date"),
                risk_level=risk_level_from_score(row.get("score")).value,
                business_unit=row.get("business_unit") or None,
            )
            for row in ordered[:limit]
        ]

    def technology_health(self, rows: List[Row]) -> List[TechnologyHealth]:
        """Average quality per technology, best technology first."""
        groups: Dict[str, Dict[str, Any]] = OrderedDict()
        for row in rows:
            technology = row.get("technology")
            if technology is None:
                continue
            group = groups.setdefault(technology, {"scores": [], "applications": set()})
            if row.get("score") is not None:
                group["scores"].append(to_float(row.get("score")))
            group["applications"].add(row.get("application_name"))

        results = [
            TechnologyHealth(
                technology_name=technology,
                avg_score=_average(group["scores"]),
                application_count=len(group["applications"]),
            )
            for technology, group in groups.items()
        ]
        results.sort(key=lambda t: (-t.avg_score, t.technology_name))
        return results

    # -- CTO / architect -----------------------------------------------------

    def architecture_complexity(self, rows: List[Row], limit: Optional[int] = None) -> PanelReport:
        """Per-application complexity; the summary covers every application, the list only the largest."""
        applications = []
        for row in rows:
            weighted = complexity_score(
                row.get("nb_complexity_high"),
                row.get("nb_complexity_medium"),
                row.get("nb_complexity_low"),
            )
            applications.append(ArchitectureApplication(
                application_name=row.get("application_name"),
                lines_of_code=to_int(row.get("nb_code_lines")),
                files=to_int(row.get("nb_files")),
                artifacts=to_int(row.get("nb_artifacts")),
                complexity_score=weighted,
                architecture_score=to_float(row.get("architecture_score")),
                complexity_rating=complexity_rating(weighted).value,
            ))
        applications.sort(key=lambda a: a.lines_of_code, reverse=True)

        ratings = [app.complexity_rating for app in applications]
        summary = ArchitectureSummary(
            total_applications=len(applications),
            total_lines_of_code=sum(app.lines_of_code for app in applications),
            avg_architecture_score=_average([app.architecture_score for app in applications]),
            high_complexity_apps=ratings.count(ComplexityRating.HIGH.value),
            medium_complexity_apps=ratings.count(ComplexityRating.MEDIUM.value),
            low_complexity_apps=ratings.count(ComplexityRating.LOW.value),
        )
        return PanelReport(summary=summary, applications=applications[:limit or self.panel_limit])

    def security_metrics(self, rows: List[Row], limit: Optional[int] = None) -> PanelReport:
        """Security grade and three-tier risk per application, worst first."""
        applications = [
            SecurityApplication(
                application_name=row.get("application_name"),
                security_score=to_float(row.get("security_score")),
                security_grade=health_grade(row.get("security_score")).value,
                critical_violations=to_int(row.get("critical_violations")),
                total_violations=to_int(row.get("total_violations")),
                risk_level=security_risk_level(row.get("security_score")).value,
            )
            for row in rows
        ]
        applications.sort(key=lambda a: a.security_score)

        levels = [app.risk_level for app in applications]
        summary = SecuritySummary(
            total_applications=len(applications),
            avg_security_score=_average([app.security_score for app in applications]),
            total_critical_violations=sum(app.critical_violations for app in applications),
            high_risk_applications=levels.count(SecurityRisk.HIGH.value),
            medium_risk_applications=levels.count(SecurityRisk.MEDIUM.value),
            low_risk_applications=levels.count(SecurityRisk.LOW.value),
        )
        return PanelReport(summary=summary, applications=applications[:limit or self.panel_limit])

    @staticmethod
    def resolve_performance_criterion(criterion_names: Iterable[str]) -> Optional[str]:
        """First criterion whose name mentions performance or efficiency, if any."""
        for name in criterion_names:
            if name and any(marker in name.lower() for marker in PERFORMANCE_MARKERS):
                return name
        return None

    @staticmethod
    def resolve_efficiency_criterion(criterion_names: Iterable[str]) -> Optional[str]:
        for name in criterion_names:
            if name and "efficiency" in name.lower():
                return name
        return None

    def performance_metrics(self, rows: List[Row], criterion: Optional[str],
                            limit: Optional[int] = None) -> PanelReport:
        """Performance panel.

        With a resolved ``criterion`` the rows hold that criterion's latest scores. Without
        one the rows are every latest criterion score and a substitute view is built: scores
        below 3.0, worst first, capped.
        """
        cap = limit or self.panel_limit
        fallback = criterion is None
        if fallback:
            candidates = [
                row for row in rows
                if row.get("score") is not None and to_float(row.get("score")) < PERFORMANCE_FALLBACK_THRESHOLD
            ]
            candidates.sort(key=lambda r: to_float(r.get("score")))
            source = [
                {
                    "application_name": row.get("application_name"),
                    "performance_score": row.get("score"),
                    "efficiency_score": None,
                    "nb_code_lines": row.get("nb_code_lines"),
                }
                for row in candidates[:cap]
            ]
        else:
            source = sorted(rows, key=lambda r: to_float(r.get("performance_score")))

        applications = [
            PerformanceApplication(
                application_name=row.get("application_name"),
                performance_score=to_float(row.get("performance_score")),
                efficiency_score=to_float(row.get("efficiency_score")),
                lines_of_code=to_int(row.get("nb_code_lines")),
                performance_rating=health_grade(row.get("performance_score")).value,
            )
            for row in source
        ]

        ratings = [app.performance_rating for app in applications]
        summary = PerformanceSummary(
            total_applications=len(applications),
            avg_performance_score=_average([app.performance_score for app in applications]),
            poor_performance_apps=ratings.count(HealthGrade.POOR.value),
            fair_performance_apps=ratings.count(HealthGrade.FAIR.value),
            good_performance_apps=ratings.count(HealthGrade.GOOD.value),
            avg_efficiency_score=_average([app.efficiency_score for app in applications]),
        )
        return PanelReport(summary=summary, applications=applications[:cap],
                           criterion=criterion, fallback=fallback)

    # -- trends --------------------------------------------------------------

    def health_trends(self, history_rows: List[Row], months: int,
                      current_rows: RowSource) -> TrendSeries:
        """Monthly average Total Quality Index over every snapshot.

        ``current_rows`` fetches latest-snapshot rows and is only called when there is
        no history, to anchor the synthesized series.
        """
        if months < 1:
            return TrendSeries(points=[])
        buckets: Dict[str, List[float]] = {}
        for row in history_rows:
            period = month_of(row.get("analysis_date"))
            if period is None or row.get("score") is None:
                continue
            buckets.setdefault(period, []).append(to_float(row.get("score")))

        if not buckets:
            scores = _scores(current_rows(), "score")
            anchor = _average(scores) if scores else None
            return TrendSeries(points=self.synthesizer.health_series(anchor, months), synthetic=True)

        periods = sorted(buckets)[-months:]
        return TrendSeries(points=[HealthTrendPoint(period=p, avg_score=_average(buckets[p])) for p in periods])

    def code_quality_trends(self, history_rows: List[Row], months: int,
                            current_rows: RowSource) -> TrendSeries:
        """Monthly averages of Changeability, Robustness, Security and Performance Efficiency."""
        if months < 1:
            return TrendSeries(points=[])
        field_by_criterion = {criterion: field for field, criterion in QUALITY_TREND_CRITERIA.items()}

        buckets: Dict[str, Dict[str, List[float]]] = {}
        for row in history_rows:
            period = month_of(row.get("analysis_date"))
            field = field_by_criterion.get(row.get("business_criterion_name"))
            if period is None or field is None:
                continue
            bucket = buckets.setdefault(period, {name: [] for name in QUALITY_TREND_CRITERIA})
            if row.get("score") is not None:
                bucket[field].append(to_float(row.get("score")))

        periods = sorted(buckets)[-months:]
        if not any(buckets[p]["maintainability_score"] for p in periods):
            anchors = self._quality_anchors(current_rows())
            return TrendSeries(points=self.synthesizer.quality_series(anchors, months), synthetic=True)

        points = [
            QualityTrendPoint(period=p, **{name: _average(values) for name, values in buckets[p].items()})
            for p in periods
        ]
        return TrendSeries(points=points)

    @staticmethod
    def _quality_anchors(rows: List[Row]) -> Dict[str, Optional[float]]:
        anchors: Dict[str, Optional[float]] = {}
        for field, criterion in QUALITY_TREND_CRITERIA.items():
            scores = _scores([r for r in rows if r.get("business_criterion_name") == criterion], "score")
            anchors[field] = _average(scores) if scores else None
        return anchors
