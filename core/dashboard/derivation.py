"""
Per-application indicators derived from one application's latest snapshot rows.

An empty row set means the application key was wrong, so these functions raise
``ApplicationNotFoundError`` instead of returning zero-filled records.
"""
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from ..criteria import TOTAL_QUALITY_INDEX, is_iso_criterion
from ..exceptions import ApplicationNotFoundError
from .models import (
    ApplicationViolations,
    CriterionScore,
    HealthScorecard,
    IsoTrendPoint,
    ProductivityMetrics,
    RiskAnalysis,
    RuleViolation,
    TechnologyViolations,
)
from .scoring import (
    COMPLIANCE_COLORS,
    compliance_band,
    compliance_percentage,
    complexity_rating,
    complexity_score,
    debt_impact,
    health_grade,
    overall_risk_rating,
    round_half_up,
    to_float,
    to_int,
)

Row = Dict[str, Any]


def _require(rows: List[Row], key) -> Row:
    if not rows:
        raise ApplicationNotFoundError(key)
    return rows[0]


def health_scorecard(rows: List[Row], key=None) -> HealthScorecard:
    """Every criterion of the latest snapshot with its display value and grade.

    ISO criteria display ``compliance_score`` as a percentage; the grade of every
    criterion, ISO or not, comes from the raw ``score``.
    """
    info = _require(rows, key)

    health_scores: Dict[str, CriterionScore] = OrderedDict()
    for row in rows:
        name = row.get("business_criterion_name")
        if name is None:
            continue
        raw_score = to_float(row.get("score"))
        grade = health_grade(raw_score).value

        if is_iso_criterion(name):
            percentage = compliance_percentage(row.get("compliance_score"))
            band = compliance_band(percentage)
            health_scores[name] = CriterionScore(
                score=percentage,
                grade=grade,
                compliance_band=band.value,
                compliance_color=COMPLIANCE_COLORS[band],
            )
        else:
            health_scores[name] = CriterionScore(score=raw_score, grade=grade)

    overall = health_scores.get(TOTAL_QUALITY_INDEX)
    return HealthScorecard(
        application_name=info.get("application_name"),
        technical_debt=to_float(info.get("technical_debt_total")),
        lines_of_code=to_int(info.get("nb_code_lines")),
        files_count=to_int(info.get("nb_files")),
        analysis_date=info.get("analysis_date"),
        health_scores=health_scores,
        overall_score=overall.score if overall else 0,
        overall_grade=overall.grade if overall else "N/A",
    )


def violations_by_technology(rows: List[Row], application_name: Optional[str] = None) -> ApplicationViolations:
    """Violations grouped by technology with their rule breakdown."""
    technologies: Dict[str, Dict[str, Any]] = OrderedDict()
    total = 0
    for row in rows:
        violations = to_int(row.get("nb_violations"))
        if violations <= 0:
            continue
        critical = to_int(row.get("critical_contributions"))
        group = technologies.setdefault(row.get("technology"), {"total": 0, "critical": 0, "rules": []})
        group["total"] += violations
        group["critical"] += critical
        group["rules"].append(RuleViolation(
            rule_pattern=row.get("rule_name"),
            violations=violations,
            critical_contributions=critical,
        ))
        total += violations

    name = rows[0].get("application_name") if rows else application_name
    return ApplicationViolations(
        application_name=name,
        total_violations=total,
        technologies=[
            TechnologyViolations(
                technology=technology,
                total_violations=group["total"],
                critical_violations=group["critical"],
                rules=group["rules"],
            )
            for technology, group in technologies.items()
        ],
    )


def risk_analysis(rows: List[Row], key=None) -> RiskAnalysis:
    """Complexity and violation risk of one application.

    Rows repeat the snapshot's complexity buckets once per violation rule. The
    critical count is the number of rules with a critical contribution.
    """
    info = _require(rows, key)
    high = to_int(info.get("nb_complexity_high"))
    medium = to_int(info.get("nb_complexity_medium"))
    low = to_int(info.get("nb_complexity_low"))

    total_objects = high + medium + low
    weighted = complexity_score(high, medium, low)
    critical = len([row for row in rows if to_int(row.get("critical_contributions")) > 0])
    total_violations = sum(to_int(row.get("nb_violations")) for row in rows)
    density = round(total_violations / total_objects, 2) if total_objects > 0 else 0

    return RiskAnalysis(
        application_name=info.get("application_name"),
        high_complexity_objects=high,
        medium_complexity_objects=medium,
        low_complexity_objects=low,
        complexity_score=weighted,
        complexity_risk_level=complexity_rating(weighted).value,
        critical_violations=critical,
        total_violations=total_violations,
        risk_density=density,
        overall_risk_rating=overall_risk_rating(weighted, critical).value,
    )


def productivity_metrics(rows: List[Row], key=None) -> ProductivityMetrics:
    info = _require(rows, key)
    loc = to_int(info.get("nb_code_lines"))
    files = to_int(info.get("nb_files"))
    debt = to_float(info.get("technical_debt_total"))
    quality = to_float(info.get("quality_score"))

    avg_lines = round_half_up(loc / files) if files > 0 else 0
    debt_ratio = round(debt / loc, 4) if loc > 0 else 0
    efficiency = round_half_up((loc / 1000) * quality) if quality > 0 else 0

    return ProductivityMetrics(
        application_name=info.get("application_name"),
        lines_of_code=loc,
        number_of_files=files,
        number_of_artifacts=to_int(info.get("nb_artifacts")),
        avg_lines_per_file=avg_lines,
        quality_score=quality,
        technical_debt=debt,
        debt_ratio=debt_ratio,
        quality_efficiency=efficiency,
        technical_debt_impact=debt_impact(debt_ratio).value,
        analysis_date=info.get("analysis_date"),
    )


def iso_trends(rows: List[Row]) -> List[IsoTrendPoint]:
    """ISO-5055 compliance percentages per snapshot, in the order given (newest first)."""
    points = []
    for row in rows:
        security = compliance_percentage(row.get("security"))
        points.append(IsoTrendPoint(
            date=row.get("analysis_date"),
            security=security,
            maintainability=compliance_percentage(row.get("maintainability")),
            reliability=compliance_percentage(row.get("reliability")),
            performance=compliance_percentage(row.get("performance")),
            security_band=compliance_band(security).value,
        ))
    return points
