"""
Derived dashboard records.

Built fresh for every request and never mutated after they are returned.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

DateValue = Optional[Union[datetime, date, str]]


def _iso(value: DateValue) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return value.isoformat()


@dataclass(frozen=True)
class PortfolioMetrics:
    """Executive KPIs over the latest snapshot of every application"""
    total_applications: int
    avg_health_score: float
    total_technical_debt: float
    total_loc: int
    critical_risk_apps: int
    last_analysis_date: DateValue
    health_grade: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_applications": self.total_applications,
            "avg_health_score": self.avg_health_score,
            "total_technical_debt": self.total_technical_debt,
            "total_loc": self.total_loc,
            "critical_risk_apps": self.critical_risk_apps,
            "last_analysis_date": _iso(self.last_analysis_date),
            "health_grade": self.health_grade
        }


@dataclass(frozen=True)
class RiskBucket:
    label: str
    application_count: int
    percentage: float
    color: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "application_count": self.application_count,
            "percentage": self.percentage,
            "color": self.color
        }


@dataclass(frozen=True)
class ApplicationSummary:
    application_name: str
    health_score: float
    technical_debt: float
    analysis_date: DateValue
    risk_level: str
    business_unit: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "application_name": self.application_name,
            "health_score": self.health_score,
            "technical_debt": self.technical_debt,
            "analysis_date": _iso(self.analysis_date),
            "risk_level": self.risk_level,
            "business_unit": self.business_unit
        }


@dataclass(frozen=True)
class TechnologyHealth:
    technology_name: str
    avg_score: float
    application_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "technology_name": self.technology_name,
            "avg_score": self.avg_score,
            "application_count": self.application_count
        }


@dataclass(frozen=True)
class ArchitectureApplication:
    application_name: str
    lines_of_code: int
    files: int
    artifacts: int
    complexity_score: int
    architecture_score: float
    complexity_rating: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "application_name": self.application_name,
            "lines_of_code": self.lines_of_code,
            "files": self.files,
            "artifacts": self.artifacts,
            "complexity_score": self.complexity_score,
            "architecture_score": self.architecture_score,
            "complexity_rating": self.complexity_rating
        }


@dataclass(frozen=True)
class ArchitectureSummary:
    total_applications: int
    total_lines_of_code: int
    avg_architecture_score: float
    high_complexity_apps: int
    medium_complexity_apps: int
    low_complexity_apps: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_applications": self.total_applications,
            "total_lines_of_code": self.total_lines_of_code,
            "avg_architecture_score": self.avg_architecture_score,
            "high_complexity_apps": self.high_complexity_apps,
            "medium_complexity_apps": self.medium_complexity_apps,
            "low_complexity_apps": self.low_complexity_apps
        }


@dataclass(frozen=True)
class SecurityApplication:
    application_name: str
    security_score: float
    security_grade: str
    critical_violations: int
    total_violations: int
    risk_level: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "application_name": self.application_name,
            "security_score": self.security_score,
            "security_grade": self.security_grade,
            "critical_violations": self.critical_violations,
            "total_violations": self.total_violations,
            "risk_level": self.risk_level
        }


@dataclass(frozen=True)
class SecuritySummary:
    total_applications: int
    avg_security_score: float
    total_critical_violations: int
    high_risk_applications: int
    medium_risk_applications: int
    low_risk_applications: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_applications": self.total_applications,
            "avg_security_score": self.avg_security_score,
            "total_critical_violations": self.total_critical_violations,
            "high_risk_applications": self.high_risk_applications,
            "medium_risk_applications": self.medium_risk_applications,
            "low_risk_applications": self.low_risk_applications
        }


@dataclass(frozen=True)
class PerformanceApplication:
    application_name: str
    performance_score: float
    efficiency_score: float
    lines_of_code: int
    performance_rating: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "application_name": self.application_name,
            "performance_score": self.performance_score,
            "efficiency_score": self.efficiency_score,
            "lines_of_code": self.lines_of_code,
            "performance_rating": self.performance_rating
        }


@dataclass(frozen=True)
class PerformanceSummary:
    total_applications: int
    avg_performance_score: float
    poor_performance_apps: int
    fair_performance_apps: int
    good_performance_apps: int
    avg_efficiency_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_applications": self.total_applications,
            "avg_performance_score": self.avg_performance_score,
            "poor_performance_apps": self.poor_performance_apps,
            "fair_performance_apps": self.fair_performance_apps,
            "good_performance_apps": self.good_performance_apps,
            "avg_efficiency_score": self.avg_efficiency_score
        }


@dataclass(frozen=True)
class PanelReport:
    """A summary computed over every application plus a capped application list"""
    summary: Any
    applications: List[Any]
    criterion: Optional[str] = None
    fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "summary": self.summary.to_dict(),
            "applications": [app.to_dict() for app in self.applications]
        }
        if self.criterion is not None or self.fallback:
            result["criterion"] = self.criterion
            result["fallback"] = self.fallback
        return result


@dataclass(frozen=True)
class HealthTrendPoint:
    period: str  # YYYY-MM
    avg_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {"period": self.period, "avg_score": self.avg_score}


@dataclass(frozen=True)
class QualityTrendPoint:
    period: str
    maintainability_score: float
    reliability_score: float
    security_score: float
    performance_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "maintainability_score": self.maintainability_score,
            "reliability_score": self.reliability_score,
            "security_score": self.security_score,
            "performance_score": self.performance_score
        }


@dataclass(frozen=True)
class TrendSeries:
    """Ordered trend points, oldest first.

    ``synthetic`` is True when the points were produced by a trend synthesizer
    instead of being aggregated from historical snapshots.
    """
    points: List[Any]
    synthetic: bool = False

    def to_dict(self) -> List[Dict[str, Any]]:
        return [point.to_dict() for point in self.points]


@dataclass(frozen=True)
class CriterionScore:
    score: float
    grade: str
    compliance_band: Optional[str] = None
    compliance_color: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"score": self.score, "grade": self.grade}
        if self.compliance_band is not None:
            result["compliance_band"] = self.compliance_band
            result["compliance_color"] = self.compliance_color
        return result


@dataclass(frozen=True)
class HealthScorecard:
    application_name: str
    technical_debt: float
    lines_of_code: int
    files_count: int
    analysis_date: DateValue
    health_scores: Dict[str, CriterionScore]
    overall_score: float
    overall_grade: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "application_name": self.application_name,
            "technical_debt": self.technical_debt,
            "lines_of_code": self.lines_of_code,
            "files_count": self.files_count,
            "analysis_date": _iso(self.analysis_date),
            "health_scores": {name: score.to_dict() for name, score in self.health_scores.items()},
            "overall_score": self.overall_score,
            "overall_grade": self.overall_grade
        }


@dataclass(frozen=True)
class RuleViolation:
    rule_pattern: str
    violations: int
    critical_contributions: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule_pattern": self.rule_pattern,
            "violations": self.violations,
            "critical_contributions": self.critical_contributions
        }


@dataclass(frozen=True)
class TechnologyViolations:
    technology: str
    total_violations: int
    critical_violations: int
    rules: List[RuleViolation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "technology": self.technology,
            "total_violations": self.total_violations,
            "critical_violations": self.critical_violations,
            "rules": [rule.to_dict() for rule in self.rules]
        }


@dataclass(frozen=True)
class ApplicationViolations:
    application_name: str
    total_violations: int
    technologies: List[TechnologyViolations]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "application_name": self.application_name,
            "total_violations": self.total_violations,
            "technologies": [tech.to_dict() for tech in self.technologies]
        }


@dataclass(frozen=True)
class RiskAnalysis:
    application_name: str
    high_complexity_objects: int
    medium_complexity_objects: int
    low_complexity_objects: int
    complexity_score: int
    complexity_risk_level: str
    critical_violations: int
    total_violations: int
    risk_density: float
    overall_risk_rating: str

    @property
    def total_objects(self) -> int:
        return self.high_complexity_objects + self.medium_complexity_objects + self.low_complexity_objects

    def to_dict(self) -> Dict[str, Any]:
        return {
            "application_name": self.application_name,
            "complexity_analysis": {
                "high_complexity_objects": self.high_complexity_objects,
                "medium_complexity_objects": self.medium_complexity_objects,
                "low_complexity_objects": self.low_complexity_objects,
                "total_objects": self.total_objects,
                "complexity_score": self.complexity_score,
                "risk_level": self.complexity_risk_level
            },
            "violation_analysis": {
                "critical_violations": self.critical_violations,
                "total_violations": self.total_violations,
                "risk_density": self.risk_density
            },
            "overall_risk_rating": self.overall_risk_rating
        }


@dataclass(frozen=True)
class ProductivityMetrics:
    application_name: str
    lines_of_code: int
    number_of_files: int
    number_of_artifacts: int
    avg_lines_per_file: int
    quality_score: float
    technical_debt: float
    debt_ratio: float
    quality_efficiency: int
    technical_debt_impact: str
    analysis_date: DateValue

    def to_dict(self) -> Dict[str, Any]:
        return {
            "application_name": self.application_name,
            "size_metrics": {
                "lines_of_code": self.lines_of_code,
                "number_of_files": self.number_of_files,
                "number_of_artifacts": self.number_of_artifacts,
                "avg_lines_per_file": self.avg_lines_per_file
            },
            "quality_metrics": {
                "quality_score": self.quality_score,
                "technical_debt": self.technical_debt,
                "debt_ratio": self.debt_ratio,
                "quality_efficiency": self.quality_efficiency
            },
            "productivity_indicators": {
                "code_density": self.avg_lines_per_file,
                "maintainability_index": self.quality_score,
                "technical_debt_impact": self.technical_debt_impact
            },
            "analysis_date": _iso(self.analysis_date)
        }


@dataclass(frozen=True)
class IsoTrendPoint:
    date: DateValue
    security: int
    maintainability: int
    reliability: int
    performance: int
    security_band: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": _iso(self.date),
            "security": self.security,
            "maintainability": self.maintainability,
            "reliability": self.reliability,
            "performance": self.performance,
            "security_band": self.security_band
        }


@dataclass(frozen=True)
class ApplicationListing:
    id: int
    name: str
    latest_analysis: DateValue

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "latest_analysis": _iso(self.latest_analysis)}


@dataclass(frozen=True)
class CweFinding:
    cwe_id: str
    cwe_name: str
    description: str
    severity: str
    total_violations: int
    rules: List[Dict[str, Any]]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cwe_id": self.cwe_id,
            "cwe_name": self.cwe_name,
            "description": self.description,
            "severity": self.severity,
            "total_violations": self.total_violations,
            "rules": [dict(rule) for rule in self.rules]
        }


@dataclass(frozen=True)
class CweReport:
    """CWE findings of one application; synthetic until the datamart carries CWE data."""
    application_name: str
    findings: List[CweFinding]
    synthetic: bool = True

    def to_dict(self) -> List[Dict[str, Any]]:
        return [finding.to_dict() for finding in self.findings]
