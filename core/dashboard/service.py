"""
Dashboard service: fetches rows from the datamart and hands them to the aggregators.
"""
from typing import List, Optional

from core.database.repository import DatamartRepository
from core.exceptions import ApplicationNotFoundError

from . import derivation
from .aggregator import MetricsAggregator
from .keys import ApplicationKey
from .models import (
    ApplicationListing,
    ApplicationSummary,
    ApplicationViolations,
    CweReport,
    HealthScorecard,
    IsoTrendPoint,
    PanelReport,
    PortfolioMetrics,
    ProductivityMetrics,
    RiskAnalysis,
    RiskBucket,
    TechnologyHealth,
    TrendSeries,
)
from .synthesizer import CweProvider, SyntheticCweProvider


class DashboardService:
    """One method per dashboard panel"""

    def __init__(
        self,
        repository: DatamartRepository,
        aggregator: Optional[MetricsAggregator] = None,
        cwe_provider: Optional[CweProvider] = None,
        summary_limit: int = 50,
        trend_months: int = 6,
        iso_trend_limit: int = 10,
    ):
        self.repository = repository
        self.aggregator = aggregator or MetricsAggregator()
        self.cwe_provider = cwe_provider or SyntheticCweProvider()
        self.summary_limit = summary_limit
        self.trend_months = trend_months
        self.iso_trend_limit = iso_trend_limit

    # Executive

    def portfolio_metrics(self) -> PortfolioMetrics:
        return self.aggregator.portfolio_metrics(self.repository.portfolio_rows())

    def application_summaries(self, limit: Optional[int] = None) -> List[ApplicationSummary]:
        return self.aggregator.application_summaries(
            self.repository.application_summary_rows(), limit or self.summary_limit
        )

    def risk_distribution(self) -> List[RiskBucket]:
        return self.aggregator.risk_distribution(self.repository.quality_index_rows())

    def health_trends(self, months: Optional[int] = None) -> TrendSeries:
        return self.aggregator.health_trends(
            self.repository.health_history_rows(),
            months or self.trend_months,
            self.repository.quality_index_rows,
        )

    def technology_health(self) -> List[TechnologyHealth]:
        return self.aggregator.technology_health(self.repository.technology_health_rows())

    # CTO / architect

    def architecture_complexity(self) -> PanelReport:
        return self.aggregator.architecture_complexity(self.repository.architecture_rows())

    def security_metrics(self) -> PanelReport:
        return self.aggregator.security_metrics(self.repository.security_rows())

    def performance_metrics(self) -> PanelReport:
        names = self.repository.criterion_names()
        criterion = self.aggregator.resolve_performance_criterion(names)
        if criterion is None:
            return self.aggregator.performance_metrics(self.repository.latest_score_rows(), None)

        efficiency = self.aggregator.resolve_efficiency_criterion(names)
        rows = self.repository.performance_rows(criterion, efficiency)
        return self.aggregator.performance_metrics(rows, criterion)

    def code_quality_trends(self, months: Optional[int] = None) -> TrendSeries:
        return self.aggregator.code_quality_trends(
            self.repository.quality_history_rows(),
            months or self.trend_months,
            self.repository.latest_quality_rows,
        )

    # Application owner

    def applications(self) -> List[ApplicationListing]:
        return [
            ApplicationListing(
                id=row["application_id"],
                name=row["application_name"],
                latest_analysis=row["latest_analysis_date"],
            )
            for row in self.repository.application_rows()
        ]

    def _require_application(self, key: ApplicationKey) -> dict:
        snapshot = self.repository.find_latest_snapshot(key)
        if snapshot is None:
            raise ApplicationNotFoundError(key)
        return snapshot

    def application_health(self, key: ApplicationKey) -> HealthScorecard:
        return derivation.health_scorecard(self.repository.application_health_rows(key), key)

    def application_violations(self, key: ApplicationKey) -> ApplicationViolations:
        snapshot = self._require_application(key)
        return derivation.violations_by_technology(
            self.repository.application_violation_rows(key), snapshot["application_name"]
        )

    def application_risks(self, key: ApplicationKey) -> RiskAnalysis:
        return derivation.risk_analysis(self.repository.application_risk_rows(key), key)

    def application_productivity(self, key: ApplicationKey) -> ProductivityMetrics:
        return derivation.productivity_metrics(self.repository.application_productivity_rows(key), key)

    def application_iso_trends(self, key: ApplicationKey) -> List[IsoTrendPoint]:
        self._require_application(key)
        return derivation.iso_trends(self.repository.iso_trend_rows(key, self.iso_trend_limit))

    def application_cwe(self, key: ApplicationKey) -> CweReport:
        snapshot = self._require_application(key)
        name = snapshot["application_name"]
        return CweReport(application_name=name, findings=self.cwe_provider.findings(name))
