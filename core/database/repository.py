"""
Row queries against the datamart.

Every method returns plain row dictionaries (column name -> value). The dashboard
core only ever sees these materialized rows, never the session.
"""
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func, literal
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, Query, aliased

from core.criteria import (
    TOTAL_QUALITY_INDEX,
    ARCHITECTURAL_DESIGN,
    SECURITY,
    QUALITY_TREND_CRITERIA,
    ISO_TREND_CRITERIA,
)
from core.dashboard.keys import ApplicationKey, ById
from core.exceptions import DatamartUnavailableError
from utils.logger import get_logger

from .models import DimSnapshot, DimApplication, AppHealthScore, AppSizingMeasure, AppViolationsMeasure

logger = get_logger(__name__)

Row = Dict[str, Any]


class DatamartRepository:
    """Named row queries used by the dashboard panels."""

    def __init__(self, session: Session):
        self.session = session

    # -- helpers -------------------------------------------------------------

    def _fetch(self, operation: str, query: Query) -> List[Row]:
        try:
            return [row._asdict() for row in query.all()]
        except SQLAlchemyError as e:
            logger.error(f"Datamart query '{operation}' failed: {e}")
            self.session.rollback()
            raise DatamartUnavailableError(operation, e) from e

    @staticmethod
    def _key_filter(key: ApplicationKey):
        if isinstance(key, ById):
            return DimSnapshot.application_id == key.application_id
        return DimSnapshot.application_name == key.name

    def _latest_criterion_query(self, criterion: str) -> Query:
        return (
            self.session.query(
                DimSnapshot.application_id,
                DimSnapshot.application_name,
                DimSnapshot.analysis_date,
                AppHealthScore.score,
            )
            .select_from(AppHealthScore)
            .join(DimSnapshot, AppHealthScore.snapshot_id == DimSnapshot.snapshot_id)
            .filter(DimSnapshot.is_latest.is_(True))
            .filter(AppHealthScore.business_criterion_name == criterion)
        )

    # -- status --------------------------------------------------------------

    def ping(self) -> bool:
        """Round-trip a trivial statement to check connectivity."""
        return bool(self._fetch("ping", self.session.query(literal(1).label("ok")))[0]["ok"])

    # -- portfolio -----------------------------------------------------------

    def portfolio_rows(self) -> List[Row]:
        """Latest Total Quality Index per application joined to sizing."""
        query = (
            self._latest_criterion_query(TOTAL_QUALITY_INDEX)
            .join(AppSizingMeasure, AppSizingMeasure.snapshot_id == AppHealthScore.snapshot_id)
            .add_columns(AppSizingMeasure.technical_debt_total, AppSizingMeasure.nb_code_lines)
        )
        return self._fetch("portfolio", query)

    def quality_index_rows(self) -> List[Row]:
        """Latest Total Quality Index per application."""
        return self._fetch("quality_index", self._latest_criterion_query(TOTAL_QUALITY_INDEX))

    def application_summary_rows(self) -> List[Row]:
        """Latest quality/debt per application, with business unit when the dimension exists."""
        base = (
            self._latest_criterion_query(TOTAL_QUALITY_INDEX)
            .join(AppSizingMeasure, AppSizingMeasure.snapshot_id == AppHealthScore.snapshot_id)
            .add_columns(AppSizingMeasure.technical_debt_total)
        )
        with_unit = (
            base.outerjoin(DimApplication, DimApplication.application_name == DimSnapshot.application_name)
            .add_columns(DimApplication.business_unit)
        )
        try:
            return [row._asdict() for row in with_unit.all()]
        except SQLAlchemyError as e:
            logger.warning(f"Application summary query with business unit failed, retrying without it: {e}")
            self.session.rollback()
        return self._fetch("application_summaries", base)

    def technology_health_rows(self) -> List[Row]:
        """Violation technologies joined to the latest Total Quality Index of the same snapshot."""
        query = (
            self.session.query(
                AppViolationsMeasure.technology,
                DimSnapshot.application_name,
                AppHealthScore.score,
            )
            .select_from(AppViolationsMeasure)
            .join(DimSnapshot, AppViolationsMeasure.snapshot_id == DimSnapshot.snapshot_id)
            .join(AppHealthScore, AppViolationsMeasure.snapshot_id == AppHealthScore.snapshot_id)
            .filter(DimSnapshot.is_latest.is_(True))
            .filter(AppHealthScore.business_criterion_name == TOTAL_QUALITY_INDEX)
        )
        return self._fetch("technology_health", query)

    def health_history_rows(self) -> List[Row]:
        """Total Quality Index of every snapshot, latest or not."""
        query = (
            self.session.query(DimSnapshot.analysis_date, AppHealthScore.score)
            .select_from(AppHealthScore)
            .join(DimSnapshot, AppHealthScore.snapshot_id == DimSnapshot.snapshot_id)
            .filter(AppHealthScore.business_criterion_name == TOTAL_QUALITY_INDEX)
            .order_by(DimSnapshot.analysis_date)
        )
        return self._fetch("health_history", query)

    # -- architecture, security, performance ---------------------------------

    def architecture_rows(self) -> List[Row]:
        """Sizing of every latest snapshot with its Architectural Design score, largest first."""
        arch = aliased(AppHealthScore)
        query = (
            self.session.query(
                DimSnapshot.application_name,
                AppSizingMeasure.nb_code_lines,
                AppSizingMeasure.nb_files,
                AppSizingMeasure.nb_artifacts,
                AppSizingMeasure.nb_complexity_high,
                AppSizingMeasure.nb_complexity_medium,
                AppSizingMeasure.nb_complexity_low,
                arch.score.label("architecture_score"),
            )
            .select_from(AppSizingMeasure)
            .join(DimSnapshot, AppSizingMeasure.snapshot_id == DimSnapshot.snapshot_id)
            .outerjoin(
                arch,
                (arch.snapshot_id == AppSizingMeasure.snapshot_id)
                & (arch.business_criterion_name == ARCHITECTURAL_DESIGN),
            )
            .filter(DimSnapshot.is_latest.is_(True))
            .order_by(AppSizingMeasure.nb_code_lines.desc())
        )
        return self._fetch("architecture", query)

    def security_rows(self) -> List[Row]:
        """Latest Security score per application with its violation totals, worst first."""
        totals = (
            self.session.query(
                AppViolationsMeasure.snapshot_id.label("snapshot_id"),
                func.sum(AppViolationsMeasure.nb_violations).label("total_violations"),
                func.sum(AppViolationsMeasure.critical_contributions).label("critical_violations"),
            )
            .group_by(AppViolationsMeasure.snapshot_id)
            .subquery()
        )
        query = (
            self.session.query(
                DimSnapshot.application_name,
                DimSnapshot.analysis_date,
                AppHealthScore.score.label("security_score"),
                totals.c.total_violations,
                totals.c.critical_violations,
            )
            .select_from(AppHealthScore)
            .join(DimSnapshot, AppHealthScore.snapshot_id == DimSnapshot.snapshot_id)
            .outerjoin(totals, totals.c.snapshot_id == AppHealthScore.snapshot_id)
            .filter(DimSnapshot.is_latest.is_(True))
            .filter(AppHealthScore.business_criterion_name == SECURITY)
            .order_by(AppHealthScore.score.asc())
        )
        return self._fetch("security", query)

    def criterion_names(self) -> List[str]:
        """Every business criterion name present in the datamart, sorted."""
        query = (
            self.session.query(AppHealthScore.business_criterion_name)
            .distinct()
            .order_by(AppHealthScore.business_criterion_name)
        )
        return [row["business_criterion_name"] for row in self._fetch("criterion_names", query)]

    def performance_rows(self, criterion: str, efficiency_criterion: Optional[str] = None) -> List[Row]:
        """Latest score of the resolved performance criterion per application."""
        eff = aliased(AppHealthScore)
        query = (
            self.session.query(
                DimSnapshot.application_name,
                DimSnapshot.analysis_date,
                AppHealthScore.score.label("performance_score"),
                eff.score.label("efficiency_score"),
                AppSizingMeasure.nb_code_lines,
            )
            .select_from(AppHealthScore)
            .join(DimSnapshot, AppHealthScore.snapshot_id == DimSnapshot.snapshot_id)
            .outerjoin(
                eff,
                (eff.snapshot_id == AppHealthScore.snapshot_id)
                & (eff.business_criterion_name == (efficiency_criterion or criterion)),
            )
            .outerjoin(AppSizingMeasure, AppSizingMeasure.snapshot_id == AppHealthScore.snapshot_id)
            .filter(DimSnapshot.is_latest.is_(True))
            .filter(AppHealthScore.business_criterion_name == criterion)
            .order_by(AppHealthScore.score.asc())
        )
        return self._fetch("performance", query)

    def latest_score_rows(self) -> List[Row]:
        """Every non-null criterion score of every latest snapshot, with its size."""
        query = (
            self.session.query(
                DimSnapshot.application_name,
                AppHealthScore.business_criterion_name,
                AppHealthScore.score,
                AppSizingMeasure.nb_code_lines,
            )
            .select_from(AppHealthScore)
            .join(DimSnapshot, AppHealthScore.snapshot_id == DimSnapshot.snapshot_id)
            .outerjoin(AppSizingMeasure, AppSizingMeasure.snapshot_id == AppHealthScore.snapshot_id)
            .filter(DimSnapshot.is_latest.is_(True))
            .filter(AppHealthScore.score.isnot(None))
        )
        return self._fetch("latest_scores", query)

    def quality_history_rows(self) -> List[Row]:
        """Scores of the code quality trend criteria across every snapshot."""
        query = (
            self.session.query(
                DimSnapshot.analysis_date,
                AppHealthScore.business_criterion_name,
                AppHealthScore.score,
            )
            .select_from(AppHealthScore)
            .join(DimSnapshot, AppHealthScore.snapshot_id == DimSnapshot.snapshot_id)
            .filter(AppHealthScore.business_criterion_name.in_(list(QUALITY_TREND_CRITERIA.values())))
            .order_by(DimSnapshot.analysis_date)
        )
        return self._fetch("quality_history", query)

    def latest_quality_rows(self) -> List[Row]:
        """Latest-snapshot scores of the code quality trend criteria."""
        query = (
            self.session.query(
                DimSnapshot.application_name,
                AppHealthScore.business_criterion_name,
                AppHealthScore.score,
            )
            .select_from(AppHealthScore)
            .join(DimSnapshot, AppHealthScore.snapshot_id == DimSnapshot.snapshot_id)
            .filter(DimSnapshot.is_latest.is_(True))
            .filter(AppHealthScore.business_criterion_name.in_(list(QUALITY_TREND_CRITERIA.values())))
        )
        return self._fetch("latest_quality", query)

    # -- applications --------------------------------------------------------

    def application_rows(self) -> List[Row]:
        """Every application with a latest snapshot, ordered by name."""
        query = (
            self.session.query(
                DimSnapshot.application_id,
                DimSnapshot.application_name,
                func.max(DimSnapshot.analysis_date).label("latest_analysis_date"),
            )
            .filter(DimSnapshot.is_latest.is_(True))
            .group_by(DimSnapshot.application_name, DimSnapshot.application_id)
            .order_by(DimSnapshot.application_name)
        )
        return self._fetch("applications", query)

    def find_latest_snapshot(self, key: ApplicationKey) -> Optional[Row]:
        """Latest snapshot of one application, or None when the key matches nothing."""
        query = (
            self.session.query(
                DimSnapshot.snapshot_id,
                DimSnapshot.application_id,
                DimSnapshot.application_name,
                DimSnapshot.analysis_date,
            )
            .filter(DimSnapshot.is_latest.is_(True))
            .filter(self._key_filter(key))
            .order_by(DimSnapshot.analysis_date.desc())
            .limit(1)
        )
        rows = self._fetch("find_latest_snapshot", query)
        return rows[0] if rows else None

    def application_health_rows(self, key: ApplicationKey) -> List[Row]:
        """Every criterion of the application's latest snapshot with its sizing."""
        query = (
            self.session.query(
                DimSnapshot.application_name,
                DimSnapshot.analysis_date,
                AppHealthScore.business_criterion_name,
                AppHealthScore.score,
                AppHealthScore.compliance_score,
                AppSizingMeasure.technical_debt_total,
                AppSizingMeasure.nb_code_lines,
                AppSizingMeasure.nb_files,
            )
            .select_from(AppHealthScore)
            .join(DimSnapshot, AppHealthScore.snapshot_id == DimSnapshot.snapshot_id)
            .outerjoin(AppSizingMeasure, AppSizingMeasure.snapshot_id == AppHealthScore.snapshot_id)
            .filter(DimSnapshot.is_latest.is_(True))
            .filter(self._key_filter(key))
            .order_by(AppHealthScore.business_criterion_name)
        )
        return self._fetch("application_health", query)

    def application_violation_rows(self, key: ApplicationKey) -> List[Row]:
        """Rules with at least one violation in the application's latest snapshot."""
        query = (
            self.session.query(
                DimSnapshot.application_name,
                AppViolationsMeasure.technology,
                AppViolationsMeasure.rule_name,
                AppViolationsMeasure.nb_violations,
                AppViolationsMeasure.critical_contributions,
            )
            .select_from(AppViolationsMeasure)
            .join(DimSnapshot, AppViolationsMeasure.snapshot_id == DimSnapshot.snapshot_id)
            .filter(DimSnapshot.is_latest.is_(True))
            .filter(self._key_filter(key))
            .filter(AppViolationsMeasure.nb_violations > 0)
            .order_by(AppViolationsMeasure.technology, AppViolationsMeasure.nb_violations.desc())
        )
        return self._fetch("application_violations", query)

    def application_risk_rows(self, key: ApplicationKey) -> List[Row]:
        """Latest snapshot rows combining violation rules with complexity buckets."""
        query = (
            self.session.query(
                DimSnapshot.application_name,
                AppViolationsMeasure.technology,
                AppViolationsMeasure.rule_name,
                AppViolationsMeasure.nb_violations,
                AppViolationsMeasure.critical_contributions,
                AppSizingMeasure.nb_complexity_high,
                AppSizingMeasure.nb_complexity_medium,
                AppSizingMeasure.nb_complexity_low,
            )
            .select_from(DimSnapshot)
            .outerjoin(AppViolationsMeasure, AppViolationsMeasure.snapshot_id == DimSnapshot.snapshot_id)
            .outerjoin(AppSizingMeasure, AppSizingMeasure.snapshot_id == DimSnapshot.snapshot_id)
            .filter(DimSnapshot.is_latest.is_(True))
            .filter(self._key_filter(key))
        )
        return self._fetch("application_risks", query)

    def application_productivity_rows(self, key: ApplicationKey) -> List[Row]:
        """Sizing and Total Quality Index of the application's latest snapshot."""
        health = aliased(AppHealthScore)
        query = (
            self.session.query(
                DimSnapshot.application_name,
                DimSnapshot.analysis_date,
                AppSizingMeasure.nb_code_lines,
                AppSizingMeasure.nb_files,
                AppSizingMeasure.nb_artifacts,
                AppSizingMeasure.technical_debt_total,
                health.score.label("quality_score"),
            )
            .select_from(DimSnapshot)
            .outerjoin(AppSizingMeasure, AppSizingMeasure.snapshot_id == DimSnapshot.snapshot_id)
            .outerjoin(
                health,
                (health.snapshot_id == DimSnapshot.snapshot_id)
                & (health.business_criterion_name == TOTAL_QUALITY_INDEX),
            )
            .filter(DimSnapshot.is_latest.is_(True))
            .filter(self._key_filter(key))
        )
        return self._fetch("application_productivity", query)

    def iso_trend_rows(self, key: ApplicationKey, limit: int = 10) -> List[Row]:
        """ISO-5055 compliance of the application's most recent snapshots, newest first."""
        snapshots = self._fetch(
            "iso_snapshots",
            self.session.query(DimSnapshot.snapshot_id, DimSnapshot.analysis_date)
            .filter(self._key_filter(key))
            .order_by(DimSnapshot.analysis_date.desc())
            .limit(limit),
        )
        if not snapshots:
            return []

        snapshot_ids: Sequence[str] = [s["snapshot_id"] for s in snapshots]
        scores = self._fetch(
            "iso_scores",
            self.session.query(
                AppHealthScore.snapshot_id,
                AppHealthScore.business_criterion_name,
                AppHealthScore.compliance_score,
            )
            .filter(AppHealthScore.snapshot_id.in_(snapshot_ids))
            .filter(AppHealthScore.business_criterion_name.in_(list(ISO_TREND_CRITERIA.values()))),
        )

        by_snapshot: Dict[str, Dict[str, Any]] = {}
        for score in scores:
            by_snapshot.setdefault(score["snapshot_id"], {})[score["business_criterion_name"]] = score["compliance_score"]

        rows = []
        for snapshot in snapshots:
            compliance = by_snapshot.get(snapshot["snapshot_id"], {})
            row = {"analysis_date": snapshot["analysis_date"]}
            for field, criterion in ISO_TREND_CRITERIA.items():
                row[field] = compliance.get(criterion)
            rows.append(row)
        return rows
