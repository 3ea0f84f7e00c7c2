"""
FastAPI dependencies and response rendering shared by the dashboard routes.
"""
from fastapi import Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from core.config import Settings, get_settings
from core.dashboard import DashboardResult, MetricsAggregator, RandomTrendSynthesizer
from core.dashboard.service import DashboardService
from core.database import DatamartRepository, get_db_session


def get_dashboard_service(
    db_session: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> DashboardService:
    """Build a request-scoped dashboard service over the current session."""
    aggregator = MetricsAggregator(
        synthesizer=RandomTrendSynthesizer(seed=settings.synthetic_seed),
        panel_limit=settings.panel_limit,
    )
    return DashboardService(
        repository=DatamartRepository(db_session),
        aggregator=aggregator,
        summary_limit=settings.application_summary_limit,
        trend_months=settings.trend_months,
        iso_trend_limit=settings.iso_trend_limit,
    )


def render(result: DashboardResult) -> JSONResponse:
    """Render a normalized result as the JSON envelope."""
    return JSONResponse(status_code=result.status_code, content=jsonable_encoder(result.to_dict()))
