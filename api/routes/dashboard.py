"""
Executive dashboard routes: portfolio KPIs, risk, health trends and technology health.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_dashboard_service, render
from core.dashboard import collect
from core.dashboard.service import DashboardService
from utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["executive"])


@router.get("/portfolio-metrics")
async def get_portfolio_metrics(service: DashboardService = Depends(get_dashboard_service)):
    """Headline portfolio KPIs over the latest snapshot of every application."""
    return render(collect(service.portfolio_metrics))


@router.get("/application-summaries")
async def get_application_summaries(
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Maximum number of applications"),
    service: DashboardService = Depends(get_dashboard_service)
):
    """Most recently analysed applications with their risk level."""
    return render(collect(service.application_summaries, limit))


@router.get("/risk-distribution")
async def get_risk_distribution(service: DashboardService = Depends(get_dashboard_service)):
    """Number of applications per risk tier."""
    return render(collect(service.risk_distribution))


@router.get("/health-trends")
async def get_health_trends(
    months: Optional[int] = Query(None, ge=1, le=60, description="Number of monthly points"),
    service: DashboardService = Depends(get_dashboard_service)
):
    """Monthly average Total Quality Index."""
    result = collect(service.health_trends, months)
    if result.synthetic:
        logger.info("No health history in the datamart, serving synthesized trend")
    return render(result)


@router.get("/technology-health")
async def get_technology_health(service: DashboardService = Depends(get_dashboard_service)):
    """Average quality per technology, best first."""
    return render(collect(service.technology_health))
