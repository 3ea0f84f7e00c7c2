"""
CTO and architect routes: complexity, security, performance and quality trends.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_dashboard_service, render
from core.dashboard import collect
from core.dashboard.service import DashboardService
from utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["quality"])


@router.get("/architecture-complexity")
async def get_architecture_complexity(service: DashboardService = Depends(get_dashboard_service)):
    """Complexity summary over every application plus the largest applications."""
    return render(collect(service.architecture_complexity))


@router.get("/security-metrics")
async def get_security_metrics(service: DashboardService = Depends(get_dashboard_service)):
    """Security grades and risk tiers, worst applications first."""
    return render(collect(service.security_metrics))


@router.get("/performance-metrics")
async def get_performance_metrics(service: DashboardService = Depends(get_dashboard_service)):
    """Performance scores of the performance-like criterion, or low scorers when none exists."""
    result = collect(service.performance_metrics)
    if result.success and result.data.get("fallback"):
        logger.info("No performance criterion in the datamart, serving low-score fallback view")
    return render(result)


@router.get("/code-quality-trends")
async def get_code_quality_trends(
    months: Optional[int] = Query(None, ge=1, le=60, description="Number of monthly points"),
    service: DashboardService = Depends(get_dashboard_service)
):
    """Monthly maintainability, reliability, security and performance averages."""
    result = collect(service.code_quality_trends, months)
    if result.synthetic:
        logger.info("No code quality history in the datamart, serving synthesized trend")
    return render(result)
