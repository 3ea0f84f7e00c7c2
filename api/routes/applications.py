"""
Application owner routes.

``app_id`` is either a numeric application id or an application name.
"""
from typing import Any, Callable

from fastapi import APIRouter, Depends

from api.dependencies import get_dashboard_service, render
from core.dashboard import collect, parse_application_key
from core.dashboard.results import failure
from core.dashboard.service import DashboardService
from core.exceptions import InvalidApplicationKeyError
from utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["applications"])


def _for_application(operation: Callable[..., Any], app_id: str):
    try:
        key = parse_application_key(app_id)
    except InvalidApplicationKeyError as e:
        return render(failure(str(e), status_code=400))
    return render(collect(operation, key))


@router.get("/applications")
async def list_applications(service: DashboardService = Depends(get_dashboard_service)):
    """Every application that has a latest snapshot."""
    return render(collect(service.applications))


@router.get("/application-health/{app_id}")
async def get_application_health(app_id: str, service: DashboardService = Depends(get_dashboard_service)):
    """Health scorecard of the application's latest snapshot."""
    return _for_application(service.application_health, app_id)


@router.get("/application-violations/{app_id}")
async def get_application_violations(app_id: str, service: DashboardService = Depends(get_dashboard_service)):
    """Violations grouped by technology."""
    return _for_application(service.application_violations, app_id)


@router.get("/application-risks/{app_id}")
async def get_application_risks(app_id: str, service: DashboardService = Depends(get_dashboard_service)):
    """Complexity and violation risk analysis."""
    return _for_application(service.application_risks, app_id)


@router.get("/application-productivity/{app_id}")
async def get_application_productivity(app_id: str, service: DashboardService = Depends(get_dashboard_service)):
    """Size, debt ratio and quality efficiency."""
    return _for_application(service.application_productivity, app_id)


@router.get("/application-iso-trends/{app_id}")
async def get_application_iso_trends(app_id: str, service: DashboardService = Depends(get_dashboard_service)):
    """ISO-5055 compliance of the most recent snapshots."""
    return _for_application(service.application_iso_trends, app_id)


@router.get("/application-cwe/{app_id}")
async def get_application_cwe(app_id: str, service: DashboardService = Depends(get_dashboard_service)):
    """CWE findings (sample catalogue until CWE data is loaded)."""
    return _for_application(service.application_cwe, app_id)
