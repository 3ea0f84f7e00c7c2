"""
Datamart connectivity check.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.dependencies import render
from core.dashboard import collect
from core.database import DatamartRepository, get_db_session

router = APIRouter(tags=["status"])


@router.get("/health")
async def datamart_health(db_session: Session = Depends(get_db_session)):
    """True when the datamart answers a trivial query."""
    return render(collect(DatamartRepository(db_session).ping))
