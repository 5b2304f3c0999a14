"""
Admin Project of the Week views.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import ContestClock, get_contest_clock
from app.core.database import get_db
from app.models import User
from app.modules.auth.dependencies import get_current_admin
from app.schemas.contest import serialize_history_entry
from app.services.contest_service import ContestService

router = APIRouter()


@router.get("/current")
async def current_project_of_week(
    db: AsyncSession = Depends(get_db),
    clock: ContestClock = Depends(get_contest_clock),
    current_admin: User = Depends(get_current_admin)
):
    current = await ContestService(db, clock).current_project_of_week()
    if not current.active:
        return {"active": False, "potw": None}
    return {"active": True, "potw": serialize_history_entry(current.potw)}


@router.get("/history")
async def project_of_week_history(
    limit: int = Query(None, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    clock: ContestClock = Depends(get_contest_clock),
    current_admin: User = Depends(get_current_admin)
):
    """Every winner, including inactive ones"""
    history = await ContestService(db, clock).history(limit)
    return [serialize_history_entry(potw) for potw in history]
