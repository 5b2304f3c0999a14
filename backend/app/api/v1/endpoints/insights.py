"""
Insights API - a user's project totals and favourite technologies.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_current_user
from app.services.insights_service import InsightsService

router = APIRouter()


@router.get("/{user_id}")
async def get_user_insights(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    insights = await InsightsService(db).user_insights(user_id)
    return insights.to_dict()
