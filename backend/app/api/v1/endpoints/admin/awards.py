"""
Admin Awards - win counts per user, taken from the POTW records.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from app.core.database import get_db
from app.models import User, ProjectOfTheWeek
from app.modules.auth.dependencies import get_current_admin

router = APIRouter()


@router.get("/users")
async def award_winners(
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    wins = func.count(ProjectOfTheWeek.id).label("wins")
    result = await db.execute(
        select(User, wins)
        .join(ProjectOfTheWeek, ProjectOfTheWeek.user_id == User.id)
        .group_by(User.id)
        .order_by(wins.desc(), User.name)
    )
    return [
        {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "avatarUrl": user.avatar_url,
            "section": user.section,
            "wins": count,
        }
        for user, count in result.all()
    ]
