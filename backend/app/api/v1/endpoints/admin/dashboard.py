"""
Admin Dashboard endpoints - platform totals.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from app.core.database import get_db
from app.models import User, Project, ProjectLike, ProjectComment, ProjectOfTheWeek, Report, ReportStatus
from app.modules.auth.dependencies import get_current_admin
from app.schemas.admin import DashboardStats, TopUser

router = APIRouter()

TOP_USERS_LIMIT = 3


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Get dashboard statistics"""
    total_users = await db.scalar(select(func.count(User.id)))
    suspended_users = await db.scalar(
        select(func.count(User.id)).where(User.is_suspended.is_(True))
    )
    total_projects = await db.scalar(select(func.count(Project.id)))
    pending_reports = await db.scalar(
        select(func.count(Report.id)).where(Report.status == ReportStatus.PENDING)
    )
    total_awards = await db.scalar(select(func.count(ProjectOfTheWeek.id)))
    total_likes = await db.scalar(select(func.count(ProjectLike.id)))
    total_comments = await db.scalar(select(func.count(ProjectComment.id)))

    result = await db.execute(
        select(User)
        .where(User.pow_wins > 0)
        .order_by(User.pow_wins.desc(), User.name)
        .limit(TOP_USERS_LIMIT)
    )
    top_users = [
        TopUser(id=user.id, name=user.name, avatarUrl=user.avatar_url, wins=user.pow_wins)
        for user in result.scalars().all()
    ]

    return DashboardStats(
        totalUsers=total_users or 0,
        suspendedUsers=suspended_users or 0,
        totalProjects=total_projects or 0,
        pendingReports=pending_reports or 0,
        totalAwards=total_awards or 0,
        totalLikes=total_likes or 0,
        totalComments=total_comments or 0,
        topUsers=top_users,
    )
