"""
Technologies API - usage counts, weekly trends and per-technology pages.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_current_user
from app.schemas.auth import serialize_user_brief
from app.schemas.common import iso
from app.services.insights_service import InsightsService

router = APIRouter()


def _counts(pairs):
    return [{"name": name, "count": count} for name, count in pairs]


@router.get("")
async def list_technologies(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Every technology used by a public project, most used first"""
    return _counts(await InsightsService(db).technologies())


@router.get("/trending")
async def trending_technologies(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return _counts(await InsightsService(db).trending())


@router.get("/{tech_name}")
async def get_technology(
    tech_name: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Description of a technology and the public projects that use it"""
    detail = await InsightsService(db).technology_detail(tech_name)
    return {
        "name": detail.name,
        **detail.info.to_dict(),
        "stats": {
            "totalProjects": len(detail.projects),
            "monthlyProjects": detail.monthly_projects,
        },
        "projects": [
            {
                "id": project.id,
                "title": project.title,
                "description": project.description,
                "imageUrl": project.image_url,
                "owner": serialize_user_brief(project.owner),
                "likesCount": project.likes_count,
                "commentsCount": project.comments_count,
                "createdAt": iso(project.created_at),
            }
            for project in detail.projects
        ],
    }
