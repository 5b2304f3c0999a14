"""
Admin Project listing.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models import User
from app.modules.auth.dependencies import get_current_admin
from app.schemas.admin import serialize_admin_project
from app.services.project_service import ProjectService

router = APIRouter()


@router.get("")
async def list_projects(
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Every project regardless of visibility"""
    return [serialize_admin_project(p) for p in await ProjectService(db).list_all()]


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    await ProjectService(db).delete(project_id)
    return {"message": "Project deleted successfully"}
