"""
Projects API - feed, project CRUD, likes, comments and reports.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import ContestClock, get_contest_clock
from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_current_user
from app.schemas.contest import serialize_winner
from app.schemas.project import (
    Challenges,
    CommentCreate,
    ProjectCreate,
    ProjectUpdate,
    ReportCreate,
    serialize_challenges,
    serialize_comment,
    serialize_project,
)
from app.services.contest_service import ContestService
from app.services.project_service import ProjectService

router = APIRouter()


@router.get("/project-of-week")
async def get_project_of_week(
    db: AsyncSession = Depends(get_db),
    clock: ContestClock = Depends(get_contest_clock),
    current_user: User = Depends(get_current_user)
):
    """Currently displayed Project of the Week"""
    current = await ContestService(db, clock).current_project_of_week()
    if current.potw is None:
        return {"active": False, "expiresAt": None}
    if not current.active:
        return {"active": False, "expiresAt": current.potw.expires_at.isoformat()}
    return {"active": True, **serialize_winner(current.potw)}


@router.get("/feed")
async def get_feed(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Own projects and friends' projects, newest first"""
    projects = await ProjectService(db).feed(current_user)
    return [serialize_project(project, current_user.id) for project in projects]


@router.get("/user/{user_id}")
async def get_user_projects(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    projects = await ProjectService(db).for_user(user_id, current_user)
    return [serialize_project(project, current_user.id) for project in projects]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Publish a project; the owner's friends are notified"""
    project = await ProjectService(db).create(current_user, project_data.model_dump())
    return serialize_project(project, current_user.id)


@router.put("/{project_id}")
async def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    project = await ProjectService(db).update(
        project_id, current_user, project_data.model_dump(exclude_unset=True)
    )
    return serialize_project(project, current_user.id)


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await ProjectService(db).delete(project_id, current_user)
    return {"message": "Project deleted successfully"}


@router.post("/{project_id}/like")
async def toggle_like(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Like, or unlike when already liked"""
    liked, likes_count = await ProjectService(db).toggle_like(project_id, current_user)
    return {"liked": liked, "likesCount": likes_count}


@router.post("/{project_id}/comment", status_code=status.HTTP_201_CREATED)
async def add_comment(
    project_id: str,
    body: CommentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    comment = await ProjectService(db).add_comment(project_id, current_user, body.text)
    return serialize_comment(comment)


@router.post("/{project_id}/comment/{comment_id}/reply", status_code=status.HTTP_201_CREATED)
async def reply_to_comment(
    project_id: str,
    comment_id: str,
    body: CommentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    reply = await ProjectService(db).add_comment(
        project_id, current_user, body.text, parent_id=comment_id
    )
    return serialize_comment(reply)


@router.get("/{project_id}/comments")
async def get_comments(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    threads = await ProjectService(db).comment_threads(project_id)
    return [serialize_comment(comment, replies) for comment, replies in threads]


@router.delete("/{project_id}/comment/{comment_id}")
async def delete_comment(
    project_id: str,
    comment_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Comment author or project owner only"""
    await ProjectService(db).delete_comment(project_id, comment_id, current_user)
    return {"message": "Comment deleted successfully"}


@router.put("/{project_id}/challenges")
async def update_challenges(
    project_id: str,
    challenges: Challenges,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    project = await ProjectService(db).update_challenges(
        project_id, current_user, challenges.model_dump()
    )
    return {
        "message": "Challenges updated successfully",
        "challenges": serialize_challenges(project),
    }


@router.post("/{project_id}/report", status_code=status.HTTP_201_CREATED)
async def report_project(
    project_id: str,
    body: ReportCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    report = await ProjectService(db).report(project_id, current_user, body.reason)
    return {"message": "Project reported successfully", "reportId": report.id}
