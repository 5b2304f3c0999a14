from pydantic import BaseModel
from typing import List, Optional

from app.models.project import Project
from app.models.report import Report, ReportAction
from app.models.user import User
from app.schemas.common import iso


# ==================== Dashboard Schemas ====================

class TopUser(BaseModel):
    id: str
    name: str
    avatarUrl: Optional[str] = None
    wins: int


class DashboardStats(BaseModel):
    """Admin dashboard totals"""
    totalUsers: int
    suspendedUsers: int
    totalProjects: int
    pendingReports: int
    totalAwards: int
    totalLikes: int
    totalComments: int
    topUsers: List[TopUser]


# ==================== Moderation Schemas ====================

class ResolveReportRequest(BaseModel):
    action: ReportAction


def serialize_admin_user(user: User, friends_count: int = 0) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "section": user.section,
        "role": user.role.value,
        "isSuspended": user.is_suspended,
        "powWins": user.pow_wins,
        "friendsCount": friends_count,
        "createdAt": iso(user.created_at),
    }


def _owner_with_email(user: Optional[User]) -> Optional[dict]:
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "email": user.email}


def serialize_admin_project(project: Project) -> dict:
    return {
        "id": project.id,
        "title": project.title,
        "description": project.description,
        "imageUrl": project.image_url,
        "githubUrl": project.github_url,
        "projectUrl": project.project_url,
        "owner": _owner_with_email(project.owner),
        "techStack": list(project.tech_stack or []),
        "visibility": project.visibility.value,
        "likesCount": project.likes_count,
        "commentsCount": project.comments_count,
        "createdAt": iso(project.created_at),
    }


def serialize_report(report: Report) -> dict:
    reporter = report.reporter
    project = report.project
    return {
        "id": report.id,
        "reporter": {
            "id": reporter.id,
            "name": reporter.name,
            "email": reporter.email,
            "avatarUrl": reporter.avatar_url,
        },
        "project": {
            "id": project.id,
            "title": project.title,
            "description": project.description,
            "imageUrl": project.image_url,
            "owner": _owner_with_email(project.owner),
        } if project else None,
        "action": report.action.value if report.action else None,
        "resolvedAt": iso(report.resolved_at),
        "reason": report.reason,
        "status": report.status.value,
        "createdAt": iso(report.created_at),
    }
