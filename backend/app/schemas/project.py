from pydantic import Field, field_validator
from typing import Optional, List

from app.models.project import Project, ProjectComment, ProjectVisibility
from app.schemas.auth import serialize_user_brief
from app.schemas.common import CamelModel, iso


class Challenges(CamelModel):
    faced: Optional[str] = ""
    learned: Optional[str] = ""
    explored: Optional[str] = ""


class ProjectCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    tech_stack: List[str] = Field(default_factory=list)
    github_url: Optional[str] = None
    project_url: Optional[str] = None
    image_url: Optional[str] = None
    visibility: ProjectVisibility = ProjectVisibility.PUBLIC
    challenges: Optional[Challenges] = None

    @field_validator('tech_stack')
    @classmethod
    def clean_tech_stack(cls, value: List[str]) -> List[str]:
        return [item.strip() for item in value if item and item.strip()]


class ProjectUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    tech_stack: Optional[List[str]] = None
    github_url: Optional[str] = None
    project_url: Optional[str] = None
    image_url: Optional[str] = None
    visibility: Optional[ProjectVisibility] = None
    challenges: Optional[Challenges] = None


class CommentCreate(CamelModel):
    text: Optional[str] = None


class ReportCreate(CamelModel):
    reason: Optional[str] = None


def serialize_challenges(project: Project) -> dict:
    return {
        "faced": project.challenges_faced or "",
        "learned": project.challenges_learned or "",
        "explored": project.challenges_explored or "",
    }


def serialize_project(project: Project, viewer_id: Optional[str] = None) -> dict:
    owner = project.owner
    return {
        "id": project.id,
        "ownerId": project.owner_id,
        "ownerName": owner.name if owner else None,
        "ownerAvatar": owner.avatar_url if owner else None,
        "title": project.title,
        "description": project.description,
        "techStack": list(project.tech_stack or []),
        "githubUrl": project.github_url,
        "projectUrl": project.project_url,
        "imageUrl": project.image_url,
        "visibility": project.visibility.value,
        "createdAt": iso(project.created_at),
        "likes": [like.user_id for like in project.likes],
        "likesCount": project.likes_count,
        "commentsCount": project.comments_count,
        "isLiked": project.is_liked_by(viewer_id) if viewer_id else False,
        "challenges": serialize_challenges(project),
    }


def serialize_project_card(project: Project) -> dict:
    """Compact project shown inside contest and winner payloads"""
    return {
        "id": project.id,
        "title": project.title,
        "description": project.description,
        "techStack": list(project.tech_stack or []),
        "imageUrl": project.image_url,
        "githubUrl": project.github_url,
        "projectUrl": project.project_url,
        "likesCount": project.likes_count,
        "commentsCount": project.comments_count,
        "owner": serialize_user_brief(project.owner),
    }


def serialize_comment(comment: ProjectComment, replies: Optional[List[ProjectComment]] = None) -> dict:
    data = {
        "id": comment.id,
        "user": serialize_user_brief(comment.user),
        "text": comment.text,
        "createdAt": iso(comment.created_at),
    }
    if replies is not None:
        data["replies"] = [serialize_comment(reply) for reply in replies]
    return data
