"""
Project Service - projects, likes, comments and moderation reports.

Deleting a project removes its likes, comments, contest entries, reports and
Project of the Week rows through ON DELETE CASCADE; issued certificates stay
(their project_id becomes NULL and project_title keeps the printed name).
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    CommentNotFoundError,
    NotOwnerError,
    ProjectNotFoundError,
    ValidationError,
)
from app.core.logging_config import logger
from app.core.types import is_valid_uuid
from app.models.notification import NotificationType
from app.models.project import Project, ProjectComment, ProjectLike, ProjectVisibility
from app.models.report import Report
from app.models.user import User
from app.services.notification_service import NotificationService
from app.services.social_service import are_friends, get_friend_ids

EDITABLE_FIELDS = (
    "title", "description", "tech_stack", "github_url", "project_url", "image_url", "visibility",
)


class ProjectService:
    """Project operations over one request's session"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notifications = NotificationService(db)

    # ========== Project Operations ==========

    async def get(self, project_id: str) -> Project:
        """Load a project with fresh likes, comments and owner"""
        if not is_valid_uuid(project_id):
            raise ProjectNotFoundError(project_id)
        result = await self.db.execute(
            select(Project)
            .where(Project.id == project_id)
            .execution_options(populate_existing=True)
        )
        project = result.scalar_one_or_none()
        if not project:
            raise ProjectNotFoundError(project_id)
        return project

    async def get_owned(self, project_id: str, user: User, message: str = "Not authorized") -> Project:
        project = await self.get(project_id)
        if project.owner_id != user.id:
            raise NotOwnerError(message)
        return project

    async def feed(self, user: User) -> List[Project]:
        """Own projects plus every project of the user's friends"""
        friend_ids = await get_friend_ids(self.db, user.id)
        result = await self.db.execute(
            select(Project)
            .where(or_(Project.owner_id == user.id, Project.owner_id.in_(friend_ids)))
            .order_by(Project.created_at.desc())
        )
        return list(result.scalars().all())

    async def for_user(self, owner_id: str, viewer: User) -> List[Project]:
        """A user's projects as the viewer may see them"""
        if not is_valid_uuid(owner_id):
            return []
        query = select(Project).where(Project.owner_id == owner_id)
        if owner_id != viewer.id and not await are_friends(self.db, viewer.id, owner_id):
            query = query.where(Project.visibility == ProjectVisibility.PUBLIC)
        result = await self.db.execute(query.order_by(Project.created_at.desc()))
        return list(result.scalars().all())

    async def list_all(self) -> List[Project]:
        result = await self.db.execute(select(Project).order_by(Project.created_at.desc()))
        return list(result.scalars().all())

    async def create(self, owner: User, data: Dict[str, Any]) -> Project:
        challenges = data.pop("challenges", None) or {}
        project = Project(
            owner_id=owner.id,
            challenges_faced=challenges.get("faced", ""),
            challenges_learned=challenges.get("learned", ""),
            challenges_explored=challenges.get("explored", ""),
            **{key: value for key, value in data.items() if key in EDITABLE_FIELDS},
        )
        self.db.add(project)
        await self.db.flush()

        friend_ids = await get_friend_ids(self.db, owner.id)
        await self.notifications.notify_many(
            friend_ids,
            NotificationType.NEW_PROJECT,
            f"{owner.name} shared a new project: {project.title}",
            sender_id=owner.id,
            related_project_id=project.id,
            metadata={"projectId": project.id},
        )
        await self.db.commit()

        logger.info(f"[ProjectService] Project {project.id} created by {owner.id}")
        return await self.get(project.id)

    async def update(self, project_id: str, user: User, data: Dict[str, Any]) -> Project:
        project = await self.get_owned(project_id, user)
        challenges = data.pop("challenges", None)
        for key, value in data.items():
            if key in EDITABLE_FIELDS and value is not None:
                setattr(project, key, value)
        if challenges is not None:
            self._apply_challenges(project, challenges)
        await self.db.commit()
        return await self.get(project.id)

    async def delete(self, project_id: str, user: Optional[User] = None) -> None:
        """Delete a project; with a user, only its owner may"""
        project = await self.get(project_id) if user is None else await self.get_owned(project_id, user)
        await self.db.execute(delete(Project).where(Project.id == project.id))
        await self.db.commit()
        logger.info(f"[ProjectService] Project {project.id} deleted")

    # ========== Engagement ==========

    async def toggle_like(self, project_id: str, user: User) -> Tuple[bool, int]:
        """Returns (liked, likes count)"""
        project = await self.get(project_id)
        result = await self.db.execute(
            select(ProjectLike).where(
                ProjectLike.project_id == project.id,
                ProjectLike.user_id == user.id,
            )
        )
        like = result.scalar_one_or_none()
        if like:
            await self.db.delete(like)
            liked = False
        else:
            self.db.add(ProjectLike(project_id=project.id, user_id=user.id))
            liked = True
        await self.db.commit()

        count = await self.db.scalar(
            select(func.count(ProjectLike.id)).where(ProjectLike.project_id == project.id)
        )
        return liked, count or 0

    async def add_comment(
        self,
        project_id: str,
        user: User,
        text: Optional[str],
        parent_id: Optional[str] = None,
    ) -> ProjectComment:
        label = "Reply" if parent_id else "Comment"
        if not text or not text.strip():
            raise ValidationError(f"{label} text is required", field="text")

        project = await self.get(project_id)
        if parent_id:
            parent = self._find_comment(project, parent_id)
            # Replies are one level deep
            parent_id = parent.parent_id or parent.id

        comment = ProjectComment(project_id=project.id, parent_id=parent_id, text=text.strip())
        comment.user = user
        self.db.add(comment)
        await self.db.commit()
        return comment

    @staticmethod
    def _find_comment(project: Project, comment_id: str) -> ProjectComment:
        for comment in project.comments:
            if comment.id == comment_id:
                return comment
        raise CommentNotFoundError(comment_id)

    async def comment_threads(self, project_id: str) -> List[Tuple[ProjectComment, List[ProjectComment]]]:
        """Top-level comments in order, each with its replies"""
        project = await self.get(project_id)
        replies: Dict[str, List[ProjectComment]] = {}
        for comment in project.comments:
            if comment.parent_id:
                replies.setdefault(comment.parent_id, []).append(comment)
        return [
            (comment, replies.get(comment.id, []))
            for comment in project.comments
            if comment.parent_id is None
        ]

    async def delete_comment(self, project_id: str, comment_id: str, user: User) -> None:
        project = await self.get(project_id)
        comment = self._find_comment(project, comment_id)
        if comment.user_id != user.id and project.owner_id != user.id:
            raise NotOwnerError()
        # Replies go with their comment
        await self.db.execute(
            delete(ProjectComment).where(
                or_(ProjectComment.id == comment.id, ProjectComment.parent_id == comment.id)
            )
        )
        await self.db.commit()

    @staticmethod
    def _apply_challenges(project: Project, challenges: Dict[str, Optional[str]]) -> None:
        project.challenges_faced = challenges.get("faced") or ""
        project.challenges_learned = challenges.get("learned") or ""
        project.challenges_explored = challenges.get("explored") or ""

    async def update_challenges(self, project_id: str, user: User, challenges: Dict[str, Optional[str]]) -> Project:
        project = await self.get_owned(
            project_id, user, "Only the project owner can update challenges"
        )
        self._apply_challenges(project, challenges)
        await self.db.commit()
        return project

    # ========== Moderation ==========

    async def report(self, project_id: str, reporter: User, reason: Optional[str]) -> Report:
        if not reason or not reason.strip():
            raise ValidationError("Report reason is required", field="reason")
        project = await self.get(project_id)
        report = Report(reporter_id=reporter.id, project_id=project.id, reason=reason.strip())
        self.db.add(report)
        await self.db.commit()
        logger.info(f"[ProjectService] Project {project.id} reported by {reporter.id}")
        return report

    async def count_owned(self, owner_id: str) -> int:
        count = await self.db.scalar(
            select(func.count(Project.id)).where(Project.owner_id == owner_id)
        )
        return count or 0
