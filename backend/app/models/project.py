from sqlalchemy import Column, String, DateTime, Text, ForeignKey, JSON, Index, UniqueConstraint
from sqlalchemy.orm import relationship
import enum

from app.core.clock import utcnow
from app.core.database import Base
from app.core.types import GUID, generate_uuid, value_enum


class ProjectVisibility(str, enum.Enum):
    """Who can see a project outside the owner's own feed"""
    PUBLIC = "public"
    FRIENDS = "friends"


class Project(Base):
    """A student project shown on the feed"""
    __tablename__ = "projects"

    __table_args__ = (
        Index('ix_projects_owner_id', 'owner_id'),
        Index('ix_projects_created_at', 'created_at'),  # Feed ordering
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    owner_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    tech_stack = Column(JSON, default=list, nullable=False)
    github_url = Column(Text, nullable=True)
    project_url = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    visibility = Column(value_enum(ProjectVisibility), default=ProjectVisibility.PUBLIC, nullable=False)

    # Reflection written by the owner after shipping
    challenges_faced = Column(Text, default="", nullable=False)
    challenges_learned = Column(Text, default="", nullable=False)
    challenges_explored = Column(Text, default="", nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    owner = relationship("User", back_populates="projects", lazy="selectin")
    likes = relationship(
        "ProjectLike", back_populates="project", lazy="selectin",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    comments = relationship(
        "ProjectComment", back_populates="project", lazy="selectin",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by="ProjectComment.created_at",
    )

    @property
    def likes_count(self) -> int:
        return len(self.likes)

    @property
    def comments_count(self) -> int:
        # Replies are not counted
        return sum(1 for comment in self.comments if comment.parent_id is None)

    def is_liked_by(self, user_id: str) -> bool:
        return any(like.user_id == user_id for like in self.likes)

    def __repr__(self):
        return f"<Project {self.title}>"


class ProjectLike(Base):
    """One user liking one project"""
    __tablename__ = "project_likes"

    __table_args__ = (
        UniqueConstraint('project_id', 'user_id', name='uq_project_likes_project_user'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    project = relationship("Project", back_populates="likes")


class ProjectComment(Base):
    """Comment on a project; parent_id is set on replies (one level deep)"""
    __tablename__ = "project_comments"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    parent_id = Column(GUID, ForeignKey("project_comments.id", ondelete="CASCADE"), nullable=True, index=True)
    text = Column(Text, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    project = relationship("Project", back_populates="comments")
    user = relationship("User", lazy="selectin")

    def __repr__(self):
        return f"<ProjectComment {self.id} on {self.project_id}>"
