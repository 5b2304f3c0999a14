from sqlalchemy import Column, DateTime, Boolean, Text, ForeignKey, JSON, Index
import enum

from app.core.clock import utcnow
from app.core.database import Base
from app.core.types import GUID, generate_uuid, value_enum


class NotificationType(str, enum.Enum):
    """Notification kinds (values kept as the client reads them)"""
    FRIEND_REQUEST = "FRIEND_REQUEST"
    FRIEND_ACCEPTED = "FRIEND_ACCEPTED"
    NEW_PROJECT = "NEW_PROJECT"
    POTW_WINNER = "potw_winner"
    POTW_ANNOUNCEMENT = "potw_announcement"
    CONTEST_REMINDER = "contest_reminder"


class Notification(Base):
    """In-app notification for a single recipient"""
    __tablename__ = "notifications"

    __table_args__ = (
        Index('ix_notifications_user_created', 'user_id', 'created_at'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Who triggered it (friend request sender, new project owner); NULL for system notices
    sender_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    type = Column(value_enum(NotificationType), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    related_project_id = Column(GUID, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)

    # 'metadata' is reserved on declarative classes
    extra_data = Column("metadata", JSON, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Notification {self.type} -> {self.user_id}>"
