from sqlalchemy import Column, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
import enum

from app.core.clock import utcnow
from app.core.database import Base
from app.core.types import GUID, generate_uuid, value_enum


class ReportStatus(str, enum.Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class ReportAction(str, enum.Enum):
    """What the admin did about a report"""
    APPROVED = "approved"
    DELETED = "deleted"
    WARNED = "warned"
    SUSPENDED = "suspended"


class Report(Base):
    """A user flagging a project for moderation"""
    __tablename__ = "reports"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    reporter_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # Kept after the project is removed so the moderation trail survives
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True)
    reason = Column(Text, nullable=False)

    status = Column(value_enum(ReportStatus), default=ReportStatus.PENDING, nullable=False, index=True)
    action = Column(value_enum(ReportAction), nullable=True)
    resolved_by_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    resolved_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    reporter = relationship("User", foreign_keys=[reporter_id], lazy="selectin")
    project = relationship("Project", lazy="selectin")

    def __repr__(self):
        return f"<Report {self.id} {self.status}>"
