"""
Project of the Week contest models.

Contestant       - a project registered for one contest week
ContestWeek      - per-week state: admin phase override and approved winner
ProjectOfTheWeek - the published winner shown on the feed until expiry
"""
from sqlalchemy import (
    Column, DateTime, Integer, Float, Text, Boolean, ForeignKey,
    Index, UniqueConstraint, text,
)
from sqlalchemy.orm import relationship
import enum

from app.core.clock import utcnow
from app.core.database import Base
from app.core.types import GUID, generate_uuid, value_enum


class ContestPhase(str, enum.Enum):
    """Weekly contest phase"""
    REGISTRATION = "registration"  # Saturday
    EVALUATION = "evaluation"      # Sunday
    DISPLAY = "display"            # Monday - Friday


class ContestantStatus(str, enum.Enum):
    ACTIVE = "active"
    REMOVED = "removed"
    WINNER = "winner"
    PARTICIPANT = "participant"


class ContestCertificateType(str, enum.Enum):
    """Contest certificate a contestant is entitled to"""
    NONE = "none"
    WINNER = "winner"
    PARTICIPANT = "participant"


class Contestant(Base):
    """A project entered into one week's contest"""
    __tablename__ = "contestants"

    __table_args__ = (
        UniqueConstraint('project_id', 'week_number', 'year', name='uq_contestants_project_week'),
        Index('ix_contestants_week', 'year', 'week_number', 'status'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)

    # Contest-local wall clock
    registered_at = Column(DateTime, nullable=False)
    week_number = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)

    status = Column(value_enum(ContestantStatus), default=ContestantStatus.ACTIVE, nullable=False)
    certificate_type = Column(
        value_enum(ContestCertificateType), default=ContestCertificateType.NONE, nullable=False
    )

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    project = relationship("Project", lazy="selectin")
    user = relationship("User", lazy="selectin")

    def __repr__(self):
        return f"<Contestant {self.project_id} W{self.week_number}-{self.year} {self.status}>"


class ContestWeek(Base):
    """Persisted state for one contest week"""
    __tablename__ = "contest_weeks"

    __table_args__ = (
        UniqueConstraint('week_number', 'year', name='uq_contest_weeks_week_year'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    week_number = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)

    # Admin-set phase; NULL means the calendar decides
    phase_override = Column(value_enum(ContestPhase), nullable=True)
    updated_by_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Set once a winner is approved for the week
    winner_project_id = Column(GUID, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<ContestWeek W{self.week_number}-{self.year} override={self.phase_override}>"


class ProjectOfTheWeek(Base):
    """Published Project of the Week"""
    __tablename__ = "projects_of_the_week"

    __table_args__ = (
        # At most one active winner at any time
        Index(
            "uq_potw_single_active", "is_active",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
        Index('ix_potw_selected_at', 'selected_at'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    reason = Column(Text, nullable=False)
    score = Column(Float, default=0, nullable=False)
    week_number = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)

    # Contest-local wall clock
    selected_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    project = relationship("Project", lazy="selectin")
    user = relationship("User", lazy="selectin")

    def __repr__(self):
        return f"<ProjectOfTheWeek {self.project_id} W{self.week_number}-{self.year}>"
