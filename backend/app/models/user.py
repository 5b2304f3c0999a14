from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text, ForeignKey, Table, Index, text
from sqlalchemy.orm import relationship
import enum

from app.core.clock import utcnow
from app.core.database import Base
from app.core.types import GUID, generate_uuid, value_enum


class UserRole(str, enum.Enum):
    """User roles"""
    USER = "user"
    ADMIN = "admin"


# Friendship is symmetric: accepting a request stores both (a, b) and (b, a)
user_friends = Table(
    "user_friends",
    Base.metadata,
    Column("user_id", GUID, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("friend_id", GUID, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime, default=utcnow, nullable=False),
)


class User(Base):
    """User model"""
    __tablename__ = "users"

    __table_args__ = (
        # Only one admin account may exist
        Index(
            "uq_users_single_admin", "role",
            unique=True,
            sqlite_where=text("role = 'admin'"),
            postgresql_where=text("role = 'admin'"),
        ),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    avatar_url = Column(Text, nullable=True)
    bio = Column(Text, default="", nullable=False)
    section = Column(String(100), nullable=False)

    role = Column(value_enum(UserRole), default=UserRole.USER, nullable=False)
    is_suspended = Column(Boolean, default=False, nullable=False)

    # Project of the Week wins
    pow_wins = Column(Integer, default=0, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    projects = relationship("Project", back_populates="owner", passive_deletes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self):
        return f"<User {self.email}>"
