from sqlalchemy import Column, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
import enum

from app.core.clock import utcnow
from app.core.database import Base
from app.core.types import GUID, generate_uuid, value_enum


class FriendRequestStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class FriendRequest(Base):
    """Friend request from sender to receiver"""
    __tablename__ = "friend_requests"

    __table_args__ = (
        Index('ix_friend_requests_pair', 'sender_id', 'receiver_id', 'status'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    sender_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(value_enum(FriendRequestStatus), default=FriendRequestStatus.PENDING, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    sender = relationship("User", foreign_keys=[sender_id], lazy="selectin")
    receiver = relationship("User", foreign_keys=[receiver_id], lazy="selectin")

    def __repr__(self):
        return f"<FriendRequest {self.sender_id} -> {self.receiver_id} {self.status}>"
