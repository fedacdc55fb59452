"""FriendRequest and Friendship ORM models."""
import uuid
import enum
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from campus_events.database import Base


class FriendRequestStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    declined = "declined"


class FriendshipStatus(str, enum.Enum):
    active = "active"
    blocked = "blocked"


class FriendRequest(Base):
    __tablename__ = "friend_requests"

    request_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    sender_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    receiver_id = Column(String(36), ForeignKey("users.user_id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=FriendRequestStatus.pending.value)
    message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    responded_at = Column(DateTime(timezone=True), nullable=True)


class Friendship(Base):
    """One row per direction, so (a, b) and (b, a) both exist."""

    __tablename__ = "friendships"
    __table_args__ = (UniqueConstraint("user_id", "friend_id", name="uq_friendships_pair"),)

    friendship_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False, index=True)
    friend_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    status = Column(String(20), nullable=False, default=FriendshipStatus.active.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
