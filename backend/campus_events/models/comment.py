"""Comment and Media ORM models."""
import uuid
import enum
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey
from sqlalchemy.sql import func
from campus_events.database import Base


class Comment(Base):
    __tablename__ = "comments"

    comment_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.event_id"), nullable=False, index=True)
    parent_comment_id = Column(String(36), ForeignKey("comments.comment_id"), nullable=True)
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=True)
    guest_name = Column(String(100), nullable=True)
    guest_email = Column(String(320), nullable=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class MediaType(str, enum.Enum):
    image = "image"
    video = "video"


class Media(Base):
    __tablename__ = "media"

    media_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.event_id"), nullable=True, index=True)
    comment_id = Column(String(36), ForeignKey("comments.comment_id"), nullable=True, index=True)
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=True)
    guest_name = Column(String(100), nullable=True)
    guest_email = Column(String(320), nullable=True)
    media_type = Column(String(10), nullable=False)
    url = Column(String(1000), nullable=False)
    filename = Column(String(255), nullable=True)
    file_size = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
