"""Favorite ORM model."""
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from campus_events.database import Base


class Favorite(Base):
    __tablename__ = "favorites"
    # Provider ids can collide with local ids, so the source is part of the key.
    __table_args__ = (
        UniqueConstraint("user_id", "event_id", "external_source", name="uq_favorites_user_event_source"),
    )

    favorite_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False, index=True)
    event_id = Column(String(100), nullable=False)  # not a FK: provider events are never stored
    external_source = Column(String(20), nullable=False, default="user")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
