"""RSVP ORM model."""
import uuid
import enum
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from campus_events.database import Base


class RSVPStatus(str, enum.Enum):
    attending = "attending"
    maybe = "maybe"
    not_attending = "not_attending"


class RSVP(Base):
    __tablename__ = "rsvps"
    # Guest rows carry a NULL user_id, which the constraint does not dedupe.
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_rsvps_event_user"),)

    rsvp_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.event_id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=True)
    guest_name = Column(String(100), nullable=True)
    guest_email = Column(String(320), nullable=True)
    guest_address = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=RSVPStatus.attending.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
