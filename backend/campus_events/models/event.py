"""Event ORM model and its enumerations."""
import uuid
import enum
from sqlalchemy import Column, String, Text, DateTime, Integer, Float, Numeric, Boolean, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from campus_events.database import Base


class EventCategory(str, enum.Enum):
    parties = "parties"
    study = "study"
    sports = "sports"
    concerts = "concerts"
    social = "social"
    restaurants = "restaurants"
    food = "food"
    nightlife = "nightlife"


class ExternalSource(str, enum.Enum):
    ticketmaster = "ticketmaster"
    meetup = "meetup"
    user = "user"


class Event(Base):
    __tablename__ = "events"

    event_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(20), nullable=False, index=True)
    start_date = Column(DateTime(timezone=True), nullable=False, index=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    location = Column(String(500), nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    host_id = Column(String(36), ForeignKey("users.user_id"), nullable=True)  # NULL for provider events
    max_attendees = Column(Integer, nullable=True)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    min_price = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    max_price = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    is_public = Column(Boolean, nullable=False, default=True)

    # Provenance
    external_id = Column(String(100), nullable=True)
    external_source = Column(String(20), nullable=False, default=ExternalSource.user.value)
    external_url = Column(String(1000), nullable=True)

    image_url = Column(String(1000), nullable=True)
    venue_name = Column(String(255), nullable=True)

    # Platform fee
    platform_fee = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    is_paid = Column(Boolean, nullable=False, default=False)
    # Set only on paid events; one hosting fee pays for one event
    payment_intent_id = Column(String(255), nullable=True, unique=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    host = relationship("User", lazy="joined")

    @property
    def is_external(self) -> bool:
        """Provider-sourced rows are read-only: no RSVP, no ownership."""
        return self.external_source != ExternalSource.user.value
