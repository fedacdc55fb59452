"""Pydantic schemas for Events and the normalized search listing."""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from campus_events.models.event import EventCategory


class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    category: EventCategory
    start_date: datetime
    end_date: Optional[datetime] = None
    location: str = Field(min_length=1, max_length=500)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    max_attendees: Optional[int] = Field(None, gt=0)
    price: float = Field(0, ge=0)
    is_public: bool = True
    image_url: Optional[str] = Field(None, max_length=1000)
    venue_name: Optional[str] = Field(None, max_length=255)
    payment_intent_id: Optional[str] = None  # from /api/create-event-payment

    @model_validator(mode="after")
    def _check_dates(self):
        if self.end_date is not None and _as_utc(self.end_date) <= _as_utc(self.start_date):
            raise ValueError("end_date must be after start_date")
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be provided together")
        return self


class EventOut(BaseModel):
    event_id: str
    title: str
    description: Optional[str] = None
    category: str
    start_date: datetime
    end_date: Optional[datetime] = None
    location: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    host_id: Optional[str] = None
    max_attendees: Optional[int] = None
    price: float = 0
    min_price: float = 0
    max_price: float = 0
    is_public: bool = True
    external_id: Optional[str] = None
    external_source: str
    external_url: Optional[str] = None
    image_url: Optional[str] = None
    venue_name: Optional[str] = None
    platform_fee: float = 0
    is_paid: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class EventListing(BaseModel):
    """Normalized event shape shared by provider results and stored events.

    ``start_date`` stays a string: provider payloads are not trusted to carry a
    parseable timestamp, and the search flow decides what to do with bad ones.
    """

    id: str
    title: str
    description: Optional[str] = None
    category: str
    start_date: str
    end_date: Optional[str] = None
    location: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    price: float = 0
    min_price: float = 0
    max_price: float = 0
    image_url: Optional[str] = None
    external_id: Optional[str] = None
    external_source: str
    external_url: Optional[str] = None
    venue_name: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    address: Optional[str] = None
    host_id: Optional[str] = None
    host_name: Optional[str] = None
    max_attendees: Optional[int] = None
    is_favorited: Optional[bool] = None

    @classmethod
    def from_event(cls, event) -> "EventListing":
        """Build a listing from a stored ``Event`` row."""
        return cls(
            id=event.event_id,
            title=event.title,
            description=event.description,
            category=event.category,
            start_date=_as_utc(event.start_date).isoformat(),
            end_date=_as_utc(event.end_date).isoformat() if event.end_date else None,
            location=event.location,
            latitude=event.latitude,
            longitude=event.longitude,
            price=event.price or 0,
            min_price=event.min_price or 0,
            max_price=event.max_price or 0,
            image_url=event.image_url,
            external_id=event.external_id,
            external_source=event.external_source,
            external_url=event.external_url,
            venue_name=event.venue_name,
            host_id=event.host_id,
            host_name=event.host.full_name if event.host else None,
            max_attendees=event.max_attendees,
        )


class EventSearchResponse(BaseModel):
    events: list[EventListing] = []


def _as_utc(value: datetime) -> datetime:
    """Naive timestamps (SQLite round-trips) are UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
