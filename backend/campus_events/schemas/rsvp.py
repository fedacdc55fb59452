"""Pydantic schemas for RSVPs."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from campus_events.models.rsvp import RSVPStatus


class RSVPCreate(BaseModel):
    status: RSVPStatus = RSVPStatus.attending


class GuestRSVPCreate(BaseModel):
    guest_name: str = Field(min_length=1, max_length=100)
    guest_email: EmailStr
    guest_address: Optional[str] = Field(None, max_length=500)
    status: RSVPStatus = RSVPStatus.attending


class RSVPOut(BaseModel):
    rsvp_id: str
    event_id: str
    user_id: Optional[str] = None
    guest_name: Optional[str] = None
    guest_email: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
