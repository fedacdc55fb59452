"""Pydantic schemas for friend requests."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class FriendRequestCreate(BaseModel):
    receiver_id: str
    message: Optional[str] = Field(None, max_length=500)


class FriendRequestOut(BaseModel):
    request_id: str
    sender_id: str
    receiver_id: str
    status: str
    message: Optional[str] = None
    created_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
