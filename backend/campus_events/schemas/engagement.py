"""Pydantic schemas for comments, media and favorites."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, model_validator

from campus_events.models.comment import MediaType
from campus_events.models.event import ExternalSource


class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=2000)
    parent_comment_id: Optional[str] = None


class GuestCommentCreate(CommentCreate):
    guest_name: str = Field(min_length=1, max_length=100)
    guest_email: EmailStr


class CommentOut(BaseModel):
    comment_id: str
    event_id: str
    parent_comment_id: Optional[str] = None
    user_id: Optional[str] = None
    guest_name: Optional[str] = None
    content: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class MediaCreate(BaseModel):
    event_id: Optional[str] = None
    comment_id: Optional[str] = None
    type: MediaType
    url: str = Field(min_length=1, max_length=1000)
    filename: Optional[str] = Field(None, max_length=255)
    file_size: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def _require_target(self):
        if not self.event_id and not self.comment_id:
            raise ValueError("event_id or comment_id is required")
        return self


class GuestMediaCreate(MediaCreate):
    guest_name: str = Field(min_length=1, max_length=100)
    guest_email: EmailStr


class MediaOut(BaseModel):
    media_id: str
    event_id: Optional[str] = None
    comment_id: Optional[str] = None
    user_id: Optional[str] = None
    guest_name: Optional[str] = None
    media_type: str
    url: str
    filename: Optional[str] = None
    file_size: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UploadURLOut(BaseModel):
    upload_url: str


class FavoriteCreate(BaseModel):
    external_source: ExternalSource = ExternalSource.user


class FavoriteOut(BaseModel):
    favorite_id: str
    user_id: str
    event_id: str
    external_source: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
