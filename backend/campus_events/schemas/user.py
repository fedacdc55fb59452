"""Pydantic schemas for users, registration and login."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from campus_events.auth.passwords import validate_password_strength


def _normalize_email(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    university: Optional[str] = Field(None, max_length=100)
    graduation_year: Optional[int] = Field(None, ge=2020, le=2035)

    @field_validator("email", mode="before")
    @classmethod
    def _lower_email(cls, value):
        return _normalize_email(value)

    @field_validator("password")
    @classmethod
    def _strong_password(cls, value: str) -> str:
        return validate_password_strength(value)

    @field_validator("first_name", "last_name", "university", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email", mode="before")
    @classmethod
    def _lower_email(cls, value):
        return _normalize_email(value)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def _strong_password(cls, value: str) -> str:
        return validate_password_strength(value)


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)
    university: Optional[str] = Field(None, max_length=100)
    graduation_year: Optional[int] = Field(None, ge=2020, le=2035)
    bio: Optional[str] = Field(None, max_length=500)
    instagram_handle: Optional[str] = Field(None, max_length=50)
    twitter_handle: Optional[str] = Field(None, max_length=50)
    is_public_profile: Optional[bool] = None

    @field_validator("first_name", "last_name", "is_public_profile")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

    @field_validator("instagram_handle", "twitter_handle")
    @classmethod
    def _strip_at(cls, value: Optional[str]) -> Optional[str]:
        return value.lstrip("@") if value else value


class ProfileImageUploadRequest(BaseModel):
    filename: str = Field(min_length=1, max_length=255)
    content_type: str
    size: int = Field(gt=0)


class ProfileImageUpdate(BaseModel):
    image_url: str = Field(min_length=1, max_length=1000)


class UserOut(BaseModel):
    user_id: str
    email: str
    first_name: str
    last_name: str
    university: Optional[str] = None
    graduation_year: Optional[int] = None
    email_verified: bool = False
    profile_image_url: Optional[str] = None
    bio: Optional[str] = None
    instagram_handle: Optional[str] = None
    twitter_handle: Optional[str] = None
    is_public_profile: bool = True
    friends_count: int = 0
    events_hosted: int = 0
    events_attended: int = 0
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PublicProfileOut(BaseModel):
    """Profile fields visible to other users (no email)."""

    user_id: str
    first_name: str
    last_name: str
    university: Optional[str] = None
    graduation_year: Optional[int] = None
    profile_image_url: Optional[str] = None
    bio: Optional[str] = None
    instagram_handle: Optional[str] = None
    twitter_handle: Optional[str] = None
    friends_count: int = 0
    events_hosted: int = 0
    events_attended: int = 0

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    user: UserOut
    message: str
