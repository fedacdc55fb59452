"""User ORM model."""
import uuid
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime
from sqlalchemy.sql import func
from campus_events.database import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(320), nullable=False, unique=True, index=True)  # stored lower-case
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    university = Column(String(100), nullable=True)
    graduation_year = Column(Integer, nullable=True)
    email_verified = Column(Boolean, nullable=False, default=False)
    profile_image_url = Column(String(500), nullable=True)
    bio = Column(Text, nullable=True)
    instagram_handle = Column(String(50), nullable=True)
    twitter_handle = Column(String(50), nullable=True)
    is_public_profile = Column(Boolean, nullable=False, default=True)

    # Denormalized counters
    friends_count = Column(Integer, nullable=False, default=0)
    events_hosted = Column(Integer, nullable=False, default=0)
    events_attended = Column(Integer, nullable=False, default=0)

    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
