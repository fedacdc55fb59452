"""User storage operations."""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from campus_events.auth.passwords import hash_password
from campus_events.models.user import User

logger = logging.getLogger(__name__)

USER_SEARCH_LIMIT = 20


def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.user_id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def create_user(
    db: Session,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    university: Optional[str] = None,
    graduation_year: Optional[int] = None,
) -> User:
    """Create a user; the caller is expected to have checked for duplicates."""
    user = User(
        email=email.strip().lower(),
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        university=university,
        graduation_year=graduation_year,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s", user.user_id)
    return user


def update_profile(db: Session, user: User, updates: dict[str, Any]) -> User:
    """Apply a partial profile update."""
    for field, value in updates.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    logger.info("Updated profile for user %s (%s)", user.user_id, ", ".join(sorted(updates)))
    return user


def update_password(db: Session, user: User, new_password: str) -> None:
    user.password_hash = hash_password(new_password)
    db.commit()
    logger.info("Changed password for user %s", user.user_id)


def record_login(db: Session, user: User) -> None:
    user.last_login_at = datetime.now(timezone.utc)
    db.commit()


def search_users(db: Session, query: str, current_user_id: str) -> list[User]:
    """Case-insensitive substring match on name or email, excluding the caller."""
    pattern = f"%{query.strip().lower()}%"
    return (
        db.query(User)
        .filter(
            or_(
                func.lower(User.first_name).like(pattern),
                func.lower(User.last_name).like(pattern),
                func.lower(User.email).like(pattern),
            ),
            User.user_id != current_user_id,
        )
        .order_by(User.first_name, User.last_name)
        .limit(USER_SEARCH_LIMIT)
        .all()
    )


def get_public_profile(db: Session, user_id: str, viewer_id: Optional[str]) -> User:
    """Fetch a profile; private profiles are visible only to their owner."""
    user = get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if not user.is_public_profile and viewer_id != user.user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="This profile is private")
    return user
