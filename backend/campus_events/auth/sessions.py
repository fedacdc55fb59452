"""Server-side sessions keyed by an opaque cookie token."""
import logging
import secrets
from datetime import datetime, timezone
from typing import Optional

from fastapi import Response

from campus_events.auth.store import KeyValueStore
from campus_events.config import settings

logger = logging.getLogger(__name__)

_KEY_PREFIX = "sess:"


class SessionManager:
    """Create, resolve and destroy sessions held in a ``KeyValueStore``."""

    def __init__(self, store: KeyValueStore, max_age: int):
        self.store = store
        self.max_age = max_age

    def create(self, user_id: str) -> str:
        token = secrets.token_urlsafe(32)
        self.store.set(
            _KEY_PREFIX + token,
            {"user_id": user_id, "created_at": datetime.now(timezone.utc).isoformat()},
            self.max_age,
        )
        return token

    def get_user_id(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        data = self.store.get(_KEY_PREFIX + token)
        return data["user_id"] if data else None

    def destroy(self, token: Optional[str]) -> None:
        if token:
            self.store.delete(_KEY_PREFIX + token)


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )
