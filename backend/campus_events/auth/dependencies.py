"""Shared auth state and the FastAPI dependencies that resolve the caller."""
import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from campus_events.auth.rate_limit import RateLimiter
from campus_events.auth.sessions import SessionManager
from campus_events.auth.store import MemoryStore
from campus_events.config import settings
from campus_events.database import get_db
from campus_events.models.user import User

logger = logging.getLogger(__name__)

if settings.is_production:
    logger.warning("Using the in-memory session store in production; sessions are not shared between instances")

session_store = MemoryStore(
    prune_interval=settings.SESSION_PRUNE_INTERVAL_SECONDS,
    max_entries=settings.SESSION_STORE_MAX_ENTRIES,
)
rate_limit_store = MemoryStore(prune_interval=settings.API_RATE_WINDOW_SECONDS)

session_manager = SessionManager(session_store, settings.SESSION_MAX_AGE_SECONDS)

login_limiter = RateLimiter(rate_limit_store, settings.LOGIN_MAX_ATTEMPTS, settings.LOGIN_WINDOW_SECONDS, "login")
register_limiter = RateLimiter(rate_limit_store, settings.LOGIN_MAX_ATTEMPTS, settings.LOGIN_WINDOW_SECONDS, "register")
api_limiter = RateLimiter(rate_limit_store, settings.API_RATE_LIMIT, settings.API_RATE_WINDOW_SECONDS, "api")


def get_session_manager() -> SessionManager:
    return session_manager


def session_token(request: Request) -> Optional[str]:
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def get_optional_user(
    request: Request,
    db: Session = Depends(get_db),
    sessions: SessionManager = Depends(get_session_manager),
) -> Optional[User]:
    """Resolve the session cookie to a user, or None for anonymous callers."""
    user_id = sessions.get_user_id(session_token(request))
    if not user_id:
        return None
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        # Session outlived its user row
        sessions.destroy(session_token(request))
        return None
    return user


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user
