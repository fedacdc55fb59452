"""Registration, login, logout and session routes."""
import logging
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from campus_events.auth.audit import log_security_event
from campus_events.auth.dependencies import (
    get_current_user,
    get_optional_user,
    get_session_manager,
    login_limiter,
    register_limiter,
    session_token,
)
from campus_events.auth.passwords import dummy_verify, verify_password
from campus_events.auth.rate_limit import RateLimiter, client_ip
from campus_events.auth.sessions import SessionManager, clear_session_cookie, set_session_cookie
from campus_events.database import get_db
from campus_events.models.user import User
from campus_events.schemas.user import AuthResponse, ChangePasswordRequest, LoginRequest, RegisterRequest, UserOut
from campus_events.services import user_service

logger = logging.getLogger(__name__)
router = APIRouter()

INVALID_CREDENTIALS = "Invalid email or password"


def _enforce_limit(limiter: RateLimiter, key: str, ip: str, email: str) -> None:
    result = limiter.hit(key)
    if not result.allowed:
        log_security_event("rate_limited", endpoint=limiter.prefix, email=email, ip=ip)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many authentication attempts, please try again later",
            headers={"Retry-After": str(result.retry_after)},
        )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    sessions: SessionManager = Depends(get_session_manager),
):
    """Create an account and sign the new user in."""
    ip = client_ip(request)
    _enforce_limit(register_limiter, ip, ip, payload.email)
    log_security_event("registration_attempt", email=payload.email, ip=ip, user_agent=request.headers.get("user-agent"))

    if user_service.get_user_by_email(db, payload.email):
        log_security_event("registration_failed", email=payload.email, ip=ip, reason="user_exists")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="An account with this email already exists")

    user = user_service.create_user(
        db,
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        university=payload.university,
        graduation_year=payload.graduation_year,
    )
    set_session_cookie(response, sessions.create(user.user_id))
    log_security_event("registration_success", email=user.email, user_id=user.user_id, ip=ip)
    return AuthResponse(user=UserOut.model_validate(user), message="Account created successfully")


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    sessions: SessionManager = Depends(get_session_manager),
):
    """Verify credentials and establish a session.

    Unknown email and wrong password return the same 401 so the response
    never reveals whether an account exists.
    """
    ip = client_ip(request)
    _enforce_limit(login_limiter, f"{ip}:{payload.email}", ip, payload.email)
    log_security_event("login_attempt", email=payload.email, ip=ip, user_agent=request.headers.get("user-agent"))

    user = user_service.get_user_by_email(db, payload.email)
    if not user:
        dummy_verify()
        log_security_event("login_failed", email=payload.email, ip=ip, reason="user_not_found")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)
    if not verify_password(payload.password, user.password_hash):
        log_security_event("login_failed", email=payload.email, user_id=user.user_id, ip=ip, reason="invalid_password")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    # Rotate: drop any session the browser was already carrying
    sessions.destroy(session_token(request))
    user_service.record_login(db, user)
    set_session_cookie(response, sessions.create(user.user_id))
    log_security_event("login_success", email=user.email, user_id=user.user_id, ip=ip)
    return AuthResponse(user=UserOut.model_validate(user), message="Logged in successfully")


@router.post("/logout")
def logout(
    request: Request,
    response: Response,
    user: User | None = Depends(get_optional_user),
    sessions: SessionManager = Depends(get_session_manager),
):
    """Destroy the server-side session and clear the cookie."""
    sessions.destroy(session_token(request))
    clear_session_cookie(response)
    log_security_event("logout_success", user_id=user.user_id if user else None, ip=client_ip(request))
    return {"message": "Logged out successfully", "success": True}


@router.get("/user", response_model=UserOut)
def current_user(user: User = Depends(get_current_user)):
    return user


@router.post("/change-password")
def change_password(
    payload: ChangePasswordRequest,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ip = client_ip(request)
    if not verify_password(payload.current_password, user.password_hash):
        log_security_event("password_change_failed", user_id=user.user_id, ip=ip, reason="invalid_current_password")
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    user_service.update_password(db, user, payload.new_password)
    log_security_event("password_change_success", user_id=user.user_id, ip=ip)
    return {"message": "Password changed successfully", "success": True}
