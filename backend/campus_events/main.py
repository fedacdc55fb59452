"""FastAPI application entry point."""
import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from campus_events.auth.dependencies import api_limiter
from campus_events.auth.rate_limit import client_ip
from campus_events.config import settings
from campus_events.database import Base, engine
from campus_events.logging_config import configure_logging

# Import routers
from campus_events.routers import auth, events, friends, media, payments, profile

# Import all models so Base.metadata knows about them
from campus_events.models.user import User                           # noqa: F401
from campus_events.models.event import Event                         # noqa: F401
from campus_events.models.rsvp import RSVP                           # noqa: F401
from campus_events.models.comment import Comment, Media              # noqa: F401
from campus_events.models.favorite import Favorite                   # noqa: F401
from campus_events.models.friendship import FriendRequest, Friendship  # noqa: F401

configure_logging()
logger = logging.getLogger(__name__)

HEALTH_PATH = "/api/health"

app = FastAPI(
    title="Campus Events",
    description="Campus event discovery: nearby events from providers and students, RSVPs, comments and friends",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def api_rate_limit(request: Request, call_next):
    """Per-IP request budget for everything under /api except health checks."""
    path = request.url.path
    if not path.startswith("/api/") or path == HEALTH_PATH or request.method == "HEAD":
        return await call_next(request)
    result = api_limiter.hit(client_ip(request))
    if not result.allowed:
        logger.warning("API rate limit exceeded for %s on %s", client_ip(request), path)
        return JSONResponse(
            status_code=429,
            content={"detail": "Too many requests, please try again later"},
            headers={"Retry-After": str(result.retry_after)},
        )
    return await call_next(request)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"detail": "Conflicting data"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Register routers
app.include_router(auth.router, prefix="/api", tags=["Auth"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(media.router, prefix="/api", tags=["Media"])
app.include_router(media.objects_router, tags=["Media"])
app.include_router(profile.router, prefix="/api", tags=["Profile"])
app.include_router(friends.router, prefix="/api/friends", tags=["Friends"])
app.include_router(payments.router, prefix="/api", tags=["Payments"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
    logger.info("Campus Events API starting (environment=%s)", settings.ENVIRONMENT)


@app.api_route(HEALTH_PATH, methods=["GET", "HEAD"])
def health_check():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
