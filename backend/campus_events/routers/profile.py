"""Profile, user lookup and "my stuff" routes."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from campus_events.auth.dependencies import get_current_user, get_optional_user
from campus_events.config import settings
from campus_events.database import get_db
from campus_events.models.user import User
from campus_events.schemas.engagement import FavoriteOut
from campus_events.schemas.event import EventOut
from campus_events.schemas.user import (
    ProfileImageUpdate,
    ProfileImageUploadRequest,
    ProfileUpdate,
    PublicProfileOut,
    UserOut,
)
from campus_events.services import event_service, user_service
from campus_events.services.object_storage import ObjectStorageError, ObjectStorageService, get_object_storage

logger = logging.getLogger(__name__)
router = APIRouter()


@router.put("/profile", response_model=UserOut)
def update_profile(
    payload: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Partial profile update."""
    return user_service.update_profile(db, user, payload.model_dump(exclude_unset=True))


@router.post("/profile/image-upload")
def profile_image_upload(
    payload: ProfileImageUploadRequest,
    user: User = Depends(get_current_user),
    storage: ObjectStorageService = Depends(get_object_storage),
):
    """Signed upload URL for a profile picture plus the path it will live at."""
    if payload.size > settings.MAX_PROFILE_IMAGE_BYTES:
        raise HTTPException(status_code=400, detail="File too large")
    if not payload.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image files allowed")
    try:
        upload_url = storage.get_upload_url()
    except ObjectStorageError as exc:
        logger.error("Profile image upload URL failed for user %s: %s", user.user_id, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to generate upload URL")
    return {"upload_url": upload_url, "image_url": storage.normalize_object_path(upload_url.split("?", 1)[0])}


@router.post("/profile/image", response_model=UserOut)
def set_profile_image(
    payload: ProfileImageUpdate,
    user: User = Depends(get_current_user),
    storage: ObjectStorageService = Depends(get_object_storage),
    db: Session = Depends(get_db),
):
    image_url = storage.normalize_object_path(payload.image_url)
    return user_service.update_profile(db, user, {"profile_image_url": image_url})


@router.get("/users/search", response_model=list[PublicProfileOut])
def search_users(
    q: str = Query(..., min_length=1, max_length=100),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return user_service.search_users(db, q, user.user_id)


@router.get("/users/{user_id}", response_model=PublicProfileOut)
def get_profile(
    user_id: str,
    viewer: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    return user_service.get_public_profile(db, user_id, viewer.user_id if viewer else None)


@router.get("/user/events", response_model=list[EventOut])
def my_events(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Events the caller hosts."""
    return event_service.get_user_events(db, user.user_id)


@router.get("/user/favorites", response_model=list[FavoriteOut])
def my_favorites(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return event_service.get_user_favorites(db, user.user_id)
