"""Media attachment, upload-URL and object download routes."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from campus_events.auth.dependencies import get_current_user
from campus_events.database import get_db
from campus_events.models.user import User
from campus_events.schemas.engagement import GuestMediaCreate, MediaCreate, MediaOut, UploadURLOut
from campus_events.services import engagement_service
from campus_events.services.object_storage import (
    ObjectNotFoundError,
    ObjectStorageError,
    ObjectStorageService,
    get_object_storage,
)

logger = logging.getLogger(__name__)
router = APIRouter()
# Mounted at the root so stored "/objects/..." URLs resolve as-is
objects_router = APIRouter()


@router.post("/objects/upload", response_model=UploadURLOut)
def request_upload_url(storage: ObjectStorageService = Depends(get_object_storage)):
    """Hand the browser a pre-signed URL to PUT an upload to."""
    try:
        return UploadURLOut(upload_url=storage.get_upload_url())
    except ObjectStorageError as exc:
        logger.error("Upload URL request failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to get upload URL")


@router.post("/media", response_model=MediaOut, status_code=status.HTTP_201_CREATED)
def create_media(
    payload: MediaCreate,
    user: User = Depends(get_current_user),
    storage: ObjectStorageService = Depends(get_object_storage),
    db: Session = Depends(get_db),
):
    return engagement_service.create_media(
        db,
        media_type=payload.type.value,
        url=storage.normalize_object_path(payload.url),
        event_id=payload.event_id,
        comment_id=payload.comment_id,
        user_id=user.user_id,
        filename=payload.filename,
        file_size=payload.file_size,
    )


@router.post("/media/guest", response_model=MediaOut, status_code=status.HTTP_201_CREATED)
def create_guest_media(
    payload: GuestMediaCreate,
    storage: ObjectStorageService = Depends(get_object_storage),
    db: Session = Depends(get_db),
):
    return engagement_service.create_media(
        db,
        media_type=payload.type.value,
        url=storage.normalize_object_path(payload.url),
        event_id=payload.event_id,
        comment_id=payload.comment_id,
        guest_name=payload.guest_name,
        guest_email=payload.guest_email,
        filename=payload.filename,
        file_size=payload.file_size,
    )


@router.get("/comments/{comment_id}/media", response_model=list[MediaOut])
def list_comment_media(comment_id: str, db: Session = Depends(get_db)):
    return engagement_service.get_comment_media(db, comment_id)


@objects_router.get("/objects/{object_path:path}")
def serve_object(object_path: str, storage: ObjectStorageService = Depends(get_object_storage)):
    """Redirect to a short-lived signed download URL for an uploaded object."""
    try:
        signed_url = storage.get_object_url(object_path)
    except ObjectNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Object not found")
    except ObjectStorageError as exc:
        logger.error("Object download failed for %s: %s", object_path, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to fetch object")
    return RedirectResponse(url=signed_url, status_code=status.HTTP_302_FOUND)
