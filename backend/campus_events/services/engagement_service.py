"""Comment and media storage service."""
import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from campus_events.models.comment import Comment, Media
from campus_events.services import event_service

logger = logging.getLogger(__name__)


def create_comment(
    db: Session,
    event_id: str,
    content: str,
    user_id: Optional[str] = None,
    guest_name: Optional[str] = None,
    guest_email: Optional[str] = None,
    parent_comment_id: Optional[str] = None,
) -> Comment:
    """Add a comment to an event thread, from a user or a guest."""
    if not event_service.get_event(db, event_id):
        raise HTTPException(status_code=404, detail="Event not found")
    if parent_comment_id:
        parent = db.query(Comment).filter(Comment.comment_id == parent_comment_id).first()
        if not parent or parent.event_id != event_id:
            raise HTTPException(status_code=400, detail="Parent comment does not belong to this event")

    comment = Comment(
        event_id=event_id,
        parent_comment_id=parent_comment_id,
        user_id=user_id,
        guest_name=guest_name,
        guest_email=guest_email.lower() if guest_email else None,
        content=content.strip(),
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    logger.info("Comment %s on event %s by %s", comment.comment_id, event_id, user_id or "guest")
    return comment


def get_event_comments(db: Session, event_id: str) -> list[Comment]:
    return db.query(Comment).filter(Comment.event_id == event_id).order_by(Comment.created_at).all()


def create_media(
    db: Session,
    media_type: str,
    url: str,
    event_id: Optional[str] = None,
    comment_id: Optional[str] = None,
    user_id: Optional[str] = None,
    guest_name: Optional[str] = None,
    guest_email: Optional[str] = None,
    filename: Optional[str] = None,
    file_size: Optional[int] = None,
) -> Media:
    """Attach an uploaded object to an event and/or a comment."""
    if event_id and not event_service.get_event(db, event_id):
        raise HTTPException(status_code=404, detail="Event not found")
    if comment_id:
        comment = db.query(Comment).filter(Comment.comment_id == comment_id).first()
        if not comment:
            raise HTTPException(status_code=404, detail="Comment not found")
        if event_id and comment.event_id != event_id:
            raise HTTPException(status_code=400, detail="Comment does not belong to this event")

    media = Media(
        event_id=event_id,
        comment_id=comment_id,
        user_id=user_id,
        guest_name=guest_name,
        guest_email=guest_email.lower() if guest_email else None,
        media_type=media_type,
        url=url,
        filename=filename,
        file_size=file_size,
    )
    db.add(media)
    db.commit()
    db.refresh(media)
    logger.info("Media %s (%s) attached to event=%s comment=%s", media.media_id, media_type, event_id, comment_id)
    return media


def get_event_media(db: Session, event_id: str) -> list[Media]:
    return db.query(Media).filter(Media.event_id == event_id).order_by(Media.created_at).all()


def get_comment_media(db: Session, comment_id: str) -> list[Media]:
    return db.query(Media).filter(Media.comment_id == comment_id).order_by(Media.created_at).all()
