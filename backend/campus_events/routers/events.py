"""Event routes: search, detail, creation, RSVPs, comments and favorites."""
import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from campus_events.auth.dependencies import get_current_user, get_optional_user
from campus_events.database import get_db
from campus_events.models.event import EventCategory, ExternalSource
from campus_events.models.user import User
from campus_events.providers import EventProvider, SearchOptions, get_event_providers
from campus_events.schemas.engagement import CommentCreate, CommentOut, FavoriteCreate, FavoriteOut, GuestCommentCreate, MediaOut
from campus_events.schemas.event import EventCreate, EventOut, EventSearchResponse
from campus_events.schemas.rsvp import GuestRSVPCreate, RSVPCreate, RSVPOut
from campus_events.services import engagement_service, event_service, rsvp_service, search_service
from campus_events.services.payment_service import HOSTING_FEE_TYPE, PaymentError, PaymentService, get_payment_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/search", response_model=EventSearchResponse)
def search_events(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius: float = Query(50, gt=0, le=500, description="Miles"),
    category: Optional[EventCategory] = Query(None),
    keyword: Optional[str] = Query(None, max_length=100),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    user: Optional[User] = Depends(get_optional_user),
    providers: list[EventProvider] = Depends(get_event_providers),
    db: Session = Depends(get_db),
):
    """Provider and stored events near a point, favorites first."""
    if start_date and end_date and end_date < start_date:
        raise HTTPException(status_code=400, detail="endDate must not be before startDate")
    options = SearchOptions(
        category=category.value if category else None,
        keyword=keyword,
        start_date=start_date,
        end_date=end_date,
    )
    events = search_service.search_events(
        db,
        providers,
        lat,
        lng,
        radius,
        options,
        user_id=user.user_id if user else None,
    )
    return EventSearchResponse(events=events)


@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    user: User = Depends(get_current_user),
    payments: PaymentService = Depends(get_payment_service),
    db: Session = Depends(get_db),
):
    """Publish a hosted event; a paid hosting-fee intent marks it as paid."""
    is_paid = False
    platform_fee = 0.0
    if payload.payment_intent_id:
        try:
            intent = payments.retrieve_payment_intent(payload.payment_intent_id)
        except PaymentError as exc:
            logger.error("Payment verification failed for %s: %s", payload.payment_intent_id, exc)
            raise HTTPException(status_code=400, detail="Invalid payment")
        metadata = intent.get("metadata") or {}
        if (
            intent.get("status") == "succeeded"
            and metadata.get("user_id") == user.user_id
            and metadata.get("type") == HOSTING_FEE_TYPE
            and not event_service.payment_intent_used(db, payload.payment_intent_id)
        ):
            is_paid = True
            platform_fee = intent.get("amount", 0) / 100
        else:
            logger.warning("Payment intent %s not usable by user %s", payload.payment_intent_id, user.user_id)

    return event_service.create_event(
        db,
        host=user,
        payload=payload,
        is_paid=is_paid,
        platform_fee=platform_fee,
        payment_intent_id=payload.payment_intent_id if is_paid else None,
    )


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    event = event_service.get_event(db, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


# ── RSVPs ─────────────────────────────────────────────────────────


@router.get("/{event_id}/rsvps", response_model=list[RSVPOut])
def list_rsvps(event_id: str, db: Session = Depends(get_db)):
    return rsvp_service.get_event_rsvps(db, event_id)


@router.post("/{event_id}/rsvp", response_model=RSVPOut)
def rsvp(
    event_id: str,
    payload: RSVPCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Set the caller's RSVP; resubmitting replaces the previous status."""
    return rsvp_service.upsert_rsvp(db, event_id, user, payload.status)


@router.post("/{event_id}/rsvp/guest", response_model=RSVPOut, status_code=status.HTTP_201_CREATED)
def guest_rsvp(event_id: str, payload: GuestRSVPCreate, db: Session = Depends(get_db)):
    return rsvp_service.create_guest_rsvp(
        db,
        event_id,
        guest_name=payload.guest_name,
        guest_email=payload.guest_email,
        rsvp_status=payload.status,
        guest_address=payload.guest_address,
    )


# ── Comments and media ────────────────────────────────────────────


@router.get("/{event_id}/comments", response_model=list[CommentOut])
def list_comments(event_id: str, db: Session = Depends(get_db)):
    return engagement_service.get_event_comments(db, event_id)


@router.post("/{event_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
def create_comment(
    event_id: str,
    payload: CommentCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return engagement_service.create_comment(
        db,
        event_id,
        payload.content,
        user_id=user.user_id,
        parent_comment_id=payload.parent_comment_id,
    )


@router.post("/{event_id}/comments/guest", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
def create_guest_comment(event_id: str, payload: GuestCommentCreate, db: Session = Depends(get_db)):
    return engagement_service.create_comment(
        db,
        event_id,
        payload.content,
        guest_name=payload.guest_name,
        guest_email=payload.guest_email,
        parent_comment_id=payload.parent_comment_id,
    )


@router.get("/{event_id}/media", response_model=list[MediaOut])
def list_event_media(event_id: str, db: Session = Depends(get_db)):
    return engagement_service.get_event_media(db, event_id)


# ── Favorites ─────────────────────────────────────────────────────


@router.post("/{event_id}/favorite", response_model=FavoriteOut)
def add_favorite(
    event_id: str,
    payload: Optional[FavoriteCreate] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Bookmark an event. Provider events are identified by id plus source."""
    source = payload.external_source if payload else ExternalSource.user
    if source == ExternalSource.user and not event_service.get_event(db, event_id):
        raise HTTPException(status_code=404, detail="Event not found")
    return event_service.add_favorite(db, user.user_id, event_id, source.value)


@router.delete("/{event_id}/favorite")
def remove_favorite(
    event_id: str,
    external_source: ExternalSource = Query(ExternalSource.user),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    removed = event_service.remove_favorite(db, user.user_id, event_id, external_source.value)
    return {"success": True, "removed": removed}
