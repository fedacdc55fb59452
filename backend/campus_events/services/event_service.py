"""Event storage service for user-created events and favorites.

Responsibilities:
- Location search over stored events (category, date range, radius)
- Event creation with UTC normalization and host counters
- Favorites keyed by (user, event id, source) so provider ids never collide
  with local ids
"""
import logging
import math
from datetime import date, datetime, time, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_events.models.event import Event, ExternalSource
from campus_events.models.favorite import Favorite
from campus_events.models.user import User
from campus_events.schemas.event import EventCreate

logger = logging.getLogger(__name__)

EARTH_RADIUS_MILES = 3958.8


def haversine_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points, in miles."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lng2 - lng1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_MILES * math.asin(min(1.0, math.sqrt(a)))


def search_events_by_location(
    db: Session,
    lat: float,
    lng: float,
    radius: float,
    category: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    now: Optional[datetime] = None,
) -> list[Event]:
    """Upcoming public stored events near (lat, lng).

    Events with coordinates farther than ``radius`` miles are excluded. Events
    without coordinates cannot be placed, so distance does not rule them out.
    """
    now = now or datetime.now(timezone.utc)
    query = db.query(Event).filter(Event.is_public.is_(True), Event.start_date > now)
    if category:
        query = query.filter(Event.category == category)
    if start_date:
        query = query.filter(Event.start_date >= datetime.combine(start_date, time.min, tzinfo=timezone.utc))
    if end_date:
        query = query.filter(Event.start_date <= datetime.combine(end_date, time.max, tzinfo=timezone.utc))

    results = []
    for event in query.order_by(Event.start_date).all():
        if event.latitude is not None and event.longitude is not None:
            if haversine_miles(lat, lng, event.latitude, event.longitude) > radius:
                continue
        results.append(event)
    logger.debug("Stored event search near %s,%s (%s mi): %d matches", lat, lng, radius, len(results))
    return results


def get_event(db: Session, event_id: str) -> Optional[Event]:
    return db.query(Event).filter(Event.event_id == event_id).first()


def get_user_events(db: Session, host_id: str) -> list[Event]:
    return db.query(Event).filter(Event.host_id == host_id).order_by(Event.start_date).all()


def payment_intent_used(db: Session, payment_intent_id: str) -> bool:
    return db.query(Event.event_id).filter(Event.payment_intent_id == payment_intent_id).first() is not None


def create_event(
    db: Session,
    host: User,
    payload: EventCreate,
    is_paid: bool = False,
    platform_fee: float = 0,
    payment_intent_id: Optional[str] = None,
) -> Event:
    """Persist a host-created event and bump the host's counter."""
    event = Event(
        title=payload.title,
        description=payload.description,
        category=payload.category.value,
        start_date=_to_utc(payload.start_date),
        end_date=_to_utc(payload.end_date) if payload.end_date else None,
        location=payload.location,
        latitude=payload.latitude,
        longitude=payload.longitude,
        host_id=host.user_id,
        max_attendees=payload.max_attendees,
        price=payload.price,
        min_price=payload.price,
        max_price=payload.price,
        is_public=payload.is_public,
        image_url=payload.image_url,
        venue_name=payload.venue_name,
        external_source=ExternalSource.user.value,
        platform_fee=platform_fee,
        is_paid=is_paid,
        payment_intent_id=payment_intent_id,
    )
    db.add(event)
    host.events_hosted = (host.events_hosted or 0) + 1
    db.commit()
    db.refresh(event)
    logger.info("Created event '%s' (%s) by host %s, paid=%s", event.title, event.event_id, host.user_id, is_paid)
    return event


# ── Favorites ──────────────────────────────────────────────────────


def add_favorite(db: Session, user_id: str, event_id: str, external_source: str) -> Favorite:
    """Create a favorite, or return the existing one for the same key."""
    existing = _find_favorite(db, user_id, event_id, external_source)
    if existing:
        return existing
    favorite = Favorite(user_id=user_id, event_id=event_id, external_source=external_source)
    db.add(favorite)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent insert of the same key
        db.rollback()
        return _find_favorite(db, user_id, event_id, external_source)
    db.refresh(favorite)
    logger.info("User %s favorited %s event %s", user_id, external_source, event_id)
    return favorite


def remove_favorite(db: Session, user_id: str, event_id: str, external_source: str) -> bool:
    deleted = (
        db.query(Favorite)
        .filter(
            Favorite.user_id == user_id,
            Favorite.event_id == event_id,
            Favorite.external_source == external_source,
        )
        .delete(synchronize_session=False)
    )
    db.commit()
    if deleted:
        logger.info("User %s unfavorited %s event %s", user_id, external_source, event_id)
    return bool(deleted)


def is_favorited(db: Session, user_id: str, event_id: str, external_source: str) -> bool:
    return _find_favorite(db, user_id, event_id, external_source) is not None


def favorite_keys(db: Session, user_id: str) -> set[tuple[str, str]]:
    """All (event_id, external_source) pairs the user has favorited."""
    rows = db.query(Favorite.event_id, Favorite.external_source).filter(Favorite.user_id == user_id).all()
    return {(event_id, source) for event_id, source in rows}


def get_user_favorites(db: Session, user_id: str) -> list[Favorite]:
    return db.query(Favorite).filter(Favorite.user_id == user_id).order_by(Favorite.created_at.desc()).all()


def _find_favorite(db: Session, user_id: str, event_id: str, external_source: str) -> Optional[Favorite]:
    return (
        db.query(Favorite)
        .filter(
            Favorite.user_id == user_id,
            Favorite.event_id == event_id,
            Favorite.external_source == external_source,
        )
        .first()
    )


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
