"""RSVP storage service.

Authenticated RSVPs are an upsert on (event_id, user_id): the database's
ON CONFLICT DO UPDATE guarantees a single row per pair even when two
submissions race. Guest RSVPs are plain inserts with no dedup key.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from campus_events.models.event import Event
from campus_events.models.rsvp import RSVP, RSVPStatus
from campus_events.models.user import User
from campus_events.services import event_service

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _rsvp_target(db: Session, event_id: str) -> Event:
    """Load an event that accepts RSVPs, or raise 404/403."""
    event = event_service.get_event(db, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    if event.is_external:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="RSVPs for externally listed events are handled by the ticket provider",
        )
    return event


def _check_capacity(db: Session, event: Event, rsvp_status: RSVPStatus, user_id: Optional[str] = None) -> None:
    if rsvp_status != RSVPStatus.attending or not event.max_attendees:
        return
    query = db.query(func.count(RSVP.rsvp_id)).filter(
        RSVP.event_id == event.event_id,
        RSVP.status == RSVPStatus.attending.value,
    )
    if user_id:
        query = query.filter((RSVP.user_id.is_(None)) | (RSVP.user_id != user_id))
    if query.scalar() >= event.max_attendees:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Event is at capacity")


def upsert_rsvp(db: Session, event_id: str, user: User, rsvp_status: RSVPStatus) -> RSVP:
    """Create or update the caller's RSVP; returns the single stored row."""
    event = _rsvp_target(db, event_id)
    _check_capacity(db, event, rsvp_status, user.user_id)

    dialect = db.get_bind().dialect.name
    insert = _DIALECT_INSERTS.get(dialect)
    if insert is None:
        raise RuntimeError(f"RSVP upsert is not supported on dialect {dialect!r}")

    now = datetime.now(timezone.utc)
    stmt = insert(RSVP).values(
        rsvp_id=str(uuid.uuid4()),
        event_id=event.event_id,
        user_id=user.user_id,
        status=rsvp_status.value,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["event_id", "user_id"],
        set_={"status": stmt.excluded.status, "updated_at": stmt.excluded.updated_at},
    )
    db.execute(stmt)

    user.events_attended = (
        db.query(func.count(RSVP.rsvp_id))
        .filter(RSVP.user_id == user.user_id, RSVP.status == RSVPStatus.attending.value)
        .scalar()
    )
    db.commit()

    rsvp = db.query(RSVP).filter(RSVP.event_id == event.event_id, RSVP.user_id == user.user_id).one()
    db.refresh(rsvp)
    logger.info("User %s RSVP'd '%s' to event %s", user.user_id, rsvp_status.value, event.event_id)
    return rsvp


def create_guest_rsvp(
    db: Session,
    event_id: str,
    guest_name: str,
    guest_email: str,
    rsvp_status: RSVPStatus = RSVPStatus.attending,
    guest_address: Optional[str] = None,
) -> RSVP:
    event = _rsvp_target(db, event_id)
    _check_capacity(db, event, rsvp_status)
    rsvp = RSVP(
        event_id=event.event_id,
        guest_name=guest_name,
        guest_email=guest_email.lower(),
        guest_address=guest_address,
        status=rsvp_status.value,
    )
    db.add(rsvp)
    db.commit()
    db.refresh(rsvp)
    logger.info("Guest RSVP %s '%s' to event %s", rsvp.rsvp_id, rsvp_status.value, event.event_id)
    return rsvp


def get_event_rsvps(db: Session, event_id: str) -> list[RSVP]:
    return db.query(RSVP).filter(RSVP.event_id == event_id).order_by(RSVP.created_at).all()
