"""Event search and aggregation.

Merges provider results with stored events into one ranked list:
1. fetch every provider (in worker threads) and the local store independently
2. concatenate
3. keep only events whose start parses and is strictly in the future
4. for signed-in callers, mark favorites (keyed by id + source)
5. favorites first, then ascending start time (stable)
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campus_events.providers.base import EventProvider, SearchOptions
from campus_events.schemas.event import EventListing
from campus_events.services import event_service

logger = logging.getLogger(__name__)


def parse_start(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO timestamp to aware UTC; None when it cannot be parsed."""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        # Offsets near datetime.min/max overflow on conversion
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def _fetch_provider(
    provider: EventProvider,
    lat: float,
    lng: float,
    radius: float,
    options: SearchOptions,
) -> list[EventListing]:
    try:
        return provider.search_events(lat, lng, radius, options)
    except Exception:
        # Providers are expected to degrade on their own; this keeps a buggy one
        # from taking the stored results down with it.
        logger.exception("Provider %s raised during search", provider.name)
        return []


def _fetch_stored(
    db: Session,
    lat: float,
    lng: float,
    radius: float,
    options: SearchOptions,
    now: datetime,
) -> list[EventListing]:
    try:
        events = event_service.search_events_by_location(
            db,
            lat,
            lng,
            radius,
            category=options.category,
            start_date=options.start_date,
            end_date=options.end_date,
            now=now,
        )
    except SQLAlchemyError:
        logger.exception("Stored event search failed")
        db.rollback()
        return []
    return [EventListing.from_event(event) for event in events]


def filter_upcoming(events: list[EventListing], now: datetime) -> list[EventListing]:
    """Drop events that start at or before ``now`` or whose start is unparseable."""
    upcoming = []
    for event in events:
        start = parse_start(event.start_date)
        if start is None:
            logger.warning("Excluding %s event %s: invalid start date %r", event.external_source, event.id, event.start_date)
            continue
        if start > now:
            upcoming.append(event)
    return upcoming


def rank_events(events: list[EventListing]) -> list[EventListing]:
    """Favorited first, then by ascending start. Callers pass parseable events only."""
    return sorted(events, key=lambda e: (not e.is_favorited, parse_start(e.start_date)))


def search_events(
    db: Session,
    providers: list[EventProvider],
    lat: float,
    lng: float,
    radius: float,
    options: Optional[SearchOptions] = None,
    user_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> list[EventListing]:
    options = options or SearchOptions()
    now = now or datetime.now(timezone.utc)

    candidates: list[EventListing] = []
    if providers:
        with ThreadPoolExecutor(max_workers=len(providers), thread_name_prefix="provider") as pool:
            futures = [pool.submit(_fetch_provider, p, lat, lng, radius, options) for p in providers]
            stored = _fetch_stored(db, lat, lng, radius, options, now)
            for provider, future in zip(providers, futures):
                results = future.result()
                logger.info("Found %d %s events", len(results), provider.name)
                candidates.extend(results)
    else:
        stored = _fetch_stored(db, lat, lng, radius, options, now)
    logger.info("Found %d stored events", len(stored))
    candidates.extend(stored)

    upcoming = filter_upcoming(candidates, now)

    if user_id:
        favorites = event_service.favorite_keys(db, user_id)
        upcoming = [
            event.model_copy(update={"is_favorited": (event.id, event.external_source) in favorites})
            for event in upcoming
        ]

    ranked = rank_events(upcoming)
    logger.info("Search near %s,%s: %d candidates, %d returned", lat, lng, len(candidates), len(ranked))
    return ranked
