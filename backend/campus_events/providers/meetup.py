"""Meetup GraphQL client, limited to college-relevant events."""
import logging
from datetime import datetime, timedelta
from typing import Optional

import requests
from pydantic import BaseModel, Field, ValidationError

from campus_events.models.event import EventCategory, ExternalSource
from campus_events.providers.base import EventProvider, SearchOptions
from campus_events.schemas.event import EventListing

logger = logging.getLogger(__name__)

RESULT_LIMIT = 20
DESCRIPTION_LIMIT = 200

RANKED_EVENTS_QUERY = """
query($lat: Float!, $lon: Float!, $radius: Float!, $first: Int!) {
  rankedEvents(input: {lat: $lat, lon: $lon, radius: $radius, first: $first}) {
    edges {
      node {
        id
        title
        description
        eventUrl
        dateTime
        duration
        group { name urlname }
        venue { name lat lon address_1 city state }
      }
    }
  }
}
"""

COLLEGE_KEYWORDS = (
    "student", "college", "university", "campus", "young professional",
    "20s", "twenties", "grad", "undergraduate", "alumni", "study",
    "networking", "career", "internship", "volunteer",
)

# Checked in order; first hit wins
CATEGORY_KEYWORDS = (
    (EventCategory.study.value, ("study", "academic", "homework")),
    (EventCategory.sports.value, ("sport", "fitness", "workout")),
    (EventCategory.parties.value, ("party", "mixer", "social hour")),
    (EventCategory.concerts.value, ("concert", "music", "band")),
)


class MeetupGroup(BaseModel):
    name: str = ""
    urlname: Optional[str] = None


class MeetupVenue(BaseModel):
    name: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    address_1: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None


class MeetupEvent(BaseModel):
    id: str
    title: str
    description: Optional[str] = ""
    eventUrl: Optional[str] = None
    dateTime: str
    duration: Optional[int] = None  # seconds
    group: MeetupGroup = Field(default_factory=MeetupGroup)
    venue: Optional[MeetupVenue] = None


def is_college_relevant(event: MeetupEvent) -> bool:
    text = f"{event.title} {event.description or ''} {event.group.name}".lower()
    return any(keyword in text for keyword in COLLEGE_KEYWORDS)


def categorize(event: MeetupEvent) -> str:
    text = f"{event.title} {event.description or ''}".lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category
    return EventCategory.social.value


def _end_date(event: MeetupEvent) -> Optional[str]:
    if not event.duration:
        return None
    try:
        start = datetime.fromisoformat(event.dateTime)
    except ValueError:
        return None
    return (start + timedelta(seconds=event.duration)).isoformat()


class MeetupProvider(EventProvider):
    name = ExternalSource.meetup.value

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.meetup.com/gql",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def search_events(
        self,
        latitude: float,
        longitude: float,
        radius: float,
        options: Optional[SearchOptions] = None,
    ) -> list[EventListing]:
        if not self.api_key:
            return []
        try:
            response = self.session.post(
                self.api_url,
                json={
                    "query": RANKED_EVENTS_QUERY,
                    "variables": {"lat": latitude, "lon": longitude, "radius": radius, "first": RESULT_LIMIT},
                },
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("Meetup search failed: %s", exc)
            return []

        if not isinstance(body, dict) or body.get("errors"):
            logger.error("Meetup GraphQL errors: %s", body.get("errors") if isinstance(body, dict) else body)
            return []
        edges = ((body.get("data") or {}).get("rankedEvents") or {}).get("edges") or []

        listings = []
        for edge in edges:
            try:
                event = MeetupEvent.model_validate((edge or {}).get("node") or {})
            except ValidationError:
                logger.warning("Skipping malformed Meetup event")
                continue
            if not is_college_relevant(event):
                continue
            listing = self.transform_event(event)
            if listing.latitude is None or listing.longitude is None:
                continue
            listings.append(listing)
        logger.info("Meetup returned %d relevant events near %s,%s", len(listings), latitude, longitude)
        return listings

    def transform_event(self, event: MeetupEvent) -> EventListing:
        description = event.description or ""
        if len(description) > DESCRIPTION_LIMIT:
            description = description[:DESCRIPTION_LIMIT] + "..."
        venue = event.venue
        return EventListing(
            id=f"meetup_{event.id}",
            title=event.title,
            description=description,
            category=categorize(event),
            start_date=event.dateTime,
            end_date=_end_date(event),
            location=(venue.name if venue and venue.name else "Online/TBA"),
            latitude=venue.lat if venue else None,
            longitude=venue.lon if venue else None,
            external_id=event.id,
            external_source=ExternalSource.meetup.value,
            external_url=event.eventUrl,
            venue_name=venue.name if venue else None,
            city=venue.city if venue else None,
            state=venue.state if venue else None,
            address=venue.address_1 if venue else None,
            host_name=event.group.name or None,
        )
