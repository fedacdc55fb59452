"""Ticketmaster Discovery API client.

Translates a geographic search into Discovery API query parameters, decodes
the response through explicit schemas, and normalizes each event into an
``EventListing``. Events the map cannot place (no coordinates) are dropped.
"""
import calendar
import logging
import re
from datetime import date, datetime, timezone
from typing import Any, Optional

import pytz
import requests
from pydantic import BaseModel, Field, ValidationError

from campus_events.models.event import EventCategory, ExternalSource
from campus_events.providers.base import EventProvider, SearchOptions
from campus_events.schemas.event import EventListing

logger = logging.getLogger(__name__)

PAGE_SIZE = 100
MIN_IMAGE_WIDTH = 300
DEFAULT_LOCAL_TIME = "20:00:00"
ALL_CLASSIFICATIONS = "Music,Sports,Arts & Theatre,Miscellaneous,Film"

# App category -> Discovery classification. Categories absent here have no
# provider equivalent, so the provider is skipped for them.
CATEGORY_TO_CLASSIFICATION = {
    EventCategory.parties.value: "Music",
    EventCategory.concerts.value: "Music",
    EventCategory.nightlife.value: "Music",
    EventCategory.sports.value: "Sports",
    EventCategory.social.value: "Miscellaneous",
    EventCategory.restaurants.value: "Miscellaneous",
    EventCategory.food.value: "Miscellaneous",
}

# Discovery segment -> app category
SEGMENT_TO_CATEGORY = {
    "music": EventCategory.concerts.value,
    "sports": EventCategory.sports.value,
    "arts & theatre": EventCategory.social.value,
    "arts": EventCategory.social.value,
    "film": EventCategory.social.value,
    "miscellaneous": EventCategory.social.value,
}

_DOLLAR_AMOUNT = re.compile(r"\$(\d+(?:\.\d{2})?)")

_TITLE_PREFIXES = [
    re.compile(r"^.{0,60}?\bpresents?\s*:\s*", re.IGNORECASE),
    re.compile(r"^presents?\s+", re.IGNORECASE),
    re.compile(r"^(?:an evening with|live in concert:?|live:)\s+", re.IGNORECASE),
]
_TITLE_SUFFIXES = [
    re.compile(r"\s*\((?:\d{2}\+|all ages|rescheduled|postponed|moved)\)\s*$", re.IGNORECASE),
    re.compile(r"\s*[-–|]\s*(?:official\s+)?(?:tickets?|vip packages?|fan packages?|parking)\b.*$", re.IGNORECASE),
    re.compile(r"\s*[-–|:]\s*(?:the\s+)?[^-–|:]*\btour\b[^-–|:]*$", re.IGNORECASE),
]


# ── Provider response schema ──────────────────────────────────────


class TMImage(BaseModel):
    url: str
    width: int = 0
    height: int = 0


class TMPriceRange(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None
    currency: Optional[str] = None


class TMAccessibility(BaseModel):
    info: Optional[str] = None


class TMNamed(BaseModel):
    name: Optional[str] = None


class TMState(BaseModel):
    stateCode: Optional[str] = None


class TMLocation(BaseModel):
    latitude: Optional[str] = None
    longitude: Optional[str] = None


class TMAddress(BaseModel):
    line1: Optional[str] = None


class TMVenue(BaseModel):
    name: Optional[str] = None
    city: Optional[TMNamed] = None
    state: Optional[TMState] = None
    location: Optional[TMLocation] = None
    address: Optional[TMAddress] = None


class TMClassification(BaseModel):
    segment: Optional[TMNamed] = None
    genre: Optional[TMNamed] = None


class TMStart(BaseModel):
    localDate: Optional[str] = None
    localTime: Optional[str] = None
    dateTime: Optional[str] = None


class TMDates(BaseModel):
    start: TMStart = Field(default_factory=TMStart)
    timezone: Optional[str] = None


class TMEventEmbedded(BaseModel):
    venues: list[TMVenue] = []


class TicketmasterEvent(BaseModel):
    id: str
    name: str
    url: Optional[str] = None
    dates: TMDates = Field(default_factory=TMDates)
    images: list[TMImage] = []
    priceRanges: list[TMPriceRange] = []
    classifications: list[TMClassification] = []
    accessibility: Optional[TMAccessibility] = None
    embedded: Optional[TMEventEmbedded] = Field(None, alias="_embedded")


class TMResponseEmbedded(BaseModel):
    events: list[dict[str, Any]] = []


class TicketmasterResponse(BaseModel):
    embedded: Optional[TMResponseEmbedded] = Field(None, alias="_embedded")


# ── Normalization helpers ─────────────────────────────────────────


def clean_title(title: str) -> str:
    """Strip presenter prefixes and tour/ticket/age suffixes from a title."""
    cleaned = title.strip()
    for pattern in _TITLE_PREFIXES:
        cleaned = pattern.sub("", cleaned, count=1)
    changed = True
    while changed:
        changed = False
        for pattern in _TITLE_SUFFIXES:
            stripped = pattern.sub("", cleaned)
            if stripped != cleaned and stripped.strip():
                cleaned = stripped
                changed = True
    cleaned = cleaned.strip(" -–|:")
    return cleaned or title.strip()


def pick_image(images: list[TMImage]) -> Optional[str]:
    """Largest image at least MIN_IMAGE_WIDTH wide, else the first one."""
    if not images:
        return None
    wide = [img for img in images if img.width >= MIN_IMAGE_WIDTH]
    if wide:
        return max(wide, key=lambda img: img.width).url
    return images[0].url


def price_bounds(price_ranges: list[TMPriceRange], info: Optional[str] = None) -> tuple[float, float]:
    """(min, max) over positive price values; (0, 0) when nothing usable.

    Without usable ranges, a dollar amount in the free-text ``info`` field is
    taken as a single price.
    """
    prices = []
    for price_range in price_ranges:
        if not price_range.min or price_range.min <= 0:
            continue
        prices.append(price_range.min)
        if price_range.max and price_range.max > 0:
            prices.append(price_range.max)
    if not prices:
        match = _DOLLAR_AMOUNT.search(info) if info else None
        if match:
            price = float(match.group(1))
            return price, price
        return 0.0, 0.0
    return min(prices), max(prices)


def parse_coordinate(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def start_timestamp(dates: TMDates) -> str:
    """ISO start time; localDate/localTime are localized to the event zone."""
    if dates.start.dateTime:
        return dates.start.dateTime
    if not dates.start.localDate:
        return ""
    naive_text = f"{dates.start.localDate}T{dates.start.localTime or DEFAULT_LOCAL_TIME}"
    if not dates.timezone:
        return naive_text
    try:
        naive = datetime.fromisoformat(naive_text)
        return pytz.timezone(dates.timezone).localize(naive).isoformat()
    except (ValueError, pytz.UnknownTimeZoneError):
        return naive_text


def map_segment(segment: Optional[str]) -> str:
    if not segment:
        return EventCategory.social.value
    return SEGMENT_TO_CATEGORY.get(segment.lower(), EventCategory.social.value)


def add_months(day: date, months: int) -> date:
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


class TicketmasterProvider(EventProvider):
    name = ExternalSource.ticketmaster.value

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://app.ticketmaster.com/discovery/v2",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        if not api_key:
            logger.warning("Ticketmaster API key not provided; provider search is disabled")

    def build_params(
        self,
        latitude: float,
        longitude: float,
        radius: float,
        options: SearchOptions,
        today: Optional[date] = None,
    ) -> Optional[dict[str, str]]:
        """Discovery query parameters, or None when the category has no mapping."""
        today = today or datetime.now(timezone.utc).date()
        start = options.start_date or today
        # Concerts are announced far ahead; everything else stays near-term
        end = options.end_date or add_months(today, 12 if options.category == EventCategory.concerts.value else 3)

        params = {
            "apikey": self.api_key,
            "latlong": f"{latitude},{longitude}",
            "radius": str(max(1, int(round(radius)))),
            "unit": "miles",
            "size": str(PAGE_SIZE),
            "sort": "date,asc",
            "startDateTime": f"{start.isoformat()}T00:00:00Z",
            "endDateTime": f"{end.isoformat()}T23:59:59Z",
        }
        if options.keyword:
            params["keyword"] = options.keyword
        if options.category:
            classification = CATEGORY_TO_CLASSIFICATION.get(options.category.lower())
            if classification is None:
                return None
            params["classificationName"] = classification
        else:
            params["classificationName"] = ALL_CLASSIFICATIONS
        return params

    def search_events(
        self,
        latitude: float,
        longitude: float,
        radius: float,
        options: Optional[SearchOptions] = None,
    ) -> list[EventListing]:
        options = options or SearchOptions()
        if not self.api_key:
            return []

        params = self.build_params(latitude, longitude, radius, options)
        if params is None:
            logger.debug("Category %s has no Ticketmaster classification; skipping", options.category)
            return []

        try:
            response = self.session.get(f"{self.base_url}/events.json", params=params, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("Ticketmaster search failed: %s", exc)
            return []

        try:
            decoded = TicketmasterResponse.model_validate(body)
        except ValidationError as exc:
            logger.error("Ticketmaster response did not match schema: %s", exc.error_count())
            return []
        if not decoded.embedded:
            return []

        listings = []
        for raw in decoded.embedded.events:
            try:
                event = TicketmasterEvent.model_validate(raw)
            except ValidationError:
                logger.warning("Skipping malformed Ticketmaster event %s", raw.get("id", "?"))
                continue
            listing = self.transform_event(event)
            if listing.latitude is None or listing.longitude is None:
                continue
            listings.append(listing)
        logger.info("Ticketmaster returned %d placeable events near %s,%s", len(listings), latitude, longitude)
        return listings

    def transform_event(self, event: TicketmasterEvent) -> EventListing:
        venue = event.embedded.venues[0] if event.embedded and event.embedded.venues else None
        segment = event.classifications[0].segment.name if event.classifications and event.classifications[0].segment else None
        info = event.accessibility.info if event.accessibility else None
        min_price, max_price = price_bounds(event.priceRanges, info)
        location = venue.location if venue else None

        return EventListing(
            id=event.id,
            title=clean_title(event.name),
            description=f"Official {segment or 'Event'}",
            category=map_segment(segment),
            start_date=start_timestamp(event.dates),
            location=(venue.name if venue and venue.name else "TBA"),
            latitude=parse_coordinate(location.latitude) if location else None,
            longitude=parse_coordinate(location.longitude) if location else None,
            price=min_price,
            min_price=min_price,
            max_price=max_price,
            image_url=pick_image(event.images),
            external_id=event.id,
            external_source=ExternalSource.ticketmaster.value,
            external_url=event.url,
            venue_name=venue.name if venue else None,
            city=venue.city.name if venue and venue.city else None,
            state=venue.state.stateCode if venue and venue.state else None,
            address=venue.address.line1 if venue and venue.address else None,
        )
