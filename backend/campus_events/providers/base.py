"""Common interface for external event providers."""
from dataclasses import dataclass
from datetime import date
from typing import Optional

from campus_events.schemas.event import EventListing


@dataclass
class SearchOptions:
    category: Optional[str] = None
    keyword: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class EventProvider:
    """A third-party event search API.

    ``search_events`` never raises for provider trouble: an unreachable or
    malformed provider yields an empty list, so callers cannot tell
    "unavailable" apart from "no events".
    """

    name: str = "provider"

    def search_events(
        self,
        latitude: float,
        longitude: float,
        radius: float,
        options: Optional[SearchOptions] = None,
    ) -> list[EventListing]:
        raise NotImplementedError
