"""External event providers and the dependency that builds them."""
from functools import lru_cache

from campus_events.config import settings
from campus_events.providers.base import EventProvider, SearchOptions
from campus_events.providers.meetup import MeetupProvider
from campus_events.providers.ticketmaster import TicketmasterProvider

__all__ = ["EventProvider", "SearchOptions", "get_event_providers"]


@lru_cache(maxsize=1)
def _configured_providers() -> tuple[EventProvider, ...]:
    providers: list[EventProvider] = [
        TicketmasterProvider(
            api_key=settings.TICKETMASTER_API_KEY,
            base_url=settings.TICKETMASTER_BASE_URL,
            timeout=settings.PROVIDER_TIMEOUT_SECONDS,
        )
    ]
    if settings.MEETUP_ENABLED and settings.MEETUP_API_KEY:
        providers.append(
            MeetupProvider(
                api_key=settings.MEETUP_API_KEY,
                api_url=settings.MEETUP_API_URL,
                timeout=settings.PROVIDER_TIMEOUT_SECONDS,
            )
        )
    return tuple(providers)


def get_event_providers() -> list[EventProvider]:
    """FastAPI dependency: the providers enabled by configuration."""
    return list(_configured_providers())
