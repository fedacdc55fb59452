"""Tests for the Ticketmaster and Meetup provider clients."""
from datetime import date

import pytest
import requests

from campus_events.providers import SearchOptions
from campus_events.providers.meetup import MeetupProvider, categorize, is_college_relevant, MeetupEvent
from campus_events.providers.ticketmaster import (
    TMImage,
    TMPriceRange,
    TicketmasterEvent,
    TicketmasterProvider,
    add_months,
    clean_title,
    pick_image,
    price_bounds,
)
from tests.conftest import FakeResponse


class FakeSession:
    """Records outbound calls and replays a canned response (or raises)."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def _reply(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error:
            raise self.error
        return self.response

    def get(self, url, **kwargs):
        return self._reply("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._reply("POST", url, **kwargs)


def _tm_event(**overrides) -> dict:
    event = {
        "id": "G5vzZ9Qk1a",
        "name": "Live Nation Presents: The Lumineers - The Automatic World Tour",
        "url": "https://www.ticketmaster.com/event/G5vzZ9Qk1a",
        "dates": {
            "start": {"localDate": "2030-09-12", "localTime": "19:30:00"},
            "timezone": "America/New_York",
        },
        "images": [
            {"url": "https://img/small.jpg", "width": 100, "height": 56},
            {"url": "https://img/large.jpg", "width": 1024, "height": 576},
            {"url": "https://img/medium.jpg", "width": 640, "height": 360},
        ],
        "priceRanges": [{"min": 45.5, "max": 120.0, "currency": "USD"}],
        "classifications": [{"segment": {"name": "Music"}, "genre": {"name": "Rock"}}],
        "_embedded": {
            "venues": [{
                "name": "Heritage Bank Center",
                "city": {"name": "Cincinnati"},
                "state": {"stateCode": "OH"},
                "address": {"line1": "100 Broadway St"},
                "location": {"latitude": "39.0976", "longitude": "-84.5118"},
            }],
        },
    }
    event.update(overrides)
    return event


def _tm_body(*events) -> dict:
    return {"_embedded": {"events": list(events)}}


class TestTicketmasterParams:
    """Query construction."""

    def setup_method(self):
        self.provider = TicketmasterProvider(api_key="key", session=FakeSession())

    def test_default_window_is_three_months(self):
        params = self.provider.build_params(39.1, -84.51, 50, SearchOptions(), today=date(2030, 1, 31))
        assert params["latlong"] == "39.1,-84.51"
        assert params["radius"] == "50"
        assert params["unit"] == "miles"
        assert params["startDateTime"] == "2030-01-31T00:00:00Z"
        assert params["endDateTime"] == "2030-04-30T23:59:59Z"
        assert params["classificationName"] == "Music,Sports,Arts & Theatre,Miscellaneous,Film"

    def test_concerts_look_a_year_ahead(self):
        params = self.provider.build_params(39.1, -84.51, 50, SearchOptions(category="concerts"), today=date(2030, 1, 1))
        assert params["endDateTime"] == "2031-01-01T23:59:59Z"
        assert params["classificationName"] == "Music"

    def test_explicit_dates_and_keyword(self):
        options = SearchOptions(keyword="jazz", start_date=date(2030, 5, 1), end_date=date(2030, 5, 31))
        params = self.provider.build_params(39.1, -84.51, 25, options)
        assert params["keyword"] == "jazz"
        assert params["startDateTime"] == "2030-05-01T00:00:00Z"
        assert params["endDateTime"] == "2030-05-31T23:59:59Z"

    def test_small_radius_is_at_least_one_mile(self):
        assert self.provider.build_params(39.1, -84.51, 0.3, SearchOptions())["radius"] == "1"
        assert self.provider.build_params(39.1, -84.51, 2.6, SearchOptions())["radius"] == "3"

    def test_unmapped_category_skips_provider(self):
        assert self.provider.build_params(39.1, -84.51, 50, SearchOptions(category="study")) is None
        assert self.provider.search_events(39.1, -84.51, 50, SearchOptions(category="study")) == []
        assert self.provider.session.calls == []

    def test_add_months_clamps_day(self):
        assert add_months(date(2030, 1, 31), 1) == date(2030, 2, 28)
        assert add_months(date(2030, 11, 15), 3) == date(2031, 2, 15)


class TestTicketmasterSearch:
    """Fetching, decoding and normalizing."""

    def test_transform(self):
        session = FakeSession(FakeResponse(_tm_body(_tm_event())))
        events = TicketmasterProvider(api_key="key", session=session).search_events(39.1, -84.51, 50)

        assert len(events) == 1
        event = events[0]
        assert event.id == "G5vzZ9Qk1a"
        assert event.external_source == "ticketmaster"
        assert event.title == "The Lumineers"
        assert event.category == "concerts"
        assert event.start_date == "2030-09-12T19:30:00-04:00"
        assert event.image_url == "https://img/large.jpg"
        assert (event.min_price, event.max_price, event.price) == (45.5, 120.0, 45.5)
        assert (event.latitude, event.longitude) == (39.0976, -84.5118)
        assert event.city == "Cincinnati"
        assert event.state == "OH"
        assert event.address == "100 Broadway St"
        assert event.location == "Heritage Bank Center"

        method, url, kwargs = session.calls[0]
        assert url == "https://app.ticketmaster.com/discovery/v2/events.json"
        assert kwargs["params"]["apikey"] == "key"

    def test_event_without_coordinates_is_dropped(self):
        placeable = _tm_event()
        unplaceable = _tm_event(id="nowhere", _embedded={"venues": [{"name": "Online"}]})
        session = FakeSession(FakeResponse(_tm_body(placeable, unplaceable)))
        events = TicketmasterProvider(api_key="key", session=session).search_events(39.1, -84.51, 50)
        assert [e.id for e in events] == ["G5vzZ9Qk1a"]

    def test_malformed_event_is_skipped(self):
        session = FakeSession(FakeResponse(_tm_body({"name": "no id"}, _tm_event())))
        events = TicketmasterProvider(api_key="key", session=session).search_events(39.1, -84.51, 50)
        assert [e.id for e in events] == ["G5vzZ9Qk1a"]

    def test_no_results(self):
        session = FakeSession(FakeResponse({"page": {"totalElements": 0}}))
        assert TicketmasterProvider(api_key="key", session=session).search_events(39.1, -84.51, 50) == []

    @pytest.mark.parametrize("session", [
        FakeSession(error=requests.ConnectionError("down")),
        FakeSession(FakeResponse({"fault": "rate limited"}, status_code=429)),
        FakeSession(FakeResponse(ValueError("not json"))),
    ])
    def test_failures_degrade_to_empty(self, session):
        assert TicketmasterProvider(api_key="key", session=session).search_events(39.1, -84.51, 50) == []

    def test_missing_api_key_disables_provider(self):
        session = FakeSession(FakeResponse(_tm_body(_tm_event())))
        assert TicketmasterProvider(api_key="", session=session).search_events(39.1, -84.51, 50) == []
        assert session.calls == []

    def test_utc_datetime_preferred_over_local(self):
        raw = _tm_event(dates={"start": {"localDate": "2030-09-12", "dateTime": "2030-09-12T23:30:00Z"}})
        event = TicketmasterProvider(api_key="key").transform_event(TicketmasterEvent.model_validate(raw))
        assert event.start_date == "2030-09-12T23:30:00Z"

    def test_missing_local_time_uses_default(self):
        raw = _tm_event(dates={"start": {"localDate": "2030-09-12"}, "timezone": "America/Chicago"})
        event = TicketmasterProvider(api_key="key").transform_event(TicketmasterEvent.model_validate(raw))
        assert event.start_date == "2030-09-12T20:00:00-05:00"

    def test_unknown_segment_maps_to_social(self):
        raw = _tm_event(classifications=[{"segment": {"name": "Undefined"}}])
        event = TicketmasterProvider(api_key="key").transform_event(TicketmasterEvent.model_validate(raw))
        assert event.category == "social"


class TestTicketmasterHelpers:
    """Title, image and price normalization."""

    @pytest.mark.parametrize("raw, expected", [
        ("Live Nation Presents: Hozier", "Hozier"),
        ("Zach Bryan - The Quittin Time Tour", "Zach Bryan"),
        ("Cincinnati Bengals vs. Cleveland Browns", "Cincinnati Bengals vs. Cleveland Browns"),
        ("Noah Kahan (18+)", "Noah Kahan"),
        ("Wicked - Official Tickets", "Wicked"),
        ("Tour", "Tour"),
    ])
    def test_clean_title(self, raw, expected):
        assert clean_title(raw) == expected

    def test_pick_image_falls_back_to_first(self):
        images = [TMImage(url="a", width=100), TMImage(url="b", width=200)]
        assert pick_image(images) == "a"
        assert pick_image([]) is None

    def test_price_bounds_ignore_zero_and_missing(self):
        assert price_bounds([]) == (0.0, 0.0)
        assert price_bounds([TMPriceRange(min=0, max=0)]) == (0.0, 0.0)
        assert price_bounds([TMPriceRange(min=20, max=None), TMPriceRange(min=15, max=80)]) == (15, 80)

    def test_price_from_accessibility_info(self):
        info = "Tickets from $35.50 at the box office"
        assert price_bounds([], info) == (35.5, 35.5)
        assert price_bounds([TMPriceRange(min=20, max=40)], info) == (20, 40)
        assert price_bounds([], "Wheelchair seating available") == (0.0, 0.0)

        raw = _tm_event(priceRanges=[], accessibility={"info": "General admission $25"})
        event = TicketmasterProvider(api_key="key").transform_event(TicketmasterEvent.model_validate(raw))
        assert (event.min_price, event.max_price, event.price) == (25.0, 25.0, 25.0)


def _meetup_node(**overrides) -> dict:
    node = {
        "id": "301234",
        "title": "College Students Board Game Night",
        "description": "Meet other students over board games. " * 10,
        "eventUrl": "https://www.meetup.com/cincy-games/events/301234",
        "dateTime": "2030-03-02T19:00:00-05:00",
        "duration": 7200,
        "group": {"name": "Cincy Games", "urlname": "cincy-games"},
        "venue": {"name": "Rhinegeist", "lat": 39.117, "lon": -84.52, "address_1": "1910 Elm St",
                  "city": "Cincinnati", "state": "OH"},
    }
    node.update(overrides)
    return node


def _meetup_body(*nodes) -> dict:
    return {"data": {"rankedEvents": {"edges": [{"node": n} for n in nodes]}}}


class TestMeetup:
    """Meetup GraphQL client."""

    def test_transform(self):
        session = FakeSession(FakeResponse(_meetup_body(_meetup_node())))
        events = MeetupProvider(api_key="token", session=session).search_events(39.1, -84.51, 25)

        assert len(events) == 1
        event = events[0]
        assert event.id == "meetup_301234"
        assert event.external_id == "301234"
        assert event.external_source == "meetup"
        assert event.end_date == "2030-03-02T21:00:00-05:00"
        assert len(event.description) == 203
        assert event.description.endswith("...")
        assert event.host_name == "Cincy Games"

        method, url, kwargs = session.calls[0]
        assert method == "POST"
        assert kwargs["headers"]["Authorization"] == "Bearer token"
        assert kwargs["json"]["variables"] == {"lat": 39.1, "lon": -84.51, "radius": 25, "first": 20}

    def test_irrelevant_events_are_filtered(self):
        node = _meetup_node(id="2", title="Knitting Circle", description="Yarn", group={"name": "Crafters"})
        session = FakeSession(FakeResponse(_meetup_body(node)))
        assert MeetupProvider(api_key="token", session=session).search_events(39.1, -84.51, 25) == []

    def test_graphql_errors_degrade_to_empty(self):
        session = FakeSession(FakeResponse({"errors": [{"message": "bad token"}]}))
        assert MeetupProvider(api_key="token", session=session).search_events(39.1, -84.51, 25) == []

    def test_network_error_degrades_to_empty(self):
        session = FakeSession(error=requests.Timeout("slow"))
        assert MeetupProvider(api_key="token", session=session).search_events(39.1, -84.51, 25) == []

    def test_categorize(self):
        def event(title):
            return MeetupEvent(id="1", title=title, dateTime="2030-01-01T00:00:00")

        assert categorize(event("Finals study group")) == "study"
        assert categorize(event("Intramural sports night")) == "sports"
        assert categorize(event("Grad student mixer")) == "parties"
        assert categorize(event("Open mic music")) == "concerts"
        assert categorize(event("Coffee chat")) == "social"
        assert is_college_relevant(event("Young Professional happy hour"))
