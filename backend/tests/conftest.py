"""Pytest fixtures: SQLite database, fake collaborators and auth helpers."""
import os
from datetime import datetime, timedelta, timezone

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
import requests
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from campus_events.auth.dependencies import rate_limit_store, session_store
from campus_events.database import Base, get_db
from campus_events.main import app
from campus_events.providers import EventProvider, get_event_providers
from campus_events.services.object_storage import ObjectStorageService, get_object_storage
from campus_events.services.payment_service import PaymentError, get_payment_service

# Import all models so they register with Base.metadata
from campus_events.models.user import User                           # noqa: F401
from campus_events.models.event import Event                         # noqa: F401
from campus_events.models.rsvp import RSVP                           # noqa: F401
from campus_events.models.comment import Comment, Media              # noqa: F401
from campus_events.models.favorite import Favorite                   # noqa: F401
from campus_events.models.friendship import FriendRequest, Friendship  # noqa: F401

SQLITE_URL = "sqlite:///./test.db"
PASSWORD = "Sup3rSecret"
PRIVATE_DIR = "/campus-bucket/.private"


class FakeProvider(EventProvider):
    """Provider double that returns canned listings."""

    def __init__(self, events=None, name="ticketmaster"):
        self.events = list(events or [])
        self.name = name
        self.calls = []

    def search_events(self, latitude, longitude, radius, options=None):
        self.calls.append((latitude, longitude, radius, options))
        return list(self.events)


class FakePaymentService:
    """In-memory stand-in for the payment processor."""

    def __init__(self):
        self.intents = {}
        self.fail = False

    def create_payment_intent(self, amount_cents, currency, metadata):
        if self.fail:
            raise PaymentError("processor down")
        intent_id = f"pi_{len(self.intents) + 1}"
        intent = {
            "id": intent_id,
            "amount": amount_cents,
            "currency": currency,
            "status": "requires_payment_method",
            "client_secret": f"{intent_id}_secret",
            "metadata": dict(metadata),
        }
        self.intents[intent_id] = intent
        return intent

    def retrieve_payment_intent(self, payment_intent_id):
        if self.fail or payment_intent_id not in self.intents:
            raise PaymentError("No such payment_intent")
        return self.intents[payment_intent_id]

    def succeed(self, payment_intent_id):
        self.intents[payment_intent_id]["status"] = "succeeded"


class FakeStorageSession:
    """Minimal requests.Session double for the storage sidecar."""

    def __init__(self):
        self.posts = []
        self.heads = []
        self.missing = set()

    def post(self, url, json=None, timeout=None):
        self.posts.append((url, json))
        return FakeResponse(
            {"signed_url": f"https://storage.googleapis.com/{json['bucket_name']}/{json['object_name']}?X-Goog-Signature=abc"}
        )

    def head(self, url, timeout=None):
        self.heads.append(url)
        object_name = url.split("?", 1)[0].split("/", 4)[4]
        return FakeResponse({}, status_code=404 if object_name in self.missing else 200)


class FakeResponse:
    def __init__(self, body, status_code=200):
        self._body = body
        self.status_code = status_code
        self.ok = status_code < 400

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session bound to the test engine."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def providers():
    """Providers the search endpoint will see; tests append to this list."""
    return []


@pytest.fixture
def payments():
    return FakePaymentService()


@pytest.fixture
def storage_session():
    return FakeStorageSession()


@pytest.fixture(scope="function")
def client(db_engine, providers, payments, storage_session):
    """TestClient with the database and outbound collaborators overridden."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    session_store.clear()
    rate_limit_store.clear()
    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_event_providers] = lambda: providers
    app.dependency_overrides[get_payment_service] = lambda: payments
    app.dependency_overrides[get_object_storage] = lambda: ObjectStorageService(
        sidecar_url="http://sidecar.test",
        private_dir=PRIVATE_DIR,
        session=storage_session,
    )
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    session_store.clear()
    rate_limit_store.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def register_user(client: TestClient, email: str = "alice@uc.edu", first_name: str = "Alice",
                  last_name: str = "Smith", password: str = PASSWORD) -> dict:
    """Register via the API (which also signs the client in) and return the user JSON."""
    resp = client.post("/api/register", json={
        "email": email,
        "password": password,
        "first_name": first_name,
        "last_name": last_name,
        "university": "University of Cincinnati",
        "graduation_year": 2027,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()["user"]


def login_as(client: TestClient, email: str, password: str = PASSWORD) -> dict:
    """Drop the current session cookie and sign in as someone else."""
    client.cookies.clear()
    resp = client.post("/api/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["user"]


def create_event(client: TestClient, title: str = "Study Night", hours_from_now: int = 48, **overrides) -> dict:
    """Create an event as the signed-in user and return the event JSON."""
    start = datetime.now(timezone.utc) + timedelta(hours=hours_from_now)
    payload = {
        "title": title,
        "description": "Bring snacks",
        "category": "social",
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(hours=2)).isoformat(),
        "location": "Langsam Library",
        "latitude": 39.1329,
        "longitude": -84.5150,
    }
    payload.update(overrides)
    resp = client.post("/api/events", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()
