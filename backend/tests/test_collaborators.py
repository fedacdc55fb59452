"""Tests for the payment processor and object storage clients."""
import pytest
import requests

from campus_events.services.object_storage import ObjectNotFoundError, ObjectStorageError, ObjectStorageService
from campus_events.services.payment_service import PaymentError, PaymentService
from tests.conftest import FakeResponse


class RecordingSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error:
            raise self.error
        return self.response

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)

    def head(self, url, **kwargs):
        return self.request("HEAD", url, **kwargs)


class TestPaymentService:
    """Stripe PaymentIntents over REST."""

    def test_create_payment_intent(self):
        session = RecordingSession(FakeResponse({"id": "pi_123", "client_secret": "pi_123_secret"}))
        service = PaymentService("sk_test_abc", session=session)
        intent = service.create_payment_intent(500, "usd", {"type": "event_hosting_fee", "user_id": "u1"})

        assert intent["client_secret"] == "pi_123_secret"
        method, url, kwargs = session.calls[0]
        assert method == "POST"
        assert url == "https://api.stripe.com/v1/payment_intents"
        assert kwargs["auth"] == ("sk_test_abc", "")
        assert kwargs["data"] == {
            "amount": "500",
            "currency": "usd",
            "metadata[type]": "event_hosting_fee",
            "metadata[user_id]": "u1",
        }

    def test_retrieve_payment_intent(self):
        session = RecordingSession(FakeResponse({"id": "pi_123", "status": "succeeded"}))
        intent = PaymentService("sk_test_abc", session=session).retrieve_payment_intent("pi_123")
        assert intent["status"] == "succeeded"
        assert session.calls[0][:2] == ("GET", "https://api.stripe.com/v1/payment_intents/pi_123")

    def test_processor_error_message(self):
        body = {"error": {"message": "No such payment_intent: 'pi_x'"}}
        session = RecordingSession(FakeResponse(body, status_code=404))
        with pytest.raises(PaymentError, match="No such payment_intent"):
            PaymentService("sk_test_abc", session=session).retrieve_payment_intent("pi_x")

    def test_unreachable_processor(self):
        session = RecordingSession(error=requests.ConnectionError("refused"))
        with pytest.raises(PaymentError):
            PaymentService("sk_test_abc", session=session).retrieve_payment_intent("pi_x")

    def test_missing_key(self):
        session = RecordingSession(FakeResponse({}))
        with pytest.raises(PaymentError):
            PaymentService("", session=session).create_payment_intent(500, "usd", {})
        assert session.calls == []


class TestObjectStorage:
    """Signed upload URLs and path normalization."""

    def _service(self, session=None, private_dir="/campus-bucket/.private"):
        return ObjectStorageService("http://sidecar.test/", private_dir, ttl_seconds=900, session=session)

    def test_upload_url(self):
        session = RecordingSession(FakeResponse({"signed_url": "https://signed"}))
        assert self._service(session).get_upload_url() == "https://signed"
        method, url, kwargs = session.calls[0]
        assert url == "http://sidecar.test/object-storage/signed-object-url"
        assert kwargs["json"]["bucket_name"] == "campus-bucket"
        assert kwargs["json"]["object_name"].startswith(".private/uploads/")

    @pytest.mark.parametrize("session", [
        RecordingSession(error=requests.ConnectionError("refused")),
        RecordingSession(FakeResponse({"oops": True})),
        RecordingSession(FakeResponse({}, status_code=500)),
    ])
    def test_upload_url_failures(self, session):
        with pytest.raises(ObjectStorageError):
            self._service(session).get_upload_url()

    def test_unconfigured_private_dir(self):
        with pytest.raises(ObjectStorageError):
            self._service(RecordingSession(), private_dir="").get_upload_url()

    @pytest.mark.parametrize("raw, expected", [
        ("https://storage.googleapis.com/campus-bucket/.private/uploads/abc?X-Goog-Signature=1", "/objects/uploads/abc"),
        ("https://storage.googleapis.com/other-bucket/file.png", "/other-bucket/file.png"),
        ("/objects/uploads/abc", "/objects/uploads/abc"),
        ("https://cdn.example.com/pic.png", "https://cdn.example.com/pic.png"),
    ])
    def test_normalize_object_path(self, raw, expected):
        assert self._service().normalize_object_path(raw) == expected

    def test_object_url(self):
        session = RecordingSession(FakeResponse({"signed_url": "https://signed"}))
        assert self._service(session).get_object_url("/objects/uploads/abc") == "https://signed"
        methods = [(method, kwargs.get("json", {}).get("method")) for method, _, kwargs in session.calls]
        assert methods == [("POST", "HEAD"), ("HEAD", None), ("POST", "GET")]
        assert session.calls[0][2]["json"]["object_name"] == ".private/uploads/abc"

    def test_object_url_missing_object(self):
        class MissingObjectSession(RecordingSession):
            def head(self, url, **kwargs):
                return FakeResponse({}, status_code=404)

        session = MissingObjectSession(FakeResponse({"signed_url": "https://signed"}))
        with pytest.raises(ObjectNotFoundError):
            self._service(session).get_object_url("uploads/gone")

    @pytest.mark.parametrize("path", ["/objects/", "/objects/uploads/../../other-bucket/x", ""])
    def test_object_url_rejects_bad_paths(self, path):
        session = RecordingSession(FakeResponse({"signed_url": "https://signed"}))
        with pytest.raises(ObjectNotFoundError):
            self._service(session).get_object_url(path)
        assert session.calls == []

    def test_object_url_storage_error(self):
        session = RecordingSession(FakeResponse({"signed_url": "https://signed"}, status_code=503))
        with pytest.raises(ObjectStorageError):
            self._service(session).get_object_url("uploads/abc")
