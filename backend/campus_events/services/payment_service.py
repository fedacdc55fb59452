"""Stripe PaymentIntents over the REST API, for the event hosting fee."""
import logging
from typing import Any, Optional

import requests

from campus_events.config import settings

logger = logging.getLogger(__name__)

HOSTING_FEE_TYPE = "event_hosting_fee"


class PaymentError(Exception):
    """The payment processor could not be reached or rejected the call."""


class PaymentService:
    def __init__(
        self,
        secret_key: str,
        api_base: str = "https://api.stripe.com/v1",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.secret_key = secret_key
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, data: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        if not self.secret_key:
            raise PaymentError("Payment processor is not configured")
        try:
            response = self.session.request(
                method,
                f"{self.api_base}{path}",
                data=data,
                auth=(self.secret_key, ""),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise PaymentError(f"Payment processor unreachable: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise PaymentError(f"Payment processor returned invalid JSON ({response.status_code})") from exc
        if not response.ok:
            message = (body.get("error") or {}).get("message", "unknown error") if isinstance(body, dict) else "unknown error"
            raise PaymentError(f"Payment processor error ({response.status_code}): {message}")
        return body

    def create_payment_intent(self, amount_cents: int, currency: str, metadata: dict[str, str]) -> dict[str, Any]:
        data = {"amount": str(amount_cents), "currency": currency}
        # Stripe expects nested form fields: metadata[key]=value
        data.update({f"metadata[{key}]": value for key, value in metadata.items()})
        intent = self._request("POST", "/payment_intents", data=data)
        logger.info("Created payment intent %s for %d %s", intent.get("id"), amount_cents, currency)
        return intent

    def retrieve_payment_intent(self, payment_intent_id: str) -> dict[str, Any]:
        return self._request("GET", f"/payment_intents/{payment_intent_id}")


def get_payment_service() -> PaymentService:
    """FastAPI dependency."""
    return PaymentService(
        secret_key=settings.STRIPE_SECRET_KEY,
        api_base=settings.STRIPE_API_BASE,
        timeout=settings.PROVIDER_TIMEOUT_SECONDS,
    )
