"""Hosting-fee payment route."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status

from campus_events.auth.dependencies import get_current_user
from campus_events.config import settings
from campus_events.models.user import User
from campus_events.schemas.payment import EventPaymentOut
from campus_events.services.payment_service import HOSTING_FEE_TYPE, PaymentError, PaymentService, get_payment_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/create-event-payment", response_model=EventPaymentOut)
def create_event_payment(
    user: User = Depends(get_current_user),
    payments: PaymentService = Depends(get_payment_service),
):
    """Start the flat platform-fee charge a host pays before publishing."""
    try:
        intent = payments.create_payment_intent(
            amount_cents=settings.PLATFORM_FEE_CENTS,
            currency=settings.PLATFORM_FEE_CURRENCY,
            metadata={"type": HOSTING_FEE_TYPE, "user_id": user.user_id},
        )
    except PaymentError as exc:
        logger.error("Creating hosting-fee payment for user %s failed: %s", user.user_id, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Error creating payment intent")
    return EventPaymentOut(client_secret=intent["client_secret"], platform_fee=settings.PLATFORM_FEE_CENTS / 100)
