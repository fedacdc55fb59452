"""Pydantic schemas for the hosting-fee payment."""
from pydantic import BaseModel


class EventPaymentOut(BaseModel):
    client_secret: str
    platform_fee: float
