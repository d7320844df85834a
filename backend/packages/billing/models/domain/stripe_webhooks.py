"""
Domain models for Stripe webhook payloads.

Event types are kept as plain strings: Stripe adds new types over time and
unknown ones must still parse so they can be acknowledged and ignored.
"""

from typing import Optional, Any
from enum import Enum
from pydantic import BaseModel


class StripeWebhookType(str, Enum):
    """Stripe webhook event types we act on."""

    CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"


class StripeCheckoutSessionData(BaseModel):
    """Stripe checkout session object as delivered in an event."""

    id: str
    customer: Optional[str] = None
    subscription: Optional[str] = None
    payment_status: Optional[str] = None
    status: Optional[str] = None


class StripeEventData(BaseModel):
    """Stripe event data wrapper."""

    object: dict[str, Any]  # The actual object (checkout session, invoice, etc.)


class StripeWebhookPayload(BaseModel):
    """Complete Stripe webhook payload."""

    id: str
    type: str
    data: StripeEventData
    created: int
    livemode: bool = False

    def is_type(self, webhook_type: StripeWebhookType) -> bool:
        return self.type == webhook_type.value
