"""Domain models for hosted checkout sessions."""

from typing import Optional
from pydantic import BaseModel

from packages.billing.models.domain.subscription import SubscriptionSnapshot

PAYMENT_STATUS_PAID = "paid"


class CheckoutSession(BaseModel):
    """Handle the client redirects the user to."""

    id: str
    url: Optional[str] = None


class CheckoutSessionSnapshot(BaseModel):
    """A retrieved checkout session with its subscription expanded."""

    id: str
    customer_id: Optional[str] = None
    payment_status: str
    subscription: Optional[SubscriptionSnapshot] = None

    def is_settled(self) -> bool:
        return (
            self.payment_status == PAYMENT_STATUS_PAID
            and self.subscription is not None
        )
