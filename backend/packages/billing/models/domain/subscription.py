"""
Domain models for subscriptions.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from common.utils.time import utcnow
from packages.billing.models.domain.enums import SubscriptionStatus
from packages.billing.models.domain.plans import Plan


class Subscription(BaseModel):
    """
    A user's single subscription record.

    status == FREE exactly when there is no Stripe subscription behind it.
    """

    id: int
    user_id: int

    status: SubscriptionStatus
    stripe_subscription_id: Optional[str] = None
    plan_id: Optional[int] = None
    stripe_price_id: Optional[str] = None

    # Start of the current billing period, drives remaining-credit math
    period_start: datetime

    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @property
    def is_free(self) -> bool:
        return self.status == SubscriptionStatus.FREE

    def has_paid_subscription(self) -> bool:
        """True while a Stripe subscription is live and worth canceling."""
        return (
            self.stripe_subscription_id is not None
            and self.status != SubscriptionStatus.CANCELED
        )


class SubscriptionCreateModel(BaseModel):
    """Model for creating the initial (free) subscription."""

    user_id: int
    status: SubscriptionStatus = SubscriptionStatus.FREE
    stripe_subscription_id: Optional[str] = None
    plan_id: Optional[int] = None
    stripe_price_id: Optional[str] = None
    period_start: datetime = Field(default_factory=utcnow)

    class Config:
        use_enum_values = True


class SubscriptionSnapshot(BaseModel):
    """
    Stripe-side state of a subscription at one point in time.

    Both reconciliation paths derive their write from one of these, which is
    what makes them converge.
    """

    subscription_id: str
    customer_id: Optional[str] = None
    status: SubscriptionStatus
    price_id: Optional[str] = None
    period_start: datetime


class UserBilling(BaseModel):
    """User plus the subscription and plan they currently hold."""

    user_id: int
    email: str
    full_name: Optional[str] = None
    stripe_customer_id: Optional[str] = None
    subscription: Subscription
    plan: Optional[Plan] = None


class ConfirmSessionResult(BaseModel):
    """
    Outcome of a synchronous checkout confirmation.

    success == False means payment is not settled yet; callers retry later.
    """

    success: bool
    user: Optional[UserBilling] = None
