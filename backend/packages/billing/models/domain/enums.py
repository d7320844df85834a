"""
Billing enums - strongly typed enumerations for subscription and usage states.
"""

from enum import Enum


class SubscriptionStatus(str, Enum):
    """
    Local subscription status.

    FREE is the only status without a Stripe subscription behind it.
    """

    ACTIVE = "active"  # Paid subscription in good standing
    FREE = "free"  # Free plan, no Stripe subscription
    INCOMPLETE = "incomplete"  # Checkout finished, first payment not settled
    PAST_DUE = "past_due"  # Payment failed, Stripe is retrying
    CANCELED = "canceled"  # Stripe subscription ended


class StripeSubscriptionStatus(str, Enum):
    """Stripe subscription status values."""

    INCOMPLETE = "incomplete"
    INCOMPLETE_EXPIRED = "incomplete_expired"
    TRIALING = "trialing"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    UNPAID = "unpaid"
    PAUSED = "paused"

    def to_local(self) -> SubscriptionStatus:
        return _STRIPE_TO_LOCAL[self]

    @classmethod
    def map_status(cls, raw: str) -> SubscriptionStatus:
        """Map a raw Stripe status, treating unknown values as incomplete."""
        try:
            return cls(raw).to_local()
        except ValueError:
            return SubscriptionStatus.INCOMPLETE


_STRIPE_TO_LOCAL = {
    StripeSubscriptionStatus.ACTIVE: SubscriptionStatus.ACTIVE,
    StripeSubscriptionStatus.TRIALING: SubscriptionStatus.ACTIVE,
    StripeSubscriptionStatus.PAST_DUE: SubscriptionStatus.PAST_DUE,
    StripeSubscriptionStatus.UNPAID: SubscriptionStatus.PAST_DUE,
    StripeSubscriptionStatus.PAUSED: SubscriptionStatus.PAST_DUE,
    StripeSubscriptionStatus.INCOMPLETE: SubscriptionStatus.INCOMPLETE,
    StripeSubscriptionStatus.INCOMPLETE_EXPIRED: SubscriptionStatus.CANCELED,
    StripeSubscriptionStatus.CANCELED: SubscriptionStatus.CANCELED,
}


class UsageType(str, Enum):
    """Types of metered usage events."""

    API_CALL = "api_call"
    CONTENT_ANALYSIS = "content_analysis"
    MODEL_TRAINING = "model_training"
