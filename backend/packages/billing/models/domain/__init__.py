"""Domain models for billing."""

from packages.billing.models.domain.enums import (
    SubscriptionStatus,
    StripeSubscriptionStatus,
    UsageType,
)
from packages.billing.models.domain.plans import Plan, PlanCreateModel
from packages.billing.models.domain.subscription import (
    Subscription,
    SubscriptionCreateModel,
    SubscriptionSnapshot,
    UserBilling,
    ConfirmSessionResult,
)
from packages.billing.models.domain.checkout import (
    CheckoutSession,
    CheckoutSessionSnapshot,
)
from packages.billing.models.domain.usage import (
    UsageEvent,
    UsageEventCreateModel,
    DailyUsage,
    UsageSummary,
)

__all__ = [
    # Enums
    "SubscriptionStatus",
    "StripeSubscriptionStatus",
    "UsageType",
    # Plans
    "Plan",
    "PlanCreateModel",
    # Subscription
    "Subscription",
    "SubscriptionCreateModel",
    "SubscriptionSnapshot",
    "UserBilling",
    "ConfirmSessionResult",
    # Checkout
    "CheckoutSession",
    "CheckoutSessionSnapshot",
    # Usage
    "UsageEvent",
    "UsageEventCreateModel",
    "DailyUsage",
    "UsageSummary",
]
