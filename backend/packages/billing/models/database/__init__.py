"""Database models for billing."""

from packages.billing.models.database.plan import PlanEntity
from packages.billing.models.database.subscription import SubscriptionEntity
from packages.billing.models.database.usage import UsageEventEntity

__all__ = [
    "PlanEntity",
    "SubscriptionEntity",
    "UsageEventEntity",
]
