"""Billing repositories."""

from packages.billing.repositories.plan_repository import PlanRepository
from packages.billing.repositories.subscription_repository import SubscriptionRepository
from packages.billing.repositories.usage_repository import UsageEventRepository

__all__ = [
    "PlanRepository",
    "SubscriptionRepository",
    "UsageEventRepository",
]
