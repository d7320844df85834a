"""
Domain models for the usage ledger and its aggregates.
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field

from common.utils.time import utcnow
from packages.billing.models.domain.enums import UsageType, SubscriptionStatus


class UsageEvent(BaseModel):
    """
    One metered usage event. Append-only: never mutated or deleted.
    """

    id: int
    project_id: int
    credits: int
    type: UsageType
    event_metadata: dict = Field(default_factory=dict)
    created_at: datetime

    class Config:
        from_attributes = True


class UsageEventCreateModel(BaseModel):
    """Model for appending a usage event."""

    project_id: int
    credits: int = Field(ge=0)
    type: UsageType
    event_metadata: dict = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)

    class Config:
        use_enum_values = True


class UsageEventWithProject(UsageEvent):
    """Usage event joined with the name of the project that produced it."""

    project_name: str


class DailyUsage(BaseModel):
    """Credits consumed on one UTC day."""

    date: date
    credits: int


class UsageSummary(BaseModel):
    """
    Dashboard view of a user's consumption.

    remaining_credits = credit_allotment - credits_used, where credits_used
    counts events since the subscription period start. Negative means the
    user is over quota.
    """

    plan_name: Optional[str] = None
    status: SubscriptionStatus
    period_start: datetime
    credit_allotment: int
    credits_used: int
    remaining_credits: int
    total_credits_used: int
    last_7_days: list[DailyUsage]
    last_30_days: list[DailyUsage]
    by_type: dict[UsageType, int]
