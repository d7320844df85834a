"""
API schemas for billing operations.

Request and response models for billing, plan and usage endpoints.
"""

from datetime import date, datetime
from typing import Any, Optional
from pydantic import BaseModel, Field

from packages.billing.models.domain.enums import SubscriptionStatus, UsageType
from packages.billing.models.domain.plans import Plan
from packages.billing.models.domain.subscription import UserBilling


# ============================================================================
# Plan Schemas
# ============================================================================


class PlanResponse(BaseModel):
    """A catalog plan as shown on the pricing page."""

    id: int
    name: str
    price_cents: int
    credits: int
    price_id: Optional[str] = Field(
        default=None, description="Stripe price id to pass to checkout"
    )
    description: Optional[str] = None

    @classmethod
    def from_plan(cls, plan: Plan, description: Optional[str] = None) -> "PlanResponse":
        return cls(
            id=plan.id,
            name=plan.name,
            price_cents=plan.price_cents,
            credits=plan.credits,
            price_id=plan.stripe_price_id,
            description=description,
        )


class PlansResponse(BaseModel):
    plans: list[PlanResponse]


# ============================================================================
# Subscription Schemas
# ============================================================================


class SubscriptionResponse(BaseModel):
    """Current subscription with its plan."""

    status: SubscriptionStatus
    stripe_subscription_id: Optional[str] = None
    period_start: datetime
    plan: Optional[PlanResponse] = None


class UserBillingResponse(BaseModel):
    """User joined with subscription and plan."""

    user_id: int
    email: str
    full_name: Optional[str] = None
    subscription: SubscriptionResponse

    @classmethod
    def from_billing(cls, billing: UserBilling) -> "UserBillingResponse":
        return cls(
            user_id=billing.user_id,
            email=billing.email,
            full_name=billing.full_name,
            subscription=SubscriptionResponse(
                status=billing.subscription.status,
                stripe_subscription_id=billing.subscription.stripe_subscription_id,
                period_start=billing.subscription.period_start,
                plan=PlanResponse.from_plan(billing.plan) if billing.plan else None,
            ),
        )


# ============================================================================
# Checkout Schemas
# ============================================================================


class CheckoutRequest(BaseModel):
    """Request to switch plans. The free price downgrades instead of checking out."""

    price_id: str = Field(min_length=1)


class CheckoutResponse(BaseModel):
    """Hosted checkout to redirect to, or the downgraded billing state."""

    session_id: Optional[str] = None
    url: Optional[str] = Field(default=None, description="Stripe checkout session URL")
    user: Optional[UserBillingResponse] = None


class ConfirmSessionResponse(BaseModel):
    success: bool
    user: Optional[UserBillingResponse] = None


# ============================================================================
# Portal Schemas
# ============================================================================


class PortalResponse(BaseModel):
    url: str = Field(..., description="Stripe customer portal URL")


# ============================================================================
# Usage Schemas
# ============================================================================


class RecordUsageRequest(BaseModel):
    project_id: int
    credits: int = Field(ge=0)
    type: UsageType
    metadata: dict[str, Any] = Field(default_factory=dict)


class UsageEventResponse(BaseModel):
    id: int
    project_id: int
    project_name: Optional[str] = None
    credits: int
    type: UsageType
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class DailyUsageResponse(BaseModel):
    date: date
    credits: int


class UsageSummaryResponse(BaseModel):
    """Dashboard usage rollup."""

    plan_name: Optional[str] = None
    status: SubscriptionStatus
    period_start: datetime
    credit_allotment: int
    credits_used: int = Field(..., description="Credits used since the period start")
    remaining_credits: int = Field(
        ..., description="Allotment minus credits used; negative when over quota"
    )
    total_credits_used: int
    last_7_days: list[DailyUsageResponse]
    last_30_days: list[DailyUsageResponse]
    by_type: dict[UsageType, int]
