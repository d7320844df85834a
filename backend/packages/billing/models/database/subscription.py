"""
Database entity for subscriptions.
"""

from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    Index,
    CheckConstraint,
)
from sqlalchemy.sql import func

from common.db.base import Base, BigIntegerType


class SubscriptionEntity(Base):
    """
    User subscription database entity.

    One-to-one with users. The check constraint pins the free status to the
    absence of a Stripe subscription id.
    """

    __tablename__ = "subscriptions"

    id = Column(BigIntegerType, primary_key=True, index=True, autoincrement=True)
    user_id = Column(
        BigIntegerType,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    status = Column(
        String(50), nullable=False, index=True
    )  # active, free, incomplete, past_due, canceled
    stripe_subscription_id = Column(String(255), nullable=True, unique=True, index=True)

    plan_id = Column(BigIntegerType, ForeignKey("plans.id"), nullable=True)
    stripe_price_id = Column(String(255), nullable=True)

    period_start = Column(DateTime(timezone=True), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            "(status = 'free') = (stripe_subscription_id IS NULL)",
            name="free_iff_no_stripe_subscription",
        ),
        Index("idx_subscription_status_plan", "status", "plan_id"),
    )
