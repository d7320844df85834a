"""
Repository for subscription management.
"""

from typing import Optional
from datetime import datetime
from sqlalchemy import select, update, or_

from common.core.exceptions import NotFoundError
from common.repositories.base import BaseRepository
from packages.billing.models.database.subscription import SubscriptionEntity
from packages.billing.models.domain.subscription import (
    Subscription,
    SubscriptionSnapshot,
)
from packages.billing.models.domain.enums import SubscriptionStatus
from packages.users.models.database.user import UserEntity
from common.core.otel_axiom_exporter import trace_span, get_logger

logger = get_logger(__name__)


class SubscriptionRepository(BaseRepository[SubscriptionEntity, Subscription]):
    """Repository for managing user subscriptions."""

    def __init__(self, db_session=None):
        super().__init__(SubscriptionEntity, Subscription, db_session)

    @trace_span
    async def get_by_user_id(self, user_id: int) -> Optional[Subscription]:
        """Get the subscription of a user."""
        async with self._get_session() as session:
            result = await session.execute(
                select(SubscriptionEntity).where(SubscriptionEntity.user_id == user_id)
            )
            db_subscription = result.scalar_one_or_none()
            return self._entity_to_domain(db_subscription) if db_subscription else None

    @trace_span
    async def set_free(
        self,
        user_id: int,
        plan_id: Optional[int],
        price_id: Optional[str],
        period_start: datetime,
    ) -> Optional[Subscription]:
        """Move a user onto the free plan, dropping any Stripe subscription id."""
        async with self._get_session() as session:
            await session.execute(
                update(SubscriptionEntity)
                .where(SubscriptionEntity.user_id == user_id)
                .values(
                    status=SubscriptionStatus.FREE.value,
                    stripe_subscription_id=None,
                    plan_id=plan_id,
                    stripe_price_id=price_id,
                    period_start=period_start,
                )
            )
        return await self.get_by_user_id(user_id)

    @trace_span
    async def apply_snapshot_by_customer(
        self,
        customer_id: str,
        snapshot: SubscriptionSnapshot,
        plan_id: Optional[int],
    ) -> bool:
        """
        Write a Stripe subscription snapshot onto the subscription of the user
        owning customer_id, as one conditional UPDATE.

        - Rows already equal to the snapshot are not touched, so re-applying
          the same snapshot is a no-op.
        - A canceled snapshot only lands while the row still points at that
          Stripe subscription, so a replaced subscription cannot clobber its
          successor.

        Returns True when a row changed. Raises NotFoundError if no user owns
        the customer.
        """
        values = {
            "status": snapshot.status.value,
            "stripe_subscription_id": snapshot.subscription_id,
            "stripe_price_id": snapshot.price_id,
            "plan_id": plan_id,
            "period_start": snapshot.period_start,
        }
        differs = [
            getattr(SubscriptionEntity, key).is_distinct_from(value)
            for key, value in values.items()
        ]
        owner_ids = select(UserEntity.id).where(
            UserEntity.stripe_customer_id == customer_id
        )

        stmt = (
            update(SubscriptionEntity)
            .where(SubscriptionEntity.user_id.in_(owner_ids))
            .where(or_(*differs))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if snapshot.status == SubscriptionStatus.CANCELED:
            stmt = stmt.where(
                SubscriptionEntity.stripe_subscription_id == snapshot.subscription_id
            )

        async with self._get_session() as session:
            result = await session.execute(stmt)
            if result.rowcount > 0:
                return True

            owner = await session.execute(owner_ids)
            user_id = owner.scalar_one_or_none()
            if user_id is None:
                raise NotFoundError(
                    f"No user for Stripe customer {customer_id}",
                    detail="Unknown customer",
                )

            existing = await session.execute(
                select(SubscriptionEntity.id).where(
                    SubscriptionEntity.user_id == user_id
                )
            )
            if existing.scalar_one_or_none() is not None:
                return False

            # Provisioning never created the row; the snapshot becomes the record
            logger.warning(
                f"Creating missing subscription row for user {user_id}",
                extra={"user_id": user_id, "customer_id": customer_id},
            )
            session.add(
                SubscriptionEntity(
                    user_id=user_id,
                    **values,
                )
            )
            await session.flush()
            return True
