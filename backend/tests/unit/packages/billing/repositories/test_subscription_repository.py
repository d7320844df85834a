import pytest
from datetime import datetime, timezone
from sqlalchemy.exc import IntegrityError

from common.core.exceptions import NotFoundError
from packages.billing.models.database.subscription import SubscriptionEntity
from packages.billing.models.domain.enums import SubscriptionStatus
from packages.billing.models.domain.subscription import SubscriptionSnapshot
from packages.billing.repositories.subscription_repository import SubscriptionRepository

PERIOD_START = datetime(2026, 9, 1, tzinfo=timezone.utc)


def _snapshot(**overrides) -> SubscriptionSnapshot:
    data = dict(
        subscription_id="sub_repo",
        customer_id="cus_test123",
        status=SubscriptionStatus.ACTIVE,
        price_id="price_pro",
        period_start=PERIOD_START,
    )
    data.update(overrides)
    return SubscriptionSnapshot(**data)


class TestSubscriptionRepository:
    @pytest.fixture
    async def repository(self):
        return SubscriptionRepository()

    async def test_get_by_user_id(self, repository, sample_user, free_subscription):
        subscription = await repository.get_by_user_id(sample_user.id)

        assert subscription.id == free_subscription.id
        assert subscription.is_free
        assert subscription.has_paid_subscription() is False

    async def test_get_by_user_id_missing(self, repository, sample_user):
        assert await repository.get_by_user_id(sample_user.id) is None

    async def test_apply_snapshot_updates_row(
        self, repository, sample_user, free_subscription, seeded_plans
    ):
        changed = await repository.apply_snapshot_by_customer(
            "cus_test123", _snapshot(), seeded_plans["Pro"].id
        )

        assert changed is True
        subscription = await repository.get_by_user_id(sample_user.id)
        assert subscription.status == SubscriptionStatus.ACTIVE
        assert subscription.stripe_subscription_id == "sub_repo"
        assert subscription.stripe_price_id == "price_pro"
        assert subscription.plan_id == seeded_plans["Pro"].id
        assert subscription.period_start.replace(tzinfo=None) == PERIOD_START.replace(
            tzinfo=None
        )

    async def test_apply_same_snapshot_twice(
        self, repository, sample_user, free_subscription, seeded_plans
    ):
        plan_id = seeded_plans["Pro"].id
        assert await repository.apply_snapshot_by_customer(
            "cus_test123", _snapshot(), plan_id
        )
        assert not await repository.apply_snapshot_by_customer(
            "cus_test123", _snapshot(), plan_id
        )

    async def test_apply_creates_missing_row(
        self, repository, sample_user, seeded_plans
    ):
        changed = await repository.apply_snapshot_by_customer(
            "cus_test123", _snapshot(), seeded_plans["Pro"].id
        )

        assert changed is True
        subscription = await repository.get_by_user_id(sample_user.id)
        assert subscription.stripe_subscription_id == "sub_repo"

    async def test_apply_unknown_customer(self, repository, seeded_plans):
        with pytest.raises(NotFoundError):
            await repository.apply_snapshot_by_customer(
                "cus_missing", _snapshot(), seeded_plans["Pro"].id
            )

    async def test_set_free(
        self, repository, sample_user, active_subscription, seeded_plans
    ):
        free = seeded_plans["Free"]
        subscription = await repository.set_free(
            sample_user.id,
            plan_id=free.id,
            price_id=free.stripe_price_id,
            period_start=PERIOD_START,
        )

        assert subscription.status == SubscriptionStatus.FREE
        assert subscription.stripe_subscription_id is None
        assert subscription.plan_id == free.id

    async def test_free_with_stripe_id_violates_constraint(
        self, test_db, sample_user, seeded_plans
    ):
        test_db.add(
            SubscriptionEntity(
                user_id=sample_user.id,
                status=SubscriptionStatus.FREE.value,
                stripe_subscription_id="sub_inconsistent",
                plan_id=seeded_plans["Free"].id,
                period_start=PERIOD_START,
            )
        )
        with pytest.raises(IntegrityError):
            await test_db.commit()
