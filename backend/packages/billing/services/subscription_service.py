"""
Service for managing subscriptions.

The only writer of the subscription record. Stripe state reaches it two
ways, the synchronous confirm_session() when the user returns from checkout
and the asynchronous checkout.session.completed webhook. Both reduce to the
same Stripe subscription snapshot and the same idempotent repository write,
so they converge whatever order they arrive in.
"""

from typing import Optional

from sqlalchemy.exc import IntegrityError

from common.core.config import settings
from common.core.exceptions import (
    InvalidOperation,
    NotFoundError,
    NotProvisioned,
)
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.db.scoped import transaction
from common.utils.time import utcnow
from packages.billing.repositories.subscription_repository import SubscriptionRepository
from packages.billing.models.domain.checkout import CheckoutSession
from packages.billing.models.domain.subscription import (
    ConfirmSessionResult,
    Subscription,
    SubscriptionCreateModel,
    SubscriptionSnapshot,
    UserBilling,
)
from packages.billing.models.domain.enums import SubscriptionStatus
from packages.billing.models.domain.stripe_webhooks import (
    StripeCheckoutSessionData,
    StripeWebhookType,
)
from packages.billing.providers.payment.factory import get_payment_provider
from packages.billing.services.plans_service import PlansService
from packages.users.models.domain.user import User
from packages.users.services.user_service import UserService

logger = get_logger(__name__)


def checkout_success_url() -> str:
    return f"{settings.client_url.rstrip('/')}/?session_id={{CHECKOUT_SESSION_ID}}"


def checkout_cancel_url() -> str:
    return f"{settings.client_url.rstrip('/')}/"


class SubscriptionService:
    """Service for subscription management and Stripe reconciliation."""

    def __init__(self):
        self.subscription_repo = SubscriptionRepository()
        self.user_service = UserService()
        self.plans_service = PlansService()
        self.payment = get_payment_provider()

    @trace_span
    async def get_subscription(self, user_id: int) -> Subscription:
        subscription = await self.subscription_repo.get_by_user_id(user_id)
        if not subscription:
            raise NotFoundError(
                f"No subscription for user {user_id}", detail="Subscription not found"
            )
        return subscription

    @trace_span
    async def get_user_billing(self, user_id: int) -> UserBilling:
        """User joined with their subscription and plan, read on one connection."""
        async with transaction():
            user = await self.user_service.require_user(user_id)
            subscription = await self.get_subscription(user_id)
            plan = (
                await self.plans_service.get_plan(subscription.plan_id)
                if subscription.plan_id
                else None
            )
        return UserBilling(
            user_id=user.id,
            email=user.email,
            full_name=user.full_name,
            stripe_customer_id=user.stripe_customer_id,
            subscription=subscription,
            plan=plan,
        )

    @trace_span
    async def is_provisioned(self, user: User) -> bool:
        """True once the user has both a Stripe customer and a subscription row."""
        if not user.stripe_customer_id:
            return False
        return await self.subscription_repo.get_by_user_id(user.id) is not None

    @trace_span
    async def provision_billing(self, user: User) -> Subscription:
        """
        Give a new user a Stripe customer and a free subscription.

        Each half is skipped when already present, so a retried signup does
        not create a second customer or subscription.
        """
        if not user.stripe_customer_id:
            customer_id = await self.payment.create_customer(
                user_id=user.id, email=user.email, name=user.full_name
            )
            attached = await self.user_service.attach_stripe_customer(
                user.id, customer_id
            )
            if not attached:
                logger.warning(
                    f"User {user.id} already had a Stripe customer, keeping the existing one",
                    extra={"user_id": user.id, "orphan_customer_id": customer_id},
                )

        existing = await self.subscription_repo.get_by_user_id(user.id)
        if existing:
            return existing

        free_plan = await self.plans_service.free_plan()
        try:
            subscription = await self.subscription_repo.create(
                SubscriptionCreateModel(
                    user_id=user.id,
                    status=SubscriptionStatus.FREE,
                    plan_id=free_plan.id,
                    stripe_price_id=free_plan.stripe_price_id,
                )
            )
        except IntegrityError:
            # A concurrent request created it first
            return await self.get_subscription(user.id)

        logger.info(
            "Created FREE subscription for new user",
            extra={"user_id": user.id, "subscription_id": subscription.id},
        )
        return subscription

    @trace_span
    async def initiate_checkout(self, user_id: int, price_id: str) -> CheckoutSession:
        """
        Start a hosted checkout for a paid price.

        An existing paid subscription is canceled first on a best-effort
        basis. The local record is not touched here; it changes only once
        payment is confirmed.
        """
        if self.plans_service.is_free_price(price_id):
            raise InvalidOperation(
                "Checkout requested for the free price",
                detail="The free plan does not go through checkout, cancel instead",
            )

        plan = await self.plans_service.get_by_price_id(price_id)
        if plan is None or plan.is_free:
            raise InvalidOperation(
                f"Unknown or free price {price_id}", detail="Unknown plan price"
            )

        user = await self.user_service.require_user(user_id)
        if not user.stripe_customer_id:
            raise NotProvisioned(f"User {user_id} has no Stripe customer")

        prior_canceled = None
        subscription = await self.subscription_repo.get_by_user_id(user_id)
        if subscription and subscription.has_paid_subscription():
            prior_canceled = await self._cancel_prior_subscription(
                user_id, subscription.stripe_subscription_id
            )

        session = await self.payment.create_checkout_session(
            customer_id=user.stripe_customer_id,
            price_id=price_id,
            success_url=checkout_success_url(),
            cancel_url=checkout_cancel_url(),
            user_id=user_id,
        )

        logger.info(
            f"Created checkout session for user {user_id}",
            extra={
                "user_id": user_id,
                "price_id": price_id,
                "session_id": session.id,
                "prior_subscription_canceled": prior_canceled,
            },
        )
        return session

    async def _cancel_prior_subscription(self, user_id: int, subscription_id: str) -> bool:
        """Attempt to cancel the subscription being replaced. Failure is logged, not raised."""
        try:
            await self.payment.cancel_subscription(subscription_id)
        except Exception as e:
            logger.error(
                f"Failed to cancel prior subscription {subscription_id} before checkout: {e}",
                extra={
                    "user_id": user_id,
                    "subscription_id": subscription_id,
                    "error": str(e),
                },
            )
            return False

        logger.info(
            f"Cancelled prior subscription {subscription_id} before checkout",
            extra={"user_id": user_id, "subscription_id": subscription_id},
        )
        return True

    @trace_span
    async def cancel_or_downgrade_to_free(self, user_id: int) -> UserBilling:
        """
        Cancel any Stripe subscription and put the user on the free plan.

        Calling it again on a free user changes nothing, including the
        period start.
        """
        subscription = await self.get_subscription(user_id)
        if subscription.is_free:
            return await self.get_user_billing(user_id)

        if subscription.has_paid_subscription():
            try:
                await self.payment.cancel_subscription(
                    subscription.stripe_subscription_id
                )
            except NotFoundError:
                logger.info(
                    f"Subscription {subscription.stripe_subscription_id} already gone at Stripe",
                    extra={
                        "user_id": user_id,
                        "subscription_id": subscription.stripe_subscription_id,
                    },
                )

        free_plan = await self.plans_service.free_plan()
        await self.subscription_repo.set_free(
            user_id,
            plan_id=free_plan.id,
            price_id=free_plan.stripe_price_id,
            period_start=utcnow(),
        )

        logger.info(
            f"Downgraded user {user_id} to FREE",
            extra={
                "user_id": user_id,
                "old_status": subscription.status.value,
                "old_subscription_id": subscription.stripe_subscription_id,
            },
        )
        return await self.get_user_billing(user_id)

    @trace_span
    async def confirm_session(self, user_id: int, session_id: str) -> ConfirmSessionResult:
        """
        Reconcile from a checkout session the user just returned from.

        Returns success=False without writing anything until Stripe reports
        the session paid with a subscription attached.
        """
        session = await self.payment.retrieve_checkout_session(session_id)
        if not session.is_settled():
            logger.info(
                f"Checkout session {session_id} not settled yet",
                extra={
                    "user_id": user_id,
                    "session_id": session_id,
                    "payment_status": session.payment_status,
                },
            )
            return ConfirmSessionResult(success=False)

        customer_id = session.customer_id or session.subscription.customer_id
        if not customer_id:
            logger.warning(
                f"Checkout session {session_id} has no customer",
                extra={"user_id": user_id, "session_id": session_id},
            )
            return ConfirmSessionResult(success=False)

        await self._apply_snapshot(customer_id, session.subscription)

        owner = await self.user_service.get_by_stripe_customer_id(customer_id)
        if owner and owner.id != user_id:
            logger.warning(
                f"Checkout session {session_id} belongs to user {owner.id}, confirmed by user {user_id}",
                extra={
                    "user_id": user_id,
                    "owner_user_id": owner.id,
                    "session_id": session_id,
                },
            )

        return ConfirmSessionResult(
            success=True, user=await self.get_user_billing(user_id)
        )

    @trace_span
    async def handle_provider_event(self, payload: bytes, signature: Optional[str]) -> bool:
        """
        Process a Stripe webhook delivery.

        The signature is verified against the raw body before anything else;
        InvalidSignature leaves all state untouched. Only completed checkout
        sessions are acted on, every other type is acknowledged and ignored. A
        completed session missing its customer or subscription raises
        InvalidOperation so Stripe redelivers it.
        Returns True when the event was applied.
        """
        event = self.payment.construct_event(payload, signature or "")

        if not event.is_type(StripeWebhookType.CHECKOUT_SESSION_COMPLETED):
            logger.info(
                f"Ignoring Stripe event type {event.type}",
                extra={"event_id": event.id, "event_type": event.type},
            )
            return False

        session = StripeCheckoutSessionData.model_validate(event.data.object)
        if not session.customer or not session.subscription:
            logger.warning(
                f"Checkout session {session.id} completed without customer or subscription",
                extra={"event_id": event.id, "session_id": session.id},
            )
            raise InvalidOperation(
                f"Checkout session {session.id} has no customer or subscription",
                detail="Checkout session has no customer or subscription",
            )

        snapshot = await self.payment.retrieve_subscription(session.subscription)
        await self._apply_snapshot(session.customer, snapshot)

        logger.info(
            f"Processed checkout.session.completed for customer {session.customer}",
            extra={
                "event_id": event.id,
                "session_id": session.id,
                "customer_id": session.customer,
                "subscription_id": snapshot.subscription_id,
            },
        )
        return True

    async def _apply_snapshot(self, customer_id: str, snapshot: SubscriptionSnapshot) -> bool:
        plan = await self.plans_service.get_by_price_id(snapshot.price_id)
        if plan is None:
            logger.warning(
                f"Stripe price {snapshot.price_id} is not in the plan catalog",
                extra={
                    "customer_id": customer_id,
                    "price_id": snapshot.price_id,
                    "subscription_id": snapshot.subscription_id,
                },
            )

        changed = await self.subscription_repo.apply_snapshot_by_customer(
            customer_id, snapshot, plan.id if plan else None
        )
        logger.info(
            f"Applied subscription snapshot for customer {customer_id}",
            extra={
                "customer_id": customer_id,
                "subscription_id": snapshot.subscription_id,
                "status": snapshot.status.value,
                "changed": changed,
            },
        )
        return changed

    @trace_span
    async def create_portal_session(self, user_id: int) -> str:
        """Create customer portal session."""
        user = await self.user_service.require_user(user_id)
        if not user.stripe_customer_id:
            raise NotProvisioned(f"User {user_id} has no Stripe customer")

        portal_url = await self.payment.create_customer_portal_session(
            customer_id=user.stripe_customer_id,
            return_url=checkout_cancel_url(),
        )

        logger.info(
            f"Created portal session for user {user_id}",
            extra={"user_id": user_id},
        )
        return portal_url
