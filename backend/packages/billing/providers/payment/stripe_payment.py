"""
Stripe implementation of payment provider.
"""

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Optional

import stripe
from pydantic import ValidationError

from common.core.config import settings
from common.core.exceptions import InvalidSignature, NotFoundError, ProviderUnavailable
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.utils.time import from_unix, utcnow
from packages.billing.models.domain.checkout import (
    CheckoutSession,
    CheckoutSessionSnapshot,
)
from packages.billing.models.domain.enums import StripeSubscriptionStatus
from packages.billing.models.domain.subscription import SubscriptionSnapshot
from packages.billing.models.domain.stripe_webhooks import StripeWebhookPayload
from packages.billing.providers.payment.interface import PaymentProviderInterface

logger = get_logger(__name__)


def _field(obj: Any, key: str) -> Any:
    """Read a key from a Stripe object, None when absent."""
    if obj is None:
        return None
    try:
        return obj[key]
    except (KeyError, TypeError):
        return None


def _object_id(obj: Any) -> Optional[str]:
    """Id of a Stripe reference that may be a bare id or an expanded object."""
    if obj is None or isinstance(obj, str):
        return obj
    return _field(obj, "id")


@contextmanager
def _stripe_errors(operation: str, **context):
    """Translate Stripe SDK failures into application exceptions."""
    try:
        yield
    except stripe.InvalidRequestError as e:
        if e.code == "resource_missing":
            logger.warning(
                f"Stripe resource missing during {operation}",
                extra={**context, "error": str(e)},
            )
            raise NotFoundError(str(e)) from e
        logger.error(
            f"Stripe rejected {operation}: {str(e)}",
            extra={**context, "error": str(e)},
        )
        raise ProviderUnavailable(str(e)) from e
    except stripe.StripeError as e:
        logger.error(
            f"Stripe call failed during {operation}: {str(e)}",
            extra={**context, "error": str(e)},
        )
        raise ProviderUnavailable(str(e)) from e


class StripePaymentProvider(PaymentProviderInterface):
    """Stripe-based payment implementation."""

    def __init__(self):
        """Initialize Stripe with API credentials."""
        stripe.api_key = settings.stripe_secret_key
        self.webhook_secret = settings.stripe_webhook_secret

    @trace_span
    async def create_customer(
        self,
        user_id: int,
        email: str,
        name: Optional[str] = None,
    ) -> str:
        """Create a Stripe customer."""
        with _stripe_errors("create_customer", user_id=user_id):
            customer = await stripe.Customer.create_async(
                email=email,
                name=name,
                metadata={"user_id": str(user_id)},
            )

        logger.info(
            "Created Stripe customer",
            extra={"user_id": user_id, "customer_id": customer.id},
        )
        return customer.id

    @trace_span
    async def create_checkout_session(
        self,
        customer_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
        user_id: Optional[int] = None,
    ) -> CheckoutSession:
        """Create a subscription-mode Stripe checkout session."""
        metadata = {"user_id": str(user_id)} if user_id is not None else {}
        with _stripe_errors(
            "create_checkout_session", customer_id=customer_id, price_id=price_id
        ):
            session = await stripe.checkout.Session.create_async(
                customer=customer_id,
                payment_method_types=["card"],
                line_items=[
                    {
                        "price": price_id,
                        "quantity": 1,
                    }
                ],
                mode="subscription",
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata,
                subscription_data={"metadata": metadata},
            )

        logger.info(
            "Created Stripe checkout session",
            extra={
                "customer_id": customer_id,
                "price_id": price_id,
                "session_id": session.id,
            },
        )
        return CheckoutSession(id=session.id, url=_field(session, "url"))

    @trace_span
    async def cancel_subscription(self, subscription_id: str) -> None:
        """Cancel Stripe subscription."""
        with _stripe_errors("cancel_subscription", subscription_id=subscription_id):
            await stripe.Subscription.cancel_async(subscription_id)

        logger.info(
            "Cancelled Stripe subscription",
            extra={"subscription_id": subscription_id},
        )

    @trace_span
    async def retrieve_checkout_session(
        self, session_id: str
    ) -> CheckoutSessionSnapshot:
        """Retrieve a checkout session with the subscription expanded."""
        with _stripe_errors("retrieve_checkout_session", session_id=session_id):
            session = await stripe.checkout.Session.retrieve_async(
                session_id, expand=["subscription"]
            )

        subscription = _field(session, "subscription")
        snapshot = None
        if isinstance(subscription, str):
            snapshot = await self.retrieve_subscription(subscription)
        elif subscription is not None:
            snapshot = self._to_snapshot(subscription)

        return CheckoutSessionSnapshot(
            id=session.id,
            customer_id=_object_id(_field(session, "customer")),
            payment_status=_field(session, "payment_status") or "unpaid",
            subscription=snapshot,
        )

    @trace_span
    async def retrieve_subscription(self, subscription_id: str) -> SubscriptionSnapshot:
        """Retrieve the current state of a Stripe subscription."""
        with _stripe_errors("retrieve_subscription", subscription_id=subscription_id):
            subscription = await stripe.Subscription.retrieve_async(subscription_id)
        return self._to_snapshot(subscription)

    @trace_span
    async def create_customer_portal_session(
        self,
        customer_id: str,
        return_url: str,
    ) -> str:
        """Create Stripe customer portal session."""
        with _stripe_errors("create_customer_portal_session", customer_id=customer_id):
            session = await stripe.billing_portal.Session.create_async(
                customer=customer_id,
                return_url=return_url,
            )

        logger.info("Created Stripe portal session", extra={"customer_id": customer_id})
        return session.url

    def construct_event(self, payload: bytes, signature: str) -> StripeWebhookPayload:
        """
        Verify the Stripe-Signature header against the raw body and parse it.

        Raises InvalidSignature for a missing secret, a bad signature or an
        unparsable payload. Nothing is read from the payload before this passes.
        """
        if not self.webhook_secret or not signature:
            raise InvalidSignature("Webhook secret or signature missing")

        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Stripe signature verification failed: {e}")
            raise InvalidSignature(str(e)) from e
        except ValueError as e:
            logger.warning(f"Invalid Stripe webhook payload: {e}")
            raise InvalidSignature(str(e)) from e

        try:
            return StripeWebhookPayload.model_validate_json(payload)
        except ValidationError as e:
            logger.warning(f"Unexpected Stripe event shape: {e}")
            raise InvalidSignature(str(e)) from e

    @trace_span
    async def health_check(self) -> bool:
        """Check Stripe health."""
        try:
            # Try to retrieve account to verify API key works
            await stripe.Account.retrieve_async()
            return True
        except stripe.StripeError as e:
            logger.error(f"Payment health check failed: {e}")
            return False

    def _to_snapshot(self, subscription: Any) -> SubscriptionSnapshot:
        items = _field(_field(subscription, "items"), "data") or []
        first_item = items[0] if items else None

        return SubscriptionSnapshot(
            subscription_id=subscription["id"],
            customer_id=_object_id(_field(subscription, "customer")),
            status=StripeSubscriptionStatus.map_status(
                _field(subscription, "status") or ""
            ),
            price_id=_object_id(_field(first_item, "price")),
            period_start=self._period_start(subscription, first_item),
        )

    def _period_start(self, subscription: Any, first_item: Any) -> datetime:
        # Newer API versions carry the billing period on the subscription item
        timestamp = (
            _field(first_item, "current_period_start")
            or _field(subscription, "current_period_start")
            or _field(subscription, "start_date")
            or _field(subscription, "created")
        )
        if timestamp is None:
            return utcnow()
        return from_unix(int(timestamp))
