"""
Unit tests for StripePaymentProvider.

Stripe SDK calls are patched; no network access.
"""

import hashlib
import hmac
import json
import time
import pytest
import stripe
from unittest.mock import AsyncMock, patch

from common.core.exceptions import InvalidSignature, NotFoundError, ProviderUnavailable
from packages.billing.models.domain.enums import SubscriptionStatus
from packages.billing.providers.payment.stripe_payment import StripePaymentProvider

WEBHOOK_SECRET = "whsec_test_secret"


def sign(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int = None) -> str:
    timestamp = timestamp or int(time.time())
    signature = hmac.new(
        secret.encode("utf-8"),
        f"{timestamp}.{payload}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={timestamp},v1={signature}"


def stripe_subscription(status="active", price_id="price_pro", **extra):
    data = {
        "id": "sub_123",
        "object": "subscription",
        "customer": "cus_test123",
        "status": status,
        "items": {
            "data": [
                {"price": {"id": price_id}, "current_period_start": 1790000000}
            ]
        },
    }
    data.update(extra)
    return data


@pytest.fixture
def provider():
    return StripePaymentProvider()


class TestErrorMapping:
    async def test_resource_missing_maps_to_not_found(self, provider):
        error = stripe.InvalidRequestError(
            "No such subscription: 'sub_gone'", param="id", code="resource_missing"
        )
        with patch("stripe.Subscription.cancel_async", AsyncMock(side_effect=error)):
            with pytest.raises(NotFoundError):
                await provider.cancel_subscription("sub_gone")

    async def test_connection_error_maps_to_unavailable(self, provider):
        error = stripe.APIConnectionError("Network unreachable")
        with patch("stripe.Customer.create_async", AsyncMock(side_effect=error)):
            with pytest.raises(ProviderUnavailable):
                await provider.create_customer(user_id=1, email="a@example.com")

    async def test_other_invalid_request_maps_to_unavailable(self, provider):
        error = stripe.InvalidRequestError("Invalid price", param="price")
        with patch(
            "stripe.checkout.Session.create_async", AsyncMock(side_effect=error)
        ):
            with pytest.raises(ProviderUnavailable):
                await provider.create_checkout_session(
                    customer_id="cus_test123",
                    price_id="price_bad",
                    success_url="http://localhost:3000/?session_id={CHECKOUT_SESSION_ID}",
                    cancel_url="http://localhost:3000/",
                )


class TestStripeCalls:
    async def test_create_customer(self, provider):
        customer = stripe.Customer.construct_from({"id": "cus_new"}, "sk_test")
        create = AsyncMock(return_value=customer)
        with patch("stripe.Customer.create_async", create):
            customer_id = await provider.create_customer(
                user_id=7, email="new@example.com", name="New"
            )

        assert customer_id == "cus_new"
        assert create.call_args.kwargs["metadata"] == {"user_id": "7"}

    async def test_create_checkout_session(self, provider):
        session = stripe.checkout.Session.construct_from(
            {"id": "cs_1", "url": "https://checkout.stripe.com/c/pay/cs_1"}, "sk_test"
        )
        create = AsyncMock(return_value=session)
        with patch("stripe.checkout.Session.create_async", create):
            result = await provider.create_checkout_session(
                customer_id="cus_test123",
                price_id="price_pro",
                success_url="http://localhost:3000/?session_id={CHECKOUT_SESSION_ID}",
                cancel_url="http://localhost:3000/",
                user_id=3,
            )

        assert result.id == "cs_1"
        assert result.url == "https://checkout.stripe.com/c/pay/cs_1"
        kwargs = create.call_args.kwargs
        assert kwargs["mode"] == "subscription"
        assert kwargs["line_items"] == [{"price": "price_pro", "quantity": 1}]

    async def test_retrieve_subscription_snapshot(self, provider):
        with patch(
            "stripe.Subscription.retrieve_async",
            AsyncMock(return_value=stripe_subscription(status="trialing")),
        ):
            snapshot = await provider.retrieve_subscription("sub_123")

        assert snapshot.subscription_id == "sub_123"
        assert snapshot.customer_id == "cus_test123"
        assert snapshot.status == SubscriptionStatus.ACTIVE
        assert snapshot.price_id == "price_pro"
        assert int(snapshot.period_start.timestamp()) == 1790000000

    async def test_unknown_stripe_status_is_incomplete(self, provider):
        with patch(
            "stripe.Subscription.retrieve_async",
            AsyncMock(return_value=stripe_subscription(status="something_new")),
        ):
            snapshot = await provider.retrieve_subscription("sub_123")

        assert snapshot.status == SubscriptionStatus.INCOMPLETE

    async def test_retrieve_checkout_session_expanded(self, provider):
        session = stripe.checkout.Session.construct_from(
            {
                "id": "cs_1",
                "object": "checkout.session",
                "customer": "cus_test123",
                "payment_status": "paid",
                "subscription": stripe_subscription(),
            },
            "sk_test",
        )
        with patch(
            "stripe.checkout.Session.retrieve_async", AsyncMock(return_value=session)
        ) as retrieve:
            snapshot = await provider.retrieve_checkout_session("cs_1")

        assert retrieve.call_args.kwargs["expand"] == ["subscription"]
        assert snapshot.is_settled()
        assert snapshot.subscription.subscription_id == "sub_123"

    async def test_retrieve_checkout_session_unpaid(self, provider):
        session = stripe.checkout.Session.construct_from(
            {
                "id": "cs_1",
                "object": "checkout.session",
                "customer": "cus_test123",
                "payment_status": "unpaid",
                "subscription": None,
            },
            "sk_test",
        )
        with patch(
            "stripe.checkout.Session.retrieve_async", AsyncMock(return_value=session)
        ):
            snapshot = await provider.retrieve_checkout_session("cs_1")

        assert snapshot.is_settled() is False


class TestConstructEvent:
    def _payload(self, event_type="checkout.session.completed") -> str:
        return json.dumps(
            {
                "id": "evt_1",
                "object": "event",
                "type": event_type,
                "created": int(time.time()),
                "livemode": False,
                "data": {"object": {"id": "cs_1", "customer": "cus_test123"}},
            }
        )

    def test_valid_signature(self, provider):
        payload = self._payload()
        event = provider.construct_event(payload.encode(), sign(payload))

        assert event.id == "evt_1"
        assert event.type == "checkout.session.completed"

    def test_unknown_event_type_parses(self, provider):
        payload = self._payload("customer.created")
        event = provider.construct_event(payload.encode(), sign(payload))

        assert event.type == "customer.created"

    def test_wrong_secret(self, provider):
        payload = self._payload()
        with pytest.raises(InvalidSignature):
            provider.construct_event(payload.encode(), sign(payload, "whsec_other"))

    def test_tampered_body(self, provider):
        payload = self._payload()
        header = sign(payload)
        with pytest.raises(InvalidSignature):
            provider.construct_event(payload.replace("cus_test123", "cus_evil").encode(), header)

    def test_missing_signature(self, provider):
        with pytest.raises(InvalidSignature):
            provider.construct_event(self._payload().encode(), "")

    def test_stale_timestamp(self, provider):
        payload = self._payload()
        with pytest.raises(InvalidSignature):
            provider.construct_event(
                payload.encode(), sign(payload, timestamp=int(time.time()) - 3600)
            )
