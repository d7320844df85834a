import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from packages.billing.models.domain.checkout import CheckoutSession


@pytest.fixture
def mock_payment_provider():
    """Create a mocked payment provider (Stripe)."""
    provider = AsyncMock()
    provider.create_customer = AsyncMock(return_value="cus_created")
    provider.create_checkout_session = AsyncMock(
        return_value=CheckoutSession(
            id="cs_test_123", url="https://checkout.stripe.com/c/pay/cs_test_123"
        )
    )
    provider.create_customer_portal_session = AsyncMock(
        return_value="https://billing.stripe.com/p/session/test_123"
    )
    provider.cancel_subscription = AsyncMock(return_value=None)
    provider.retrieve_checkout_session = AsyncMock()
    provider.retrieve_subscription = AsyncMock()
    # Webhook verification is synchronous
    provider.construct_event = MagicMock()
    return provider


@pytest.fixture
def patch_payment_provider(mock_payment_provider):
    """Route every SubscriptionService built inside the test to the mock provider."""
    with patch(
        "packages.billing.services.subscription_service.get_payment_provider",
        return_value=mock_payment_provider,
    ):
        yield mock_payment_provider


@pytest.fixture
def mock_span():
    """Create a mock span instance for testing telemetry."""
    span = MagicMock()
    span.__enter__ = MagicMock(return_value=span)
    span.__exit__ = MagicMock(return_value=None)
    span.__aenter__ = AsyncMock(return_value=span)
    span.__aexit__ = AsyncMock(return_value=None)
    return span


@pytest.fixture
def mock_start_span(mock_span):
    """Create a mock start_span function that returns mock_span."""
    with patch(
        "common.core.otel_axiom_exporter.axiom_tracer.start_as_current_span",
        return_value=mock_span,
    ) as mock:
        yield mock
