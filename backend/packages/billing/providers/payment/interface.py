"""
Interface for payment providers.

Abstracts payment processing away from the Stripe SDK. Implementations
translate SDK failures into the application's exception taxonomy:
NotFoundError for unknown references, ProviderUnavailable for everything
else, InvalidSignature for webhook verification failures.
"""

from abc import ABC, abstractmethod
from typing import Optional

from packages.billing.models.domain.checkout import (
    CheckoutSession,
    CheckoutSessionSnapshot,
)
from packages.billing.models.domain.subscription import SubscriptionSnapshot
from packages.billing.models.domain.stripe_webhooks import StripeWebhookPayload


class PaymentProviderInterface(ABC):
    """Abstract interface for payment providers."""

    @abstractmethod
    async def create_customer(
        self,
        user_id: int,
        email: str,
        name: Optional[str] = None,
    ) -> str:
        """
        Create a customer in the payment provider.

        Returns:
            customer_id: Payment provider customer ID
        """
        pass

    @abstractmethod
    async def create_checkout_session(
        self,
        customer_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
        user_id: Optional[int] = None,
    ) -> CheckoutSession:
        """
        Create a hosted checkout session for a subscription to price_id.

        Args:
            customer_id: Existing payment provider customer
            price_id: Price to subscribe to
            success_url: URL to redirect on success
            cancel_url: URL to redirect on cancel
            user_id: Internal user id, stored as metadata
        """
        pass

    @abstractmethod
    async def cancel_subscription(self, subscription_id: str) -> None:
        """Cancel a subscription immediately."""
        pass

    @abstractmethod
    async def retrieve_checkout_session(
        self, session_id: str
    ) -> CheckoutSessionSnapshot:
        """Retrieve a checkout session with its subscription expanded."""
        pass

    @abstractmethod
    async def retrieve_subscription(self, subscription_id: str) -> SubscriptionSnapshot:
        """Retrieve the current state of a subscription."""
        pass

    @abstractmethod
    async def create_customer_portal_session(
        self,
        customer_id: str,
        return_url: str,
    ) -> str:
        """
        Create a customer portal session for managing subscription.

        Returns:
            portal_url: URL to customer portal
        """
        pass

    @abstractmethod
    def construct_event(self, payload: bytes, signature: str) -> StripeWebhookPayload:
        """Verify a webhook delivery and parse it into an event."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the payment backend is available and healthy."""
        pass
