"""
Stripe webhook handler for payment events.

Only checkout.session.completed changes state. Every other event type is
acknowledged with 200 so Stripe stops redelivering it.
"""

from fastapi import Request

from common.core.otel_axiom_exporter import get_logger
from packages.billing.services.subscription_service import SubscriptionService

logger = get_logger(__name__)

SIGNATURE_HEADER = "stripe-signature"


async def handle_stripe_webhook(request: Request) -> dict[str, bool]:
    """
    Handle incoming webhook from Stripe.

    The raw body is passed through untouched, signature verification needs
    the exact bytes Stripe signed. InvalidSignature propagates to the
    exception handler and becomes a 400.
    """
    payload_bytes = await request.body()
    sig_header = request.headers.get(SIGNATURE_HEADER)

    if not sig_header:
        logger.warning("Stripe webhook received without signature header")

    handled = await SubscriptionService().handle_provider_event(
        payload_bytes, sig_header
    )
    return {"received": True, "handled": handled}
