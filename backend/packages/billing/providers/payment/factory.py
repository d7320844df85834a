"""
Factory for getting payment provider instance.
"""

from packages.billing.providers.payment.interface import PaymentProviderInterface
from packages.billing.providers.payment.stripe_payment import StripePaymentProvider


def get_payment_provider() -> PaymentProviderInterface:
    """
    Get payment provider instance.

    Only Stripe is supported; the interface keeps services free of SDK calls.
    """
    return StripePaymentProvider()
