"""
Billing API routes.

Protected endpoints for subscription management.
"""

from fastapi import APIRouter, Depends

from packages.auth.dependencies import get_current_active_user
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.billing.services.subscription_service import SubscriptionService
from packages.billing.models.schemas.billing import (
    CheckoutRequest,
    CheckoutResponse,
    ConfirmSessionResponse,
    PortalResponse,
    UserBillingResponse,
)

router = APIRouter()


def get_subscription_service() -> SubscriptionService:
    return SubscriptionService()


@router.get("/subscription", response_model=UserBillingResponse)
async def get_subscription(
    current_user: AuthenticatedUser = Depends(get_current_active_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
):
    """Current subscription and plan of the caller."""
    billing = await subscription_service.get_user_billing(current_user.user_id)
    return UserBillingResponse.from_billing(billing)


@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout_session(
    request: CheckoutRequest,
    current_user: AuthenticatedUser = Depends(get_current_active_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
):
    """
    Switch plan.

    A paid price returns a Stripe checkout session to redirect to. The free
    price downgrades immediately and returns the new billing state.
    """
    if subscription_service.plans_service.is_free_price(request.price_id):
        billing = await subscription_service.cancel_or_downgrade_to_free(
            current_user.user_id
        )
        return CheckoutResponse(user=UserBillingResponse.from_billing(billing))

    session = await subscription_service.initiate_checkout(
        current_user.user_id, request.price_id
    )
    return CheckoutResponse(session_id=session.id, url=session.url)


@router.post("/cancel", response_model=UserBillingResponse)
async def cancel_subscription(
    current_user: AuthenticatedUser = Depends(get_current_active_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
):
    """Cancel the paid subscription and return to the free plan."""
    billing = await subscription_service.cancel_or_downgrade_to_free(
        current_user.user_id
    )
    return UserBillingResponse.from_billing(billing)


@router.get("/checkout/{session_id}", response_model=ConfirmSessionResponse)
async def confirm_checkout_session(
    session_id: str,
    current_user: AuthenticatedUser = Depends(get_current_active_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
):
    """
    Confirm a checkout session after Stripe redirects back.

    success=false means payment has not settled yet; poll again.
    """
    result = await subscription_service.confirm_session(
        current_user.user_id, session_id
    )
    return ConfirmSessionResponse(
        success=result.success,
        user=UserBillingResponse.from_billing(result.user) if result.user else None,
    )


@router.post("/portal", response_model=PortalResponse)
async def create_portal_session(
    current_user: AuthenticatedUser = Depends(get_current_active_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
):
    """Stripe customer portal for payment methods and invoices."""
    url = await subscription_service.create_portal_session(current_user.user_id)
    return PortalResponse(url=url)
