from fastapi import APIRouter, Depends

from common.core.exceptions import NotFoundError
from packages.auth.dependencies import get_current_active_user
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.billing.models.schemas.billing import PlanResponse, SubscriptionResponse
from packages.billing.services.subscription_service import SubscriptionService
from packages.users.models.schemas.user import UserResponse

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: AuthenticatedUser = Depends(get_current_active_user),
):
    """Current user profile with subscription, when one is provisioned."""
    subscription_service = SubscriptionService()
    user = await subscription_service.user_service.require_user(current_user.user_id)

    subscription = None
    try:
        billing = await subscription_service.get_user_billing(user.id)
        subscription = SubscriptionResponse(
            status=billing.subscription.status,
            stripe_subscription_id=billing.subscription.stripe_subscription_id,
            period_start=billing.subscription.period_start,
            plan=PlanResponse.from_plan(billing.plan) if billing.plan else None,
        )
    except NotFoundError:
        pass

    return UserResponse(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        created_at=user.created_at,
        subscription=subscription,
    )
