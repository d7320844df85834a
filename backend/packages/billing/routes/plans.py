"""
Plans API routes.

Public endpoint for retrieving available subscription plans.
"""

from fastapi import APIRouter

from packages.billing.services.plans_service import PlansService, PLAN_DESCRIPTIONS
from packages.billing.models.schemas.billing import PlanResponse, PlansResponse

router = APIRouter()


@router.get("", response_model=PlansResponse)
async def get_plans():
    """
    Get all available subscription plans, cheapest first.

    This endpoint is public (no auth required) for pricing pages.
    """
    plans = await PlansService().list_plans()
    return PlansResponse(
        plans=[
            PlanResponse.from_plan(plan, PLAN_DESCRIPTIONS.get(plan.name))
            for plan in plans
        ]
    )
