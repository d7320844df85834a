"""Service for the plan catalog."""

from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from common.core.config import settings
from common.core.exceptions import NotFoundError
from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.billing.models.domain.plans import Plan, PlanCreateModel, PlanDefinition
from packages.billing.repositories.plan_repository import PlanRepository

logger = get_logger(__name__)

FREE_PLAN_NAME = "Free"

DEFAULT_PLANS = [
    PlanDefinition(
        name=FREE_PLAN_NAME,
        price_cents=0,
        credits=10,
        description="Try it out",
        stripe_price_setting="stripe_price_id_free",
    ),
    PlanDefinition(
        name="Pro",
        price_cents=2000,
        credits=100,
        description="For individual builders",
        stripe_price_setting="stripe_price_id_pro",
    ),
    PlanDefinition(
        name="Business",
        price_cents=5000,
        credits=500,
        description="For teams",
        stripe_price_setting="stripe_price_id_business",
    ),
]

PLAN_DESCRIPTIONS = {plan.name: plan.description for plan in DEFAULT_PLANS}


def configured_price_id(definition: PlanDefinition) -> Optional[str]:
    return getattr(settings, definition.stripe_price_setting) or None


class PlansService:
    """Service for plan lookup and startup seeding."""

    def __init__(self):
        self.plan_repo = PlanRepository()

    @property
    def free_price_id(self) -> Optional[str]:
        return settings.stripe_price_id_free or None

    def is_free_price(self, price_id: str) -> bool:
        return self.free_price_id is not None and price_id == self.free_price_id

    @trace_span
    async def seed_default_plans(self) -> List[Plan]:
        """
        Insert catalog plans that do not exist yet, matched by name.

        Existing rows keep their price and credits; they only gain a Stripe
        price id when they have none. Safe to run on every startup.
        """
        for definition in DEFAULT_PLANS:
            price_id = configured_price_id(definition)
            existing = await self.plan_repo.get_by_name(definition.name)

            if existing is None:
                try:
                    await self.plan_repo.create(
                        PlanCreateModel(
                            name=definition.name,
                            price_cents=definition.price_cents,
                            credits=definition.credits,
                            stripe_price_id=price_id,
                        )
                    )
                    logger.info(
                        f"Seeded plan {definition.name}",
                        extra={"plan": definition.name, "price_id": price_id},
                    )
                except IntegrityError:
                    # Another instance seeded it concurrently
                    logger.info(f"Plan {definition.name} already seeded")
            elif existing.stripe_price_id is None and price_id:
                await self.plan_repo.set_stripe_price_id_if_missing(
                    existing.id, price_id
                )

        return await self.plan_repo.get_all()

    @trace_span
    async def list_plans(self) -> List[Plan]:
        return await self.plan_repo.get_all()

    @trace_span
    async def get_plan(self, plan_id: int) -> Optional[Plan]:
        return await self.plan_repo.get(plan_id)

    @trace_span
    async def get_by_price_id(self, price_id: Optional[str]) -> Optional[Plan]:
        if not price_id:
            return None
        return await self.plan_repo.get_by_stripe_price_id(price_id)

    @trace_span
    async def free_plan(self) -> Plan:
        plan = await self.plan_repo.get_by_name(FREE_PLAN_NAME)
        if plan is None:
            raise NotFoundError("Free plan is not seeded", detail="Plan not found")
        return plan
