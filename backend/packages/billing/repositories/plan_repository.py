"""
Repository for the plan catalog.
"""

from typing import Optional, List
from sqlalchemy import select, update

from common.repositories.base import BaseRepository
from common.core.otel_axiom_exporter import trace_span
from packages.billing.models.database.plan import PlanEntity
from packages.billing.models.domain.plans import Plan


class PlanRepository(BaseRepository[PlanEntity, Plan]):
    def __init__(self, db_session=None):
        super().__init__(PlanEntity, Plan, db_session)

    @trace_span
    async def get_all(self) -> List[Plan]:
        """Catalog ordered by price."""
        async with self._get_session() as session:
            result = await session.execute(
                select(PlanEntity).order_by(PlanEntity.price_cents, PlanEntity.id)
            )
            return self._entities_to_domain(result.scalars().all())

    @trace_span
    async def get_by_name(self, name: str) -> Optional[Plan]:
        async with self._get_session() as session:
            result = await session.execute(
                select(PlanEntity).where(PlanEntity.name == name)
            )
            entity = result.scalar_one_or_none()
            return self._entity_to_domain(entity) if entity else None

    @trace_span
    async def get_by_stripe_price_id(self, price_id: str) -> Optional[Plan]:
        async with self._get_session() as session:
            result = await session.execute(
                select(PlanEntity).where(PlanEntity.stripe_price_id == price_id)
            )
            entity = result.scalar_one_or_none()
            return self._entity_to_domain(entity) if entity else None

    @trace_span
    async def set_stripe_price_id_if_missing(self, plan_id: int, price_id: str) -> bool:
        async with self._get_session() as session:
            result = await session.execute(
                update(PlanEntity)
                .where(PlanEntity.id == plan_id, PlanEntity.stripe_price_id.is_(None))
                .values(stripe_price_id=price_id)
            )
            return result.rowcount > 0
