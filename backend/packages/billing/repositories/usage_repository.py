"""
Repository for the usage ledger.

All aggregates are scoped to a user through the projects they own.
"""

from typing import Optional, List, Tuple
from datetime import date, datetime
from sqlalchemy import select, func

from common.db.functions import utc_date
from common.repositories.base import BaseRepository
from common.utils.time import as_date
from packages.billing.models.database.usage import UsageEventEntity
from packages.billing.models.domain.usage import UsageEvent, UsageEventWithProject
from packages.billing.models.domain.enums import UsageType
from packages.projects.models.database.project import ProjectEntity
from common.core.otel_axiom_exporter import trace_span


class UsageEventRepository(BaseRepository[UsageEventEntity, UsageEvent]):
    """Repository for appending and aggregating usage events."""

    def __init__(self, db_session=None):
        super().__init__(UsageEventEntity, UsageEvent, db_session)

    def _owned_by(self, query, user_id: int):
        return query.join(
            ProjectEntity, ProjectEntity.id == UsageEventEntity.project_id
        ).where(ProjectEntity.user_id == user_id)

    @trace_span
    async def get_total_credits(
        self, user_id: int, since: Optional[datetime] = None
    ) -> int:
        """Sum of credits across the user's projects, optionally from since on."""
        query = self._owned_by(
            select(func.coalesce(func.sum(UsageEventEntity.credits), 0)), user_id
        )
        if since is not None:
            query = query.where(UsageEventEntity.created_at >= since)

        async with self._get_session() as session:
            result = await session.execute(query)
            return int(result.scalar_one() or 0)

    @trace_span
    async def get_daily_totals(
        self, user_id: int, since: datetime
    ) -> List[Tuple[date, int]]:
        """Per-UTC-day credit sums from since on, ascending. Empty days are absent."""
        day = utc_date(UsageEventEntity.created_at).label("day")
        query = (
            self._owned_by(
                select(day, func.sum(UsageEventEntity.credits).label("credits")),
                user_id,
            )
            .where(UsageEventEntity.created_at >= since)
            .group_by(day)
            .order_by(day)
        )

        async with self._get_session() as session:
            result = await session.execute(query)
            return [(as_date(row.day), int(row.credits)) for row in result.all()]

    @trace_span
    async def get_credits_by_type(self, user_id: int) -> dict[UsageType, int]:
        """All-time credit sums per usage type."""
        query = self._owned_by(
            select(UsageEventEntity.type, func.sum(UsageEventEntity.credits)),
            user_id,
        ).group_by(UsageEventEntity.type)

        async with self._get_session() as session:
            result = await session.execute(query)
            return {UsageType(type_): int(total) for type_, total in result.all()}

    @trace_span
    async def get_credits_by_project_and_type(
        self, user_id: int
    ) -> List[Tuple[int, UsageType, int]]:
        """All-time credit sums per (project, usage type)."""
        query = self._owned_by(
            select(
                UsageEventEntity.project_id,
                UsageEventEntity.type,
                func.sum(UsageEventEntity.credits),
            ),
            user_id,
        ).group_by(UsageEventEntity.project_id, UsageEventEntity.type)

        async with self._get_session() as session:
            result = await session.execute(query)
            return [
                (project_id, UsageType(type_), int(total))
                for project_id, type_, total in result.all()
            ]

    @trace_span
    async def get_recent_for_user(
        self, user_id: int, limit: int = 100
    ) -> List[UsageEventWithProject]:
        """Newest events first, each with its project name."""
        query = (
            self._owned_by(select(UsageEventEntity, ProjectEntity.name), user_id)
            .order_by(UsageEventEntity.created_at.desc(), UsageEventEntity.id.desc())
            .limit(limit)
        )

        async with self._get_session() as session:
            result = await session.execute(query)
            return [
                UsageEventWithProject(
                    **self._entity_to_domain(event).model_dump(),
                    project_name=project_name,
                )
                for event, project_name in result.all()
            ]
