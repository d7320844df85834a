"""
Service for the usage ledger: recording events and rolling them up.

Aggregates are pure reads over the append-only ledger, scoped to every
project the user owns. A user with no projects or no events gets zeros and
empty collections.
"""

from typing import Iterator, Optional
from datetime import datetime

from common.core.constants import SUPPORTED_USAGE_WINDOWS
from common.core.exceptions import InvalidOperation, NotFoundError
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.db.context import readonly
from common.utils.time import utcnow, window_start
from packages.billing.repositories.usage_repository import UsageEventRepository
from packages.billing.repositories.subscription_repository import SubscriptionRepository
from packages.billing.repositories.plan_repository import PlanRepository
from packages.billing.models.domain.usage import (
    DailyUsage,
    UsageEvent,
    UsageEventCreateModel,
    UsageEventWithProject,
    UsageSummary,
)
from packages.billing.models.domain.enums import UsageType
from packages.projects.repositories.project_repository import ProjectRepository

logger = get_logger(__name__)


class UsageService:
    """Service for usage event tracking and aggregation."""

    def __init__(self):
        self.usage_repo = UsageEventRepository()
        self.project_repo = ProjectRepository()
        self.subscription_repo = SubscriptionRepository()
        self.plan_repo = PlanRepository()

    @trace_span
    async def record_usage(
        self,
        user_id: int,
        project_id: int,
        credits: int,
        usage_type: UsageType,
        event_metadata: Optional[dict] = None,
    ) -> UsageEvent:
        """Append a usage event to a project the user owns."""
        if credits < 0:
            raise InvalidOperation(
                f"Negative credits {credits}", detail="Credits must be non-negative"
            )

        project = await self.project_repo.get_for_user(project_id, user_id)
        if not project:
            raise NotFoundError(
                f"Project {project_id} not found for user {user_id}",
                detail="Project not found",
            )

        event = await self.usage_repo.create(
            UsageEventCreateModel(
                project_id=project_id,
                credits=credits,
                type=usage_type,
                event_metadata=event_metadata or {},
            )
        )

        logger.info(
            f"Recorded usage event {event.id} ({credits} credits)",
            extra={
                "event_id": event.id,
                "user_id": user_id,
                "project_id": project_id,
                "type": usage_type.value,
                "credits": credits,
            },
        )
        return event

    @trace_span
    async def total_credits_used(
        self, user_id: int, since: Optional[datetime] = None
    ) -> int:
        """Credits consumed across the user's projects at or after since."""
        return await self.usage_repo.get_total_credits(user_id, since)

    @trace_span
    async def daily_series(
        self, user_id: int, window_days: int, now: Optional[datetime] = None
    ) -> Iterator[DailyUsage]:
        """
        Per-day credits over the trailing window, oldest day first.

        The window is whole UTC days: today plus the window_days - 1 days
        before it. Days without usage are left out, so dates need not be
        contiguous. The per-day totals are fetched in one query before
        returning; only the DailyUsage items are built lazily.
        """
        if window_days not in SUPPORTED_USAGE_WINDOWS:
            raise InvalidOperation(
                f"Unsupported usage window {window_days}",
                detail=f"Window must be one of {list(SUPPORTED_USAGE_WINDOWS)} days",
            )

        since = window_start(window_days, now or utcnow())
        rows = await self.usage_repo.get_daily_totals(user_id, since)
        return (DailyUsage(date=day, credits=credits) for day, credits in rows)

    @trace_span
    async def by_type(self, user_id: int) -> dict[UsageType, int]:
        """All-time credits per usage type. Types never used are absent."""
        return await self.usage_repo.get_credits_by_type(user_id)

    @trace_span
    async def list_events(
        self, user_id: int, limit: int = 100
    ) -> list[UsageEventWithProject]:
        """Most recent usage events across the user's projects."""
        return await self.usage_repo.get_recent_for_user(user_id, limit=limit)

    @readonly
    @trace_span
    async def usage_summary(self, user_id: int) -> UsageSummary:
        """
        Dashboard rollup.

        Remaining credits count only usage since the subscription period
        start and may go negative when the user is over quota.
        """
        subscription = await self.subscription_repo.get_by_user_id(user_id)
        if not subscription:
            raise NotFoundError(
                f"No subscription for user {user_id}", detail="Subscription not found"
            )

        plan = (
            await self.plan_repo.get(subscription.plan_id)
            if subscription.plan_id
            else None
        )
        allotment = plan.credits if plan else 0
        credits_used = await self.total_credits_used(user_id, subscription.period_start)

        now = utcnow()
        return UsageSummary(
            plan_name=plan.name if plan else None,
            status=subscription.status,
            period_start=subscription.period_start,
            credit_allotment=allotment,
            credits_used=credits_used,
            remaining_credits=allotment - credits_used,
            total_credits_used=await self.total_credits_used(user_id),
            last_7_days=list(await self.daily_series(user_id, 7, now=now)),
            last_30_days=list(await self.daily_series(user_id, 30, now=now)),
            by_type=await self.by_type(user_id),
        )
