"""
Usage API routes.

Protected endpoints for recording and reading metered usage.
"""

from fastapi import APIRouter, Depends, Query, status

from packages.auth.dependencies import get_current_active_user
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.billing.models.domain.usage import UsageEvent, UsageEventWithProject
from packages.billing.services.usage_service import UsageService
from packages.billing.models.schemas.billing import (
    DailyUsageResponse,
    RecordUsageRequest,
    UsageEventResponse,
    UsageSummaryResponse,
)

router = APIRouter()


def get_usage_service() -> UsageService:
    return UsageService()


def _event_response(event: UsageEvent) -> UsageEventResponse:
    return UsageEventResponse(
        id=event.id,
        project_id=event.project_id,
        project_name=(
            event.project_name if isinstance(event, UsageEventWithProject) else None
        ),
        credits=event.credits,
        type=event.type,
        metadata=event.event_metadata,
        created_at=event.created_at,
    )


@router.get("", response_model=UsageSummaryResponse)
async def get_usage_summary(
    current_user: AuthenticatedUser = Depends(get_current_active_user),
    usage_service: UsageService = Depends(get_usage_service),
):
    """Credits used, remaining and the 7 and 30 day series for the dashboard."""
    summary = await usage_service.usage_summary(current_user.user_id)
    return UsageSummaryResponse(
        plan_name=summary.plan_name,
        status=summary.status,
        period_start=summary.period_start,
        credit_allotment=summary.credit_allotment,
        credits_used=summary.credits_used,
        remaining_credits=summary.remaining_credits,
        total_credits_used=summary.total_credits_used,
        last_7_days=[
            DailyUsageResponse(date=day.date, credits=day.credits)
            for day in summary.last_7_days
        ],
        last_30_days=[
            DailyUsageResponse(date=day.date, credits=day.credits)
            for day in summary.last_30_days
        ],
        by_type=summary.by_type,
    )


@router.get("/events", response_model=list[UsageEventResponse])
async def list_usage_events(
    limit: int = Query(default=100, ge=1, le=500),
    current_user: AuthenticatedUser = Depends(get_current_active_user),
    usage_service: UsageService = Depends(get_usage_service),
):
    """Most recent usage events across the caller's projects."""
    events = await usage_service.list_events(current_user.user_id, limit=limit)
    return [_event_response(event) for event in events]


@router.post("", response_model=UsageEventResponse, status_code=status.HTTP_201_CREATED)
async def record_usage(
    request: RecordUsageRequest,
    current_user: AuthenticatedUser = Depends(get_current_active_user),
    usage_service: UsageService = Depends(get_usage_service),
):
    """Append a usage event to one of the caller's projects."""
    event = await usage_service.record_usage(
        user_id=current_user.user_id,
        project_id=request.project_id,
        credits=request.credits,
        usage_type=request.type,
        event_metadata=request.metadata,
    )
    return _event_response(event)
