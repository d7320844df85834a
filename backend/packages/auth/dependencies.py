from typing import Annotated, Optional
from fastapi import Depends, Header

from common.core.exceptions import Unauthorized
from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.auth.services.auth_service import AuthService

logger = get_logger(__name__)


def get_auth_service() -> AuthService:
    """Get AuthService instance."""
    return AuthService()


@trace_span
async def get_current_user(
    authorization: Annotated[Optional[str], Header()] = None,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthenticatedUser:
    """Get current authenticated user from the bearer token."""
    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthorized("Authorization header missing or invalid")

    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise Unauthorized("Empty bearer token")

    return await auth_service.authenticate_user_from_token(token)


@trace_span
async def get_current_active_user(
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """Get current active user."""
    logger.debug(f"Authenticated user_id={current_user.user_id}")
    return current_user
