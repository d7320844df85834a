from typing import Optional

from packages.users.repositories.user_repository import UserRepository
from packages.users.models.domain.user import User, UserCreateModel
from common.core.exceptions import NotFoundError
from common.core.otel_axiom_exporter import trace_span, get_logger

logger = get_logger(__name__)


class UserService:
    """Service for handling user operations."""

    def __init__(self):
        self.user_repo = UserRepository()

    @trace_span
    async def create_user(self, user_data: UserCreateModel) -> User:
        """Create a new user (caller has already checked the subject is unknown)."""
        user = await self.user_repo.create(user_data)
        logger.info(
            f"Created user with ID: {user.id}",
            extra={"user_id": user.id, "auth_subject": user.auth_subject},
        )
        return user

    @trace_span
    async def get_user(self, user_id: int) -> Optional[User]:
        """Get a user by ID."""
        return await self.user_repo.get(user_id)

    @trace_span
    async def require_user(self, user_id: int) -> User:
        user = await self.user_repo.get(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found", detail="User not found")
        return user

    @trace_span
    async def get_by_auth_subject(self, auth_subject: str) -> Optional[User]:
        return await self.user_repo.get_by_auth_subject(auth_subject)

    @trace_span
    async def get_by_stripe_customer_id(self, customer_id: str) -> Optional[User]:
        return await self.user_repo.get_by_stripe_customer_id(customer_id)

    @trace_span
    async def attach_stripe_customer(self, user_id: int, customer_id: str) -> bool:
        return await self.user_repo.set_stripe_customer_id_if_missing(
            user_id, customer_id
        )
