from typing import Optional
from sqlalchemy import select, update

from common.repositories.base import BaseRepository
from packages.users.models.database.user import UserEntity
from packages.users.models.domain.user import User
from common.core.otel_axiom_exporter import trace_span


class UserRepository(BaseRepository[UserEntity, User]):
    def __init__(self, db_session=None):
        super().__init__(UserEntity, User, db_session)

    @trace_span
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        async with self._get_session() as session:
            result = await session.execute(
                select(UserEntity).where(UserEntity.email == email)
            )
            db_user = result.scalar_one_or_none()
            return self._entity_to_domain(db_user) if db_user else None

    @trace_span
    async def get_by_auth_subject(self, auth_subject: str) -> Optional[User]:
        """Get user by identity token subject."""
        async with self._get_session() as session:
            result = await session.execute(
                select(UserEntity).where(UserEntity.auth_subject == auth_subject)
            )
            db_user = result.scalar_one_or_none()
            return self._entity_to_domain(db_user) if db_user else None

    @trace_span
    async def get_by_stripe_customer_id(self, customer_id: str) -> Optional[User]:
        async with self._get_session() as session:
            result = await session.execute(
                select(UserEntity).where(UserEntity.stripe_customer_id == customer_id)
            )
            db_user = result.scalar_one_or_none()
            return self._entity_to_domain(db_user) if db_user else None

    @trace_span
    async def set_stripe_customer_id_if_missing(
        self, user_id: int, customer_id: str
    ) -> bool:
        """
        Attach a payment customer to the user unless one is already set.

        Returns False when another request attached a customer first.
        """
        async with self._get_session() as session:
            result = await session.execute(
                update(UserEntity)
                .where(
                    UserEntity.id == user_id,
                    UserEntity.stripe_customer_id.is_(None),
                )
                .values(stripe_customer_id=customer_id)
            )
            return result.rowcount > 0
