import asyncio

from alembic import context
from sqlalchemy.ext.asyncio import create_async_engine

from common.db.base import Base
from common.db.session import ASYNC_DATABASE_URL

# Register every entity on Base.metadata for autogenerate
from packages.users.models.database.user import UserEntity  # noqa: F401
from packages.projects.models.database.project import ProjectEntity  # noqa: F401
from packages.billing.models.database import (  # noqa: F401
    PlanEntity,
    SubscriptionEntity,
    UsageEventEntity,
)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=ASYNC_DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(ASYNC_DATABASE_URL)
    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
