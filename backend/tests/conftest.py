# Shared pytest configuration and fixtures for all test types
import os

# Settings are read at import time, so configure them before importing the app
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("STRIPE_PRICE_ID_FREE", "price_free")
os.environ.setdefault("STRIPE_PRICE_ID_PRO", "price_pro")
os.environ.setdefault("STRIPE_PRICE_ID_BUSINESS", "price_business")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-0123456789abcdefghij")

import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from slowapi import Limiter  # noqa: E402
from slowapi.util import get_remote_address  # noqa: E402
from unittest.mock import patch  # noqa: E402
from datetime import datetime, timezone, timedelta  # noqa: E402

# Create test limiter with no limits and in-memory storage
test_limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],
    storage_uri="memory://",
)

# Patch the limiter before importing the app so decorators use test limiter
with patch("common.providers.rate_limiter.limiter.limiter", test_limiter):
    from api.main import app

from common.db.session import get_db  # noqa: E402
from common.db.base import Base  # noqa: E402
from packages.users.models.database.user import UserEntity  # noqa: E402
from packages.projects.models.database.project import ProjectEntity  # noqa: E402
from packages.billing.models.database import (  # noqa: E402, F401
    PlanEntity,
    SubscriptionEntity,
    UsageEventEntity,
)
from packages.billing.models.domain.enums import SubscriptionStatus  # noqa: E402
from packages.billing.services.plans_service import PlansService  # noqa: E402
from packages.auth.dependencies import get_current_active_user  # noqa: E402
from packages.auth.models.domain.authenticated_user import (  # noqa: E402
    AuthenticatedUser,
)

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_CUSTOMER_ID = "cus_test123"
FREE_PRICE_ID = "price_free"
PRO_PRICE_ID = "price_pro"
BUSINESS_PRICE_ID = "price_business"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine and initialize schema."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_connection(test_engine):
    """Create test connection with outer transaction for rollback isolation."""
    async with test_engine.connect() as connection:
        trans = await connection.begin()
        yield connection
        await trans.rollback()


@pytest_asyncio.fixture(scope="function")
async def test_session_factory(test_connection):
    """Create session factory bound to test connection.

    Using join_transaction_mode="create_savepoint" so nested transaction()
    calls create savepoints instead of real nested transactions.
    """
    return async_sessionmaker(
        bind=test_connection,
        class_=AsyncSession,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )


@pytest_asyncio.fixture(scope="function")
async def test_db(test_session_factory):
    """Create a test database session."""
    async with test_session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function", autouse=True)
async def patch_lazy_sessions(test_session_factory, monkeypatch):
    """
    Patch session factories to use test database.

    This allows real transaction() and get_session() to run with proper
    commit/rollback/ContextVar semantics while using the test database.
    """
    monkeypatch.setattr("common.db.scoped.AsyncSessionLocal", test_session_factory)
    monkeypatch.setattr(
        "common.db.scoped.AsyncSessionLocalReadonly", test_session_factory
    )


@pytest_asyncio.fixture(scope="function")
async def seeded_plans(patch_lazy_sessions):
    """Seed the Free/Pro/Business catalog. Returns plans keyed by name."""
    plans = await PlansService().seed_default_plans()
    return {plan.name: plan for plan in plans}


@pytest_asyncio.fixture(scope="function")
async def sample_user(test_db: AsyncSession):
    """A user with a provisioned Stripe customer."""
    user = UserEntity(
        email="test@example.com",
        full_name="Test User",
        auth_subject="auth|test-user",
        stripe_customer_id=TEST_CUSTOMER_ID,
    )
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user


@pytest_asyncio.fixture(scope="function")
async def other_user(test_db: AsyncSession):
    """A second, unrelated user for isolation checks."""
    user = UserEntity(
        email="other@example.com",
        full_name="Other User",
        auth_subject="auth|other-user",
        stripe_customer_id="cus_other456",
    )
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user


@pytest_asyncio.fixture(scope="function")
async def unprovisioned_user(test_db: AsyncSession):
    """A user whose Stripe customer was never created."""
    user = UserEntity(
        email="new@example.com",
        full_name="New User",
        auth_subject="auth|new-user",
    )
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user


@pytest_asyncio.fixture(scope="function")
async def free_subscription(test_db: AsyncSession, sample_user, seeded_plans):
    """FREE subscription on the Free plan, period started yesterday."""
    free = seeded_plans["Free"]
    subscription = SubscriptionEntity(
        user_id=sample_user.id,
        status=SubscriptionStatus.FREE.value,
        stripe_subscription_id=None,
        plan_id=free.id,
        stripe_price_id=free.stripe_price_id,
        period_start=datetime.now(timezone.utc) - timedelta(days=1),
    )
    test_db.add(subscription)
    await test_db.commit()
    await test_db.refresh(subscription)
    return subscription


@pytest_asyncio.fixture(scope="function")
async def active_subscription(test_db: AsyncSession, sample_user, seeded_plans):
    """ACTIVE Pro subscription backed by Stripe subscription sub_old."""
    pro = seeded_plans["Pro"]
    subscription = SubscriptionEntity(
        user_id=sample_user.id,
        status=SubscriptionStatus.ACTIVE.value,
        stripe_subscription_id="sub_old",
        plan_id=pro.id,
        stripe_price_id=pro.stripe_price_id,
        period_start=datetime.now(timezone.utc) - timedelta(days=1),
    )
    test_db.add(subscription)
    await test_db.commit()
    await test_db.refresh(subscription)
    return subscription


@pytest_asyncio.fixture(scope="function")
async def sample_project(test_db: AsyncSession, sample_user):
    """A project owned by sample_user."""
    project = ProjectEntity(
        user_id=sample_user.id,
        name="Test Project",
        description="Project for usage tests",
    )
    test_db.add(project)
    await test_db.commit()
    await test_db.refresh(project)
    return project


@pytest_asyncio.fixture(scope="function")
async def other_project(test_db: AsyncSession, other_user):
    """A project owned by other_user."""
    project = ProjectEntity(user_id=other_user.id, name="Other Project")
    test_db.add(project)
    await test_db.commit()
    await test_db.refresh(project)
    return project


@pytest_asyncio.fixture(scope="function")
async def test_user(sample_user):
    """Create a test authenticated user."""
    return AuthenticatedUser(user_id=sample_user.id, email=sample_user.email)


@pytest_asyncio.fixture(scope="function")
async def client(test_db: AsyncSession, test_user):
    """Create a test client."""

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    def override_get_current_active_user():
        return test_user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_active_user] = override_get_current_active_user

    try:
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def anonymous_client(test_db: AsyncSession):
    """Test client without an authenticated user override."""

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
