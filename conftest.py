import os
from typing import AsyncGenerator, Optional

# Test environment must be in place before any app module reads settings
TEST_JWT_SECRET = "test-jwt-secret-with-enough-length-for-hs256"
TEST_WEBHOOK_SECRET = "whsec_test_secret"

os.environ.update(
    {
        "ENVIRONMENT": "test",
        "LOG_LEVEL": "WARNING",
        "SITE_URL": "http://localhost:3000",
        "DATABASE_URL": "sqlite+aiosqlite://",
        "SUPABASE_URL": "https://bakery-test.supabase.co",
        "SUPABASE_ANON_KEY": "test-anon-key",
        "SUPABASE_SERVICE_ROLE_KEY": "test-service-role-key",
        "SUPABASE_JWT_SECRET": TEST_JWT_SECRET,
        "STRIPE_PUBLISHABLE_KEY": "pk_test_bakery",
        "STRIPE_SECRET_KEY": "sk_test_bakery",
        "STRIPE_WEBHOOK_SECRET": TEST_WEBHOOK_SECRET,
        "RATE_LIMIT_ENABLED": "false",
    }
)

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.errors import Unauthorized
from libs.db.base import Base
from libs.db.session import get_async_db
from services.bakery_service import models as _bakery_models  # noqa: F401
from services.bakery_service.app.main import app
from services.bakery_service.storage import get_image_storage
from services.bakery_service.stripe_client import get_stripe_client
from tests.factories import ProfileFactory
from tests.stubs import FakeImageStorage, FakeStripeClient

get_settings.cache_clear()
settings = get_settings()


@pytest_asyncio.fixture
async def test_engine():
    """
    Fresh in-memory SQLite database per test.

    StaticPool keeps the single connection alive so every session sees the
    same database; foreign keys are switched on so ON DELETE rules apply.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session


class AuthState:
    """The user the test client acts as; ``None`` means anonymous."""

    def __init__(self):
        self.user: Optional[AuthUser] = None

    def login(self, profile) -> AuthUser:
        self.user = AuthUser(user_id=profile.id, email=profile.email)
        return self.user

    def logout(self) -> None:
        self.user = None


@pytest.fixture
def auth() -> AuthState:
    return AuthState()


@pytest.fixture
def stripe_client() -> FakeStripeClient:
    return FakeStripeClient()


@pytest.fixture
def image_storage() -> FakeImageStorage:
    return FakeImageStorage()


@pytest_asyncio.fixture
async def client(
    db_session, auth, stripe_client, image_storage
) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient with the app and overridden dependencies.
    """

    async def _current_user() -> AuthUser:
        if auth.user is None:
            raise Unauthorized()
        return auth.user

    app.dependency_overrides[get_async_db] = lambda: db_session
    app.dependency_overrides[get_current_user] = _current_user
    app.dependency_overrides[get_stripe_client] = lambda: stripe_client
    app.dependency_overrides[get_image_storage] = lambda: image_storage

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def customer(db_session):
    profile = ProfileFactory.create(name="Casey Customer", phone="+1 555 0100")
    db_session.add(profile)
    await db_session.commit()
    return profile


@pytest_asyncio.fixture
async def admin(db_session):
    profile = ProfileFactory.create(name="Ari Admin", role="admin")
    db_session.add(profile)
    await db_session.commit()
    return profile
