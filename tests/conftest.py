"""Global test configuration and fixtures for the Merse credits API."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from merse.database.models import Base
from merse.modules.billing.credits.usage import UsageRecorder
from merse.modules.rate_limit.tiered import TieredRateLimiter
from merse.utils.settings.database import DatabaseSettings
from tests.factories import (
    ApiKeyFactory,
    CreditUsageFactory,
    SiteProjectFactory,
    UserCreditProfileFactory,
)
from tests.utils.fakes import FakeCounterBackend, FakeOrionClient

ADMIN_KEY = "test-admin-key"


@pytest.fixture
def profile_factory():
    return UserCreditProfileFactory


@pytest.fixture
def usage_factory():
    return CreditUsageFactory


@pytest.fixture
def project_factory():
    return SiteProjectFactory


@pytest.fixture
def api_key_factory():
    return ApiKeyFactory


@pytest.fixture(autouse=True)
def test_environment(tmp_path, monkeypatch):
    """Point every test at its own SQLite file and keep external backends off."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'merse_test.db'}")
    monkeypatch.setenv("USAGE_RECORDER_BACKGROUND", "false")
    monkeypatch.setenv("MERSE_ADMIN_KEY", ADMIN_KEY)
    monkeypatch.setenv("ENVIRONMENT", "TEST")
    for name in ("REDIS_URL", "UPSTASH_REDIS_REST_URL", "UPSTASH_REDIS_REST_TOKEN"):
        monkeypatch.delenv(name, raising=False)


@pytest_asyncio.fixture
async def async_engine(test_environment) -> AsyncGenerator[AsyncEngine, None]:
    """Create the schema in the per-test database."""
    engine = create_async_engine(DatabaseSettings().DATABASE_URL_ASYNC)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=async_engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def recorder(session_factory) -> UsageRecorder:
    return UsageRecorder(session_factory)


@pytest.fixture
def counter_backend() -> FakeCounterBackend:
    return FakeCounterBackend()


@pytest.fixture
def orion_client() -> FakeOrionClient:
    return FakeOrionClient()


@pytest_asyncio.fixture
async def app(
    async_engine, counter_backend, orion_client
) -> AsyncGenerator[FastAPI, None]:
    """Create FastAPI application with lifespan manager for testing."""
    from merse.main import app

    async with LifespanManager(app):
        app.state.tiered_rate_limiter = TieredRateLimiter(counter_backend)
        app.state.orion_client = orion_client
        yield app


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {ADMIN_KEY}"}


@pytest_asyncio.fixture
async def api_key(client, admin_headers) -> dict:
    """Issue a basic-tier key for `user-1` through the admin endpoint."""
    response = await client.post(
        "/v1/keys",
        json={"user_id": "user-1", "name": "Test key", "rate_limit_tier": "basic"},
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.fixture
def api_headers(api_key) -> dict[str, str]:
    return {"Authorization": f"Bearer {api_key['key']}"}
