"""Shared test fixtures for the Statbook backend."""

from collections.abc import AsyncGenerator

import fakeredis.aioredis
import pytest
from httpx import ASGITransport, AsyncClient

from app.config import Environment, Settings, get_settings
from app.dependencies import get_redis
from app.main import create_app
from gateway.stat_store import StatStore


@pytest.fixture
def test_settings() -> Settings:
    """Provide test settings with safe defaults."""
    return Settings(
        environment=Environment.TESTING,
        debug=True,
        redis_url="redis://localhost:6379/15",
        cors_origins=["http://localhost:3000"],
    )


@pytest.fixture
async def fake_redis() -> AsyncGenerator:
    """Provide a fake Redis instance for testing."""
    server = fakeredis.FakeServer()
    redis = fakeredis.aioredis.FakeRedis(server=server, decode_responses=True)
    yield redis
    await redis.aclose()


@pytest.fixture
def store(fake_redis) -> StatStore:
    return StatStore(fake_redis)


@pytest.fixture
async def app(test_settings, fake_redis):
    """Create a test application wired to fake Redis."""
    application = create_app()

    async def override_get_redis():
        yield fake_redis

    application.dependency_overrides[get_redis] = override_get_redis
    application.dependency_overrides[get_settings] = lambda: test_settings
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator:
    """Provide an async HTTP client for API testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
