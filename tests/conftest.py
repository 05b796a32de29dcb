"""Shared pytest fixtures for store, service and API tests.

Tests run against a throwaway SQLite file per test; set ``TEST_DATABASE_URL``
to run the same suite against PostgreSQL.
"""

import os
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tshort.database import Base, get_session_factory
from tshort.link_service import LinkService
from tshort.main import app
from tshort.redis import get_redis
from tshort.store import LinkStore

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL")


@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    url = TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'tshort.db'}"
    engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def store(session_factory: async_sessionmaker[AsyncSession]) -> LinkStore:
    return LinkStore(session_factory, timeout=5.0, attempts=2)


@pytest.fixture
def cache() -> AsyncMock:
    """Redis mock backed by a dict, enough for GET/SETEX/PING."""
    data: dict[str, str] = {}

    async def fake_get(key: str) -> str | None:
        return data.get(key)

    async def fake_setex(key: str, ttl: int, value: str) -> bool:
        data[key] = value
        return True

    client = AsyncMock()
    client.get = AsyncMock(side_effect=fake_get)
    client.setex = AsyncMock(side_effect=fake_setex)
    client.ping = AsyncMock(return_value=True)
    client.data = data
    return client


@pytest.fixture
def link_service(store: LinkStore, cache: AsyncMock) -> LinkService:
    return LinkService(store, cache=cache, min_length=6)


@pytest_asyncio.fixture(scope="function")
async def client(
    session_factory: async_sessionmaker[AsyncSession], cache: AsyncMock
) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_redis() -> AsyncMock:
        return cache

    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_redis] = override_get_redis

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
