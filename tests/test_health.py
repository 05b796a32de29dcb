"""Health, metrics and failure-mapping tests."""

from unittest.mock import MagicMock

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from tshort.database import get_session_factory
from tshort.enums import HealthStatus
from tshort.main import app


@pytest.fixture
def broken_factory() -> MagicMock:
    return MagicMock(side_effect=OperationalError("SELECT 1", {}, ConnectionRefusedError("refused")))


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == HealthStatus.HEALTHY.value
    assert data["database"] == HealthStatus.HEALTHY.value
    assert data["cache"] == HealthStatus.HEALTHY.value


@pytest.mark.asyncio
async def test_health_check_database_down(client: AsyncClient, broken_factory: MagicMock) -> None:
    app.dependency_overrides[get_session_factory] = lambda: broken_factory

    response = await client.get("/health")
    data = response.json()
    assert data["status"] == HealthStatus.UNHEALTHY.value
    assert data["database"] == HealthStatus.UNHEALTHY.value


@pytest.mark.asyncio
async def test_store_outage_is_service_unavailable(client: AsyncClient, broken_factory: MagicMock) -> None:
    app.dependency_overrides[get_session_factory] = lambda: broken_factory

    submit = await client.post("/", data={"url": "http://example.com"})
    assert submit.status_code == 503
    assert submit.json() == {"detail": "Link store unavailable"}

    lookup = await client.get("/abcdef", follow_redirects=False)
    assert lookup.status_code == 503

    # the app keeps serving after failures
    assert (await client.get("/")).status_code == 200


@pytest.mark.asyncio
async def test_metrics_exposed(client: AsyncClient) -> None:
    await client.post("/", data={"url": "http://example.com"})
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "tshort_assign_requests_total" in response.text
