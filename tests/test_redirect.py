"""Redirect endpoint behavior tests."""

import pytest
from httpx import AsyncClient

from tshort.config import get_settings


@pytest.mark.asyncio
async def test_redirect_valid_id(client: AsyncClient) -> None:
    create_resp = await client.post("/", data={"url": "https://www.google.com"})
    link_id = create_resp.json()["URL"].rsplit("/", 1)[1]

    response = await client.get(f"/{link_id}", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "https://www.google.com"


@pytest.mark.asyncio
async def test_redirect_unknown_id(client: AsyncClient) -> None:
    response = await client.get("/nonexistent", follow_redirects=False)
    assert response.status_code == 404
    assert response.json() == {"detail": "Short URL not found"}


@pytest.mark.asyncio
async def test_redirect_served_from_cache(client: AsyncClient, cache) -> None:
    cache.data["link:cached1"] = "http://cached.example"

    response = await client.get("/cached1", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "http://cached.example"


@pytest.mark.asyncio
async def test_redirect_preserves_query_in_target(client: AsyncClient) -> None:
    target = "http://example.com/search?q=a+b&page=2"
    created = (await client.post("/api/shorten", json={"url": target})).json()

    response = await client.get(f"/{created['id']}", follow_redirects=False)
    assert response.headers["location"] == target


@pytest.mark.asyncio
async def test_permanent_redirect_when_configured(client: AsyncClient, monkeypatch) -> None:
    monkeypatch.setattr(get_settings(), "REDIRECT_STATUS_CODE", 308)
    created = (await client.post("/api/shorten", json={"url": "http://example.com"})).json()

    response = await client.get(f"/{created['id']}", follow_redirects=False)
    assert response.status_code == 308
