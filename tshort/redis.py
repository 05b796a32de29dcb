"""Redis client for the resolved-link cache.

Link records never change once written, so a resolved ``id -> url`` pair can
be cached without invalidation. The client is created lazily and shared by all
requests.

Flow Diagram — Redis Client
===========================
::
    ┌─────────────┐
    │ get_redis()  │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ cache        │── disabled ──► None
    │ enabled?     │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Create once, │
    │ then reuse   │
    └─────────────┘

Functions:
    get_redis():  FastAPI dependency for the shared Redis client.
    close_redis():  Cleanup function for shutdown.
"""

import redis.asyncio as redis

from tshort.config import get_settings

__all__ = ["close_redis", "get_redis"]

settings = get_settings()

redis_client: redis.Redis | None = None


async def get_redis() -> redis.Redis | None:
    global redis_client
    if not settings.LINK_CACHE_ENABLED:
        return None
    if redis_client is None:
        redis_client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_timeout=settings.STORE_TIMEOUT_SECONDS,
            socket_connect_timeout=settings.STORE_TIMEOUT_SECONDS,
        )
    return redis_client


async def close_redis() -> None:
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None
