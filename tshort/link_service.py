"""Link service layer: identifier assignment and redirect resolution.

Architecture Overview
=====================
::
    ┌──────────────────────────────────────────────────────────┐
    │                      LinkService                         │
    │  ┌──────────────────────┐     ┌───────────────────────┐  │
    │  │ assign(url, origin)  │     │ resolve(id)           │  │
    │  │ • dedup by url       │     │ • Redis read-through  │  │
    │  │ • digest prefixes    │     │ • store lookup        │  │
    │  │ • atomic insert      │     │ • LinkNotFound        │  │
    │  └──────────┬───────────┘     └───────────┬───────────┘  │
    └─────────────┼─────────────────────────────┼──────────────┘
                  ▼                             ▼
         ┌─────────────────┐           ┌─────────────────┐
         │   LinkStore     │           │     Redis       │
         │ (PostgreSQL)    │           │ (cache, opt.)   │
         └─────────────────┘           └─────────────────┘

Assignment Flow
---------------
::
    ┌─────────────┐
    │ find_by_url │── found ──► return its id
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ candidate = │
    │ digest[:L]  │◄──────────────────┐
    └──────┬──────┘                   │
           ▼                          │
    ┌─────────────┐  held by other    │
    │ find_by_id  │── url ──► L += 1 ─┤
    └──────┬──────┘                   │
      free │   held by same url ──► return candidate
           ▼                          │
    ┌─────────────┐  conflict, other  │
    │ insert_if_  │── url ──► L += 1 ─┘
    │ absent      │
    └──────┬──────┘
           ├── inserted ──► return candidate
           └── conflict, same url ──► return winner's id

    L > MAX_ID_LENGTH ──► CollisionExhausted

Resolution Flow
---------------
::
    GET link:{id} ── hit ──► url
         │ miss
         ▼
    find_by_id ── none ──► LinkNotFound
         │
         ▼
    SETEX link:{id} ──► url

Usage Examples
==============
```python
service = LinkService(LinkStore(session_factory), cache=redis_client)
link_id = await service.assign("http://example.com", "203.0.113.7")
assert await service.resolve(link_id) == "http://example.com"
```
"""

import logging
import time

import redis.asyncio as redis
from prometheus_client import Counter, Histogram
from redis.exceptions import RedisError

from tshort.enums import AssignOutcome, CacheStatus
from tshort.errors import CollisionExhausted, EmptyURL, LinkNotFound, ShortenerError
from tshort.identifier import candidate_ids, url_fingerprint
from tshort.models import Link
from tshort.store import LinkStore

__all__ = ["LinkService"]

DEFAULT_CACHE_TTL_SECONDS = 3600
CACHE_KEY_PREFIX = "link"


# ============================================================================
# PROMETHEUS METRICS
# ============================================================================

ASSIGN_REQUESTS_TOTAL = Counter(
    "tshort_assign_requests_total",
    "Identifier assignment requests by outcome",
    ["outcome"],
)
ASSIGN_COLLISIONS_TOTAL = Counter(
    "tshort_assign_collisions_total",
    "Candidate identifiers already held by a different URL",
)
ASSIGN_DURATION = Histogram(
    "tshort_assign_duration_seconds",
    "Time taken to assign an identifier",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)
RESOLVE_REQUESTS_TOTAL = Counter(
    "tshort_resolve_requests_total",
    "Identifier resolution requests",
    ["found", "cache"],
)


# ============================================================================
# CORE SERVICE CLASS
# ============================================================================

class LinkService:
    """Assigns identifiers to URLs and resolves identifiers back to URLs.

    Args:
        store: Link store used for every read and write.
        cache: Optional Redis client for resolved links; ``None`` disables caching.
        min_length: Length of the first candidate identifier (``HASH_LEN``).
        cache_ttl: Seconds a resolved link stays in Redis.
        logger: Logger or request-scoped adapter.
    """

    def __init__(
        self,
        store: LinkStore,
        cache: redis.Redis | None = None,
        min_length: int = 6,
        cache_ttl: int = DEFAULT_CACHE_TTL_SECONDS,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        self._store = store
        self._cache = cache
        self._min_length = min_length
        self._cache_ttl = cache_ttl
        self._logger = logger or logging.getLogger("tshort.links")

    @classmethod
    def from_context(cls, ctx: "RequestContext") -> "LinkService":
        """Build a service from the per-request context."""
        settings = ctx.settings
        store = LinkStore(
            ctx.session_factory,
            timeout=settings.STORE_TIMEOUT_SECONDS,
            attempts=settings.STORE_RETRY_ATTEMPTS,
            logger=ctx.logger,
        )
        return cls(
            store,
            cache=ctx.cache,
            min_length=settings.HASH_LEN,
            cache_ttl=settings.LINK_CACHE_TTL_SECONDS,
            logger=ctx.logger,
        )

    @property
    def store(self) -> LinkStore:
        return self._store

    # ========================================================================
    # PUBLIC API METHODS
    # ========================================================================

    async def assign(self, url: str, origin: str | None) -> str:
        """Return the identifier for ``url``, creating its link if needed.

        Repeated calls with the same URL return the same identifier and never
        create a second record, including when the calls race each other.

        Args:
            url: Non-empty, scheme-normalized URL.
            origin: Submitter address, stored as-is.

        Returns:
            str: The shortest free prefix of the URL's digest at insert time,
            or the identifier already recorded for the URL.

        Raises:
            EmptyURL: If ``url`` is empty.
            CollisionExhausted: If every prefix is held by another URL.
            StoreUnavailable: If the store keeps failing.
        """
        start_time = time.perf_counter()
        try:
            link_id, outcome = await self._assign(url, origin)
        except ShortenerError:
            ASSIGN_REQUESTS_TOTAL.labels(outcome=AssignOutcome.ERROR).inc()
            raise
        finally:
            ASSIGN_DURATION.observe(time.perf_counter() - start_time)

        ASSIGN_REQUESTS_TOTAL.labels(outcome=outcome).inc()
        return link_id

    async def resolve(self, link_id: str) -> str:
        """Return the URL stored for ``link_id``.

        Raises:
            LinkNotFound: If no link has this identifier.
            StoreUnavailable: If the store keeps failing.
        """
        cached_url = await self._cache_get(link_id)
        if cached_url is not None:
            RESOLVE_REQUESTS_TOTAL.labels(found="true", cache=CacheStatus.HIT).inc()
            return cached_url

        link = await self._store.find_by_id(link_id)
        if link is None:
            RESOLVE_REQUESTS_TOTAL.labels(found="false", cache=CacheStatus.MISS).inc()
            self._logger.info(f"No link for id: {link_id}")
            raise LinkNotFound(link_id)

        RESOLVE_REQUESTS_TOTAL.labels(found="true", cache=CacheStatus.MISS).inc()
        await self._cache_set(link.id, link.url)
        return link.url

    async def get_link(self, link_id: str) -> Link:
        link = await self._store.find_by_id(link_id)
        if link is None:
            raise LinkNotFound(link_id)
        return link

    # ========================================================================
    # PRIVATE HELPER METHODS
    # ========================================================================

    async def _assign(self, url: str, origin: str | None) -> tuple[str, AssignOutcome]:
        if not url:
            raise EmptyURL()

        known = await self._store.find_by_url(url)
        if known is not None:
            self._logger.debug(f"URL already linked as {known.id}")
            return known.id, AssignOutcome.EXISTING

        for candidate in candidate_ids(url, self._min_length):
            holder = await self._store.find_by_id(candidate)
            if holder is None:
                outcome = await self._store.insert_if_absent(candidate, url, origin)
                if outcome.inserted:
                    self._logger.info(f"Created link {candidate} -> {url}")
                    await self._cache_set(candidate, url)
                    return candidate, AssignOutcome.CREATED
                holder = outcome.existing

            if holder.url == url:
                # Lost a race against a submission of the same URL
                return holder.id, AssignOutcome.EXISTING

            ASSIGN_COLLISIONS_TOTAL.inc()
            self._logger.debug(f"Candidate {candidate} held by another URL, extending")

        fingerprint = url_fingerprint(url)
        self._logger.error(f"Identifier space exhausted for URL sha256={fingerprint}")
        raise CollisionExhausted(fingerprint)

    async def _cache_get(self, link_id: str) -> str | None:
        if self._cache is None:
            return None
        try:
            return await self._cache.get(f"{CACHE_KEY_PREFIX}:{link_id}")
        except RedisError as exc:
            self._logger.warning(f"Cache read failed for {link_id}: {exc}")
            return None

    async def _cache_set(self, link_id: str, url: str) -> None:
        if self._cache is None:
            return
        try:
            await self._cache.setex(f"{CACHE_KEY_PREFIX}:{link_id}", self._cache_ttl, url)
        except RedisError as exc:
            self._logger.warning(f"Cache write failed for {link_id}: {exc}")
