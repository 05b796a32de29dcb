"""Link store: the persistent identifier to URL mapping.

The store exposes three data operations, each run in its own short
transaction on a pooled connection::

    find_by_url(url)                 SELECT ... WHERE url_hash = sha256(:url)
    find_by_id(id)                   SELECT ... WHERE id = :id
    insert_if_absent(id, url, org)   INSERT ... ON CONFLICT DO NOTHING RETURNING id
                                     └─ conflict? re-read by id, then by url_hash

``insert_if_absent`` carries no conflict target, so both the primary key on
``id`` and the unique constraint on ``url_hash`` turn a competing insert into a
reported conflict instead of an exception or a second row.

Failure handling
================
::
    attempt ──► asyncio.timeout(STORE_TIMEOUT_SECONDS)
       │             │
       │      TimeoutError / SQLAlchemyError / OSError
       │             │
       └──── retry ◄─┘ (up to STORE_RETRY_ATTEMPTS in total)
                     │
                     ▼
              StoreUnavailable

Cancellation is never retried: it propagates and the open transaction is
rolled back by ``session.begin()``.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from prometheus_client import Counter
from sqlalchemy import select, text
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tshort.errors import StoreUnavailable
from tshort.identifier import url_fingerprint
from tshort.models import Link

__all__ = ["InsertOutcome", "LinkStore"]

T = TypeVar("T")

_DIALECT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}

STORE_OPERATIONS_TOTAL = Counter(
    "tshort_store_operations_total",
    "Link store operations",
    ["operation"],
)
STORE_FAILURES_TOTAL = Counter(
    "tshort_store_failures_total",
    "Link store attempts that failed or timed out",
    ["operation"],
)


@dataclass(frozen=True)
class InsertOutcome:
    """Result of :meth:`LinkStore.insert_if_absent`.

    ``existing`` is the row that won the conflict and is only set when
    ``inserted`` is false.
    """

    inserted: bool
    existing: Link | None = None


class LinkStore:
    """Async link store backed by a SQLAlchemy session factory.

    Args:
        session_factory: Pooled ``async_sessionmaker``; one session is opened
            per operation.
        timeout: Upper bound in seconds for a single attempt.
        attempts: Total attempts per operation, including the first.
        logger: Logger or request-scoped adapter.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout: float = 5.0,
        attempts: int = 2,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        self._session_factory = session_factory
        self._timeout = timeout
        self._attempts = max(attempts, 1)
        self._logger = logger or logging.getLogger("tshort.store")

    async def find_by_url(self, url: str) -> Link | None:
        async def _find(session: AsyncSession) -> Link | None:
            link = await self._select_one(session, Link.url_hash == url_fingerprint(url))
            return link if link is not None and link.url == url else None

        return await self._run("find_by_url", _find)

    async def find_by_id(self, link_id: str) -> Link | None:
        return await self._run("find_by_id", lambda session: self._select_one(session, Link.id == link_id))

    async def insert_if_absent(self, link_id: str, url: str, origin: str | None) -> InsertOutcome:
        """Insert a link unless its id or url is already taken.

        Returns:
            InsertOutcome: ``inserted=True`` when this call created the row,
            otherwise the conflicting row in ``existing``.

        Raises:
            StoreUnavailable: On repeated failure, or if a conflict is
                reported but no conflicting row can be read back.
        """
        url_hash = url_fingerprint(url)

        async def _insert(session: AsyncSession) -> InsertOutcome:
            stmt = self._insert_statement(
                session, {"id": link_id, "url": url, "url_hash": url_hash, "origin": origin}
            )
            created = (await session.execute(stmt)).scalar_one_or_none()
            if created is not None:
                return InsertOutcome(inserted=True)

            existing = await self._select_one(session, Link.id == link_id)
            if existing is None:
                existing = await self._select_one(session, Link.url_hash == url_hash)
            if existing is None:
                raise StoreUnavailable(f"Insert of '{link_id}' conflicted but no conflicting row is visible")
            return InsertOutcome(inserted=False, existing=existing)

        return await self._run("insert_if_absent", _insert)

    async def ping(self) -> None:
        """Round-trip to the database; raises StoreUnavailable when unreachable."""
        await self._run("ping", lambda session: session.execute(text("SELECT 1")))

    # ========================================================================
    # PRIVATE HELPERS
    # ========================================================================

    async def _run(self, operation: str, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
        STORE_OPERATIONS_TOTAL.labels(operation=operation).inc()
        last_error: BaseException | None = None

        for attempt in range(1, self._attempts + 1):
            try:
                async with asyncio.timeout(self._timeout):
                    async with self._session_factory() as session:
                        async with session.begin():
                            return await work(session)
            except (TimeoutError, SQLAlchemyError, OSError) as exc:
                last_error = exc
                STORE_FAILURES_TOTAL.labels(operation=operation).inc()
                self._logger.warning(
                    f"Store {operation} attempt {attempt}/{self._attempts} failed: {exc!r}"
                )

        self._logger.error(f"Store {operation} gave up after {self._attempts} attempts")
        raise StoreUnavailable(f"Link store {operation} failed: {last_error!r}") from last_error

    @staticmethod
    async def _select_one(session: AsyncSession, condition: Any) -> Link | None:
        result = await session.execute(select(Link).where(condition))
        return result.scalar_one_or_none()

    @staticmethod
    def _insert_statement(session: AsyncSession, values: dict[str, Any]):
        dialect = session.get_bind().dialect.name
        try:
            insert = _DIALECT_INSERTS[dialect]
        except KeyError:
            raise StoreUnavailable(f"Unsupported database dialect: {dialect}") from None
        return insert(Link).values(**values).on_conflict_do_nothing().returning(Link.id)
