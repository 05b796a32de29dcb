"""Database engine and session factory for the link store.

This module provides SQLAlchemy async engine setup and database lifecycle
operations. PostgreSQL (asyncpg) is the production backend; SQLite
(aiosqlite) works for local runs and tests.

Flow Diagram — Database Operations
=================================
::
    ┌─────────────┐
    │  Request     │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ get_session_ │
    │ factory()    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ LinkStore    │
    │ opens one    │
    │ session per  │
    │ operation    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Connection   │
    │ returned to  │
    │ pool         │
    └─────────────┘

How to Use
===========
**Step 1 — Initialize on startup**::
    await init_db()  # Creates tables

**Step 2 — Hand the factory to a store**::
    store = LinkStore(get_session_factory(), timeout=5.0)

**Step 3 — Cleanup on shutdown**::
    await close_db()

Key Behaviours
===============
- Connections come from a bounded pool; waiting for one is bounded by
  ``STORE_TIMEOUT_SECONDS``.
- No session is shared between requests.
- Tables are created automatically on application startup.

Classes:
    Base:  SQLAlchemy declarative base for all models.

Functions:
    build_engine():  Engine from settings, pool tuned per dialect.
    get_session_factory():  FastAPI dependency returning the session factory.
    init_db():  Creates all tables on startup.
    close_db():  Disposes the engine on shutdown.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from tshort.config import Settings, get_settings

__all__ = ["Base", "build_engine", "close_db", "get_session_factory", "init_db"]

settings = get_settings()


def build_engine(settings: Settings) -> AsyncEngine:
    options: dict = {"echo": settings.APP_ENV == "development", "pool_pre_ping": True}
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.STORE_TIMEOUT_SECONDS,
            connect_args={"timeout": settings.STORE_TIMEOUT_SECONDS},
        )
    return create_async_engine(settings.DATABASE_URL, **options)


engine = build_engine(settings)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_session


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
