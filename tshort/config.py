"""Configuration management for the t-short link service.

This module provides centralized configuration management using Pydantic BaseSettings
with environment variable support and caching for performance.

Flow Diagram — get_settings()
=============================
::
    ┌─────────────┐
    │  Call get_  │
    │  settings() │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Check cache  │
    │ (lru_cache)  │
    └──────┬──────┘
    HIT?  │
    ┌─────┴─────┐
    │ NO         │ YES
    ▼            ▼
┌─────────┐  ┌─────────┐
│ Merge   │  │ Return  │
│ sources │  │ cached  │
│ & build │  │ value   │
└─────────┘  └─────────┘

Sources (highest priority first)
================================
1. Keyword arguments passed to ``Settings(...)`` (tests).
2. Environment variables.
3. ``.env`` in the working directory.
4. ``config.json`` in the working directory.
5. Secret files.

How to Use
===========
**Step 1 — Import**::
    from tshort.config import get_settings

**Step 2 — Read values**::
    settings = get_settings()
    hash_len = settings.HASH_LEN

Key Behaviours
===============
- Settings are cached after first access.
- ``HASH_LEN`` is the minimum identifier length and must fit inside the
  43-character encoded digest.
- ``REDIRECT_STATUS_CODE`` only accepts method-preserving redirects (307/308).

Classes:
    Settings:  Pydantic model for all configuration values.
"""

__all__ = ["Settings", "get_settings"]

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from tshort.identifier import MAX_ID_LENGTH


class Settings(BaseSettings):
    APP_NAME: str = "t-short"
    APP_ENV: str = "development"

    # Public prefix for generated links; derived from the request when unset
    BASE_URL: str | None = None

    LISTEN_HOST: str = "0.0.0.0"
    LISTEN_PORT: int = 8080

    # PostgreSQL
    DATABASE_URL: str = "postgresql+asyncpg://tshort:tshort@db:5432/tshort"
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10

    # Redis read-through cache for resolved links
    REDIS_URL: str = "redis://redis:6379/0"
    LINK_CACHE_ENABLED: bool = True
    LINK_CACHE_TTL_SECONDS: int = 3600

    # Identifier generation
    HASH_LEN: int = Field(default=6, ge=1, le=MAX_ID_LENGTH)

    # Store call bounds
    STORE_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0)
    STORE_RETRY_ATTEMPTS: int = Field(default=2, ge=1)

    REDIRECT_STATUS_CODE: int = 307

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        json_file="config.json",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("REDIRECT_STATUS_CODE")
    @classmethod
    def validate_redirect_status(cls, v: int) -> int:
        if v not in (307, 308):
            raise ValueError("Redirect status must be 307 or 308 to preserve the request method")
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
