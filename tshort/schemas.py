"""Pydantic schemas for request/response validation.

Schema Hierarchy
=================
::
    ShortenRequest (Input, POST /api/shorten)
    └─ url: str

    ShortLinkResponse (Output, POST / for API callers)
    └─ URL: str (full short link)

    LinkResponse (Output, POST /api/shorten)
    ├─ id: str
    ├─ url: str
    └─ short_url: str

    LinkInfo (Output, GET /api/links/:id)
    ├─ LinkResponse fields
    └─ created_at: datetime

    HealthResponse (Output, GET /health)
    ├─ status, database, cache: HealthStatus

Key Behaviours
===============
- No URL validation beyond scheme normalization; see ``tshort.url_builder``.
- ``ShortLinkResponse`` keeps the upper-case ``URL`` key API callers rely on.
- The submitter's origin address is never echoed back.
"""

import datetime

from pydantic import BaseModel

from tshort.enums import HealthStatus

__all__ = [
    "HealthResponse",
    "LinkInfo",
    "LinkResponse",
    "ShortLinkResponse",
    "ShortenRequest",
]


class ShortenRequest(BaseModel):
    url: str


class ShortLinkResponse(BaseModel):
    URL: str


class LinkResponse(BaseModel):
    id: str
    url: str
    short_url: str


class LinkInfo(LinkResponse):
    created_at: datetime.datetime | None = None


class HealthResponse(BaseModel):
    status: HealthStatus
    database: HealthStatus
    cache: HealthStatus
