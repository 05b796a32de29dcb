"""FastAPI route definitions for the t-short HTTP surface.

API Endpoint Overview
=====================
::
    GET  /health
        └─ HealthResponse (200)

    POST /api/shorten
        ├─ ShortenRequest (JSON body)
        └─ LinkResponse (200) or 400/500/503

    GET  /api/links/:id
        └─ LinkInfo (200) or 404

    GET  /
        └─ index.html submission form

    POST /
        ├─ form fields: url, method
        └─ response.html (method=web) or {"URL": ...}

    GET  /:id
        └─ 307 Redirect or 404

Request Flow Diagram
====================
::
    ┌─────────────┐      ┌─────────────┐      ┌─────────────┐
    │ HTTP        │ ───► │ Normalize   │ ───► │ LinkService │
    │ Request     │      │ url / path  │      │ assign or   │
    └─────────────┘      └─────────────┘      │ resolve     │
                                              └──────┬──────┘
                                                     ▼
                         ┌─────────────┐      ┌─────────────┐
                         │ HTML, JSON  │ ◄─── │ id / url or │
                         │ or redirect │      │ Shortener-  │
                         └─────────────┘      │ Error       │
                                              └─────────────┘

Key Behaviours
===============
- Errors raised by the service propagate as ``ShortenerError`` and are turned
  into status codes by the handler installed in ``tshort.main``.
- Fixed paths are registered before ``/{link_id}`` and take precedence.
- Redirects preserve the HTTP method (307 by default, 308 if configured).
"""

from pathlib import Path

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from redis.exceptions import RedisError

from tshort.dependencies import RequestContext, get_link_service, get_request_context
from tshort.enums import HealthStatus, SubmitMethod
from tshort.errors import StoreUnavailable
from tshort.link_service import LinkService
from tshort.schemas import HealthResponse, LinkInfo, LinkResponse, ShortenRequest, ShortLinkResponse
from tshort.url_builder import build_short_url, normalize_url

__all__ = ["router"]

router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

INDEX_TITLE = "t-short: the link un-longerer"


def _public_base_url(request: Request, ctx: RequestContext) -> str:
    return ctx.settings.BASE_URL or str(request.base_url)


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check(
    ctx: RequestContext = Depends(get_request_context),
    service: LinkService = Depends(get_link_service),
) -> HealthResponse:
    db_status = HealthStatus.HEALTHY
    cache_status = HealthStatus.DISABLED

    try:
        await service.store.ping()
    except StoreUnavailable as e:
        ctx.logger.error(f"Database health check failed: {e}")
        db_status = HealthStatus.UNHEALTHY

    if ctx.cache is not None:
        try:
            await ctx.cache.ping()
            cache_status = HealthStatus.HEALTHY
        except RedisError as e:
            ctx.logger.error(f"Cache health check failed: {e}")
            cache_status = HealthStatus.UNHEALTHY

    status = (
        HealthStatus.HEALTHY
        if db_status is HealthStatus.HEALTHY and cache_status is not HealthStatus.UNHEALTHY
        else HealthStatus.UNHEALTHY
    )
    return HealthResponse(status=status, database=db_status, cache=cache_status)


@router.post("/api/shorten", response_model=LinkResponse, tags=["links"])
async def shorten_json(
    payload: ShortenRequest,
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
    service: LinkService = Depends(get_link_service),
) -> LinkResponse:
    ctx.add_tag("api_endpoint")
    url = normalize_url(payload.url)
    link_id = await service.assign(url, ctx.client_ip)
    return LinkResponse(
        id=link_id,
        url=url,
        short_url=build_short_url(_public_base_url(request, ctx), link_id),
    )


@router.get("/api/links/{link_id}", response_model=LinkInfo, tags=["links"])
async def link_info(
    link_id: str,
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
    service: LinkService = Depends(get_link_service),
) -> LinkInfo:
    link = await service.get_link(link_id)
    return LinkInfo(
        id=link.id,
        url=link.url,
        short_url=build_short_url(_public_base_url(request, ctx), link.id),
        created_at=link.created_at,
    )


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index(request: Request):
    return templates.TemplateResponse(request, "index.html", {"title": INDEX_TITLE})


@router.post("/", tags=["links"])
async def submit_link(
    request: Request,
    url: str = Form(""),
    method: str = Form(""),
    ctx: RequestContext = Depends(get_request_context),
    service: LinkService = Depends(get_link_service),
):
    """Shorten a URL submitted by the HTML form or by an API caller."""
    normalized = normalize_url(url)
    ctx.add_tag("submission")

    link_id = await service.assign(normalized, ctx.client_ip)
    short_url = build_short_url(_public_base_url(request, ctx), link_id)
    ctx.logger.info(f"Shortened {normalized} -> {short_url} in {ctx.get_duration():.1f}ms")

    if method == SubmitMethod.WEB:
        return templates.TemplateResponse(
            request,
            "response.html",
            {"title": short_url, "short_url": short_url, "url": normalized},
        )
    return ShortLinkResponse(URL=short_url)


@router.get("/{link_id}", tags=["redirect"])
async def redirect_to_url(
    link_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: LinkService = Depends(get_link_service),
) -> RedirectResponse:
    ctx.add_tag("redirect")
    url = await service.resolve(link_id)
    ctx.logger.debug(f"Redirect {link_id} -> {url}")
    return RedirectResponse(url=url, status_code=ctx.settings.REDIRECT_STATUS_CODE)
