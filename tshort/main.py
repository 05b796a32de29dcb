"""FastAPI application entry point for the t-short link service.

Application Lifecycle Diagram
===========================
::
    ┌─────────────┐
    │  uvicorn    │
    │  startup    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ lifespan()  │
    │ init_db()   │
    │ services    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Serve HTTP  │
    │ requests    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ lifespan()  │
    │ shutdown:   │
    │ close_db()  │
    │ close_redis()│
    └─────────────┘

How to Use
===========
**Step 1 — Run**::
    python -m tshort
    # or
    uvicorn tshort.main:app --host 0.0.0.0 --port 8080

**Step 2 — Make API calls**::
    curl -X POST http://localhost:8080/ -d url=example.com
    curl -i http://localhost:8080/<id>

Key Behaviours
===============
- Database tables are created automatically on startup.
- Every ``ShortenerError`` becomes a JSON ``{"detail": ...}`` response with the
  error's status code; a failing request never stops the server.
- Prometheus metrics are exposed at ``/metrics``.
"""

__all__ = ["app"]

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from tshort.config import get_settings
from tshort.database import close_db, init_db
from tshort.dependencies import _service_manager
from tshort.errors import ShortenerError
from tshort.redis import close_redis
from tshort.routes import router

settings = get_settings()
logger = logging.getLogger("tshort")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    await _service_manager.initialize()
    await init_db()
    yield
    # Shutdown
    await _service_manager.cleanup()
    await close_db()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    description="Deterministic, collision-safe URL shortener",
    lifespan=lifespan,
)


@app.exception_handler(ShortenerError)
async def shortener_error_handler(request: Request, exc: ShortenerError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        detail = exc.detail
    else:
        detail = str(exc)
        if exc.http_status == 400:
            logger.warning(f"{request.method} {request.url.path} rejected: {detail}")
    return JSONResponse(status_code=exc.http_status, content={"detail": detail})


Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=False,
    should_respect_env_var=False,
).instrument(app).expose(app)

app.include_router(router)
