"""
Markdown Blog API

Thin FastAPI backend storing blog posts as Markdown plus pre-rendered,
sanitized HTML.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from blog_api.config import get_settings
from blog_api.db import check_database_connectivity, dispose_engine, init_db
from blog_api.middleware import (
    RateLimitMiddleware,
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
    request_id_var,
)
from blog_api.routers import posts

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

SERVICE_NAME = "markdown-blog-api"
VERSION = "0.1.0"

# Error kind reported for each HTTP status raised by the routers
_ERROR_KINDS = {
    400: "validation",
    404: "not_found",
    429: "rate_limited",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: create tables on startup, release the pool on shutdown."""
    await init_db()
    yield
    await dispose_engine()


app = FastAPI(
    title="Markdown Blog API",
    description="Posts written in Markdown, served with pre-rendered sanitized HTML",
    version=VERSION,
    lifespan=lifespan,
)

# Middleware added last runs first: request ID is the outermost layer
app.add_middleware(RateLimitMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
)
app.add_middleware(RequestIDMiddleware)

# Routers
app.include_router(posts.router, prefix="/api")


def _error_body(message: str, kind: str, details: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "error": message, "kind": kind}
    if details is not None:
        body["details"] = details
    return body


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Body validation failures, reported before any content processing runs."""
    details = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        msg = err.get("msg", "invalid value")
        details.append(f"{loc}: {msg}" if loc else msg)
    return JSONResponse(
        status_code=400,
        content=_error_body("Validation failed", "validation", details),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    rid = request_id_var.get() or "n/a"
    if exc.status_code >= 500:
        logger.error("[%s] HTTP %s – %s", rid, exc.status_code, exc.detail)
        kind = "storage"
    else:
        logger.warning("[%s] HTTP %s – %s", rid, exc.status_code, exc.detail)
        kind = _ERROR_KINDS.get(exc.status_code, "http_error")

    message = str(exc.detail)
    # Starlette's own 404 for unmatched paths
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = "Route not found"

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(message, kind),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    rid = request_id_var.get() or "n/a"
    logger.error("[%s] Unhandled exception: %s", rid, exc, exc_info=True)
    details = repr(exc) if get_settings().debug else None
    return JSONResponse(
        status_code=500,
        content=_error_body("Internal server error", "internal", details),
    )


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check verifying the database is reachable."""
    db_status = "ok" if await check_database_connectivity() else "fail"
    checks = {"database": db_status}
    failed = [k for k, v in checks.items() if v != "ok"]

    if failed:
        overall = "degraded"
        logger.warning("Health check degraded — failed: %s", ", ".join(failed))
    else:
        overall = "ok"

    result: dict[str, Any] = {
        "status": overall,
        "service": SERVICE_NAME,
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
    }
    return JSONResponse(content=result, status_code=200 if not failed else 503)
