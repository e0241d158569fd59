"""Middleware — request IDs, security headers, rate limiting."""

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from blog_api.config import get_settings

logger = logging.getLogger(__name__)

# Context var accessible from anywhere during a request lifecycle
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# In-memory rate limiter: {ip: [timestamps]}
_rate_limits: dict[str, list[float]] = {}
_rate_limit_call_count = 0
# Every N checks, forget IPs that have gone quiet
RATE_LIMIT_SWEEP_INTERVAL = 1000

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a unique request ID to every request/response cycle.

    Reads ``X-Request-ID`` from the incoming request headers; if absent,
    generates a new UUID4.  The ID is stored in a context variable so that
    logging and error handlers can include it, and is echoed back on the
    response as ``X-Request-ID``.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request_id_var.set(rid)

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add standard security headers to every response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # JSON-only API: nothing here should ever load or run in a page
        response.headers["Content-Security-Policy"] = (
            "default-src 'none'; frame-ancestors 'none'"
        )
        return response


def _sweep_rate_limits(cutoff: float) -> None:
    """Drop IPs with no request inside the current window."""
    idle = [ip for ip, stamps in _rate_limits.items() if not stamps or stamps[-1] <= cutoff]
    for ip in idle:
        del _rate_limits[ip]


def check_rate_limit(ip: str) -> bool:
    """Return True if request is allowed, False if rate limited."""
    global _rate_limit_call_count
    settings = get_settings()
    now = time.time()
    cutoff = now - settings.rate_limit_window

    _rate_limit_call_count += 1
    if _rate_limit_call_count % RATE_LIMIT_SWEEP_INTERVAL == 0:
        _sweep_rate_limits(cutoff)

    recent = [ts for ts in _rate_limits.get(ip, ()) if ts > cutoff]
    if len(recent) >= settings.rate_limit_max:
        _rate_limits[ip] = recent
        return False
    recent.append(now)
    _rate_limits[ip] = recent
    return True


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window request limit per client IP."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        client_ip = request.client.host if request.client else "unknown"
        if not check_rate_limit(client_ip):
            logger.warning("Rate limit exceeded for %s", client_ip)
            return JSONResponse(
                status_code=429,
                content={
                    "success": False,
                    "error": RATE_LIMIT_MESSAGE,
                    "kind": "rate_limited",
                },
            )
        return await call_next(request)
