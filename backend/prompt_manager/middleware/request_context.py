"""Request context middleware: request id, timing, request log and rate limiting.

One middleware does all of it in a single pass. The token bucket itself is the
pure function ``check_rate_limit`` so it can be tested without HTTP.
"""

import logging
import threading
import time
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from ..core.config import settings
from ..core.logging_config import request_id_var
from ..exceptions import ErrorCode

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------------

# Stale bucket entries are swept every N calls.
_EVICT_EVERY = 100
_EVICT_AGE = 120.0  # seconds


def check_rate_limit(
    bucket: dict[str, tuple[float, float]],
    key: str,
    max_per_minute: int,
    now: Optional[float] = None,
) -> tuple[bool, float]:
    """Token bucket check for *key*.

    Args:
        bucket: ``{key: (available_tokens, last_refill)}``, modified in place.
        key: Client identifier.
        max_per_minute: Sustained rate cap; 0 or less disables limiting.
        now: Current time in seconds (injectable for testing). Defaults to ``time.monotonic()``.

    Returns:
        ``(allowed, retry_after)``; *retry_after* is 0.0 when allowed, otherwise
        the seconds until the next token is available.
    """
    if max_per_minute <= 0:
        return True, 0.0

    if now is None:
        now = time.monotonic()

    refill_rate = max_per_minute / 60.0  # tokens per second

    if key in bucket:
        tokens, last_refill = bucket[key]
        tokens = min(max_per_minute, tokens + (now - last_refill) * refill_rate)
    else:
        tokens = float(max_per_minute)

    if tokens >= 1.0:
        bucket[key] = (tokens - 1.0, now)
        return True, 0.0

    bucket[key] = (tokens, now)
    return False, (1.0 - tokens) / refill_rate


def evict_stale(bucket: dict[str, tuple[float, float]], now: float, max_age: float = _EVICT_AGE) -> int:
    """Drop entries not touched for *max_age* seconds. Returns how many were removed."""
    stale = [k for k, (_, ts) in bucket.items() if ts < now - max_age]
    for k in stale:
        del bucket[k]
    return len(stale)


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

# Health probes and docs are never throttled.
_EXEMPT_PATHS = frozenset({"/", "/health", "/docs", "/redoc", "/openapi.json"})


def _client_key(request: Request) -> str:
    """Rate-limit key: first ``X-Forwarded-For`` hop, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Request id, timing, structured request log and per-client rate limiting."""

    def __init__(self, app: ASGIApp, rate_limit_per_minute: Optional[int] = None):
        super().__init__(app)
        self.rate_limit_per_minute = (
            settings.rate_limit_per_minute if rate_limit_per_minute is None else rate_limit_per_minute
        )
        self._buckets: dict[str, tuple[float, float]] = {}
        self._lock = threading.Lock()
        self._calls = 0

    def _allow(self, key: str) -> tuple[bool, float]:
        with self._lock:
            now = time.monotonic()
            self._calls += 1
            if self._calls % _EVICT_EVERY == 0:
                evict_stale(self._buckets, now)
            return check_rate_limit(self._buckets, key, self.rate_limit_per_minute, now=now)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        request_id_var.set(rid)

        if request.url.path not in _EXEMPT_PATHS:
            key = _client_key(request)
            allowed, retry_after = self._allow(key)
            if not allowed:
                logger.warning(
                    "Rate limit exceeded",
                    extra={"client": key, "path": request.url.path, "retry_after": round(retry_after, 1)},
                )
                return JSONResponse(
                    status_code=429,
                    content={
                        "error": ErrorCode.RATE_LIMITED.value,
                        "message": "Too many requests",
                        "details": {"retry_after": round(retry_after, 1)},
                    },
                    headers={
                        "Retry-After": str(int(retry_after) + 1),
                        "X-Request-ID": rid,
                    },
                )

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        response.headers["X-Request-ID"] = rid
        response.headers["X-Response-Time"] = f"{duration_ms}ms"

        logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        return response
