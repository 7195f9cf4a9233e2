"""
Per-IP rate limiting for the API.

Fixed window: each client IP may make rate_limit_requests requests to paths
under the API prefix per rate_limit_window_seconds. Health and root are not
limited.
"""

import time
from typing import Callable, Dict, Optional, Tuple

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from jobportal.config import get_settings
from jobportal.logging_config import get_logger

logger = get_logger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


def _get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class InMemoryRateLimitStore:
    """Fixed-window counters. Key -> (count, window_start)."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._data: Dict[str, Tuple[int, float]] = {}
        self._clock = clock

    def check_and_incr(self, identifier: str, limit: int, window_seconds: int) -> Tuple[bool, int]:
        """
        Count one request for identifier.

        Returns:
            (allowed, seconds until the window resets). A rejected request
            is not counted.
        """
        now = self._clock()
        count, start = self._data.get(identifier, (0, now))
        if now - start >= window_seconds:
            count, start = 0, now

        retry_after = max(1, int(window_seconds - (now - start)))
        if count >= limit:
            return False, retry_after

        self._data[identifier] = (count + 1, start)
        return True, retry_after

    def cleanup_old(self, max_age_seconds: int) -> None:
        """Drop windows older than max_age_seconds."""
        now = self._clock()
        stale = [k for k, (_, start) in self._data.items() if now - start > max_age_seconds]
        for key in stale:
            self._data.pop(key, None)

    def reset(self) -> None:
        self._data.clear()


_store: Optional[InMemoryRateLimitStore] = None


def get_store() -> InMemoryRateLimitStore:
    global _store
    if _store is None:
        _store = InMemoryRateLimitStore()
    return _store


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests over the per-IP limit with a 429 envelope."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        settings = get_settings()
        if not settings.rate_limit_enabled:
            return await call_next(request)
        if not request.url.path.startswith(settings.api_prefix):
            return await call_next(request)

        store = get_store()
        store.cleanup_old(max_age_seconds=settings.rate_limit_window_seconds * 2)

        client_ip = _get_client_ip(request)
        allowed, retry_after = store.check_and_incr(
            client_ip,
            settings.rate_limit_requests,
            settings.rate_limit_window_seconds,
        )
        if not allowed:
            logger.warning("Rate limit exceeded", extra={"client_ip": client_ip})
            content = {
                "success": False,
                "message": RATE_LIMIT_MESSAGE,
                "error": "rate_limited",
            }
            request_id = getattr(request.state, "request_id", None)
            if request_id:
                content["requestId"] = request_id
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content=content,
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)
