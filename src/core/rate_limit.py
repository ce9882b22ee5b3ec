"""
Fixed-window inbound rate limiting, keyed by client address.
"""

import time
from typing import Callable, Dict, Tuple

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)


class FixedWindowRateLimiter:
    def __init__(self, max_requests: int, window_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}

    def hit(self, key: str) -> bool:
        """Record one request for ``key``; False once the window's quota is used up."""
        now = self._clock()
        started, count = self._windows.get(key, (now, 0))
        if now - started >= self.window_seconds:
            started, count = now, 0

        count += 1
        self._windows[key] = (started, count)
        self._evict(now)
        return count <= self.max_requests

    def retry_after(self, key: str) -> int:
        started, _ = self._windows.get(key, (self._clock(), 0))
        return max(0, int(self.window_seconds - (self._clock() - started)))

    def _evict(self, now: float) -> None:
        if len(self._windows) < 10_000:
            return
        expired = [key for key, (started, _) in self._windows.items() if now - started >= self.window_seconds]
        for key in expired:
            del self._windows[key]


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limiter: FixedWindowRateLimiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next):
        client = request.client.host if request.client else "unknown"
        if not self.limiter.hit(client):
            logger.warning("Rate limit exceeded", client=client, path=request.url.path)
            return JSONResponse(
                status_code=429,
                content={"message": "Too many requests, please try again later."},
                headers={"Retry-After": str(self.limiter.retry_after(client))},
            )
        return await call_next(request)
