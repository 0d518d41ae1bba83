# expense_tracker/core/rate_limit.py
from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """
    In-memory sliding window limiter keyed by client identifier.
    Allows at most `limit` hits per `window_seconds` for each key.
    """

    def __init__(self, limit: int, window_seconds: float, clock: Optional[Callable[[], float]] = None):
        self.limit = int(limit)
        self.window_seconds = float(window_seconds)
        self._clock = clock or time.monotonic
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = self._clock()
        self._lock = threading.Lock()

    def _evict(self, hits: Deque[float], now: float) -> None:
        cutoff = now - self.window_seconds
        while hits and hits[0] <= cutoff:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        # Drop clients that have been idle for a whole window
        if now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        for key in list(self._hits):
            hits = self._hits[key]
            self._evict(hits, now)
            if not hits:
                del self._hits[key]

    def allow(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            self._sweep(now)
            hits = self._hits.setdefault(key, deque())
            self._evict(hits, now)
            if len(hits) >= self.limit:
                return False
            hits.append(now)
            return True

    def remaining(self, key: str) -> int:
        now = self._clock()
        with self._lock:
            hits = self._hits.get(key)
            if hits is None:
                return self.limit
            self._evict(hits, now)
            if not hits:
                del self._hits[key]
                return self.limit
            return max(self.limit - len(hits), 0)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


TOO_MANY_REQUESTS_MESSAGE = "Too many requests. Please try again later."


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def rate_limit_middleware(request: Request, call_next):
    """Reject the request with 429 once the client exhausted its window."""
    limiter: SlidingWindowRateLimiter = request.app.state.rate_limiter
    key = client_key(request)
    if not limiter.allow(key):
        logger.warning("Rate limit exceeded for %s", key)
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"message": TOO_MANY_REQUESTS_MESSAGE},
        )
    return await call_next(request)
