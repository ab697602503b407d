"""Per-client request rate limiting.

``InMemoryRateLimiter`` keeps a sliding window per key and suits a single
process. ``RedisRateLimiter`` counts in fixed windows on a shared Redis so
several API workers enforce one limit.
"""
from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from typing import Any, Callable, Deque, Dict, Optional, Protocol

from ..config import settings

logger = logging.getLogger(__name__)


class RateLimiter(Protocol):
    async def hit(self, key: str) -> bool:
        """Record one request for ``key``; False when over the limit."""
        ...


class InMemoryRateLimiter:
    """Sliding-window limiter held in process memory."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep: Optional[float] = None
        self._lock = asyncio.Lock()

    async def hit(self, key: str) -> bool:
        now = self._clock()
        async with self._lock:
            if self._last_sweep is None or now - self._last_sweep >= self.window_seconds:
                self._sweep(now)

            hits = self._hits.setdefault(key, deque())
            while hits and now - hits[0] >= self.window_seconds:
                hits.popleft()

            if len(hits) >= self.max_requests:
                return False

            hits.append(now)
            return True

    def _sweep(self, now: float) -> None:
        """Drop keys whose newest hit has left the window."""
        stale = [
            key for key, hits in self._hits.items()
            if not hits or now - hits[-1] >= self.window_seconds
        ]
        for key in stale:
            del self._hits[key]
        self._last_sweep = now


class RedisRateLimiter:
    """Fixed-window limiter on a shared Redis counter."""

    def __init__(
        self,
        redis_client: Any,
        max_requests: int,
        window_seconds: int,
        *,
        prefix: str = "todo:rate",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.redis = redis_client
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._prefix = prefix
        self._clock = clock

    async def hit(self, key: str) -> bool:
        bucket = int(self._clock() // self.window_seconds)
        count_key = f"{self._prefix}:{key}:{bucket}"

        count = int(await self.redis.incr(count_key))
        if count == 1:
            await self.redis.expire(count_key, self.window_seconds * 2)
        return count <= self.max_requests


def build_rate_limiter(redis_client: Optional[Any] = None) -> RateLimiter:
    """Build the limiter selected by ``RATE_LIMIT_BACKEND``."""
    max_requests = settings.api.rate_limit_requests
    window = settings.api.rate_limit_window

    if settings.api.rate_limit_backend == "redis":
        if redis_client is None:
            from redis import asyncio as aioredis

            redis_client = aioredis.from_url(
                settings.redis.url,
                max_connections=settings.redis.max_connections,
            )
        logger.info("Using Redis rate limiter")
        return RedisRateLimiter(redis_client, max_requests, window)

    return InMemoryRateLimiter(max_requests, window)
