"""Sliding-window rate limiting backends."""

import logging
import math
import threading
import time
from collections import deque
from dataclasses import dataclass

from src.config import RATE_LIMIT_BACKEND, RATE_LIMIT_REQUESTS, RATE_LIMIT_WINDOW

logger = logging.getLogger(__name__)


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    retry_after: int = 0


class InMemoryRateLimiter:
    """Per-process sliding window: keeps the hit timestamps of every client.

    Every hit is recorded, rejected ones included.
    """

    def __init__(self, max_requests: int = RATE_LIMIT_REQUESTS, window: int = RATE_LIMIT_WINDOW, clock=time.monotonic):
        self.max_requests = max_requests
        self.window = window
        self.clock = clock
        self._hits: dict[str, deque] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def hit(self, client_id: str) -> RateLimitResult:
        now = self.clock()
        with self._lock:
            if now - self._last_sweep >= self.window:
                self._sweep(now)

            hits = self._hits.setdefault(client_id, deque())
            while hits and hits[0] <= now - self.window:
                hits.popleft()
            hits.append(now)

            if len(hits) > self.max_requests:
                retry_after = math.ceil(hits[0] + self.window - now)
                return RateLimitResult(False, self.max_requests, 0, max(retry_after, 1))
            return RateLimitResult(True, self.max_requests, self.max_requests - len(hits))

    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._hits)

    def _sweep(self, now: float) -> None:
        """Forget clients whose latest hit has left the window."""
        cutoff = now - self.window
        for client_id in [c for c, hits in self._hits.items() if not hits or hits[-1] <= cutoff]:
            del self._hits[client_id]
        self._last_sweep = now

    def reset(self, client_id: str | None = None) -> None:
        with self._lock:
            if client_id is None:
                self._hits.clear()
            else:
                self._hits.pop(client_id, None)


class RedisRateLimiter:
    """Sliding window shared by every process talking to the same Redis."""

    def __init__(self, client=None, max_requests: int = RATE_LIMIT_REQUESTS, window: int = RATE_LIMIT_WINDOW):
        if client is None:
            from src.db.redis_client import redis_client

            client = redis_client
        self.client = client
        self.max_requests = max_requests
        self.window = window

    def hit(self, client_id: str) -> RateLimitResult:
        count, oldest = self.client.rate_limit_check(client_id, self.window)
        if count > self.max_requests:
            retry_after = math.ceil(oldest + self.window - time.time())
            return RateLimitResult(False, self.max_requests, 0, max(retry_after, 1))
        return RateLimitResult(True, self.max_requests, self.max_requests - count)


def build_rate_limiter(backend: str = RATE_LIMIT_BACKEND):
    """Create the limiter configured by RATE_LIMIT_BACKEND."""
    if backend == "redis":
        logger.info("Using Redis rate limiter")
        return RedisRateLimiter()
    if backend != "memory":
        raise ValueError(f"Unknown rate limit backend: {backend}")
    return InMemoryRateLimiter()
