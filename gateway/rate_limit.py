"""
Fixed-window rate limiting for the /api prefix.

Supports an in-memory limiter for single-process runs and tests and a
Redis-backed implementation shared by every gateway process.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Protocol

import redis
from redis import exceptions as redis_exceptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_in: int


class RateLimiter(Protocol):
    """Counts one request for a client key and reports the window state."""

    def hit(self, key: str) -> RateLimitResult:
        ...


def _result(count: int, limit: int, reset_in: float) -> RateLimitResult:
    return RateLimitResult(
        allowed=count <= limit,
        limit=limit,
        remaining=max(limit - count, 0),
        reset_in=max(int(reset_in + 0.999), 0),
    )


@dataclass
class InMemoryRateLimiter:
    """Per-process fixed windows keyed by client."""

    limit: int = 100
    window_seconds: int = 15 * 60
    clock: Callable[[], float] = time.monotonic
    windows: dict = field(default_factory=dict)

    def __post_init__(self):
        self._lock = threading.Lock()
        self._last_sweep = self.clock()

    def _evict_expired(self, now: float) -> None:
        # Caller holds the lock. Sweeps at most once per window.
        if now - self._last_sweep < self.window_seconds:
            return
        expired = [
            key
            for key, (started, _) in self.windows.items()
            if now - started >= self.window_seconds
        ]
        for key in expired:
            del self.windows[key]
        self._last_sweep = now

    def hit(self, key: str) -> RateLimitResult:
        now = self.clock()
        with self._lock:
            self._evict_expired(now)
            started, count = self.windows.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            count += 1
            self.windows[key] = (started, count)
        return _result(count, self.limit, started + self.window_seconds - now)

    def reset(self) -> None:
        with self._lock:
            self.windows.clear()


@dataclass
class RedisRateLimiter:
    """Redis-backed fixed windows using INCR with an expiry."""

    url: str
    limit: int = 100
    window_seconds: int = 15 * 60
    key_prefix: str = "gateway:ratelimit:"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def _unlimited(self) -> RateLimitResult:
        return RateLimitResult(True, self.limit, self.limit, self.window_seconds)

    def hit(self, key: str) -> RateLimitResult:
        redis_key = f"{self.key_prefix}{key}"
        try:
            pipe = self.client.pipeline()
            pipe.incr(redis_key)
            pipe.expire(redis_key, self.window_seconds, nx=True)
            pipe.ttl(redis_key)
            count, _, ttl = pipe.execute()
        except (redis_exceptions.ConnectionError, redis_exceptions.TimeoutError):
            # Connection resets can happen on managed Redis. Let the request
            # through and reconnect for the next one.
            logger.warning("Rate limiter lost its Redis connection; allowing request")
            self.client = redis.Redis.from_url(self.url)
            return self._unlimited()
        except redis_exceptions.RedisError as exc:
            logger.warning("Rate limiter Redis error (%s); allowing request", exc)
            return self._unlimited()
        if ttl is None or ttl < 0:
            ttl = self.window_seconds
        return _result(int(count), self.limit, ttl)
