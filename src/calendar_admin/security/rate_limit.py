"""Fixed-window request throttling.

Counters live behind :class:`RateLimitStore` so a single process can count in
memory while several instances share Redis.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from functools import wraps
from typing import Callable, Mapping, Optional, Protocol

import redis
from flask import after_this_request, current_app, request

from ..common.app_logger import get_logger
from ..core.constants import RATE_LIMIT_SWEEP_SECONDS, RATE_LIMIT_WINDOW_SECONDS
from ..core.exceptions import RateLimitError
from . import audit
from .session import client_address

log = get_logger(__name__)


@dataclass(frozen=True)
class RateLimitTier:
    name: str
    max_requests: int
    window_seconds: int = RATE_LIMIT_WINDOW_SECONDS


STRICT = RateLimitTier("strict", 5)
MODERATE = RateLimitTier("moderate", 100)
DEFAULT_TIERS: Mapping[str, RateLimitTier] = {STRICT.name: STRICT, MODERATE.name: MODERATE}


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after: int

    def headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_at),
        }


class RateLimitStore(Protocol):
    def hit(self, key: str, window_seconds: int, now: float) -> tuple[int, float]:
        """Count one request for ``key``; return (count in window, window end)."""

        raise NotImplementedError


class InMemoryRateLimitStore:
    """Per-process counters.

    Expired windows are swept on access once every ``sweep_interval`` seconds.
    """

    def __init__(self, *, sweep_interval: float = RATE_LIMIT_SWEEP_SECONDS):
        self._windows: dict[str, tuple[int, float]] = {}
        self._lock = threading.Lock()
        self._sweep_interval = sweep_interval
        self._next_sweep: Optional[float] = None

    def __len__(self) -> int:
        return len(self._windows)

    def hit(self, key: str, window_seconds: int, now: float) -> tuple[int, float]:
        with self._lock:
            self._sweep(now)
            count, reset_at = self._windows.get(key, (0, 0.0))
            if now >= reset_at:
                count, reset_at = 0, now + window_seconds
            count += 1
            self._windows[key] = (count, reset_at)
            return count, reset_at

    def _sweep(self, now: float) -> None:
        if self._next_sweep is None:
            self._next_sweep = now + self._sweep_interval
            return
        if now < self._next_sweep:
            return
        expired = [k for k, (_, reset_at) in self._windows.items() if now >= reset_at]
        for k in expired:
            del self._windows[k]
        self._next_sweep = now + self._sweep_interval
        if expired:
            log.debug("Swept rate limit windows", extra={"context": {"removed": len(expired)}})


class RedisRateLimitStore:
    """Counters shared by every instance pointing at the same Redis.

    Keys are bucketed by window index, so INCR + EXPIRE in one pipeline is
    enough and no read-modify-write is needed.
    """

    def __init__(self, client, *, prefix: str = "calendar_admin:ratelimit:"):
        self._client = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisRateLimitStore":
        return cls(redis.Redis.from_url(url, decode_responses=True), **kwargs)

    def hit(self, key: str, window_seconds: int, now: float) -> tuple[int, float]:
        window = int(now // window_seconds)
        redis_key = f"{self._prefix}{key}:{window}"
        pipe = self._client.pipeline()
        pipe.incr(redis_key)
        pipe.expire(redis_key, window_seconds)
        count, _ = pipe.execute()
        return int(count), float((window + 1) * window_seconds)


def build_store(storage_url: Optional[str]) -> RateLimitStore:
    if not storage_url or storage_url.startswith("memory://"):
        return InMemoryRateLimitStore()
    if storage_url.startswith(("redis://", "rediss://", "unix://")):
        return RedisRateLimitStore.from_url(storage_url)
    raise ValueError(f"Unsupported rate limit storage: {storage_url}")


class FixedWindowRateLimiter:
    def __init__(
        self,
        store: RateLimitStore,
        *,
        tiers: Mapping[str, RateLimitTier] = DEFAULT_TIERS,
        clock: Callable[[], float] = time.time,
    ):
        self._store = store
        self._tiers = dict(tiers)
        self._clock = clock

    def check(self, client: str, tier_name: str) -> RateLimitResult:
        tier = self._tiers[tier_name]
        now = self._clock()
        count, reset_at = self._store.hit(f"{tier.name}:{client}", tier.window_seconds, now)
        return RateLimitResult(
            allowed=count <= tier.max_requests,
            limit=tier.max_requests,
            remaining=max(0, tier.max_requests - count),
            reset_at=int(math.ceil(reset_at)),
            retry_after=max(1, int(math.ceil(reset_at - now))),
        )


def rate_limited(tier_name: str):
    """Throttle a view per client address; a disabled limiter is a no-op."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            limiter: Optional[FixedWindowRateLimiter] = current_app.extensions["calendar_admin"].rate_limiter
            if limiter is None:
                return view(*args, **kwargs)

            ip = client_address()
            result = limiter.check(ip, tier_name)

            @after_this_request
            def add_headers(response):
                response.headers.update(result.headers())
                return response

            if not result.allowed:
                audit.rate_limit_exceeded(ip, request.path, tier_name)
                raise RateLimitError(retry_after=result.retry_after)
            return view(*args, **kwargs)

        return wrapper

    return decorator
