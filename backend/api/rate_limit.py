"""Fixed-window rate limiter keyed by an arbitrary string (e.g. ``submit:<ip>``).

Process-local: each worker keeps its own buckets.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Callable

MAX_BUCKETS = 10_000


@dataclass
class _Bucket:
    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    retry_after_seconds: int
    reset_at: float
    limit: int

    def headers(self) -> dict[str, str]:
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(math.floor(self.reset_at)),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after_seconds)
        return headers


class RateLimiter:
    def __init__(self, max_requests: int, window_seconds: float, clock: Callable[[], float] = time.time):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._buckets: dict[str, _Bucket] = {}

    def _cleanup(self, now: float) -> None:
        if len(self._buckets) <= MAX_BUCKETS:
            return
        for key in [k for k, b in self._buckets.items() if b.reset_at <= now]:
            del self._buckets[key]

    def check(self, key: str) -> RateLimitResult:
        now = self._clock()
        self._cleanup(now)

        bucket = self._buckets.get(key)
        if bucket is None or bucket.reset_at <= now:
            reset_at = now + self.window_seconds
            self._buckets[key] = _Bucket(count=1, reset_at=reset_at)
            return RateLimitResult(
                allowed=True,
                remaining=max(0, self.max_requests - 1),
                retry_after_seconds=math.ceil(self.window_seconds),
                reset_at=reset_at,
                limit=self.max_requests,
            )

        bucket.count += 1
        return RateLimitResult(
            allowed=bucket.count <= self.max_requests,
            remaining=max(0, self.max_requests - bucket.count),
            retry_after_seconds=max(1, math.ceil(bucket.reset_at - now)),
            reset_at=bucket.reset_at,
            limit=self.max_requests,
        )

    def reset(self) -> None:
        self._buckets.clear()

    def __len__(self) -> int:
        return len(self._buckets)
