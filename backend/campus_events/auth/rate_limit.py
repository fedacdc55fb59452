"""Fixed-window rate limiting over a ``KeyValueStore``.

Best-effort abuse mitigation only: counters live in the store, so with the
in-memory store each app instance counts on its own.
"""
import math
from dataclasses import dataclass

from fastapi import Request

from campus_events.auth.store import KeyValueStore
from campus_events.config import settings


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    retry_after: int


class RateLimiter:
    def __init__(self, store: KeyValueStore, limit: int, window: int, prefix: str):
        self.store = store
        self.limit = limit
        self.window = window
        self.prefix = prefix

    def hit(self, key: str) -> RateLimitResult:
        """Count one request for ``key`` and report whether it is allowed."""
        full_key = f"rl:{self.prefix}:{key}"
        count = self.store.incr(full_key, self.window)
        ttl = self.store.ttl(full_key) or 0
        return RateLimitResult(
            allowed=count <= self.limit,
            remaining=max(self.limit - count, 0),
            retry_after=max(math.ceil(ttl), 1),
        )

    def reset(self, key: str) -> None:
        self.store.delete(f"rl:{self.prefix}:{key}")


def client_ip(request: Request) -> str:
    """Best guess at the caller's IP; X-Forwarded-For only behind a trusted proxy."""
    if settings.TRUST_PROXY:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"
