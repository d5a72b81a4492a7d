"""
Fixed-window rate limiter for the catalog service.
"""

import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional

from fastapi import Request

from shared.logging import get_logger, set_client_context


UNKNOWN_CLIENT = "unknown"


@dataclass
class Bucket:
    """Request counter for one client within the current window."""

    count: int
    reset_at: float


class FixedWindowRateLimiter:
    """Per-client fixed-window request counter.

    One bucket per client key, all guarded by a single lock. The critical
    section only touches the bucket map, never I/O. Buckets are kept for the
    lifetime of the limiter unless ``prune`` is called explicitly.
    """

    def __init__(
        self,
        max_requests: int,
        window: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window <= 0:
            raise ValueError("window must be positive")
        self.max_requests = max_requests
        self.window = window
        self._clock = clock
        self._buckets: Dict[str, Bucket] = {}
        self._lock = threading.Lock()

    def admit(self, client_key: str, now: Optional[float] = None) -> bool:
        """Count one request for ``client_key``; return False when over the limit."""
        if now is None:
            now = self._clock()

        with self._lock:
            bucket = self._buckets.get(client_key)
            if bucket is None or now > bucket.reset_at:
                self._buckets[client_key] = Bucket(count=1, reset_at=now + self.window)
                return True

            bucket.count += 1
            return bucket.count <= self.max_requests

    def snapshot(self, client_key: str) -> Optional[Bucket]:
        """Return a copy of the bucket for ``client_key``, if any."""
        with self._lock:
            bucket = self._buckets.get(client_key)
            return replace(bucket) if bucket is not None else None

    @property
    def bucket_count(self) -> int:
        with self._lock:
            return len(self._buckets)

    def prune(self, now: Optional[float] = None) -> int:
        """Drop buckets whose window has ended. Returns the number removed."""
        if now is None:
            now = self._clock()

        with self._lock:
            expired = [key for key, bucket in self._buckets.items() if now > bucket.reset_at]
            for key in expired:
                del self._buckets[key]
        return len(expired)


class RateLimitMiddleware:
    """Applies a FixedWindowRateLimiter to inbound FastAPI requests."""

    def __init__(self, rate_limiter: FixedWindowRateLimiter, trust_forwarded_for: bool = False):
        self.rate_limiter = rate_limiter
        self.trust_forwarded_for = trust_forwarded_for
        self.logger = get_logger("catalog.rate_limit_middleware")

    def check_request(self, request: Request) -> bool:
        """Return True when the request may proceed."""
        client_key = self._get_client_id(request)
        set_client_context(client_key)
        allowed = self.rate_limiter.admit(client_key)
        if not allowed:
            self.logger.warning(
                "Rate limit exceeded",
                client_key=client_key,
                path=request.url.path,
                limit=self.rate_limiter.max_requests,
            )
        return allowed

    def _get_client_id(self, request: Request) -> str:
        """Extract client ID from request."""
        if self.trust_forwarded_for:
            forwarded_for = request.headers.get("X-Forwarded-For")
            if forwarded_for:
                first_hop = forwarded_for.split(",")[0].strip()
                if first_hop:
                    return first_hop

            real_ip = request.headers.get("X-Real-IP")
            if real_ip:
                return real_ip.strip()

        if request.client and request.client.host:
            return request.client.host
        return UNKNOWN_CLIENT
