"""
Rate limiting package for the catalog service.

Holds the fixed-window limiter and the request adapter that derives a
client identity from an inbound request.
"""

from .fixed_window import Bucket, FixedWindowRateLimiter, RateLimitMiddleware

__all__ = ["Bucket", "FixedWindowRateLimiter", "RateLimitMiddleware"]
