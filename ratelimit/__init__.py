"""
Per-client fixed-window rate limiting.

Example usage:
    from ratelimit import RateLimiter, resolve_client_key

    limiter = RateLimiter(max_per_window=3, window_ms=60_000)
    decision = limiter.check(resolve_client_key(request.headers, "10.0.0.1"))
"""

from .identity import ANON_CLIENT, resolve_client_key
from .limiter import RateLimiter
from .store import InMemoryRateLimiterStore, RateLimiterStore
from .types import RateBucket, RateLimitDecision

__all__ = [
    "ANON_CLIENT",
    "resolve_client_key",
    "RateLimiter",
    "RateLimiterStore",
    "InMemoryRateLimiterStore",
    "RateBucket",
    "RateLimitDecision",
]
