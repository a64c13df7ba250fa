"""
Fixed-window rate limiter.

Policy:
- One bucket per client identity
- The counter is incremented BEFORE the limit check, so rejected requests
  still consume a slot and the count can run past the limit inside a window
- remaining = max(0, limit - count)
- Never raises
"""

import logging
import time
from typing import Callable, Optional

from ratelimit.store import InMemoryRateLimiterStore, RateLimiterStore
from ratelimit.types import RateLimitDecision

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Gate for calls into the request negotiator.

    Usage:
        limiter = RateLimiter(max_per_window=60, window_ms=60_000)
        decision = limiter.check("203.0.113.7")
        if not decision.allowed:
            ...  # 429
    """

    def __init__(
        self,
        store: Optional[RateLimiterStore] = None,
        max_per_window: int = 60,
        window_ms: int = 60_000,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store if store is not None else InMemoryRateLimiterStore()
        self.max_per_window = max_per_window
        self.window_ms = window_ms
        self._clock = clock

    def check(
        self,
        client_key: str,
        max_per_window: Optional[int] = None,
        window_ms: Optional[int] = None,
    ) -> RateLimitDecision:
        """
        Count one request for client_key and decide whether it may proceed.

        Args:
            client_key: Resolved client identity (see resolve_client_key)
            max_per_window: Overrides the configured limit for this call
            window_ms: Overrides the configured window for this call

        Returns:
            RateLimitDecision with allowed flag, remaining slots and reset time
        """
        limit = self.max_per_window if max_per_window is None else max_per_window
        window = self.window_ms if window_ms is None else window_ms
        key = client_key or "anon"

        bucket = self.store.hit(key, self._clock(), window / 1000.0)
        allowed = bucket.count <= limit

        if not allowed:
            logger.info(f"Rate limit exceeded for {key}: {bucket.count}/{limit}")

        return RateLimitDecision(
            allowed=allowed,
            remaining=max(0, limit - bucket.count),
            reset_at=bucket.window_reset_at,
            limit=limit,
        )
