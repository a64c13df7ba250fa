"""
Rate bucket storage.

The limiter depends only on RateLimiterStore, so the in-memory map can be
swapped for an external counter store without touching the limiter contract.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict

from ratelimit.types import RateBucket

logger = logging.getLogger(__name__)


class RateLimiterStore(ABC):
    """
    Abstract bucket store.

    Key properties:
    - hit() is atomic per client key
    - Expired buckets are overwritten, not evicted, on the next hit
    """

    @abstractmethod
    def hit(self, client_key: str, now: float, window_s: float) -> RateBucket:
        """
        Count one request for client_key and return the updated bucket.

        Resets the bucket first when it does not exist yet or when
        now > window_reset_at. The increment happens unconditionally.
        """
        raise NotImplementedError

    @abstractmethod
    def sweep(self, now: float) -> int:
        """Drop expired buckets. Returns the number removed."""
        raise NotImplementedError

    @abstractmethod
    def __len__(self) -> int:
        raise NotImplementedError


class InMemoryRateLimiterStore(RateLimiterStore):
    """
    Process-wide dict of buckets guarded by one lock.

    The map grows with the number of distinct client keys. Once it holds
    more than sweep_threshold entries, expired buckets are swept on access.
    """

    def __init__(self, sweep_threshold: int = 10_000):
        self.sweep_threshold = sweep_threshold
        self._buckets: Dict[str, RateBucket] = {}
        self._lock = threading.Lock()

    def hit(self, client_key: str, now: float, window_s: float) -> RateBucket:
        with self._lock:
            bucket = self._buckets.get(client_key)
            if bucket is None or now > bucket.window_reset_at:
                bucket = RateBucket(
                    client_key=client_key,
                    count=0,
                    window_reset_at=now + window_s,
                )
                self._buckets[client_key] = bucket

            bucket.count += 1

            if len(self._buckets) > self.sweep_threshold:
                self._sweep_locked(now)

            # Copy so callers never observe later mutations
            return RateBucket(bucket.client_key, bucket.count, bucket.window_reset_at)

    def sweep(self, now: float) -> int:
        with self._lock:
            return self._sweep_locked(now)

    def _sweep_locked(self, now: float) -> int:
        expired = [k for k, b in self._buckets.items() if now > b.window_reset_at]
        for key in expired:
            del self._buckets[key]
        if expired:
            logger.debug(f"Swept {len(expired)} expired rate buckets")
        return len(expired)

    def get(self, client_key: str):
        """Current bucket for client_key, or None."""
        with self._lock:
            return self._buckets.get(client_key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)
