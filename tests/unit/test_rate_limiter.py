"""
tests/unit/test_rate_limiter.py

Fixed-window rate limiter.

Verifies:
✔ First `limit` calls in a window are allowed, the rest rejected
✔ remaining never goes negative
✔ Window resets once the clock passes reset_at
✔ Buckets are independent per client key
✔ Rejected requests still consume a slot
✔ Expired buckets are swept past the threshold
✔ Concurrent checks on one key never over-admit
✔ Client identity resolution order
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from ratelimit import (
    ANON_CLIENT,
    InMemoryRateLimiterStore,
    RateLimitDecision,
    RateLimiter,
    resolve_client_key,
)


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_limiter(max_per_window=3, window_ms=1_000, clock=None):
    return RateLimiter(
        store=InMemoryRateLimiterStore(),
        max_per_window=max_per_window,
        window_ms=window_ms,
        clock=clock or FakeClock(),
    )


# ─────────────────────────────────────────────────────
# Window counting
# ─────────────────────────────────────────────────────


class TestFixedWindow:
    def test_first_three_allowed_then_rejected(self):
        limiter = make_limiter(max_per_window=3)
        decisions = [limiter.check("203.0.113.7") for _ in range(5)]

        assert [d.allowed for d in decisions] == [True, True, True, False, False]
        assert [d.remaining for d in decisions] == [2, 1, 0, 0, 0]

    def test_reset_at_is_window_start_plus_window(self):
        clock = FakeClock(now=500.0)
        limiter = make_limiter(window_ms=60_000, clock=clock)

        decision = limiter.check("a")
        assert decision.reset_at == pytest.approx(560.0)
        assert decision.limit == 3

    def test_window_resets_after_expiry(self):
        clock = FakeClock(now=100.0)
        limiter = make_limiter(max_per_window=3, window_ms=1_000, clock=clock)

        for _ in range(4):
            limiter.check("a")
        assert limiter.check("a").allowed is False

        clock.now = 101.5
        decision = limiter.check("a")
        assert decision.allowed is True
        assert decision.remaining == 2
        assert decision.reset_at == pytest.approx(102.5)

    def test_same_window_at_exact_reset_still_counts(self):
        """The window only resets when now is strictly past reset_at."""
        clock = FakeClock(now=100.0)
        limiter = make_limiter(max_per_window=1, window_ms=1_000, clock=clock)

        limiter.check("a")
        clock.now = 101.0
        assert limiter.check("a").allowed is False

    def test_rejected_requests_consume_slots(self):
        store = InMemoryRateLimiterStore()
        limiter = RateLimiter(store=store, max_per_window=2, window_ms=1_000, clock=FakeClock())

        for _ in range(5):
            limiter.check("a")

        assert store.get("a").count == 5

    def test_keys_are_independent(self):
        limiter = make_limiter(max_per_window=1)

        assert limiter.check("a").allowed is True
        assert limiter.check("a").allowed is False
        assert limiter.check("b").allowed is True

    def test_per_call_overrides(self):
        limiter = make_limiter(max_per_window=1)

        decision = limiter.check("a", max_per_window=10)
        assert decision.allowed is True
        assert decision.remaining == 9
        assert decision.limit == 10

    def test_empty_key_uses_anon_bucket(self):
        store = InMemoryRateLimiterStore()
        limiter = RateLimiter(store=store, max_per_window=5, clock=FakeClock())

        limiter.check("")
        assert store.get(ANON_CLIENT).count == 1


# ─────────────────────────────────────────────────────
# Store
# ─────────────────────────────────────────────────────


class TestInMemoryStore:
    def test_hit_returns_copy(self):
        store = InMemoryRateLimiterStore()
        first = store.hit("a", now=0.0, window_s=1.0)
        store.hit("a", now=0.0, window_s=1.0)

        assert first.count == 1
        assert store.get("a").count == 2

    def test_sweep_removes_only_expired(self):
        store = InMemoryRateLimiterStore()
        store.hit("old", now=0.0, window_s=1.0)
        store.hit("new", now=5.0, window_s=10.0)

        removed = store.sweep(now=6.0)
        assert removed == 1
        assert store.get("old") is None
        assert store.get("new") is not None

    def test_sweep_runs_past_threshold(self):
        store = InMemoryRateLimiterStore(sweep_threshold=2)
        store.hit("a", now=0.0, window_s=1.0)
        store.hit("b", now=0.0, window_s=1.0)
        assert len(store) == 2

        store.hit("c", now=5.0, window_s=1.0)
        assert len(store) == 1
        assert store.get("c").count == 1


class TestConcurrentChecks:
    @pytest.mark.parametrize("threads, limit", [(50, 10), (200, 60)])
    def test_exactly_limit_allowed(self, threads, limit):
        store = InMemoryRateLimiterStore()
        limiter = RateLimiter(store=store, max_per_window=limit, window_ms=60_000, clock=FakeClock())
        start = threading.Barrier(threads)

        def check(_):
            start.wait()
            return limiter.check("k")

        with ThreadPoolExecutor(max_workers=threads) as pool:
            decisions = list(pool.map(check, range(threads)))

        assert sum(d.allowed for d in decisions) == limit
        assert store.get("k").count == threads
        assert sorted(d.remaining for d in decisions if d.allowed) == list(range(limit))
        assert all(d.remaining == 0 for d in decisions if not d.allowed)


# ─────────────────────────────────────────────────────
# Decision headers
# ─────────────────────────────────────────────────────


class TestDecisionHeaders:
    def test_headers_use_whole_seconds(self):
        decision = RateLimitDecision(allowed=False, remaining=0, reset_at=1_700_000_060.9, limit=60)
        headers = decision.headers()

        assert headers == {
            "X-RateLimit-Limit": "60",
            "X-RateLimit-Remaining": "0",
            "X-RateLimit-Reset": "1700000060",
        }


# ─────────────────────────────────────────────────────
# Identity
# ─────────────────────────────────────────────────────


class TestResolveClientKey:
    def test_first_forwarded_entry_wins(self):
        headers = {"x-forwarded-for": "203.0.113.7, 10.0.0.1"}
        assert resolve_client_key(headers, "10.0.0.9") == "203.0.113.7"

    def test_peer_host_when_no_forwarded_header(self):
        assert resolve_client_key({}, "198.51.100.4") == "198.51.100.4"

    def test_blank_forwarded_falls_through(self):
        assert resolve_client_key({"x-forwarded-for": " , 10.0.0.1"}, "198.51.100.4") == "198.51.100.4"

    def test_anon_when_nothing_known(self):
        assert resolve_client_key({}, None) == ANON_CLIENT
