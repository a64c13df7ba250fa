from dataclasses import dataclass


@dataclass
class RateBucket:
    client_key: str
    count: int
    window_reset_at: float     # unix seconds


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    reset_at: float            # unix seconds
    limit: int

    def headers(self) -> dict:
        """X-RateLimit-* response headers (reset as whole unix seconds)."""
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(int(self.reset_at)),
        }
