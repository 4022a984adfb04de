"""Rate limiter implementation."""

from dataclasses import dataclass
from typing import Dict, Optional

from .backend import LimiterBackend


@dataclass
class RatePolicy:
    """Rate limiting policy configuration."""
    limit: int = 60
    window_seconds: int = 60


@dataclass
class RateDecision:
    """Outcome of one rate limit check."""
    allowed: bool
    limit: int
    remaining: int
    reset_after: int

    def headers(self) -> Dict[str, str]:
        """Standard RateLimit-* response headers for this decision."""
        return {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(self.reset_after),
        }


class RateLimiter:
    """Rate limiter that uses a backend to track and enforce rate limits."""

    def __init__(self, backend: LimiterBackend, policy: Optional[RatePolicy] = None):
        """Initialize rate limiter with backend and policy."""
        self._backend = backend
        self._policy = policy or RatePolicy()

    @property
    def policy(self) -> RatePolicy:
        return self._policy

    def check_and_consume(self, key: str) -> RateDecision:
        """Count one request against `key` and decide whether it may proceed."""
        count, ttl_remaining = self._backend.incr_and_get(key, self._policy.window_seconds)
        limit = self._policy.limit
        return RateDecision(
            allowed=count <= limit,
            limit=limit,
            remaining=max(limit - count, 0),
            reset_after=ttl_remaining,
        )

