"""Rate limiting module."""

from .keys import build_rl_key, client_ip
from .backend import LimiterBackend, MemoryBackend
from .limiter import RateDecision, RatePolicy, RateLimiter
from .middleware import RateLimitMiddleware
from .config import RateLimitConfig, get_rate_limit_config, create_rate_limiter
from .exceptions import (
    RateLimitError,
    RateLimitConfigurationError,
    RateLimitBackendError
)

__all__ = [
    "build_rl_key",
    "client_ip",
    "LimiterBackend",
    "MemoryBackend",
    "RateDecision",
    "RatePolicy",
    "RateLimiter",
    "RateLimitMiddleware",
    "RateLimitConfig",
    "get_rate_limit_config",
    "create_rate_limiter",
    "RateLimitError",
    "RateLimitConfigurationError",
    "RateLimitBackendError"
]
