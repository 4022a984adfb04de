"""Rate limiting configuration and dependency injection."""

from typing import Optional

from pydantic import BaseModel, Field

from gobiz_proxy.core.config import Settings, get_settings
from .backend import LimiterBackend, MemoryBackend
from .exceptions import RateLimitConfigurationError
from .limiter import RatePolicy, RateLimiter


class RateLimitConfig(BaseModel):
    """Rate limiting configuration model."""

    enabled: bool = Field(default=True, description="Enable rate limiting")
    limit: int = Field(default=60, ge=1, description="Requests per client per window")
    window_seconds: int = Field(default=60, ge=1, le=3600, description="Window in seconds")
    backend: str = Field(default="memory", description="Backend type")
    trusted_hops: int = Field(default=1, ge=0, description="Trusted reverse proxies for client IP resolution")


def get_rate_limit_config(settings: Optional[Settings] = None) -> RateLimitConfig:
    """Get rate limiting configuration from settings."""
    settings = settings or get_settings()

    return RateLimitConfig(
        enabled=settings.ENABLE_RATE_LIMITING,
        limit=settings.RATE_LIMIT_PER_MIN,
        window_seconds=settings.RATE_LIMIT_WINDOW,
        trusted_hops=settings.TRUST_PROXY_HOPS
    )


def create_rate_limiter(config: Optional[RateLimitConfig] = None) -> Optional[RateLimiter]:
    """
    Create rate limiter instance based on configuration.

    Args:
        config: Rate limiting configuration (defaults to settings)

    Returns:
        RateLimiter instance or None if disabled
    """
    if config is None:
        config = get_rate_limit_config()

    if not config.enabled:
        return None

    backend: LimiterBackend
    if config.backend == "memory":
        backend = MemoryBackend()
    else:
        raise RateLimitConfigurationError(
            f"Unknown rate limiting backend: {config.backend}", config.backend
        )

    policy = RatePolicy(limit=config.limit, window_seconds=config.window_seconds)
    return RateLimiter(backend, policy)
