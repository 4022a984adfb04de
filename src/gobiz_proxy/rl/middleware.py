"""Rate limiting middleware for FastAPI."""

import logging
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from .keys import build_rl_key, client_ip
from .limiter import RateLimiter

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-client fixed window rate limiting with standard RateLimit headers."""

    def __init__(
        self,
        app,
        limiter: Optional[RateLimiter] = None,
        trusted_hops: int = 1
    ):
        """Initialize rate limiting middleware."""
        super().__init__(app)
        self.limiter = limiter
        self.trusted_hops = trusted_hops

        if self.limiter is None:
            logger.info("Rate limiting middleware initialized but disabled (no limiter provided)")
        else:
            logger.info(
                "Rate limiting middleware initialized",
                extra={
                    "policy_limit": self.limiter.policy.limit,
                    "policy_window": self.limiter.policy.window_seconds,
                    "trusted_hops": self.trusted_hops
                }
            )

    async def dispatch(self, request: Request, call_next):
        """Count the request against its client and reject it once over the limit."""
        if self.limiter is None:
            return await call_next(request)

        if request.method == "OPTIONS":
            return await call_next(request)

        ip = client_ip(request, self.trusted_hops)
        decision = self.limiter.check_and_consume(build_rl_key(client_id=ip))

        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded",
                extra={
                    "client_ip": ip,
                    "path": request.url.path,
                    "retry_after": decision.reset_after
                }
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "RATE_LIMITED",
                    "message": "Too many requests, please try again later."
                },
                headers={"Retry-After": str(decision.reset_after), **decision.headers()}
            )

        response = await call_next(request)
        for name, value in decision.headers().items():
            response.headers[name] = value
        return response
