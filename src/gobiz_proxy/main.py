"""Main entry point for the GoBiz proxy application."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from gobiz_proxy import __version__
from gobiz_proxy.api.routes import router
from gobiz_proxy.core.config import Settings, get_settings
from gobiz_proxy.core.endpoints import ALLOWED_ENDPOINTS
from gobiz_proxy.core.errors import GatewayError
from gobiz_proxy.core.logging import setup_logging
from gobiz_proxy.middleware import BodySizeLimitMiddleware, SecurityHeadersMiddleware
from gobiz_proxy.rl import RateLimitMiddleware, create_rate_limiter, get_rate_limit_config

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan management
    Handles startup and shutdown procedures
    """
    settings: Settings = app.state.settings
    setup_logging(settings)

    logger.info(
        "Starting GoBiz proxy",
        extra={
            "host": settings.HOST,
            "port": settings.PORT,
            "debug": settings.DEBUG,
            "log_level": settings.LOG_LEVEL,
            "upstream_base": settings.UPSTREAM_BASE,
            "upstream_timeout_ms": settings.UPSTREAM_TIMEOUT_MS,
            "rate_limiting_enabled": settings.ENABLE_RATE_LIMITING
        }
    )

    yield

    logger.info("Shutting down GoBiz proxy...")


async def gateway_exception_handler(request: Request, exc: GatewayError):
    """Render refusals raised by the proxy itself"""
    logger.warning(
        "Request refused",
        extra={
            "url": str(request.url.path),
            "method": request.method,
            "error": exc.code,
            "status_code": exc.status_code
        }
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def general_exception_handler(request: Request, exc: Exception):
    """General exception handler for unhandled errors"""
    logger.error(
        "Unhandled exception",
        extra={
            "url": str(request.url.path),
            "method": request.method,
            "error": str(exc)
        },
        exc_info=True
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "INTERNAL_ERROR",
            "message": "Internal server error occurred"
        }
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="GoBiz Proxy",
        description="Allowlisting proxy for the GoBiz merchant API: OTP login, merchant lookup and transaction ledger",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check and service information"
            },
            {
                "name": "gobiz",
                "description": "Operations forwarded to the upstream merchant API"
            }
        ]
    )
    app.state.settings = settings

    # Middleware added first runs innermost
    rate_limit_config = get_rate_limit_config(settings)
    app.add_middleware(
        RateLimitMiddleware,
        limiter=create_rate_limiter(rate_limit_config),
        trusted_hops=rate_limit_config.trusted_hops
    )
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.MAX_BODY_BYTES)
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.allowed_hosts
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["RateLimit-Limit", "RateLimit-Remaining", "RateLimit-Reset", "Retry-After"]
    )

    app.add_exception_handler(GatewayError, gateway_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(router, prefix="/api", tags=["gobiz"])

    @app.get("/", tags=["health"])
    async def root():
        """Root endpoint with proxy information and available endpoints"""
        return {
            "service": "GoBiz Proxy",
            "version": __version__,
            "status": "running",
            "upstream": settings.UPSTREAM_BASE,
            "allowed_endpoints": sorted(ALLOWED_ENDPOINTS),
            "endpoints": {
                "health": "/api/health",
                "proxy": "/api/proxy",
                "otp_request": "/api/otp/request",
                "otp_verify": "/api/otp/verify",
                "merchant_search": "/api/merchant/search",
                "mutasi": "/api/mutasi"
            },
            "documentation": {
                "swagger": "/docs",
                "redoc": "/redoc"
            }
        }

    return app


# Create app instance for uvicorn to find
app = create_app()


def main() -> None:
    """Main entry point for the application."""
    settings = get_settings()
    setup_logging(settings)

    uvicorn.run(
        "gobiz_proxy.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=True,
        server_header=False,
        date_header=True,
    )


if __name__ == "__main__":
    main()
