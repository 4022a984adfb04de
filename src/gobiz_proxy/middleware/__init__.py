"""HTTP ingress middleware: security headers and request size limits."""

from .security import SECURITY_HEADERS, BodySizeLimitMiddleware, SecurityHeadersMiddleware

__all__ = [
    "SECURITY_HEADERS",
    "BodySizeLimitMiddleware",
    "SecurityHeadersMiddleware",
]
