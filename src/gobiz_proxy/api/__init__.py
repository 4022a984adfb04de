"""HTTP routes exposed to the frontend."""

from .routes import router

__all__ = ["router"]
