"""REST API for scans and analytics."""

from .routes import router as api_router

__all__ = ["api_router"]
