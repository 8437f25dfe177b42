"""FastAPI web layer for the QR scan tracker."""

from .app_factory import create_app

__all__ = ["create_app"]
