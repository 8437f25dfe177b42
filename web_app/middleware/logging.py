"""Access logging middleware."""

import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


class LoggingMiddleware(BaseHTTPMiddleware):
    """One access line per request, with the resolved visitor IP.

    Redirects also log their target so a scan can be followed to where it
    went; server errors are logged at WARNING.
    """

    def __init__(self, app, logger: logging.Logger = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger("qr_tracker.web")

    async def dispatch(self, request: Request, call_next: Callable):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        client_ip = getattr(request.state, "client_ip", None) or "-"
        line = (
            f"{client_ip} {request.method} {request.url.path} "
            f"{response.status_code} {elapsed_ms:.1f}ms"
        )
        location = response.headers.get("location")
        if location:
            line += f" -> {location}"

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        self.logger.log(level, line)
        return response
