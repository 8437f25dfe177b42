"""Forwarded headers middleware."""

from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from qr_tracker.common.headers import get_client_ip


class ForwardedHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to resolve the visitor IP from proxy headers."""

    async def dispatch(self, request: Request, call_next: Callable):
        peer_host = request.client.host if request.client else None
        request.state.peer_host = peer_host
        request.state.client_ip = get_client_ip(request.headers, peer_host)

        response = await call_next(request)
        return response
