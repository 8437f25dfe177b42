"""Redirect and load-balancer routes."""

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import PlainTextResponse, RedirectResponse

from qr_tracker.errors import MalformedDestinationError, NotFoundError, PersistenceError

router = APIRouter()


@router.get("/r/{short_code}", include_in_schema=False)
async def redirect_to_destination(request: Request, short_code: str):
    """Record the scan and redirect to the QR code's destination."""
    service = request.app.state.service
    logger = request.app.state.logger

    peer_host = getattr(request.state, "peer_host", None)
    if peer_host is None and request.client:
        peer_host = request.client.host

    try:
        destination = await service.resolve_redirect(short_code, request.headers, peer_host)
    except NotFoundError:
        return PlainTextResponse("QR Code not found", status_code=status.HTTP_404_NOT_FOUND)
    except (PersistenceError, MalformedDestinationError) as e:
        logger.error(f"Redirect error for {short_code}: {e.message}")
        return PlainTextResponse(
            "Internal Server Error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    # 302 so every visit comes back through the tracker
    return RedirectResponse(url=destination, status_code=status.HTTP_302_FOUND)


@router.get("/health", include_in_schema=False)
async def health_check_web(request: Request):
    """Health check endpoint (simple version for load balancers)."""
    service = request.app.state.service

    health = await service.health_check()

    if health["overall"]:
        return {"status": "healthy"}
    raise HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Service unhealthy",
    )
