"""API routes implementation."""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Query, Request, status
from fastapi.responses import JSONResponse

from qr_tracker.common.validators import (
    clean_optional,
    parse_device_type,
    parse_int_id,
    parse_qr_code_id,
    parse_timestamp,
)
from qr_tracker.database.models import ScanFilter
from qr_tracker.errors import NotFoundError, ScanTrackerError, ValidationError

from .schemas import (
    AnalyticsResponse,
    ErrorResponse,
    HealthResponse,
    ScanCreateRequest,
    ScanResponse,
)

router = APIRouter()

MAX_PAGE_SIZE = 100


def error_response(status_code: int, exc: ScanTrackerError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=exc.message, code=exc.code).model_dump(),
    )


@router.get(
    "/scans",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid query parameters"},
        404: {"model": ErrorResponse, "description": "Scan not found"},
        500: {"model": ErrorResponse, "description": "Store failure"},
    },
    summary="Query scans",
    description=(
        "With analytics=true and qrCodeId, return aggregated scan counts. "
        "With id, return a single scan. Otherwise list scans, newest first."
    ),
)
async def get_scans(
    request: Request,
    qr_code_id: Optional[str] = Query(None, alias="qrCodeId"),
    analytics: Optional[str] = Query(None),
    scan_id: Optional[str] = Query(None, alias="id"),
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    country: Optional[str] = Query(None),
    device_type: Optional[str] = Query(None, alias="deviceType"),
):
    """Analytics, single scan lookup or filtered listing."""
    service = request.app.state.service

    if analytics == "true":
        qr_id = parse_qr_code_id(qr_code_id)
        result = await service.get_analytics(qr_id)
        return AnalyticsResponse.from_analytics(result)

    if scan_id is not None:
        scan = await service.get_scan(parse_int_id(scan_id, "Valid ID is required", "INVALID_ID"))
        return ScanResponse.from_scan(scan)

    scan_filter = ScanFilter(
        qr_code_id=_optional_qr_code_id(qr_code_id),
        start=parse_timestamp(start_date, "startDate"),
        end=parse_timestamp(end_date, "endDate"),
        country=clean_optional(country),
        device_type=parse_device_type(device_type),
        limit=min(_non_negative(limit, "limit", 10), MAX_PAGE_SIZE),
        offset=_non_negative(offset, "offset", 0),
    )
    scans = await service.list_scans(scan_filter)
    return [ScanResponse.from_scan(scan) for scan in scans]


@router.post(
    "/scans",
    status_code=status.HTTP_201_CREATED,
    response_model=ScanResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request or unknown QR code"},
        500: {"model": ErrorResponse, "description": "Store failure"},
    },
    summary="Record a scan manually",
    description="Insert a scan for an existing QR code without going through a redirect.",
)
async def create_scan(request: Request, body: ScanCreateRequest):
    """Record a manual or test scan."""
    service = request.app.state.service

    qr_code_id = parse_qr_code_id(body.qr_code_id)
    try:
        scan = await service.record_manual_scan(
            qr_code_id,
            user_agent=body.user_agent,
            referrer=body.referrer,
            country=body.country,
            city=body.city,
            device_type=body.device_type,
        )
    except NotFoundError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, e)

    return ScanResponse.from_scan(scan)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service is healthy.",
)
async def health_check(request: Request):
    service = request.app.state.service

    health = await service.health_check()

    return HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        database="healthy" if health["database"] else "unhealthy",
        cache="healthy" if health["cache"] else "unhealthy",
        geo_enrichment="enabled" if health["geo_enabled"] else "disabled",
        timestamp=datetime.now(timezone.utc),
    )


def _optional_qr_code_id(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    return parse_qr_code_id(value)


def _non_negative(value: Optional[str], name: str, default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")
    if parsed < 0:
        raise ValidationError(f"{name} must not be negative")
    return parsed
