"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from qr_tracker.database.models import ScanAnalytics, ScanEvent


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScanCreateRequest(CamelModel):
    """Manual scan insertion. ``qrCodeId`` is validated by the route."""

    qr_code_id: Optional[Any] = Field(None, description="QR code id (integer or integer string)")
    user_agent: Optional[str] = None
    referrer: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    device_type: Optional[str] = Field(None, description="mobile, tablet, desktop, bot or unknown")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "qrCodeId": 1,
                    "userAgent": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X)",
                    "country": "US",
                    "city": "Boston",
                    "deviceType": "mobile",
                }
            ]
        },
    )


class ScanResponse(CamelModel):
    """A stored scan event."""

    id: int
    qr_code_id: int
    scanned_at: datetime
    ip_address: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    timezone: Optional[str] = None
    isp: Optional[str] = None
    device_type: Optional[str] = None
    browser: Optional[str] = None
    os: Optional[str] = None
    user_agent: Optional[str] = None
    referrer: Optional[str] = None

    @classmethod
    def from_scan(cls, scan: ScanEvent) -> "ScanResponse":
        return cls(**scan.to_dict())


class AnalyticsResponse(BaseModel):
    """Scan counts for one QR code."""

    qr_code_id: int = Field(..., alias="qrCodeId")
    total_scans: int = Field(..., alias="totalScans")
    scans_by_country: Dict[str, int] = Field(..., alias="scansByCountry")
    scans_by_city: Dict[str, int] = Field(..., alias="scansByCity")
    scans_by_device_type: Dict[str, int] = Field(..., alias="scansByDeviceType")
    scans_by_browser: Dict[str, int] = Field(..., alias="scansByBrowser")
    scans_by_os: Dict[str, int] = Field(..., alias="scansByOS")
    scans_by_date: Dict[str, int] = Field(..., alias="scansByDate")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_analytics(cls, analytics: ScanAnalytics) -> "AnalyticsResponse":
        return cls(
            qr_code_id=analytics.qr_code_id,
            total_scans=analytics.total_scans,
            scans_by_country=analytics.by_country,
            scans_by_city=analytics.by_city,
            scans_by_device_type=analytics.by_device_type,
            scans_by_browser=analytics.by_browser,
            scans_by_os=analytics.by_os,
            scans_by_date=analytics.by_date,
        )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    database: str = Field(..., description="Database status")
    cache: str = Field(..., description="Cache status")
    geo_enrichment: str = Field(..., description="Whether geo enrichment is configured")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    error: str = Field(..., description="Error message")
    code: str = Field(..., description="Stable error code")
