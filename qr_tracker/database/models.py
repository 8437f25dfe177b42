"""Data models for the QR scan tracker."""

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, Optional


DEVICE_TYPES = ("mobile", "tablet", "desktop", "bot", "unknown")

UTM_KEYS = ("source", "medium", "campaign", "term", "content")


@dataclass
class UTMParams:
    """Marketing attribution parameters attached to a QR code.

    ``None`` means the key was never set; an empty string means it was set
    blank. Neither is written into the destination URL.
    """

    source: Optional[str] = None
    medium: Optional[str] = None
    campaign: Optional[str] = None
    term: Optional[str] = None
    content: Optional[str] = None

    def to_query_params(self) -> Dict[str, str]:
        """Return ``utm_<key>`` pairs for every non-empty value."""
        params = {}
        for key in UTM_KEYS:
            value = getattr(self, key)
            if value:
                params[f"utm_{key}"] = value
        return params

    def to_dict(self) -> dict:
        return {key: getattr(self, key) for key in UTM_KEYS}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["UTMParams"]:
        """Create from a stored JSON blob. Unknown keys are ignored."""
        if data is None:
            return None
        values = {}
        for key in UTM_KEYS:
            value = data.get(key)
            values[key] = None if value is None else str(value)
        return cls(**values)


@dataclass
class QRCode:
    """A published short code and where it points."""

    id: int
    short_code: str
    destination_url: str
    utm_params: Optional[UTMParams] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "short_code": self.short_code,
            "destination_url": self.destination_url,
            "utm_params": self.utm_params.to_dict() if self.utm_params else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QRCode":
        utm = data.get("utm_params")
        return cls(
            id=int(data["id"]),
            short_code=data["short_code"],
            destination_url=data["destination_url"],
            utm_params=utm if isinstance(utm, UTMParams) else UTMParams.from_dict(utm),
        )


@dataclass
class GeoEnrichment:
    """Geographic and network metadata resolved from a client IP."""

    country: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    timezone: Optional[str] = None
    isp: Optional[str] = None

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: dict) -> "GeoEnrichment":
        return cls(**{f.name: data.get(f.name) for f in fields(cls)})


@dataclass
class ScanEvent:
    """One recorded visit of a short code. Append-only."""

    qr_code_id: int
    scanned_at: datetime
    id: Optional[int] = None
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

    def apply_geo(self, geo: Optional[GeoEnrichment]) -> None:
        """Copy enrichment fields onto the event. ``None`` leaves them unset."""
        if geo is None:
            return
        for name, value in geo.to_dict().items():
            setattr(self, name, value)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["scanned_at"] = self.scanned_at.isoformat() if self.scanned_at else None
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ScanEvent":
        """Create from dictionary (e.g. a database row)."""
        scanned_at = data["scanned_at"]
        if not isinstance(scanned_at, datetime):
            scanned_at = datetime.fromisoformat(scanned_at)
        if scanned_at.tzinfo is None:
            scanned_at = scanned_at.replace(tzinfo=timezone.utc)
        values = {f.name: data.get(f.name) for f in fields(cls)}
        values["scanned_at"] = scanned_at
        return cls(**values)


@dataclass
class ScanFilter:
    """Filters and pagination for listing scans."""

    qr_code_id: Optional[int] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    country: Optional[str] = None
    device_type: Optional[str] = None
    limit: int = 10
    offset: int = 0

    def matches(self, scan: ScanEvent) -> bool:
        if self.qr_code_id is not None and scan.qr_code_id != self.qr_code_id:
            return False
        if self.start is not None and scan.scanned_at < self.start:
            return False
        if self.end is not None and scan.scanned_at > self.end:
            return False
        if self.country is not None and scan.country != self.country:
            return False
        if self.device_type is not None and scan.device_type != self.device_type:
            return False
        return True


@dataclass
class ScanAnalytics:
    """Scan counts for one QR code grouped along six dimensions."""

    qr_code_id: int
    total_scans: int = 0
    by_country: Dict[str, int] = field(default_factory=dict)
    by_city: Dict[str, int] = field(default_factory=dict)
    by_device_type: Dict[str, int] = field(default_factory=dict)
    by_browser: Dict[str, int] = field(default_factory=dict)
    by_os: Dict[str, int] = field(default_factory=dict)
    by_date: Dict[str, int] = field(default_factory=dict)
