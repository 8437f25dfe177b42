"""Storage layer for the QR scan tracker."""

from .base import QRCodeLookup, ScanStore
from .cache import RedisCache
from .memory import InMemoryStore
from .models import GeoEnrichment, QRCode, ScanAnalytics, ScanEvent, ScanFilter, UTMParams
from .postgres import PostgresStore

__all__ = [
    "QRCodeLookup",
    "ScanStore",
    "RedisCache",
    "InMemoryStore",
    "PostgresStore",
    "GeoEnrichment",
    "QRCode",
    "ScanAnalytics",
    "ScanEvent",
    "ScanFilter",
    "UTMParams",
]
