"""Core business logic for QR scan tracking."""

from .analytics import AnalyticsAggregator
from .geo import GeoEnrichmentClient
from .recorder import ScanRecorder
from .resolver import RedirectResolver
from .service import ScanTrackerService

__all__ = [
    "AnalyticsAggregator",
    "GeoEnrichmentClient",
    "ScanRecorder",
    "RedirectResolver",
    "ScanTrackerService",
]
