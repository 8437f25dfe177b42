"""Scan analytics aggregation."""

import logging
from datetime import timezone
from typing import Callable, Dict, Iterable, Optional

from .database.base import ScanStore
from .database.models import ScanAnalytics, ScanEvent


UNKNOWN_BUCKET = "Unknown"


def count_by(scans: Iterable[ScanEvent], key: Callable[[ScanEvent], Optional[str]]) -> Dict[str, int]:
    """Count scans per bucket label. Missing or empty labels go to ``Unknown``."""
    counts: Dict[str, int] = {}
    for scan in scans:
        label = key(scan) or UNKNOWN_BUCKET
        counts[label] = counts.get(label, 0) + 1
    return counts


def scan_day(scan: ScanEvent) -> str:
    """UTC calendar day of a scan as YYYY-MM-DD."""
    return scan.scanned_at.astimezone(timezone.utc).date().isoformat()


class AnalyticsAggregator:
    """Recompute scan counts for a QR code from the full event set.

    Cost is linear in the number of scans on every query; there are no
    running counters.
    """

    def __init__(self, store: ScanStore, logger: Optional[logging.Logger] = None):
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    async def aggregate(self, qr_code_id: int) -> ScanAnalytics:
        """Group all scans of a QR code by country, city, device, browser, OS and day.

        Args:
            qr_code_id: The QR code id

        Returns:
            ScanAnalytics with unsorted bucket counts

        Raises:
            PersistenceError: If scans cannot be read
        """
        scans = await self.store.list_scans_by_qr_code(qr_code_id)

        analytics = ScanAnalytics(
            qr_code_id=qr_code_id,
            total_scans=len(scans),
            by_country=count_by(scans, lambda s: s.country),
            by_city=count_by(scans, lambda s: s.city),
            by_device_type=count_by(scans, lambda s: s.device_type),
            by_browser=count_by(scans, lambda s: s.browser),
            by_os=count_by(scans, lambda s: s.os),
            by_date=count_by(scans, scan_day),
        )
        self.logger.debug(f"Aggregated {analytics.total_scans} scans for QR code {qr_code_id}")
        return analytics
