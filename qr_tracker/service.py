"""Business logic service for scan tracking."""

import logging
from typing import Dict, List, Optional

from .analytics import AnalyticsAggregator
from .database.base import QRCodeLookup, ScanStore
from .database.cache import RedisCache
from .database.models import ScanAnalytics, ScanEvent, ScanFilter
from .errors import NotFoundError
from .geo import GeoEnrichmentClient
from .recorder import ScanRecorder
from .resolver import FAIL_CLOSED, RedirectResolver


class ScanTrackerService:
    """Service layer wiring the resolver, recorder and aggregator together."""

    def __init__(
        self,
        store: ScanStore,
        qr_codes: QRCodeLookup,
        geo_client: GeoEnrichmentClient,
        cache: Optional[RedisCache] = None,
        scan_write_policy: str = FAIL_CLOSED,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize scan tracker service.

        Args:
            store: Scan store
            qr_codes: QR code lookup
            geo_client: Geolocation client
            cache: Optional cache instance (only used for health and shutdown)
            scan_write_policy: Behaviour when a scan cannot be stored
            logger: Optional logger
        """
        self.store = store
        self.qr_codes = qr_codes
        self.geo_client = geo_client
        self.cache = cache
        self.logger = logger or logging.getLogger(__name__)
        self.recorder = ScanRecorder(store, qr_codes, logger=self.logger)
        self.aggregator = AnalyticsAggregator(store, logger=self.logger)
        self.resolver = RedirectResolver(
            qr_codes,
            self.recorder,
            geo_client,
            scan_write_policy=scan_write_policy,
            logger=self.logger,
        )

    async def resolve_redirect(self, short_code: str, headers, peer_host: Optional[str] = None) -> str:
        return await self.resolver.resolve(short_code, headers, peer_host)

    async def record_manual_scan(self, qr_code_id: int, **fields) -> ScanEvent:
        return await self.recorder.record_manual(qr_code_id, **fields)

    async def get_analytics(self, qr_code_id: int) -> ScanAnalytics:
        return await self.aggregator.aggregate(qr_code_id)

    async def get_scan(self, scan_id: int) -> ScanEvent:
        scan = await self.store.get_scan(scan_id)
        if scan is None:
            raise NotFoundError("Scan not found", code="SCAN_NOT_FOUND")
        return scan

    async def list_scans(self, scan_filter: ScanFilter) -> List[ScanEvent]:
        return await self.store.list_scans(scan_filter)

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        db_healthy = await self.store.health_check()

        cache_healthy = True
        if self.cache and self.cache.enabled:
            cache_healthy = await self.cache.ping()

        return {
            "database": db_healthy,
            "cache": cache_healthy,
            "geo_enabled": self.geo_client.enabled,
            "overall": db_healthy and cache_healthy,
        }

    async def close(self) -> None:
        """Close service connections."""
        await self.geo_client.close()
        await self.store.close()
        if self.cache:
            await self.cache.close()
