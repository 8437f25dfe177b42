"""IP geolocation enrichment via the ipstack API."""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from .database.cache import RedisCache
from .database.models import GeoEnrichment
from .errors import ExternalServiceError


DEFAULT_GEO_API_BASE_URL = "http://api.ipstack.com"


class GeoEnrichmentClient:
    """Best-effort IP geolocation lookups.

    ``lookup`` never raises: a missing API key, a timeout, a non-2xx status
    or a provider error payload all yield ``None``.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = DEFAULT_GEO_API_BASE_URL,
        timeout_seconds: float = 2.0,
        cache: Optional[RedisCache] = None,
        cache_ttl_seconds: int = 3600,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize geolocation client.

        Args:
            api_key: ipstack access key; enrichment is disabled without it
            base_url: Provider base URL
            timeout_seconds: Upper bound for one provider call
            cache: Optional cache for successful lookups
            cache_ttl_seconds: How long a lookup stays cached
            http_client: Optional preconfigured HTTP client
            logger: Optional logger instance
        """
        self.api_key = api_key or None
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.cache = cache
        self.cache_ttl_seconds = cache_ttl_seconds
        self.logger = logger or logging.getLogger(__name__)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout_seconds)
        self._warned_missing_key = False

    @property
    def enabled(self) -> bool:
        return self.api_key is not None

    async def lookup(self, ip_address: str) -> Optional[GeoEnrichment]:
        """Resolve an IP to geographic metadata.

        Args:
            ip_address: Non-loopback client IP

        Returns:
            GeoEnrichment, or None when enrichment is unavailable
        """
        if not self.enabled:
            if not self._warned_missing_key:
                self.logger.warning("IPSTACK_API_KEY not configured, geo enrichment disabled")
                self._warned_missing_key = True
            return None

        cached = await self._get_cached(ip_address)
        if cached is not None:
            self.logger.debug(f"Geo cache hit for {ip_address}")
            return cached

        try:
            payload = await self._fetch(ip_address)
        except ExternalServiceError as e:
            self.logger.error(f"Geo lookup failed for {ip_address}: {e.message}")
            return None

        geo = self._map_payload(payload)
        await self._set_cached(ip_address, geo)
        return geo

    async def _fetch(self, ip_address: str) -> Dict[str, Any]:
        url = f"{self.base_url}/{ip_address}"
        # httpx applies its timeout per phase; wait_for bounds the whole call
        try:
            response = await asyncio.wait_for(
                self._client.get(
                    url,
                    params={"access_key": self.api_key},
                    timeout=self.timeout_seconds,
                ),
                timeout=self.timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise ExternalServiceError(f"timed out after {self.timeout_seconds}s") from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"request error: {e}") from e

        if not response.is_success:
            raise ExternalServiceError(f"ipstack API error: HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise ExternalServiceError("ipstack returned an undecodable body") from e

        if not isinstance(data, dict):
            raise ExternalServiceError("ipstack returned an unexpected body")

        if data.get("error"):
            raise ExternalServiceError(f"ipstack error: {data['error']}")

        return data

    @staticmethod
    def _map_payload(data: Dict[str, Any]) -> GeoEnrichment:
        time_zone = data.get("time_zone")
        connection = data.get("connection")
        return GeoEnrichment(
            country=_text(data.get("country_name")),
            city=_text(data.get("city")),
            region=_text(data.get("region_name")),
            latitude=_text(data.get("latitude")),
            longitude=_text(data.get("longitude")),
            timezone=_text(time_zone.get("id")) if isinstance(time_zone, dict) else None,
            isp=_text(connection.get("isp")) if isinstance(connection, dict) else None,
        )

    async def _get_cached(self, ip_address: str) -> Optional[GeoEnrichment]:
        if not self.cache:
            return None
        data = await self.cache.get_json(self.cache.get_geo_cache_key(ip_address))
        return GeoEnrichment.from_dict(data) if data is not None else None

    async def _set_cached(self, ip_address: str, geo: GeoEnrichment) -> None:
        if self.cache:
            await self.cache.set_json(
                self.cache.get_geo_cache_key(ip_address),
                geo.to_dict(),
                ttl=self.cache_ttl_seconds,
            )

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)
