"""Redis cache layer for geolocation results."""

import json
import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis


GEO_KEY_PREFIX = "qr_tracker:geo:"


class RedisCache:
    """JSON-valued Redis cache. Every operation degrades to a miss on error."""

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl_seconds: int = 3600,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            ttl_seconds: Default expiry for entries
            logger: Optional logger instance
        """
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.enabled = redis_url is not None
        self.client: Optional[redis.Redis] = None

    async def connect(self) -> None:
        """Connect to Redis. Caching is disabled if the server is unreachable."""
        if not self.enabled:
            return

        self.client = redis.from_url(self.redis_url, encoding="utf-8", decode_responses=True)
        try:
            await self.client.ping()
        except redis.RedisError as e:
            self.logger.error(f"Redis unreachable, geo cache disabled: {e}")
            await self.client.aclose()
            self.client = None
            self.enabled = False
            return
        self.logger.info(f"Geo cache connected (ttl={self.ttl_seconds}s)")

    @property
    def _ready(self) -> bool:
        return self.enabled and self.client is not None

    async def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the cached object, or None on miss, error or a corrupt entry."""
        if not self._ready:
            return None

        try:
            raw = await self.client.get(key)
        except redis.RedisError as e:
            self.logger.error(f"Cache read failed for {key}: {e}")
            return None
        if raw is None:
            return None

        try:
            value = json.loads(raw)
        except ValueError:
            self.logger.warning(f"Discarding undecodable cache entry {key}")
            return None
        return value if isinstance(value, dict) else None

    async def set_json(self, key: str, value: Dict[str, Any], ttl: Optional[int] = None) -> bool:
        if not self._ready:
            return False

        try:
            await self.client.setex(key, ttl or self.ttl_seconds, json.dumps(value))
        except redis.RedisError as e:
            self.logger.error(f"Cache write failed for {key}: {e}")
            return False
        return True

    async def ping(self) -> bool:
        if not self._ready:
            return False
        try:
            return bool(await self.client.ping())
        except redis.RedisError as e:
            self.logger.error(f"Cache ping failed: {e}")
            return False

    async def close(self) -> None:
        if self.client:
            await self.client.aclose()
            self.client = None
            self.logger.info("Redis connection closed")

    def get_geo_cache_key(self, ip_address: str) -> str:
        return f"{GEO_KEY_PREFIX}{ip_address}"
