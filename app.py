#!/usr/bin/env python3
"""
Main entry point for the QR scan tracker service.

Concurrency: requests are served with async I/O (FastAPI + asyncpg pool +
httpx + redis.asyncio). Set WORKERS > 1 for multi-process scaling; each
worker has its own DB pool and HTTP client.

Usage:
    python app.py

Environment variables:
    DATABASE_URL - PostgreSQL connection URL (in-memory store when unset)
    DATABASE_CREATE_TABLES - Set to '1' to create tables on startup
    REDIS_URL - Redis connection URL for the geo cache (optional)
    IPSTACK_API_KEY - ipstack access key (geo enrichment disabled when unset)
    GEO_TIMEOUT_SECONDS - Upper bound for one geolocation call
    SCAN_WRITE_POLICY - fail_closed (default) or fail_open
    PORT - Port to listen on
    WORKERS - Number of uvicorn worker processes (default 1)
    LOG_LEVEL - Logging level
"""

import logging
import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import Config, load_config
from qr_tracker.common.logging_config import setup_logging
from qr_tracker.database.cache import RedisCache
from qr_tracker.database.memory import InMemoryStore
from qr_tracker.database.postgres import PostgresStore
from qr_tracker.geo import GeoEnrichmentClient
from qr_tracker.service import ScanTrackerService
from web_app import create_app


async def build_service(config: Config, logger: logging.Logger) -> ScanTrackerService:
    """Create the store, cache, geo client and service from configuration."""
    if config.database_url:
        logger.info(f"Connecting to PostgreSQL at {config.database_url.rsplit('@', 1)[-1]}")
        store = PostgresStore(
            db_config=config.database_url,
            create_tables=config.database_create_tables == "1",
            logger=logger,
        )
        await store.initialize()
    else:
        logger.warning("DATABASE_URL not set, using in-memory store (data is not persisted)")
        store = InMemoryStore(logger=logger)

    cache = None
    if config.redis_url:
        logger.info(f"Connecting to Redis at {config.redis_url}")
        cache = RedisCache(
            redis_url=config.redis_url,
            ttl_seconds=config.geo_cache_ttl_seconds,
            logger=logger,
        )
        await cache.connect()
    else:
        logger.info("Redis caching disabled")

    geo_client = GeoEnrichmentClient(
        api_key=config.ipstack_api_key,
        base_url=config.geo_api_base_url,
        timeout_seconds=config.geo_timeout_seconds,
        cache=cache,
        cache_ttl_seconds=config.geo_cache_ttl_seconds,
        logger=logger,
    )

    return ScanTrackerService(
        store=store,
        qr_codes=store,
        geo_client=geo_client,
        cache=cache,
        scan_write_policy=config.scan_write_policy,
        logger=logger,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting QR scan tracker...")
    service = await build_service(config, logger)
    app.state.service = service
    logger.info("Service started successfully")

    yield

    logger.info("Shutting down QR scan tracker...")
    await service.close()
    logger.info("Service stopped")


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("QR Scan Tracker")
    logger.info(f"Configuration: {config.safe_dump()}")

    app = create_app(service_instance=None, config=config, logger=logger)
    app.router.lifespan_context = lifespan

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        workers=config.workers,
        log_level=config.log_level.lower(),
        access_log=True,
    )

    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
