"""Pytest configuration and fixtures."""

from typing import AsyncGenerator

import httpx
import pytest

from config import Config
from qr_tracker.common.logging_config import setup_logging
from qr_tracker.database.memory import InMemoryStore
from qr_tracker.database.models import QRCode, UTMParams
from qr_tracker.geo import GeoEnrichmentClient
from qr_tracker.service import ScanTrackerService
from web_app import create_app


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def sample_qr_codes():
    """QR codes as the management subsystem would have stored them."""
    return [
        QRCode(id=1, short_code="promo1", destination_url="https://example.com/landing"),
        QRCode(
            id=2,
            short_code="Spring24",
            destination_url="https://shop.example.com/sale?ref=poster",
            utm_params=UTMParams(source="qr", medium="print", campaign="spring"),
        ),
        QRCode(id=3, short_code="broken", destination_url="not a url"),
    ]


@pytest.fixture
def store(sample_qr_codes, logger):
    return InMemoryStore(qr_codes=sample_qr_codes, logger=logger)


@pytest.fixture
async def geo_client(logger) -> AsyncGenerator[GeoEnrichmentClient, None]:
    """Geo client without credentials: enrichment disabled."""
    client = GeoEnrichmentClient(api_key=None, logger=logger)
    yield client
    await client.close()


@pytest.fixture
def service(store, geo_client, logger):
    return ScanTrackerService(
        store=store,
        qr_codes=store,
        geo_client=geo_client,
        logger=logger,
    )


@pytest.fixture
def config():
    return Config(database_url=None, ipstack_api_key=None)


@pytest.fixture
def app(service, config, logger):
    """Create test FastAPI app."""
    return create_app(service_instance=service, config=config, logger=logger)


@pytest.fixture
async def client(app):
    """Create test client."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


def ipstack_payload(**overrides):
    """A successful ipstack response body."""
    payload = {
        "ip": "203.0.113.7",
        "country_name": "United States",
        "region_name": "Massachusetts",
        "city": "Boston",
        "latitude": 42.3601,
        "longitude": -71.0589,
        "time_zone": {"id": "America/New_York"},
        "connection": {"isp": "Example Telecom"},
    }
    payload.update(overrides)
    return payload
