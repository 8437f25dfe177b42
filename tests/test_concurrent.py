"""Concurrency tests for scan recording."""

import asyncio

import pytest


@pytest.mark.asyncio
class TestConcurrentScans:

    async def test_concurrent_redirects_record_every_scan(self, service, store):
        """N simultaneous hits produce exactly N scans with distinct ids."""
        n = 50

        results = await asyncio.gather(
            *[
                service.resolve_redirect("promo1", {"X-Forwarded-For": f"203.0.113.{i}"}, "10.0.0.1")
                for i in range(n)
            ]
        )

        assert results == ["https://example.com/landing"] * n
        scans = await store.list_scans_by_qr_code(1)
        assert len(scans) == n
        assert len({s.id for s in scans}) == n
        assert {s.ip_address for s in scans} == {f"203.0.113.{i}" for i in range(n)}

        analytics = await service.get_analytics(1)
        assert analytics.total_scans == n

    async def test_concurrent_http_redirects(self, client, store):
        n = 20

        responses = await asyncio.gather(*[client.get("/r/Spring24") for _ in range(n)])

        assert all(r.status_code == 302 for r in responses)
        assert store.scan_count(2) == n
