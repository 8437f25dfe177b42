"""Tests for analytics aggregation."""

from datetime import datetime, timedelta, timezone

import pytest

from qr_tracker.analytics import AnalyticsAggregator, count_by, scan_day
from qr_tracker.database.models import ScanEvent


def make_scan(qr_code_id=1, scanned_at=None, **fields):
    return ScanEvent(
        qr_code_id=qr_code_id,
        scanned_at=scanned_at or datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc),
        **fields,
    )


class TestCountBy:

    def test_counts_per_label(self):
        scans = [make_scan(country="US"), make_scan(country="US"), make_scan(country="FR")]
        assert count_by(scans, lambda s: s.country) == {"US": 2, "FR": 1}

    def test_missing_labels_go_to_unknown(self):
        scans = [make_scan(city=None), make_scan(city=""), make_scan(city="Paris")]
        assert count_by(scans, lambda s: s.city) == {"Unknown": 2, "Paris": 1}

    def test_scan_day_uses_utc(self):
        late_evening_new_york = datetime(2024, 3, 1, 22, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert scan_day(make_scan(scanned_at=late_evening_new_york)) == "2024-03-02"


@pytest.mark.asyncio
class TestAnalyticsAggregator:

    async def test_aggregate(self, store, logger):
        for country, device in [("US", "mobile"), ("US", "desktop"), ("FR", "mobile")]:
            await store.append_scan(make_scan(country=country, device_type=device, browser="Chrome"))
        await store.append_scan(make_scan(qr_code_id=2, country="DE"))

        analytics = await AnalyticsAggregator(store, logger=logger).aggregate(1)

        assert analytics.qr_code_id == 1
        assert analytics.total_scans == 3
        assert analytics.by_country == {"US": 2, "FR": 1}
        assert analytics.by_city == {"Unknown": 3}
        assert analytics.by_device_type == {"mobile": 2, "desktop": 1}
        assert analytics.by_browser == {"Chrome": 3}
        assert analytics.by_os == {"Unknown": 3}
        assert analytics.by_date == {"2024-03-01": 3}

    async def test_bucket_totals_match_total(self, store, logger):
        days = [datetime(2024, 3, d, 9, tzinfo=timezone.utc) for d in (1, 1, 2, 5)]
        for i, day in enumerate(days):
            await store.append_scan(make_scan(scanned_at=day, os="iOS" if i % 2 else None))

        analytics = await AnalyticsAggregator(store, logger=logger).aggregate(1)

        for buckets in (
            analytics.by_country,
            analytics.by_city,
            analytics.by_device_type,
            analytics.by_browser,
            analytics.by_os,
            analytics.by_date,
        ):
            assert sum(buckets.values()) == analytics.total_scans == 4
        assert analytics.by_date == {"2024-03-01": 2, "2024-03-02": 1, "2024-03-05": 1}

    async def test_no_scans(self, store, logger):
        analytics = await AnalyticsAggregator(store, logger=logger).aggregate(999)

        assert analytics.total_scans == 0
        assert analytics.by_country == {}
        assert analytics.by_date == {}
