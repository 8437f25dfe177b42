#!/usr/bin/env python3
"""
Command-line interface for the QR scan tracker.

Usage:
    python qr_tracker_cli.py analytics <qr_code_id>
    python qr_tracker_cli.py scans [--qr-code-id ID] [--country CC] [--device-type TYPE] [--limit N] [--offset N]
    python qr_tracker_cli.py scan <scan_id>
    python qr_tracker_cli.py resolve-ip <ip_address>
    python qr_tracker_cli.py health
"""

import argparse
import asyncio
import json
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from app import build_service
from config import load_config
from qr_tracker.common.logging_config import setup_logging
from qr_tracker.database.models import ScanFilter
from qr_tracker.errors import ScanTrackerError


class QRTrackerCLI:
    """Command-line interface for scan analytics."""

    def __init__(self, verbose: bool = False):
        self.config = load_config()
        self.logger = setup_logging(level="DEBUG" if verbose else "WARNING")
        self.service = None

    async def initialize(self):
        self.service = await build_service(self.config, self.logger)

    async def cleanup(self):
        if self.service:
            await self.service.close()

    async def analytics(self, qr_code_id: int) -> int:
        result = await self.service.get_analytics(qr_code_id)
        _print({
            "qrCodeId": result.qr_code_id,
            "totalScans": result.total_scans,
            "scansByCountry": result.by_country,
            "scansByCity": result.by_city,
            "scansByDeviceType": result.by_device_type,
            "scansByBrowser": result.by_browser,
            "scansByOS": result.by_os,
            "scansByDate": result.by_date,
        })
        return 0

    async def scans(self, scan_filter: ScanFilter) -> int:
        results = await self.service.list_scans(scan_filter)
        _print([scan.to_dict() for scan in results])
        return 0

    async def scan(self, scan_id: int) -> int:
        result = await self.service.get_scan(scan_id)
        _print(result.to_dict())
        return 0

    async def resolve_ip(self, ip_address: str) -> int:
        geo = await self.service.geo_client.lookup(ip_address)
        if geo is None:
            _print({"success": False, "ip_address": ip_address, "error": "No enrichment available"}, sys.stderr)
            return 1
        _print({"success": True, "ip_address": ip_address, **geo.to_dict()})
        return 0

    async def health(self) -> int:
        health = await self.service.health_check()
        _print(health)
        return 0 if health["overall"] else 1


def _print(payload, stream=None):
    print(json.dumps(payload, indent=2, default=str), file=stream or sys.stdout)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="QR scan tracker CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analytics = subparsers.add_parser("analytics", help="Aggregated scan counts for a QR code")
    analytics.add_argument("qr_code_id", type=int)

    scans = subparsers.add_parser("scans", help="List scans, newest first")
    scans.add_argument("--qr-code-id", type=int)
    scans.add_argument("--country")
    scans.add_argument("--device-type")
    scans.add_argument("--limit", type=int, default=10)
    scans.add_argument("--offset", type=int, default=0)

    scan = subparsers.add_parser("scan", help="Show a single scan")
    scan.add_argument("scan_id", type=int)

    resolve_ip = subparsers.add_parser("resolve-ip", help="Run a geolocation lookup")
    resolve_ip.add_argument("ip_address")

    subparsers.add_parser("health", help="Check store and cache health")
    return parser


async def main() -> int:
    args = build_parser().parse_args()
    cli = QRTrackerCLI(verbose=args.verbose)

    try:
        await cli.initialize()
        if args.command == "analytics":
            return await cli.analytics(args.qr_code_id)
        if args.command == "scans":
            return await cli.scans(ScanFilter(
                qr_code_id=args.qr_code_id,
                country=args.country,
                device_type=args.device_type,
                limit=args.limit,
                offset=args.offset,
            ))
        if args.command == "scan":
            return await cli.scan(args.scan_id)
        if args.command == "resolve-ip":
            return await cli.resolve_ip(args.ip_address)
        return await cli.health()
    except ScanTrackerError as e:
        _print({"success": False, "error": e.message, "code": e.code}, sys.stderr)
        return 1
    finally:
        await cli.cleanup()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
