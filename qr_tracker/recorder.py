"""Scan persistence."""

import logging
from datetime import datetime, timezone
from typing import Optional

from .common.user_agent import DeviceInfo
from .common.validators import clean_optional, parse_device_type
from .database.base import QRCodeLookup, ScanStore
from .database.models import GeoEnrichment, QRCode, ScanEvent
from .errors import NotFoundError


class ScanRecorder:
    """Append one scan event per resolved hit. No deduplication."""

    def __init__(
        self,
        store: ScanStore,
        qr_codes: QRCodeLookup,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.qr_codes = qr_codes
        self.logger = logger or logging.getLogger(__name__)

    async def record(
        self,
        qr_code: QRCode,
        client_ip: Optional[str],
        device: DeviceInfo,
        geo: Optional[GeoEnrichment] = None,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
    ) -> ScanEvent:
        """Persist a scan for an already resolved QR code.

        Raises:
            PersistenceError: If the store rejects the write
        """
        scan = ScanEvent(
            qr_code_id=qr_code.id,
            scanned_at=datetime.now(timezone.utc),
            ip_address=client_ip,
            device_type=device.device_type,
            browser=device.browser,
            os=device.os,
            user_agent=user_agent,
            referrer=referrer,
        )
        scan.apply_geo(geo)

        stored = await self.store.append_scan(scan)
        self.logger.info(
            f"Recorded scan {stored.id} for {qr_code.short_code} "
            f"(device={stored.device_type}, country={stored.country})"
        )
        return stored

    async def record_manual(
        self,
        qr_code_id: int,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
        country: Optional[str] = None,
        city: Optional[str] = None,
        device_type: Optional[str] = None,
    ) -> ScanEvent:
        """Insert a scan supplied directly by a caller, e.g. for testing.

        Raises:
            NotFoundError: If the QR code does not exist
            ValidationError: If the device type is not recognized
            PersistenceError: If the store fails
        """
        device_type = parse_device_type(device_type)

        qr_code = await self.qr_codes.get_qr_code_by_id(qr_code_id)
        if qr_code is None:
            raise NotFoundError("QR Code not found", code="QR_CODE_NOT_FOUND")

        scan = ScanEvent(
            qr_code_id=qr_code.id,
            scanned_at=datetime.now(timezone.utc),
            user_agent=clean_optional(user_agent),
            referrer=clean_optional(referrer),
            country=clean_optional(country),
            city=clean_optional(city),
            device_type=device_type,
        )
        stored = await self.store.append_scan(scan)
        self.logger.info(f"Recorded manual scan {stored.id} for QR code {qr_code_id}")
        return stored
