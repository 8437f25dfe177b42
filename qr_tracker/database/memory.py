"""In-memory store used for local development and tests."""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from .base import QRCodeLookup, ScanStore
from .models import QRCode, ScanEvent, ScanFilter


class InMemoryStore(QRCodeLookup, ScanStore):
    """QR code lookup and scan store backed by plain dictionaries.

    Appends never suspend, so concurrent requests on one event loop cannot
    interleave inside a write.
    """

    def __init__(
        self,
        qr_codes: Optional[Iterable[QRCode]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self._qr_by_id: Dict[int, QRCode] = {}
        self._qr_by_code: Dict[str, QRCode] = {}
        self._scans: List[ScanEvent] = []
        self._next_scan_id = 1

        for qr_code in qr_codes or ():
            self.add_qr_code(qr_code)

    def add_qr_code(self, qr_code: QRCode) -> None:
        """Register a QR code. Stands in for the management subsystem."""
        if qr_code.short_code in self._qr_by_code:
            raise ValueError(f"Short code '{qr_code.short_code}' already exists")
        self._qr_by_id[qr_code.id] = qr_code
        self._qr_by_code[qr_code.short_code] = qr_code

    async def get_qr_code_by_short_code(self, short_code: str) -> Optional[QRCode]:
        return self._qr_by_code.get(short_code)

    async def get_qr_code_by_id(self, qr_code_id: int) -> Optional[QRCode]:
        return self._qr_by_id.get(qr_code_id)

    async def append_scan(self, scan: ScanEvent) -> ScanEvent:
        stored = replace(scan, id=self._next_scan_id)
        self._next_scan_id += 1
        self._scans.append(stored)
        self.logger.debug(f"Stored scan {stored.id} for QR code {stored.qr_code_id}")
        return replace(stored)

    async def list_scans_by_qr_code(self, qr_code_id: int) -> List[ScanEvent]:
        return [replace(s) for s in self._scans if s.qr_code_id == qr_code_id]

    async def get_scan(self, scan_id: int) -> Optional[ScanEvent]:
        for scan in self._scans:
            if scan.id == scan_id:
                return replace(scan)
        return None

    async def list_scans(self, scan_filter: ScanFilter) -> List[ScanEvent]:
        matching = [s for s in self._scans if scan_filter.matches(s)]
        matching.sort(key=lambda s: (s.scanned_at, s.id), reverse=True)
        page = matching[scan_filter.offset:scan_filter.offset + scan_filter.limit]
        return [replace(s) for s in page]

    def scan_count(self, qr_code_id: Optional[int] = None) -> int:
        if qr_code_id is None:
            return len(self._scans)
        return sum(1 for s in self._scans if s.qr_code_id == qr_code_id)

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        pass
