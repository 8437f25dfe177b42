"""Abstract collaborators for QR code lookup and scan storage."""

from abc import ABC, abstractmethod
from typing import List, Optional

from .models import QRCode, ScanEvent, ScanFilter


class QRCodeLookup(ABC):
    """Read-only access to QR codes owned by the management subsystem."""

    @abstractmethod
    async def get_qr_code_by_short_code(self, short_code: str) -> Optional[QRCode]:
        """Get a QR code by its short code.

        Args:
            short_code: The short code to lookup (case-sensitive)

        Returns:
            The QR code if found, None otherwise

        Raises:
            PersistenceError: If the store cannot be read
        """
        pass

    @abstractmethod
    async def get_qr_code_by_id(self, qr_code_id: int) -> Optional[QRCode]:
        """Get a QR code by id.

        Args:
            qr_code_id: The QR code id

        Returns:
            The QR code if found, None otherwise

        Raises:
            PersistenceError: If the store cannot be read
        """
        pass


class ScanStore(ABC):
    """Append-only storage for scan events."""

    @abstractmethod
    async def append_scan(self, scan: ScanEvent) -> ScanEvent:
        """Persist a scan event.

        Args:
            scan: Candidate event without an id

        Returns:
            The stored event with its assigned id

        Raises:
            PersistenceError: If the write fails
        """
        pass

    @abstractmethod
    async def list_scans_by_qr_code(self, qr_code_id: int) -> List[ScanEvent]:
        """Return every scan recorded for a QR code.

        Raises:
            PersistenceError: If the store cannot be read
        """
        pass

    @abstractmethod
    async def get_scan(self, scan_id: int) -> Optional[ScanEvent]:
        """Get a single scan by id, or None."""
        pass

    @abstractmethod
    async def list_scans(self, scan_filter: ScanFilter) -> List[ScanEvent]:
        """List scans matching a filter, newest first.

        Args:
            scan_filter: Filter and pagination options

        Returns:
            A page of scan events
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is reachable."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release store resources."""
        pass
