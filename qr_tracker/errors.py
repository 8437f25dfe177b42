"""Error types for the QR scan tracker."""

from typing import Optional


class ScanTrackerError(Exception):
    """Base error carrying a stable, user-visible error code."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class ValidationError(ScanTrackerError):
    """Malformed identifier or request input."""

    code = "VALIDATION_ERROR"


class NotFoundError(ScanTrackerError):
    """Unknown short code, QR code id or scan id."""

    code = "NOT_FOUND"


class ExternalServiceError(ScanTrackerError):
    """Geolocation provider failure. Recovered inside the geo client."""

    code = "EXTERNAL_SERVICE_ERROR"


class PersistenceError(ScanTrackerError):
    """Store read or write failure."""

    code = "PERSISTENCE_ERROR"


class MalformedDestinationError(ScanTrackerError):
    """Destination URL cannot be parsed as an absolute URL."""

    code = "MALFORMED_DESTINATION"
