"""Validation utilities for the QR scan tracker."""

from datetime import datetime, timezone
from typing import Any, Optional, Tuple
from urllib.parse import urlsplit

from ..errors import ValidationError
from ..database.models import DEVICE_TYPES


MAX_URL_LENGTH = 2048


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate that a URL is absolute.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required"

    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"

    try:
        result = urlsplit(url.strip())
        # Raises for non-numeric or out-of-range ports
        result.port
    except ValueError as e:
        return False, f"Invalid URL format: {str(e)}"

    if not result.scheme:
        return False, "URL must include a scheme"

    hostname = result.hostname
    if not result.netloc or not hostname:
        return False, "URL must have a valid host"

    if any(ch.isspace() or not ch.isprintable() for ch in hostname):
        return False, "URL host contains invalid characters"

    return True, ""


def parse_qr_code_id(value: Any) -> int:
    """Parse a QR code id from a query string or JSON value.

    Accepts integers and integer strings.

    Raises:
        ValidationError: MISSING_QR_CODE_ID or INVALID_QR_CODE_ID
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("QR Code ID is required", code="MISSING_QR_CODE_ID")
    return parse_int_id(value, "QR Code ID must be a valid integer", "INVALID_QR_CODE_ID")


def parse_int_id(value: Any, message: str, code: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(message, code=code)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValidationError(message, code=code)


def parse_device_type(value: Optional[str]) -> Optional[str]:
    """Normalize an optional device type, rejecting unknown values."""
    if value is None or not value.strip():
        return None
    device_type = value.strip().lower()
    if device_type not in DEVICE_TYPES:
        raise ValidationError(
            f"deviceType must be one of: {', '.join(DEVICE_TYPES)}",
            code="INVALID_DEVICE_TYPE",
        )
    return device_type


def parse_timestamp(value: Optional[str], name: str) -> Optional[datetime]:
    """Parse an ISO-8601 filter bound. Naive values are taken as UTC."""
    if value is None or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"{name} must be an ISO-8601 timestamp")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def clean_optional(value: Optional[str]) -> Optional[str]:
    """Trim a string; blank becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None
