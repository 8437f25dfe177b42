"""Common utilities for the QR scan tracker."""

from .headers import extract_forwarded_headers, get_client_ip, header_value, should_enrich_ip
from .logging_config import setup_logging
from .url_builder import compose_destination_url
from .user_agent import DeviceInfo, classify_user_agent
from .validators import is_valid_url, parse_qr_code_id

__all__ = [
    "extract_forwarded_headers",
    "get_client_ip",
    "header_value",
    "should_enrich_ip",
    "setup_logging",
    "compose_destination_url",
    "DeviceInfo",
    "classify_user_agent",
    "is_valid_url",
    "parse_qr_code_id",
]
