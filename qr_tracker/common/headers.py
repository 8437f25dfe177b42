"""Header parsing utilities for client identification."""

import ipaddress
from typing import Dict, Mapping, Optional


def header_value(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup.

    Repeated headers are joined with ", " in arrival order. Starlette
    ``Headers.items()`` yields every raw copy, so no hop is lost.
    """
    name = name.lower()
    values = [v for k, v in headers.items() if k.lower() == name]
    if not values:
        return None
    return ", ".join(values)


def extract_forwarded_headers(headers: Mapping[str, str]) -> Dict[str, Optional[str]]:
    """Extract proxy headers from request.

    Args:
        headers: Request headers

    Returns:
        Dictionary with forwarded_for, real_ip, forwarded_proto
    """
    return {
        "forwarded_for": header_value(headers, "x-forwarded-for"),
        "real_ip": header_value(headers, "x-real-ip"),
        "forwarded_proto": header_value(headers, "x-forwarded-proto"),
    }


def get_client_ip(
    headers: Mapping[str, str],
    peer_host: Optional[str] = None,
) -> Optional[str]:
    """Resolve the visitor IP.

    Priority:
    1. First entry of X-Forwarded-For
    2. X-Real-IP
    3. Transport-level peer address

    Args:
        headers: Request headers
        peer_host: Peer address of the connection, if known

    Returns:
        IP string, or None when nothing usable is present
    """
    forwarded = extract_forwarded_headers(headers)

    forwarded_for = forwarded["forwarded_for"]
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = (forwarded["real_ip"] or "").split(",")[0].strip()
    if real_ip:
        return real_ip

    peer = (peer_host or "").strip()
    return peer or None


def should_enrich_ip(ip_address: Optional[str]) -> bool:
    """Whether an IP may be submitted for geolocation.

    Missing, unparsable and loopback addresses are skipped.
    """
    if not ip_address:
        return False
    try:
        return not ipaddress.ip_address(ip_address).is_loopback
    except ValueError:
        return False
