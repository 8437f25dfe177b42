"""URL building utilities for redirect destinations."""

from typing import Dict, List, Optional
from urllib.parse import quote_plus, unquote_plus, urlsplit, urlunsplit

from ..database.models import UTMParams
from ..errors import MalformedDestinationError
from .validators import is_valid_url


def compose_destination_url(
    destination_url: str,
    utm_params: Optional[UTMParams] = None,
) -> str:
    """Add UTM parameters to a destination URL.

    Each non-empty UTM value replaces an existing ``utm_<key>`` parameter or
    is appended. Every other query segment is kept exactly as written.

    Args:
        destination_url: Absolute destination URL
        utm_params: Optional UTM record

    Returns:
        The composed absolute URL

    Raises:
        MalformedDestinationError: If the destination is not an absolute URL
    """
    is_valid, error = is_valid_url(destination_url)
    if not is_valid:
        raise MalformedDestinationError(f"Cannot compose destination '{destination_url}': {error}")

    overrides = utm_params.to_query_params() if utm_params else {}
    if not overrides:
        return destination_url

    parts = urlsplit(destination_url)
    query = merge_query_params(parts.query, overrides)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def merge_query_params(query: str, overrides: Dict[str, str]) -> str:
    """Set parameters on a raw query string without re-encoding the rest.

    The first occurrence of an overridden key is replaced in place and later
    duplicates are dropped; keys not present are appended in order.
    """
    segments: List[str] = []
    written = set()

    for segment in query.split("&") if query else []:
        if not segment:
            continue
        key = unquote_plus(segment.split("=", 1)[0])
        if key in overrides:
            if key not in written:
                segments.append(_encode_pair(key, overrides[key]))
                written.add(key)
            continue
        segments.append(segment)

    for key, value in overrides.items():
        if key not in written:
            segments.append(_encode_pair(key, value))

    return "&".join(segments)


def _encode_pair(key: str, value: str) -> str:
    return f"{quote_plus(key)}={quote_plus(value)}"
