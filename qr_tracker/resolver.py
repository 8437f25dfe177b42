"""Redirect resolution: look up, track, compose."""

import logging
from typing import Mapping, Optional

from .common.headers import get_client_ip, header_value, should_enrich_ip
from .common.url_builder import compose_destination_url
from .common.user_agent import classify_user_agent
from .database.base import QRCodeLookup
from .errors import NotFoundError, PersistenceError
from .geo import GeoEnrichmentClient
from .recorder import ScanRecorder


FAIL_CLOSED = "fail_closed"
FAIL_OPEN = "fail_open"
SCAN_WRITE_POLICIES = (FAIL_CLOSED, FAIL_OPEN)


class RedirectResolver:
    """Turn a short code hit into a tracked redirect target."""

    def __init__(
        self,
        qr_codes: QRCodeLookup,
        recorder: ScanRecorder,
        geo_client: GeoEnrichmentClient,
        scan_write_policy: str = FAIL_CLOSED,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize redirect resolver.

        Args:
            qr_codes: QR code lookup collaborator
            recorder: Scan recorder
            geo_client: Geolocation client
            scan_write_policy: ``fail_closed`` refuses to redirect when the
                scan cannot be stored, ``fail_open`` redirects anyway
            logger: Optional logger
        """
        if scan_write_policy not in SCAN_WRITE_POLICIES:
            raise ValueError(f"Unknown scan write policy: {scan_write_policy}")
        self.qr_codes = qr_codes
        self.recorder = recorder
        self.geo_client = geo_client
        self.scan_write_policy = scan_write_policy
        self.logger = logger or logging.getLogger(__name__)

    async def resolve(
        self,
        short_code: str,
        headers: Mapping[str, str],
        peer_host: Optional[str] = None,
    ) -> str:
        """Resolve a short code to its composed destination, recording the scan.

        Args:
            short_code: Short code from the request path
            headers: Request headers
            peer_host: Transport-level peer address

        Returns:
            Absolute URL to redirect to

        Raises:
            NotFoundError: Unknown short code; nothing is recorded
            PersistenceError: Lookup failed, or the scan write failed under
                the fail-closed policy
            MalformedDestinationError: Destination cannot be composed; the
                scan stays recorded
        """
        qr_code = await self.qr_codes.get_qr_code_by_short_code(short_code)
        if qr_code is None:
            self.logger.warning(f"Short code not found: {short_code}")
            raise NotFoundError("QR Code not found", code="QR_CODE_NOT_FOUND")

        user_agent = header_value(headers, "user-agent") or None
        referrer = header_value(headers, "referer") or None

        client_ip = get_client_ip(headers, peer_host)
        device = classify_user_agent(user_agent)

        geo = None
        if should_enrich_ip(client_ip):
            geo = await self.geo_client.lookup(client_ip)

        try:
            await self.recorder.record(
                qr_code,
                client_ip=client_ip,
                device=device,
                geo=geo,
                user_agent=user_agent,
                referrer=referrer,
            )
        except PersistenceError as e:
            if self.scan_write_policy == FAIL_CLOSED:
                raise
            self.logger.error(f"Redirecting {short_code} untracked: {e.message}")

        destination = compose_destination_url(qr_code.destination_url, qr_code.utm_params)
        self.logger.debug(f"Resolved {short_code} -> {destination}")
        return destination
