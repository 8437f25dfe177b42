"""User-agent classification."""

from dataclasses import dataclass
from typing import Optional

from user_agents import parse as parse_user_agent


# Family reported by ua-parser when nothing matched
UNRECOGNIZED_FAMILY = "Other"


@dataclass(frozen=True)
class DeviceInfo:
    device_type: str
    browser: Optional[str] = None
    os: Optional[str] = None


def classify_user_agent(user_agent: Optional[str]) -> DeviceInfo:
    """Classify a raw user-agent string.

    Crawlers are always ``bot``. Otherwise the detected form factor wins and
    an undetectable one falls back to ``desktop``, as does a missing header.

    Args:
        user_agent: Raw User-Agent header value

    Returns:
        DeviceInfo with device type, browser family and OS family
    """
    if not user_agent or not user_agent.strip():
        return DeviceInfo(device_type="desktop")

    ua = parse_user_agent(user_agent)

    if ua.is_bot:
        device_type = "bot"
    elif ua.is_tablet:
        device_type = "tablet"
    elif ua.is_mobile:
        device_type = "mobile"
    else:
        device_type = "desktop"

    return DeviceInfo(
        device_type=device_type,
        browser=_family(ua.browser.family),
        os=_family(ua.os.family),
    )


def _family(family: Optional[str]) -> Optional[str]:
    if not family or family == UNRECOGNIZED_FAMILY:
        return None
    return family
