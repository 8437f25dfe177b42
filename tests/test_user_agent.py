"""Tests for user-agent classification."""

import pytest

from qr_tracker.common.user_agent import classify_user_agent


IPHONE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 16_6 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.6 Mobile/15E148 Safari/604.1"
)
IPAD_UA = (
    "Mozilla/5.0 (iPad; CPU OS 16_6 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.6 Mobile/15E148 Safari/604.1"
)
WINDOWS_CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
GOOGLEBOT_UA = "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)"
GOOGLEBOT_MOBILE_UA = (
    "Mozilla/5.0 (Linux; Android 6.0.1; Nexus 5X Build/MMB29P) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Mobile Safari/537.36 "
    "(compatible; Googlebot/2.1; +http://www.google.com/bot.html)"
)


class TestClassifyUserAgent:

    def test_mobile(self):
        info = classify_user_agent(IPHONE_UA)
        assert info.device_type == "mobile"
        assert info.os == "iOS"
        assert info.browser == "Mobile Safari"

    def test_tablet(self):
        assert classify_user_agent(IPAD_UA).device_type == "tablet"

    def test_desktop(self):
        info = classify_user_agent(WINDOWS_CHROME_UA)
        assert info.device_type == "desktop"
        assert info.browser == "Chrome"
        assert info.os == "Windows"

    @pytest.mark.parametrize("ua", [GOOGLEBOT_UA, GOOGLEBOT_MOBILE_UA])
    def test_crawler_is_bot_regardless_of_form_factor(self, ua):
        assert classify_user_agent(ua).device_type == "bot"

    @pytest.mark.parametrize("ua", [None, "", "   "])
    def test_missing_user_agent(self, ua):
        info = classify_user_agent(ua)
        assert info.device_type == "desktop"
        assert info.browser is None
        assert info.os is None

    def test_unrecognized_user_agent_defaults_to_desktop(self):
        info = classify_user_agent("SomethingUnheardOf/1.0")
        assert info.device_type == "desktop"
        assert info.os is None
