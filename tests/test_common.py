"""Tests for common utilities."""

from urllib.parse import parse_qsl, urlsplit

import pytest
from starlette.datastructures import Headers

from qr_tracker.common.headers import (
    extract_forwarded_headers,
    get_client_ip,
    header_value,
    should_enrich_ip,
)
from qr_tracker.common.url_builder import compose_destination_url
from qr_tracker.common.validators import (
    is_valid_url,
    parse_device_type,
    parse_qr_code_id,
    parse_timestamp,
)
from qr_tracker.database.models import UTMParams
from qr_tracker.errors import (
    MalformedDestinationError,
    NotFoundError,
    ScanTrackerError,
    ValidationError,
)


def query_pairs(url):
    return parse_qsl(urlsplit(url).query, keep_blank_values=True)


class TestClientIdentifier:
    """Test client IP extraction."""

    def test_first_forwarded_for_entry_wins(self):
        headers = {
            "X-Forwarded-For": " 203.0.113.7 , 10.0.0.1",
            "X-Real-IP": "198.51.100.2",
        }
        assert get_client_ip(headers, "127.0.0.1") == "203.0.113.7"

    def test_real_ip_when_no_forwarded_for(self):
        headers = {"x-real-ip": "198.51.100.2"}
        assert get_client_ip(headers, "127.0.0.1") == "198.51.100.2"

    def test_empty_forwarded_for_falls_through(self):
        headers = {"X-Forwarded-For": " , 10.0.0.1", "X-Real-IP": "198.51.100.2"}
        assert get_client_ip(headers, None) == "198.51.100.2"

    def test_peer_address_fallback(self):
        assert get_client_ip({}, "192.0.2.10") == "192.0.2.10"

    def test_nothing_available(self):
        assert get_client_ip({}, None) is None
        assert get_client_ip({"X-Real-IP": "  "}, "") is None

    def test_repeated_forwarded_for_keeps_first_hop(self):
        headers = Headers(
            raw=[
                (b"x-forwarded-for", b"203.0.113.7"),
                (b"x-forwarded-for", b"10.0.0.1, 10.0.0.2"),
            ]
        )
        assert get_client_ip(headers, "127.0.0.1") == "203.0.113.7"

    def test_header_value_joins_repeats_case_insensitively(self):
        headers = Headers(raw=[(b"x-real-ip", b"198.51.100.2"), (b"x-real-ip", b"198.51.100.3")])
        assert header_value(headers, "X-Real-Ip") == "198.51.100.2, 198.51.100.3"
        assert header_value({"User-Agent": "curl/8.0"}, "user-agent") == "curl/8.0"
        assert header_value({}, "referer") is None
        assert get_client_ip(headers, None) == "198.51.100.2"

    def test_extract_forwarded_headers(self):
        result = extract_forwarded_headers({"X-Forwarded-Proto": "https", "X-Real-IP": "1.2.3.4"})
        assert result["forwarded_proto"] == "https"
        assert result["real_ip"] == "1.2.3.4"
        assert result["forwarded_for"] is None

    def test_should_enrich_ip(self):
        assert should_enrich_ip("203.0.113.7")
        assert should_enrich_ip("2001:db8::1")
        assert not should_enrich_ip("127.0.0.1")
        assert not should_enrich_ip("::1")
        assert not should_enrich_ip(None)
        assert not should_enrich_ip("not-an-ip")


class TestValidators:
    """Test validation utilities."""

    def test_valid_urls(self):
        valid, _ = is_valid_url("https://example.com")
        assert valid

        valid, _ = is_valid_url("http://example.com:8080/path?query=value#frag")
        assert valid

    def test_invalid_urls(self):
        valid, error = is_valid_url("")
        assert not valid
        assert "required" in error.lower()

        valid, _ = is_valid_url("example.com/path")
        assert not valid

        valid, _ = is_valid_url("/relative/path")
        assert not valid

        valid, error = is_valid_url("http://example.com:70000/")
        assert not valid
        assert "format" in error.lower()

        valid, error = is_valid_url("http://bad host.example/")
        assert not valid
        assert "host" in error.lower()

    def test_parse_qr_code_id(self):
        assert parse_qr_code_id(7) == 7
        assert parse_qr_code_id("12") == 12

    def test_parse_qr_code_id_missing(self):
        with pytest.raises(ValidationError) as exc:
            parse_qr_code_id(None)
        assert exc.value.code == "MISSING_QR_CODE_ID"

    @pytest.mark.parametrize("value", ["abc", "1.5", True, 3.2, []])
    def test_parse_qr_code_id_invalid(self, value):
        with pytest.raises(ValidationError) as exc:
            parse_qr_code_id(value)
        assert exc.value.code == "INVALID_QR_CODE_ID"

    def test_parse_device_type(self):
        assert parse_device_type(" Mobile ") == "mobile"
        assert parse_device_type("") is None
        with pytest.raises(ValidationError) as exc:
            parse_device_type("smartwatch")
        assert exc.value.code == "INVALID_DEVICE_TYPE"

    def test_parse_timestamp(self):
        parsed = parse_timestamp("2024-03-01T10:00:00Z", "startDate")
        assert parsed.utcoffset().total_seconds() == 0
        assert parse_timestamp("2024-03-01", "startDate").tzinfo is not None
        with pytest.raises(ValidationError):
            parse_timestamp("yesterday", "startDate")


class TestURLComposer:
    """Test UTM composition."""

    def test_adds_only_provided_keys(self):
        url = compose_destination_url("https://example.com/x?a=1", UTMParams(source="ig"))

        pairs = query_pairs(url)
        assert ("a", "1") in pairs
        assert ("utm_source", "ig") in pairs
        assert [k for k, _ in pairs if k.startswith("utm_")] == ["utm_source"]

    def test_no_utm_record_leaves_url_unchanged(self):
        url = "https://example.com/x?b=2&a=1#top"
        assert compose_destination_url(url, None) == url

    def test_empty_values_leave_url_unchanged(self):
        url = "https://example.com/x?a=1&utm_medium=email"
        assert compose_destination_url(url, UTMParams(source="", medium=None)) == url

    def test_overwrites_existing_utm_and_keeps_others(self):
        url = compose_destination_url(
            "https://example.com/x?utm_source=old&utm_medium=email&q=a%20b",
            UTMParams(source="qr", campaign="launch"),
        )

        assert url.startswith("https://example.com/x?")
        assert "q=a%20b" in url
        pairs = dict(query_pairs(url))
        assert pairs["utm_source"] == "qr"
        assert pairs["utm_medium"] == "email"
        assert pairs["utm_campaign"] == "launch"

    def test_duplicate_utm_keys_collapse(self):
        url = compose_destination_url(
            "https://example.com/?utm_source=a&x=1&utm_source=b",
            UTMParams(source="qr"),
        )
        assert query_pairs(url) == [("utm_source", "qr"), ("x", "1")]

    def test_all_five_keys_and_fragment(self):
        url = compose_destination_url(
            "https://example.com/page#section",
            UTMParams(source="s", medium="m", campaign="c", term="t", content="spring sale"),
        )

        assert url.endswith("#section")
        assert dict(query_pairs(url)) == {
            "utm_source": "s",
            "utm_medium": "m",
            "utm_campaign": "c",
            "utm_term": "t",
            "utm_content": "spring sale",
        }

    @pytest.mark.parametrize(
        "destination",
        [
            "not a url",
            "",
            "/just/a/path",
            "http://[::1",
            "http://exa mple.com/",
            "http://example.com:99999/",
            "http://example.com:abc/",
            "http://exam\x00ple.com/",
            "http://user@:8080/",
            "https://example.com/" + "a" * 2100,
        ],
    )
    def test_malformed_destination(self, destination):
        with pytest.raises(MalformedDestinationError):
            compose_destination_url(destination, UTMParams(source="qr"))

    def test_malformed_destination_without_utm(self):
        with pytest.raises(MalformedDestinationError):
            compose_destination_url("nope", None)


class TestErrors:

    def test_default_and_overridden_codes(self):
        assert ScanTrackerError("boom").code == "INTERNAL_ERROR"
        assert NotFoundError("gone").code == "NOT_FOUND"
        assert NotFoundError("gone", code=None).code == "NOT_FOUND"
        err = NotFoundError("QR Code not found", code="QR_CODE_NOT_FOUND")
        assert err.code == "QR_CODE_NOT_FOUND"
        assert err.message == str(err) == "QR Code not found"
