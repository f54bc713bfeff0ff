"""
Field Validator Tests
=====================

Tests for URL normalization and the wire level field limits.
"""

import pytest

from frames_engine.parsing.validators import (
    ValidationError,
    get_byte_length,
    is_https_url,
    is_valid_hex_color,
    is_valid_url,
    is_valid_version,
    normalize_url,
    validate_aspect_ratio,
    validate_caip10,
    validate_frame_image,
    validate_input_text,
    validate_state,
    validate_url,
)


class TestNormalizeUrl:
    """Tests for normalize_url."""

    def test_lowercases_host_and_adds_root_path(self):
        """Scheme and host are lowercased, empty path becomes '/'."""
        assert normalize_url("HTTPS://Example.COM") == "https://example.com/"

    def test_drops_default_port(self):
        """Default ports are removed, others kept."""
        assert normalize_url("https://example.com:443/a") == "https://example.com/a"
        assert normalize_url("http://example.com:8080/a") == "http://example.com:8080/a"

    def test_keeps_query(self):
        assert normalize_url("https://example.com/a?b=1") == "https://example.com/a?b=1"

    @pytest.mark.parametrize("value", ["", "   ", "not a url", "/relative/path", "https://"])
    def test_rejects_non_absolute_urls(self, value):
        """Relative or empty values are invalid."""
        with pytest.raises(ValidationError, match="Invalid URL"):
            normalize_url(value)

    def test_non_special_scheme_kept_verbatim(self):
        """data: and similar schemes are not rewritten."""
        value = "data:image/png;base64,AAAA"
        assert normalize_url(value) == value

    def test_is_valid_url(self):
        assert is_valid_url("https://example.com")
        assert not is_valid_url("example.com")


class TestFrameImage:
    """Tests for validate_frame_image."""

    def test_https_image(self):
        assert validate_frame_image("https://example.com/a.png") == "https://example.com/a.png"

    @pytest.mark.parametrize("mime", ["image/png", "image/jpg", "image/jpeg", "image/gif"])
    def test_allowed_data_urls(self, mime):
        """Base64 data URLs of the four allowed types pass."""
        value = f"data:{mime};base64,AAAA"
        assert validate_frame_image(value) == value

    def test_rejects_other_mime_types(self):
        with pytest.raises(ValidationError, match="MIME types are allowed"):
            validate_frame_image("data:image/svg+xml;base64,AAAA")

    def test_rejects_large_data_url(self):
        """Data URLs are limited to 256KB."""
        value = "data:image/png;base64," + "A" * (256 * 1024)
        with pytest.raises(ValidationError, match="256KB"):
            validate_frame_image(value)

    def test_rejects_other_protocols(self):
        with pytest.raises(ValidationError, match='"data" protocols are allowed'):
            validate_frame_image("ftp://example.com/a.png")


class TestFieldLimits:
    """Byte limits on input text, post URLs and state."""

    def test_byte_length_counts_utf8(self):
        assert get_byte_length("é") == 2
        assert get_byte_length("abc") == 3

    def test_input_text_limit(self):
        """32 bytes pass, 33 fail."""
        assert validate_input_text("a" * 32) == "a" * 32
        with pytest.raises(ValidationError, match="32 bytes"):
            validate_input_text("a" * 33)

    def test_input_text_limit_counts_bytes(self):
        """17 two-byte characters exceed the limit."""
        with pytest.raises(ValidationError):
            validate_input_text("é" * 17)

    def test_input_text_legacy_limit(self):
        """The 1000 byte ceiling of older clients is only applied on request."""
        text = "a" * 500
        with pytest.raises(ValidationError):
            validate_input_text(text)
        assert validate_input_text(text, max_bytes=1000) == text
        with pytest.raises(ValidationError, match="1000 bytes"):
            validate_input_text("a" * 1001, max_bytes=1000)

    def test_post_url_limit(self):
        url = "https://example.com/" + "a" * 300
        with pytest.raises(ValidationError, match="256 bytes"):
            validate_url(url, 256)
        assert validate_url(url) == url

    def test_post_url_limit_counts_bytes(self):
        """256 bytes of two-byte characters pass, one more byte fails."""
        prefix = "https://example.com/"
        url = prefix + "é" * ((256 - len(prefix)) // 2)
        assert get_byte_length(url) == 256
        assert validate_url(url, 256) == url

        with pytest.raises(ValidationError, match="256 bytes"):
            validate_url(url + "a", 256)

    def test_state_limit(self):
        assert validate_state("s" * 4096) == "s" * 4096
        with pytest.raises(ValidationError, match="4096 bytes"):
            validate_state("s" * 4097)

    def test_state_limit_counts_bytes(self):
        """2048 two-byte characters are exactly 4096 bytes."""
        assert validate_state("é" * 2048) == "é" * 2048
        with pytest.raises(ValidationError, match="4096 bytes"):
            validate_state("é" * 2049)


class TestSimpleValidators:
    """Versions, aspect ratios, colors and CAIP-10 targets."""

    @pytest.mark.parametrize("value", ["vNext", "2024-02-09"])
    def test_valid_versions(self, value):
        assert is_valid_version(value)

    @pytest.mark.parametrize("value", ["next", "v2", "2024-2-9", ""])
    def test_invalid_versions(self, value):
        assert not is_valid_version(value)

    def test_aspect_ratio(self):
        assert validate_aspect_ratio("1:1") == "1:1"
        assert validate_aspect_ratio("1.91:1") == "1.91:1"
        with pytest.raises(ValidationError, match="Invalid image aspect ratio"):
            validate_aspect_ratio("16:9")

    def test_hex_color(self):
        assert is_valid_hex_color("#a1b2c3")
        assert is_valid_hex_color("#a1b2c3ff")
        assert not is_valid_hex_color("#fff")
        assert not is_valid_hex_color("a1b2c3")

    def test_https_check(self):
        assert is_https_url("https://example.com")
        assert not is_https_url("http://example.com")

    @pytest.mark.parametrize(
        "value",
        [
            "eip155:7777777:0x060f3edd18c47f59bd23d063bbeb9aa4a8fec6df",
            "eip155:8453:0x060f3edd18c47f59bd23d063bbeb9aa4a8fec6df:123",
        ],
    )
    def test_valid_caip10(self, value):
        assert validate_caip10(value) == value

    @pytest.mark.parametrize(
        "value",
        ["eip155:1", "eip155:mainnet:0xabc", ":1:0xabc", "eip155:1:0xabc:", "https://example.com"],
    )
    def test_invalid_caip10(self, value):
        with pytest.raises(ValidationError, match="Invalid CAIP-10 URL"):
            validate_caip10(value)
