"""
Field Validators
================

Pure functions validating and normalizing single frame field values.

Each validator takes the raw tag content and either returns the normalized
value or raises ValidationError with a human readable message. Callers
(the dialect parsers) turn the exception into a report keyed by the tag
name and keep parsing the remaining fields.

Wire Limits:
    - post URL:        256 bytes
    - input text:      32 bytes
    - state:           4096 bytes
    - data URL image:  256 KiB
    - buttons:         4

All limits count UTF-8 bytes, not characters.
"""

import re
from typing import Optional
from urllib.parse import urlsplit, urlunsplit


POST_URL_MAX_BYTES = 256
INPUT_TEXT_MAX_BYTES = 32
STATE_MAX_BYTES = 4096
DATA_URL_MAX_BYTES = 256 * 1024
MAX_BUTTONS = 4

VALID_ASPECT_RATIOS = ("1:1", "1.91:1")

ALLOWED_DATA_URL_PREFIXES = (
    "image/png;base64,",
    "image/jpg;base64,",
    "image/jpeg;base64,",
    "image/gif;base64,",
)

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.\-]*$")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")
_VERSION_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6,8}$")
_CHAIN_ID_RE = re.compile(r"^[0-9]+$")

# Schemes with an authority component, mapped to their default port
_SPECIAL_SCHEMES = {
    "http": 80,
    "https": 443,
    "ws": 80,
    "wss": 443,
    "ftp": 21,
}


class ValidationError(Exception):
    """Raised when a field value violates a wire-level constraint."""
    pass


def get_byte_length(value: str) -> int:
    """UTF-8 encoded length of value."""
    return len(value.encode("utf-8"))


def normalize_url(value: str) -> str:
    """
    Parse an absolute URL and return its canonical form.

    Scheme and host are lowercased, default ports are dropped and an
    empty path on http-like URLs becomes "/", so "https://Example.com"
    normalizes to "https://example.com/".

    Raises:
        ValidationError: If value is not an absolute URL
    """
    candidate = value.strip()

    if not candidate or _CONTROL_CHARS_RE.search(candidate):
        raise ValidationError("Invalid URL")

    try:
        parts = urlsplit(candidate)
        port = parts.port
    except ValueError as e:
        raise ValidationError("Invalid URL") from e

    scheme = parts.scheme.lower()
    if not scheme or not _SCHEME_RE.match(scheme):
        raise ValidationError("Invalid URL")

    if scheme not in _SPECIAL_SCHEMES:
        # data:, mailto:, eip155: ... keep everything after the scheme verbatim
        return scheme + candidate[len(scheme):]

    host = parts.hostname
    if not host or " " in host:
        raise ValidationError("Invalid URL")

    netloc = f"[{host}]" if ":" in host else host
    if parts.username is not None:
        userinfo = parts.username
        if parts.password is not None:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"
    if port is not None and port != _SPECIAL_SCHEMES[scheme]:
        netloc = f"{netloc}:{port}"

    path = (parts.path or "/").replace(" ", "%20")
    query = parts.query.replace(" ", "%20")
    fragment = parts.fragment.replace(" ", "%20")

    return urlunsplit((scheme, netloc, path, query, fragment))


def is_valid_version(value: str) -> bool:
    """Frame versions are "vNext" or a YYYY-MM-DD date."""
    return value == "vNext" or bool(_VERSION_DATE_RE.match(value))


def validate_frame_image(value: str) -> str:
    """
    Validate a frame image URL.

    Accepts http/https URLs and base64 data URLs of png, jpg, jpeg or gif
    images up to 256 KiB.

    Returns:
        Normalized URL
    """
    href = normalize_url(value)
    scheme = href.split(":", 1)[0]

    if scheme == "data":
        mime = href[len("data:"):len("data:") + 18].lower()

        if not mime.startswith(ALLOWED_DATA_URL_PREFIXES):
            raise ValidationError(
                'Invalid image URL. Only "image/png", "image/jpg", '
                '"image/jpeg" and "image/gif" MIME types are allowed'
            )

        if get_byte_length(href) > DATA_URL_MAX_BYTES:
            raise ValidationError("Invalid image URL. Image size exceeds 256KB limit")

        return href

    if scheme not in ("http", "https"):
        raise ValidationError(
            'Invalid image URL. Only "http", "https" and "data" protocols are allowed'
        )

    return href


def validate_input_text(value: str, max_bytes: int = INPUT_TEXT_MAX_BYTES) -> str:
    if get_byte_length(value) > max_bytes:
        raise ValidationError(
            f"Invalid input text. Text size exceeds {max_bytes} bytes limit"
        )
    return value


def validate_aspect_ratio(value: str) -> str:
    if value not in VALID_ASPECT_RATIOS:
        raise ValidationError("Invalid image aspect ratio")
    return value


def validate_url(value: str, max_length: Optional[int] = None) -> str:
    """
    Validate a generic absolute URL (post URLs, button targets).

    Args:
        value: Raw URL
        max_length: Optional UTF-8 byte ceiling

    Returns:
        Normalized URL
    """
    href = normalize_url(value)

    if max_length is not None and get_byte_length(value) > max_length:
        raise ValidationError(
            f"Invalid URL. URL size exceeds {max_length} bytes limit "
            "(system params are appended to post_url when it is used)."
        )

    return href


def validate_state(value: str) -> str:
    if get_byte_length(value) > STATE_MAX_BYTES:
        raise ValidationError(
            f"Invalid state. State size exceeds {STATE_MAX_BYTES} bytes limit"
        )
    return value


def validate_caip10(value: str) -> str:
    """
    Validate a mint target of the form namespace:chainId:address[:tokenId].

    The value is returned verbatim.
    """
    parts = value.split(":")

    if len(parts) not in (3, 4):
        raise ValidationError("Invalid CAIP-10 URL")

    namespace, chain_id, address = parts[:3]
    if not namespace or not _CHAIN_ID_RE.match(chain_id) or not address:
        raise ValidationError("Invalid CAIP-10 URL")

    if len(parts) == 4 and not parts[3]:
        raise ValidationError("Invalid CAIP-10 URL")

    return value


def is_valid_hex_color(value: str) -> bool:
    return bool(_HEX_COLOR_RE.match(value))


def is_valid_url(value: str) -> bool:
    """True when value parses as an absolute URL."""
    try:
        normalize_url(value)
    except ValidationError:
        return False
    return True


def is_https_url(value: str) -> bool:
    return urlsplit(value.strip()).scheme.lower() == "https"
