"""
Shared Parsing Helpers
======================

Small helpers used by more than one dialect parser. Dialect specific rules
stay in the dialect modules.
"""

from typing import Any, Callable, Optional

from frames_engine.parsing.document import FrameDocument
from frames_engine.parsing.reporter import Reporter
from frames_engine.parsing.validators import ValidationError, validate_frame_image


# Title written by get_frame_html when the caller does not provide one
DEFAULT_FRAME_TITLE = "frame"

MISSING_TITLE_MESSAGE = (
    'Missing title, please provide <title> or <meta property="og:title"> tag.'
)
DEFAULT_TITLE_MESSAGE = (
    f'Title is set to the default "{DEFAULT_FRAME_TITLE}", '
    'please provide your own <title> or <meta property="og:title"> tag.'
)


def validate_field(
    reporter: Reporter,
    key: str,
    validator: Callable[..., str],
    value: str,
    *args: Any,
) -> Optional[str]:
    """
    Run validator on value, reporting a failure at key.

    Returns:
        The normalized value, or None if validation failed
    """
    try:
        return validator(value, *args)
    except ValidationError as e:
        reporter.error(key, e)
        return None


def parse_title(
    document: FrameDocument,
    reporter: Reporter,
    from_request_method: str = "GET",
) -> Optional[str]:
    """
    Resolve the frame title: og:title meta first, then <title>.

    Missing or placeholder titles are warnings, and only for documents
    fetched with GET (POST responses are not user facing pages).
    """
    title = document.get_meta_tag("og:title") or document.title or None
    report = from_request_method.upper() != "POST"

    if title is None:
        if report:
            reporter.warn("title", MISSING_TITLE_MESSAGE)
        return None

    if title == DEFAULT_FRAME_TITLE and report:
        reporter.warn("title", DEFAULT_TITLE_MESSAGE)

    return title


def parse_og_image(
    document: FrameDocument,
    reporter: Reporter,
    from_request_method: str = "GET",
) -> Optional[str]:
    """og:image is optional; missing is a warning for GET documents only."""
    og_image = document.get_meta_tag("og:image")

    if not og_image:
        if from_request_method.upper() != "POST":
            reporter.warn("og:image", 'Missing meta tag "og:image"')
        return None

    return validate_field(reporter, "og:image", validate_frame_image, og_image)
