"""
Primary Dialect Parser
======================

Parses the primary flat meta tag dialect ("fc:frame:*").

Tags:
    fc:frame                      version, required ("vNext" or YYYY-MM-DD)
    fc:frame:image                image, required
    og:image                      Open Graph image, warning when missing
    fc:frame:image:aspect_ratio   "1:1" | "1.91:1"
    fc:frame:input:text           input placeholder, <= 32 bytes
    fc:frame:post_url             post URL, <= 256 bytes, defaults to fallback
    fc:frame:state                opaque state, <= 4096 bytes
    fc:frame:button:*             see parsing.buttons

All problems are collected in one pass; the returned frame keeps every
field that did validate.
"""

import logging

from frames_engine.models.frame import Frame
from frames_engine.models.reports import ParseStatus, Specification
from frames_engine.models.results import ParseResult
from frames_engine.parsing.buttons import parse_buttons
from frames_engine.parsing.common import parse_og_image, parse_title, validate_field
from frames_engine.parsing.document import FrameDocument
from frames_engine.parsing.reporter import Reporter
from frames_engine.parsing.validators import (
    POST_URL_MAX_BYTES,
    is_valid_version,
    validate_aspect_ratio,
    validate_frame_image,
    validate_input_text,
    validate_state,
    validate_url,
)


logger = logging.getLogger(__name__)

BUTTON_PREFIX = "fc:frame:button"


def parse_farcaster_frame(
    document: FrameDocument,
    *,
    reporter: Reporter,
    fallback_post_url: str,
    from_request_method: str = "GET",
) -> ParseResult:
    """
    Parse the primary dialect.

    Args:
        document: Loaded HTML document
        reporter: Reporter for this dialect
        fallback_post_url: Post URL used when fc:frame:post_url is absent
            (usually the URL the frame was fetched from)
        from_request_method: "GET" or "POST"; POST responses skip the
            og:image and title warnings

    Returns:
        ParseResult with specification "farcaster"
    """
    frame = Frame()

    version = document.get_meta_tag("fc:frame")
    if not version:
        reporter.error("fc:frame", 'Missing required meta tag "fc:frame"')
    elif not is_valid_version(version):
        reporter.error("fc:frame", f'Invalid version "{version}"')
    else:
        frame.version = version

    image = document.get_meta_tag("fc:frame:image")
    if not image:
        reporter.error("fc:frame:image", 'Missing required meta tag "fc:frame:image"')
    else:
        frame.image = validate_field(
            reporter, "fc:frame:image", validate_frame_image, image
        )

    frame.og_image = parse_og_image(document, reporter, from_request_method)

    aspect_ratio = document.get_meta_tag("fc:frame:image:aspect_ratio")
    if aspect_ratio:
        frame.image_aspect_ratio = validate_field(
            reporter, "fc:frame:image:aspect_ratio", validate_aspect_ratio, aspect_ratio
        )

    input_text = document.get_meta_tag("fc:frame:input:text")
    if input_text:
        frame.input_text = validate_field(
            reporter, "fc:frame:input:text", validate_input_text, input_text
        )

    post_url = document.get_meta_tag("fc:frame:post_url")
    if post_url:
        frame.post_url = validate_field(
            reporter, "fc:frame:post_url", validate_url, post_url, POST_URL_MAX_BYTES
        )
    else:
        frame.post_url = fallback_post_url

    state = document.get_meta_tag("fc:frame:state")
    if state:
        frame.state = validate_field(reporter, "fc:frame:state", validate_state, state)

    buttons = parse_buttons(document, reporter, BUTTON_PREFIX)
    if buttons:
        frame.buttons = buttons

    frame.title = parse_title(document, reporter, from_request_method)

    status = ParseStatus.FAILURE if reporter.has_errors() else ParseStatus.SUCCESS
    logger.debug(f"farcaster parse: status={status.value}, reports={len(reporter.to_dict())}")

    return ParseResult(
        status=status,
        frame=frame,
        reports=reporter.to_dict(),
        specification=Specification.FARCASTER,
    )
