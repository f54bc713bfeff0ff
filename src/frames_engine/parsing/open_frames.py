"""
Cross-Client Dialect Parser
===========================

Parses the open cross-client dialect ("of:*").

Tags:
    of:accepts:{protocol}   at least one required, content is the version
    of:version              required, never borrowed from the primary dialect
    of:image                required unless borrowed
    of:image:aspect_ratio
    of:input:text
    of:post_url
    of:state
    of:button:*

Fallback Rules:
    When the accepts list contains the "farcaster" protocol, every field
    other than the version (image, aspect ratio, input text, post URL,
    state, buttons) falls back to the already parsed primary dialect frame
    when the cross-client tag is absent. Without "farcaster" in the accepts
    list nothing is borrowed.

    Buttons: the cross-client set is used unless the primary set is strictly
    longer (cross-client wins ties).
"""

import logging
from typing import List

from frames_engine.models.frame import AcceptedProtocol, Frame
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

ACCEPTS_PREFIX = "of:accepts:"
BUTTON_PREFIX = "of:button"
FARCASTER_PROTOCOL_ID = "farcaster"


def parse_accepts(document: FrameDocument, reporter: Reporter) -> List[AcceptedProtocol]:
    """Collect of:accepts:{protocol} declarations."""
    accepts: List[AcceptedProtocol] = []

    for key, content in document.find_meta_tags(ACCEPTS_PREFIX):
        protocol_id = key[len(ACCEPTS_PREFIX):]

        if not protocol_id:
            reporter.error(key, "Missing protocol id")
            continue

        accepts.append(AcceptedProtocol(id=protocol_id, version=content or ""))

    if not accepts:
        reporter.error(
            "of:accepts:{protocol_identifier}",
            'At least one "of:accepts:{protocol_identifier}" meta tag is required',
        )

    return accepts


def parse_open_frames_frame(
    document: FrameDocument,
    *,
    reporter: Reporter,
    fallback_post_url: str,
    farcaster_frame: Frame,
    from_request_method: str = "GET",
) -> ParseResult:
    """
    Parse the cross-client dialect.

    Args:
        document: Loaded HTML document
        reporter: Reporter for this dialect
        fallback_post_url: Post URL used when neither dialect declares one
        farcaster_frame: Frame already parsed by the primary dialect
            (possibly partial), used as the fallback source
        from_request_method: "GET" or "POST"

    Returns:
        ParseResult with specification "openframes"
    """
    frame = Frame()

    accepts = parse_accepts(document, reporter)
    frame.accepts = accepts
    borrow = any(protocol.id == FARCASTER_PROTOCOL_ID for protocol in accepts)

    version = document.get_meta_tag("of:version")
    if not version:
        reporter.error("of:version", 'Missing required meta tag "of:version"')
    elif not is_valid_version(version):
        reporter.error("of:version", f'Invalid version "{version}"')
    else:
        frame.version = version

    image = document.get_meta_tag("of:image")
    if image:
        frame.image = validate_field(reporter, "of:image", validate_frame_image, image)
    elif borrow and farcaster_frame.image:
        frame.image = farcaster_frame.image
    else:
        reporter.error("of:image", 'Missing required meta tag "of:image"')

    frame.og_image = parse_og_image(document, reporter, from_request_method)

    aspect_ratio = document.get_meta_tag("of:image:aspect_ratio")
    if aspect_ratio:
        frame.image_aspect_ratio = validate_field(
            reporter, "of:image:aspect_ratio", validate_aspect_ratio, aspect_ratio
        )
    elif borrow:
        frame.image_aspect_ratio = farcaster_frame.image_aspect_ratio

    input_text = document.get_meta_tag("of:input:text")
    if input_text:
        frame.input_text = validate_field(
            reporter, "of:input:text", validate_input_text, input_text
        )
    elif borrow:
        frame.input_text = farcaster_frame.input_text

    post_url = document.get_meta_tag("of:post_url")
    if post_url:
        frame.post_url = validate_field(
            reporter, "of:post_url", validate_url, post_url, POST_URL_MAX_BYTES
        )
    elif borrow and farcaster_frame.post_url:
        frame.post_url = farcaster_frame.post_url
    else:
        frame.post_url = fallback_post_url

    state = document.get_meta_tag("of:state")
    if state:
        frame.state = validate_field(reporter, "of:state", validate_state, state)
    elif borrow:
        frame.state = farcaster_frame.state

    buttons = parse_buttons(document, reporter, BUTTON_PREFIX)
    primary_buttons = farcaster_frame.buttons or []
    if borrow and len(primary_buttons) > len(buttons):
        buttons = [button.model_copy() for button in primary_buttons]
    if buttons:
        frame.buttons = buttons

    frame.title = parse_title(document, reporter, from_request_method)

    status = ParseStatus.FAILURE if reporter.has_errors() else ParseStatus.SUCCESS
    logger.debug(f"openframes parse: status={status.value}, borrow={borrow}")

    return ParseResult(
        status=status,
        frame=frame,
        reports=reporter.to_dict(),
        specification=Specification.OPENFRAMES,
    )
