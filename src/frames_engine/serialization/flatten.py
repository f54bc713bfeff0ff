"""
Frame Flattening
================

Inverse of the meta tag dialect parsers: turns a Frame into a flat
key/value map and from there into HTML meta tags.

Contract:
    - Every key a parser reads is written under the same key
    - Primary ("fc:frame:*") tags are always written
    - Cross-client ("of:*") tags are written only when the frame declares
      at least one accepted protocol
    - Button post_url is written only for tx, post and post_redirect
    - Values are HTML escaped when rendered, so JSON state with quotes,
      ampersands or angle brackets survives a flatten -> parse round trip

Example:
    flat = get_frame_flattened(frame)
    flat["fc:frame:button:1:action"]  # "post"

    html = get_frame_html(frame, title="My frame")
"""

import html
from typing import Dict, List, Optional

from frames_engine import __version__
from frames_engine.models.frame import ButtonAction, Frame, FrameButton
from frames_engine.parsing.common import DEFAULT_FRAME_TITLE


FlattenedFrame = Dict[str, str]

FRAMES_VERSION_KEY = "frames.js:version"

_POST_URL_ACTIONS = (ButtonAction.TX, ButtonAction.POST, ButtonAction.POST_REDIRECT)


def get_frame_flattened(frame: Frame, frames_version: Optional[str] = None) -> FlattenedFrame:
    """
    Flatten frame to a tag map.

    Args:
        frame: Frame to serialize
        frames_version: Library version tag, defaults to this package version

    Returns:
        Ordered dict of meta tag name -> content
    """
    flat: FlattenedFrame = {}

    _put(flat, "fc:frame", frame.version)
    _put(flat, "fc:frame:image", frame.image)
    _put(flat, "og:image", frame.og_image or frame.image)
    _put(flat, "fc:frame:post_url", frame.post_url)
    _put(flat, "fc:frame:input:text", frame.input_text)
    _put(flat, "fc:frame:image:aspect_ratio", frame.image_aspect_ratio)
    _put(flat, "fc:frame:state", frame.state)
    _put_buttons(flat, "fc:frame:button", frame.buttons or [])

    if frame.accepts:
        for protocol in frame.accepts:
            flat[f"of:accepts:{protocol.id}"] = protocol.version

        _put(flat, "of:version", frame.version)
        _put(flat, "of:image", frame.image)
        _put(flat, "of:post_url", frame.post_url)
        _put(flat, "of:input:text", frame.input_text)
        _put(flat, "of:image:aspect_ratio", frame.image_aspect_ratio)
        _put(flat, "of:state", frame.state)
        _put_buttons(flat, "of:button", frame.buttons or [])

    if frame.title:
        flat["og:title"] = frame.title

    flat[FRAMES_VERSION_KEY] = frames_version or __version__

    return flat


def _put(flat: FlattenedFrame, key: str, value: Optional[str]) -> None:
    if value:
        flat[key] = value


def _put_buttons(flat: FlattenedFrame, prefix: str, buttons: List[FrameButton]) -> None:
    for index, button in enumerate(buttons, start=1):
        key = f"{prefix}:{index}"
        action = ButtonAction(button.action)

        flat[key] = button.label
        flat[f"{key}:action"] = action.value
        _put(flat, f"{key}:target", button.target)

        if action in _POST_URL_ACTIONS:
            _put(flat, f"{key}:post_url", button.post_url)


# =============================================================================
# HTML rendering
# =============================================================================

def render_meta_tags(flat: FlattenedFrame) -> str:
    """Render a tag map as <meta> elements, escaping attribute values."""
    return "".join(
        f'<meta name="{html.escape(key)}" content="{html.escape(value)}"/>'
        for key, value in flat.items()
    )


def get_frame_html_head(frame: Frame, frames_version: Optional[str] = None) -> str:
    """Meta tags for frame, ready to be placed in <head>."""
    flat = get_frame_flattened(frame, frames_version)
    # og:title is rendered by get_frame_html next to <title>
    flat.pop("og:title", None)
    return render_meta_tags(flat)


def get_frame_html(
    frame: Frame,
    title: Optional[str] = None,
    og_title: Optional[str] = None,
    html_head: str = "",
    html_body: str = "",
    frames_version: Optional[str] = None,
) -> str:
    """
    Full HTML document declaring frame.

    Args:
        frame: Frame to render
        title: <title> text, defaults to the frame title or "frame"
        og_title: og:title content, defaults to the frame title
        html_head: Extra markup appended to <head>
        html_body: Markup placed in <body>
        frames_version: Library version tag override
    """
    page_title = title or frame.title or DEFAULT_FRAME_TITLE
    og_title = og_title or frame.title

    og_title_tag = ""
    if og_title:
        og_title_tag = f'<meta property="og:title" content="{html.escape(og_title)}"/>'

    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "  <head>\n"
        f"    <title>{html.escape(page_title)}</title>\n"
        f"    {og_title_tag}\n"
        f"    {get_frame_html_head(frame, frames_version)}\n"
        f"    {html_head}\n"
        "  </head>\n"
        f"  <body>{html_body}</body>\n"
        "</html>"
    )
