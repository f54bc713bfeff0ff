"""
Serialization Module
====================

Frame -> flat tag map -> HTML meta tags.

Example:
    from frames_engine.serialization import get_frame_html

    return HTMLResponse(get_frame_html(frame, title="Poll"))
"""

from frames_engine.serialization.flatten import (
    FlattenedFrame,
    get_frame_flattened,
    get_frame_html,
    get_frame_html_head,
    render_meta_tags,
)


__all__ = [
    "FlattenedFrame",
    "get_frame_flattened",
    "get_frame_html",
    "get_frame_html_head",
    "render_meta_tags",
]
