"""
FramesEngine
============

Parsing, validation and interaction engine for frame documents.

A frame is an interactive document (an image, up to four buttons and an
optional text input) declared through HTML meta tags. This package reads
frames in three competing dialects, reports every problem it finds per
field, writes frames back out as meta tags, and drives the client side
request/response loop that runs when a user presses a button.

Components:
    - parsing: Reporter, field validators, button parser, dialect parsers
    - signatures: JSON Farcaster Signature encoding and verification
    - serialization: Frame flattening and HTML meta tag rendering
    - interaction: Frames stack reducer, proxy transport, frame session
    - main: FastAPI app exposing the GET and action proxies

Example:
    from frames_engine.parsing import parse_frames_with_reports

    result = parse_frames_with_reports(
        html,
        frame_url="https://example.com/frame",
        fallback_post_url="https://example.com/frame",
    )
    print(result.farcaster.status)
"""

__version__ = "0.1.0"
__author__ = "FramesEngine Project"

__all__ = [
    "__version__",
]
