"""
Parsing Module
==============

Frame extraction and validation for every supported dialect.

This module provides:
    - Reporter: Keyed error/warning collector, one per dialect pass
    - FrameDocument: Meta tag queries over a parsed HTML document
    - parse_farcaster_frame: Primary "fc:frame:*" dialect
    - parse_open_frames_frame: Cross-client "of:*" dialect
    - parse_farcaster_frame_v2: JSON-embedded dialect (+ domain manifest)
    - parse_frames_with_reports: All dialects for one document

Example:
    from frames_engine.parsing import parse_frames_with_reports

    results = parse_frames_with_reports(
        html,
        frame_url=url,
        fallback_post_url=url,
    )
    for key, reports in results.farcaster.reports.items():
        print(key, [report.message for report in reports])
"""

from frames_engine.parsing.reporter import Reporter
from frames_engine.parsing.document import FrameDocument
from frames_engine.parsing.farcaster import parse_farcaster_frame
from frames_engine.parsing.open_frames import parse_open_frames_frame
from frames_engine.parsing.farcaster_v2 import parse_farcaster_frame_v2
from frames_engine.parsing.manifest import parse_farcaster_manifest
from frames_engine.parsing.orchestrator import get_frame, parse_frames_with_reports
from frames_engine.parsing.validators import ValidationError


__all__ = [
    "FrameDocument",
    "Reporter",
    "ValidationError",
    "get_frame",
    "parse_farcaster_frame",
    "parse_farcaster_frame_v2",
    "parse_farcaster_manifest",
    "parse_frames_with_reports",
    "parse_open_frames_frame",
]
