"""
Multi-Dialect Orchestrator
==========================

Runs every dialect parser against one HTML document.

Flow:
    html -> FrameDocument
         -> primary dialect          (farcaster)
         -> cross-client dialect     (openframes, borrows from primary)
         -> JSON-embedded dialect    (farcaster_v2, optional manifest)

Document wide metadata (library version tag, debug image URL) is read once
and merged into every dialect result. Each dialect has its own Reporter, so
a failure in one dialect never hides the reports of another.

Example:
    results = parse_frames_with_reports(
        html,
        frame_url="https://example.com/frame",
        fallback_post_url="https://example.com/frame",
    )
    if results.farcaster.is_success:
        render(results.farcaster.frame)
"""

import logging
from typing import Optional, Union

from frames_engine.models.reports import Specification
from frames_engine.models.results import AnyParseResult, ParseFramesWithReportsResult
from frames_engine.parsing.document import FrameDocument
from frames_engine.parsing.farcaster import parse_farcaster_frame
from frames_engine.parsing.farcaster_v2 import parse_farcaster_frame_v2
from frames_engine.parsing.manifest import (
    DEFAULT_WELL_KNOWN_PATH,
    ManifestFetcher,
    SignatureVerifier,
)
from frames_engine.parsing.open_frames import parse_open_frames_frame
from frames_engine.parsing.reporter import Reporter


logger = logging.getLogger(__name__)

FRAMES_VERSION_TAG = "frames.js:version"
DEBUG_IMAGE_TAG = "frames.js:debug-image"


def parse_frames_with_reports(
    html: str,
    *,
    frame_url: str,
    fallback_post_url: str,
    from_request_method: str = "GET",
    strict: bool = False,
    parse_manifest: bool = False,
    manifest_fetcher: Optional[ManifestFetcher] = None,
    signature_verifier: Optional[SignatureVerifier] = None,
    well_known_path: str = DEFAULT_WELL_KNOWN_PATH,
) -> ParseFramesWithReportsResult:
    """
    Parse html with all dialects.

    Args:
        html: Raw HTML document
        frame_url: URL the document was loaded from
        fallback_post_url: Post URL used when the document declares none
        from_request_method: "GET" or "POST" (POST relaxes page warnings)
        strict: JSON dialect https enforcement
        parse_manifest: Fetch and validate the domain manifest
        manifest_fetcher: Manifest GET override
        signature_verifier: Account association verifier override
        well_known_path: Manifest path on the frame origin

    Returns:
        ParseFramesWithReportsResult keyed by dialect
    """
    document = FrameDocument.load(html)

    frames_version = document.get_meta_tag(FRAMES_VERSION_TAG)
    debug_image_url = document.get_meta_tag(DEBUG_IMAGE_TAG)

    farcaster = parse_farcaster_frame(
        document,
        reporter=Reporter(Specification.FARCASTER),
        fallback_post_url=fallback_post_url,
        from_request_method=from_request_method,
    )

    openframes = parse_open_frames_frame(
        document,
        reporter=Reporter(Specification.OPENFRAMES),
        fallback_post_url=fallback_post_url,
        farcaster_frame=farcaster.frame,
        from_request_method=from_request_method,
    )

    farcaster_v2 = parse_farcaster_frame_v2(
        document,
        reporter=Reporter(Specification.FARCASTER_V2),
        frame_url=frame_url,
        strict=strict,
        parse_manifest=parse_manifest,
        manifest_fetcher=manifest_fetcher,
        signature_verifier=signature_verifier,
        well_known_path=well_known_path,
    )

    for result in (farcaster, openframes, farcaster_v2):
        result.frames_version = frames_version
        result.debug_image_url = debug_image_url

    logger.debug(
        f"Parsed {frame_url}: farcaster={farcaster.status.value}, "
        f"openframes={openframes.status.value}, farcaster_v2={farcaster_v2.status.value}"
    )

    return ParseFramesWithReportsResult(
        farcaster=farcaster,
        openframes=openframes,
        farcaster_v2=farcaster_v2,
        frames_version=frames_version,
        debug_image_url=debug_image_url,
    )


def get_frame(
    html: str,
    *,
    frame_url: str,
    fallback_post_url: str,
    specification: Union[Specification, str] = Specification.FARCASTER,
    **options,
) -> AnyParseResult:
    """
    Parse html and return the result of a single dialect.

    Keyword options are forwarded to parse_frames_with_reports.
    """
    results = parse_frames_with_reports(
        html,
        frame_url=frame_url,
        fallback_post_url=fallback_post_url,
        **options,
    )
    return results.get(specification)
