"""
JSON-Embedded Dialect Parser
============================

Parses frames declared as a single JSON blob:

    <meta property="fc:frame" content='{"version": "next", "imageUrl": ...}'>

Schema:
    version                         string
    imageUrl                        string, URL
    button.title                    string
    button.action.type              "launch_frame"
    button.action.name              string
    button.action.url               string, URL
    button.action.splashImageUrl    string, URL
    button.action.splashBackgroundColor  hex color

All reports use the "fc:frame" key. In strict mode non-https URLs are
errors, otherwise they are warnings.

The domain manifest is only fetched when parse_manifest is set. Its reports
live on the manifest sub-result and never change the status of the frame.
"""

import copy
import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import Field, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from frames_engine.models.frame import FrameV2, FrameV2Action, FrameV2Button
from frames_engine.models.reports import ParseStatus, Specification
from frames_engine.models.results import FrameV2ParseResult
from frames_engine.parsing.document import FrameDocument
from frames_engine.parsing.manifest import (
    DEFAULT_WELL_KNOWN_PATH,
    ManifestFetcher,
    SignatureVerifier,
    parse_farcaster_manifest,
)
from frames_engine.parsing.reporter import Reporter
from frames_engine.parsing.validators import is_https_url, is_valid_hex_color, is_valid_url


logger = logging.getLogger(__name__)

FRAME_KEY = "fc:frame"
LAUNCH_FRAME_ACTION = "launch_frame"

_OBJECT_ERRORS = ("model_type", "model_attributes_type", "dict_type")


# =============================================================================
# Declaration Schema
# =============================================================================

def _check_url(value: str, info: ValidationInfo) -> str:
    if not is_valid_url(value):
        raise PydanticCustomError("invalid_url", "must be a valid URL")

    strict = bool(info.context and info.context.get("strict"))
    if strict and not is_https_url(value):
        raise PydanticCustomError("insecure_url", "must be an https URL")

    return value


class _ActionDeclaration(FrameV2Action):
    type: str
    name: str
    url: str
    splash_image_url: str = Field(..., alias="splashImageUrl")
    splash_background_color: str = Field(..., alias="splashBackgroundColor")

    @field_validator("type")
    @classmethod
    def check_type(cls, value: str) -> str:
        if value != LAUNCH_FRAME_ACTION:
            raise PydanticCustomError("launch_frame", 'must be "launch_frame"')
        return value

    @field_validator("url", "splash_image_url")
    @classmethod
    def check_url(cls, value: str, info: ValidationInfo) -> str:
        return _check_url(value, info)

    @field_validator("splash_background_color")
    @classmethod
    def check_color(cls, value: str) -> str:
        if not is_valid_hex_color(value):
            raise PydanticCustomError("hex_color", "must be a valid hex color")
        return value


class _ButtonDeclaration(FrameV2Button):
    title: str
    action: _ActionDeclaration


class _FrameDeclaration(FrameV2):
    """Every key of the embed is required; strict is read from the context."""

    version: str
    image_url: str = Field(..., alias="imageUrl")
    button: _ButtonDeclaration

    @field_validator("image_url")
    @classmethod
    def check_image_url(cls, value: str, info: ValidationInfo) -> str:
        return _check_url(value, info)


# =============================================================================
# Parser
# =============================================================================

def parse_farcaster_frame_v2(
    document: FrameDocument,
    *,
    reporter: Reporter,
    frame_url: str,
    strict: bool = False,
    parse_manifest: bool = False,
    manifest_fetcher: Optional[ManifestFetcher] = None,
    signature_verifier: Optional[SignatureVerifier] = None,
    well_known_path: str = DEFAULT_WELL_KNOWN_PATH,
) -> FrameV2ParseResult:
    """
    Parse the JSON-embedded dialect.

    Args:
        document: Loaded HTML document
        reporter: Reporter for this dialect
        frame_url: URL the document was loaded from, used for the manifest
        strict: Non-https URLs are errors instead of warnings
        parse_manifest: Fetch and validate the domain manifest
        manifest_fetcher: Optional fetcher override for the manifest GET
        signature_verifier: Optional account association verifier
        well_known_path: Manifest path on the frame origin

    Returns:
        FrameV2ParseResult
    """
    embed = document.get_meta_tag(FRAME_KEY)

    if not embed:
        reporter.error(FRAME_KEY, 'Missing required meta tag "fc:frame"')
        return _result(ParseStatus.FAILURE, FrameV2(), reporter)

    try:
        data = json.loads(embed)
    except ValueError:
        reporter.error(FRAME_KEY, "Failed to parse Frame, it is not a valid JSON value")
        return _result(ParseStatus.FAILURE, FrameV2(), reporter)

    if data is None:
        reporter.error(FRAME_KEY, "Frame must not be null")
        return _result(ParseStatus.FAILURE, FrameV2(), reporter)

    if not isinstance(data, dict):
        reporter.error(FRAME_KEY, "Frame must be an object")
        return _result(ParseStatus.FAILURE, FrameV2(), reporter)

    errors: List[Dict[str, Any]] = []
    try:
        _FrameDeclaration.model_validate(data, context={"strict": strict})
    except ValidationError as e:
        errors = e.errors()

    for error in errors:
        reporter.error(FRAME_KEY, _describe(error))

    # Partial frame: everything that validated
    frame = FrameV2.model_validate(_without(data, errors))
    if not strict:
        _warn_insecure_urls(frame, reporter)

    frame.title = document.get_meta_tag("og:title") or document.title or None

    manifest = None
    if parse_manifest:
        manifest = parse_farcaster_manifest(
            frame_url,
            reporter=Reporter(Specification.FARCASTER_V2),
            strict=strict,
            fetcher=manifest_fetcher,
            verifier=signature_verifier,
            well_known_path=well_known_path,
        )

    status = ParseStatus.FAILURE if reporter.has_errors() else ParseStatus.SUCCESS
    logger.debug(f"farcaster_v2 parse: status={status.value}, manifest={parse_manifest}")

    return _result(status, frame, reporter, manifest)


def _describe(error: Dict[str, Any]) -> str:
    """Report message for one validation error, e.g. 'Key "url" in Frame.button.action ...'."""
    *parents, name = error["loc"]
    path = ".".join(["Frame", *[str(part) for part in parents]])
    kind = error["type"]

    if kind == "missing":
        return f'Missing required key "{name}" in {path}'
    if kind == "string_type":
        return f'Key "{name}" in {path} must be a string'
    if kind in _OBJECT_ERRORS and error.get("input") is None:
        return f'Key "{name}" in {path} must not be null'
    if kind in _OBJECT_ERRORS:
        return f'Key "{name}" in {path} must be an object'

    return f'Key "{name}" in {path} {error["msg"]}'


def _without(data: Dict[str, Any], errors: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Copy of data with the value at every error location removed."""
    pruned = copy.deepcopy(data)

    for error in errors:
        *parents, name = error["loc"]
        node: Any = pruned
        for part in parents:
            node = node.get(part) if isinstance(node, dict) else None
        if isinstance(node, dict):
            node.pop(name, None)

    return pruned


def _warn_insecure_urls(frame: FrameV2, reporter: Reporter) -> None:
    urls = [("Frame", "imageUrl", frame.image_url)]

    action = frame.button.action if frame.button else None
    if action is not None:
        urls.append(("Frame.button.action", "url", action.url))
        urls.append(("Frame.button.action", "splashImageUrl", action.splash_image_url))

    for path, name, value in urls:
        if value and not is_https_url(value):
            reporter.warn(FRAME_KEY, f'Key "{name}" in {path} must be an https URL')


def _result(
    status: ParseStatus,
    frame: FrameV2,
    reporter: Reporter,
    manifest: Any = None,
) -> FrameV2ParseResult:
    return FrameV2ParseResult(
        status=status,
        frame=frame,
        reports=reporter.to_dict(),
        manifest=manifest,
    )
