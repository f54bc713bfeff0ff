"""
Parse Result Models
===================

Result envelopes returned by the dialect parsers and the orchestrator.

Result Contract:
    {
        "status": "success" | "failure",
        "frame": {...},                 # possibly partial
        "reports": {"fc:frame": [...]}, # key -> ordered reports
        "specification": "farcaster",
        "frames_version": "0.1.0",      # shared document metadata
        "debug_image_url": null
    }
"""

from typing import Optional, Union

from pydantic import BaseModel, Field

from frames_engine.models.frame import Frame, FrameV2
from frames_engine.models.manifest import FarcasterManifest
from frames_engine.models.reports import ParseStatus, Reports, Specification


class ParseResult(BaseModel):
    """Result of parsing one of the flat meta tag dialects."""

    status: ParseStatus = Field(..., description="success or failure")
    frame: Frame = Field(default_factory=Frame, description="Parsed frame")
    reports: Reports = Field(default_factory=dict, description="Reports by key")
    specification: Specification = Field(..., description="Dialect parsed")
    frames_version: Optional[str] = Field(
        default=None,
        description="Library version tag found in the document",
    )
    debug_image_url: Optional[str] = Field(
        default=None,
        description="Debug image URL found in the document",
    )

    @property
    def is_success(self) -> bool:
        return self.status == ParseStatus.SUCCESS


class ManifestParseResult(BaseModel):
    """Result of fetching and validating a domain manifest."""

    status: ParseStatus = Field(..., description="success or failure")
    manifest: FarcasterManifest = Field(
        default_factory=FarcasterManifest,
        description="Parsed manifest (possibly partial)",
    )
    reports: Reports = Field(default_factory=dict, description="Reports by key")


class FrameV2ParseResult(BaseModel):
    """Result of parsing the JSON-embedded dialect."""

    status: ParseStatus = Field(..., description="success or failure")
    frame: FrameV2 = Field(default_factory=FrameV2, description="Parsed frame")
    reports: Reports = Field(default_factory=dict, description="Reports by key")
    specification: Specification = Field(
        default=Specification.FARCASTER_V2,
        description="Dialect parsed",
    )
    manifest: Optional[ManifestParseResult] = Field(
        default=None,
        description="Manifest result, only when manifest parsing was requested",
    )
    frames_version: Optional[str] = Field(default=None, description="Library version tag")
    debug_image_url: Optional[str] = Field(default=None, description="Debug image URL")

    @property
    def is_success(self) -> bool:
        return self.status == ParseStatus.SUCCESS


AnyParseResult = Union[ParseResult, FrameV2ParseResult]


class ParseFramesWithReportsResult(BaseModel):
    """Results of all three dialect parsers run against one document."""

    farcaster: ParseResult = Field(..., description="Primary dialect result")
    openframes: ParseResult = Field(..., description="Cross-client dialect result")
    farcaster_v2: FrameV2ParseResult = Field(..., description="JSON dialect result")
    frames_version: Optional[str] = Field(default=None, description="Library version tag")
    debug_image_url: Optional[str] = Field(default=None, description="Debug image URL")

    def get(self, specification: Union[Specification, str]) -> AnyParseResult:
        """Return the result for a single dialect."""
        return getattr(self, Specification(specification).value)
