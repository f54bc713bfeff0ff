"""
Data Models
===========

Pydantic models for FramesEngine.

This module re-exports all data models for convenient access.

Models:
    Frame:
        - Frame, FrameButton, ButtonAction, AcceptedProtocol
        - FrameV2, FrameV2Button, FrameV2Action: JSON-embedded dialect

    Reports:
        - Specification: Dialect names
        - IssueLevel, ParseStatus: Report severity and parse outcome
        - ParsingReport: Single keyed diagnostic

    Manifest:
        - FarcasterManifest, AccountAssociation, ManifestFrameConfig, TriggerConfig

    Results:
        - ParseResult, FrameV2ParseResult, ManifestParseResult
        - ParseFramesWithReportsResult: All dialects for one document

    Action:
        - FrameContext, FrameActionPayload, SignedFrameAction
"""

from frames_engine.models.action import (
    CastId,
    FrameActionPayload,
    FrameContext,
    SignedFrameAction,
    TrustedData,
    UntrustedData,
)
from frames_engine.models.frame import (
    AcceptedProtocol,
    ButtonAction,
    Frame,
    FrameButton,
    FrameV2,
    FrameV2Action,
    FrameV2Button,
)
from frames_engine.models.manifest import (
    AccountAssociation,
    FarcasterManifest,
    ManifestFrameConfig,
    TriggerConfig,
)
from frames_engine.models.reports import (
    IssueLevel,
    ParseStatus,
    ParsingReport,
    Reports,
    Specification,
)
from frames_engine.models.results import (
    FrameV2ParseResult,
    ManifestParseResult,
    ParseFramesWithReportsResult,
    ParseResult,
)

__all__ = [
    # Frame
    "ButtonAction",
    "FrameButton",
    "AcceptedProtocol",
    "Frame",
    "FrameV2",
    "FrameV2Button",
    "FrameV2Action",
    # Reports
    "Specification",
    "IssueLevel",
    "ParseStatus",
    "ParsingReport",
    "Reports",
    # Manifest
    "AccountAssociation",
    "ManifestFrameConfig",
    "TriggerConfig",
    "FarcasterManifest",
    # Results
    "ParseResult",
    "FrameV2ParseResult",
    "ManifestParseResult",
    "ParseFramesWithReportsResult",
    # Action
    "CastId",
    "FrameContext",
    "UntrustedData",
    "TrustedData",
    "FrameActionPayload",
    "SignedFrameAction",
]
