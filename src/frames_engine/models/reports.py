"""
Parsing Reports
===============

Diagnostic records produced while parsing a frame document.

Every problem found during a parse pass is recorded as a ParsingReport,
keyed by the meta tag name (or logical field) it concerns. A parse result
carries the full mapping of key -> ordered list of reports.

Rules:
    - status is "failure" iff at least one report has level "error"
    - warnings never change the status
    - the source names the dialect that raised the report
"""

from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field


class Specification(str, Enum):
    """
    Frame dialects understood by the parsers.

    Attributes:
        FARCASTER: Primary flat meta tag dialect ("fc:frame:*")
        OPENFRAMES: Cross-client flat meta tag dialect ("of:*")
        FARCASTER_V2: JSON-embedded dialect (single "fc:frame" JSON blob)
    """

    FARCASTER = "farcaster"
    OPENFRAMES = "openframes"
    FARCASTER_V2 = "farcaster_v2"


class IssueLevel(str, Enum):
    """Severity of a parsing report."""

    ERROR = "error"
    WARNING = "warning"


class ParseStatus(str, Enum):
    """Outcome of a single dialect parse."""

    SUCCESS = "success"
    FAILURE = "failure"


class ParsingReport(BaseModel):
    """
    A single diagnostic message.

    Attributes:
        message: Human readable description of the problem
        source: Dialect that produced the report
        level: error or warning
    """

    message: str = Field(..., description="Human readable message")
    source: Specification = Field(..., description="Dialect that reported it")
    level: IssueLevel = Field(..., description="Severity")


Reports = Dict[str, List[ParsingReport]]
