"""
Reporter
========

Collects keyed, leveled diagnostics during a single parse pass.

Each dialect parser owns one Reporter. Reports are appended to a per-key
ordered list and tagged with the dialect that produced them. The source can
be overridden per call, for reports one dialect re-raises on behalf of
another.

Example:
    reporter = Reporter(Specification.FARCASTER)
    reporter.error("fc:frame", 'Missing required meta tag "fc:frame"')

    reporter.has_errors()   # True
    reporter.to_dict()      # {"fc:frame": [ParsingReport(...)]}
"""

from typing import Any, Dict, List, Optional

from frames_engine.models.reports import (
    IssueLevel,
    ParsingReport,
    Reports,
    Specification,
)


def _to_message(message: Any) -> str:
    """Coerce an arbitrary value (string, exception, dict) into message text."""
    if isinstance(message, str):
        return message
    if isinstance(message, BaseException):
        return str(message) or message.__class__.__name__
    if isinstance(message, dict) and isinstance(message.get("message"), str):
        return message["message"]
    return str(message)


class Reporter:
    """
    Per-dialect diagnostic collector.

    Error and report counters are maintained incrementally so that
    has_errors() and has_reports() do not scan the collected reports.
    """

    def __init__(self, source: Specification) -> None:
        self.source = Specification(source)
        self._reports: Dict[str, List[ParsingReport]] = {}
        self._error_count: int = 0
        self._report_count: int = 0

    def error(
        self,
        key: str,
        message: Any,
        source: Optional[Specification] = None,
    ) -> None:
        """Record an error at key."""
        self._add(key, message, IssueLevel.ERROR, source)
        self._error_count += 1

    def warn(
        self,
        key: str,
        message: Any,
        source: Optional[Specification] = None,
    ) -> None:
        """Record a warning at key."""
        self._add(key, message, IssueLevel.WARNING, source)

    def has_errors(self) -> bool:
        return self._error_count > 0

    def has_reports(self) -> bool:
        return self._report_count > 0

    def to_dict(self) -> Reports:
        """Return a copy of the keyed report mapping."""
        return {key: list(reports) for key, reports in self._reports.items()}

    def _add(
        self,
        key: str,
        message: Any,
        level: IssueLevel,
        source: Optional[Specification],
    ) -> None:
        report = ParsingReport(
            message=_to_message(message),
            source=Specification(source) if source is not None else self.source,
            level=level,
        )
        self._reports.setdefault(key, []).append(report)
        self._report_count += 1

    def __repr__(self) -> str:
        return (
            f"Reporter({self.source.value}, "
            f"errors={self._error_count}, reports={self._report_count})"
        )
