"""
Reporter Tests
==============
"""

from frames_engine.models.reports import IssueLevel, Specification
from frames_engine.parsing.reporter import Reporter


class TestReporter:
    """Tests for the keyed diagnostic collector."""

    def test_starts_empty(self):
        reporter = Reporter(Specification.FARCASTER)
        assert not reporter.has_errors()
        assert not reporter.has_reports()
        assert reporter.to_dict() == {}

    def test_warnings_do_not_count_as_errors(self):
        """A warning is a report but not an error."""
        reporter = Reporter(Specification.FARCASTER)
        reporter.warn("og:image", 'Missing meta tag "og:image"')

        assert reporter.has_reports()
        assert not reporter.has_errors()
        assert reporter.to_dict()["og:image"][0].level == IssueLevel.WARNING

    def test_reports_keep_order_per_key(self):
        reporter = Reporter(Specification.OPENFRAMES)
        reporter.error("of:image", "first")
        reporter.warn("of:image", "second")

        messages = [report.message for report in reporter.to_dict()["of:image"]]
        assert messages == ["first", "second"]
        assert reporter.has_errors()

    def test_source_defaults_to_dialect_and_can_be_overridden(self):
        reporter = Reporter(Specification.OPENFRAMES)
        reporter.error("a", "own")
        reporter.error("b", "borrowed", source=Specification.FARCASTER)

        reports = reporter.to_dict()
        assert reports["a"][0].source == Specification.OPENFRAMES
        assert reports["b"][0].source == Specification.FARCASTER

    def test_message_coercion(self):
        """Exceptions and {message} objects become plain text."""
        reporter = Reporter(Specification.FARCASTER)
        reporter.error("exc", ValueError("bad value"))
        reporter.error("obj", {"message": "from object"})

        reports = reporter.to_dict()
        assert reports["exc"][0].message == "bad value"
        assert reports["obj"][0].message == "from object"

    def test_to_dict_is_a_copy(self):
        reporter = Reporter(Specification.FARCASTER)
        reporter.error("fc:frame", "missing")

        snapshot = reporter.to_dict()
        snapshot["fc:frame"].clear()

        assert len(reporter.to_dict()["fc:frame"]) == 1
