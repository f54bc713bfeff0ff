"""
Orchestrator Tests
==================

Tests for parse_frames_with_reports and get_frame.
"""

import json

from frames_engine.models.reports import ParseStatus, Specification
from frames_engine.models.results import ParseResult
from frames_engine.parsing import get_frame, parse_frames_with_reports


FRAME_URL = "https://example.com/frame"


def _parse(html, **options):
    return parse_frames_with_reports(
        html,
        frame_url=FRAME_URL,
        fallback_post_url=FRAME_URL,
        **options,
    )


class TestParseFramesWithReports:
    """All dialects against one document."""

    def test_every_dialect_is_reported(self, frame_html, farcaster_tags):
        results = _parse(frame_html(farcaster_tags))

        assert results.farcaster.status == ParseStatus.SUCCESS
        # no of:accepts declaration
        assert results.openframes.status == ParseStatus.FAILURE
        # "vNext" is not a JSON embed
        assert results.farcaster_v2.status == ParseStatus.FAILURE

    def test_reports_stay_with_their_dialect(self, frame_html, farcaster_tags):
        results = _parse(frame_html(farcaster_tags))

        assert "of:accepts:{protocol_identifier}" not in results.farcaster.reports
        assert all(
            report.source == Specification.OPENFRAMES
            for reports in results.openframes.reports.values()
            for report in reports
        )

    def test_document_metadata_is_shared(self, frame_html, farcaster_tags):
        tags = farcaster_tags + [
            ("frames.js:version", "0.19.0"),
            ("frames.js:debug-image", "https://example.com/debug.png"),
        ]
        results = _parse(frame_html(tags))

        assert results.frames_version == "0.19.0"
        for dialect in (results.farcaster, results.openframes, results.farcaster_v2):
            assert dialect.frames_version == "0.19.0"
            assert dialect.debug_image_url == "https://example.com/debug.png"

    def test_json_embed_document(self, frame_html, frame_v2_data):
        results = _parse(frame_html([("fc:frame", json.dumps(frame_v2_data))]))

        assert results.farcaster_v2.status == ParseStatus.SUCCESS
        assert results.farcaster.status == ParseStatus.FAILURE

    def test_both_flat_dialects(self, frame_html, farcaster_tags):
        tags = farcaster_tags + [("of:version", "vNext"), ("of:accepts:farcaster", "vNext")]
        results = _parse(frame_html(tags))

        assert results.farcaster.is_success
        assert results.openframes.is_success
        assert results.openframes.frame.buttons == results.farcaster.frame.buttons

    def test_get_by_name(self, frame_html, farcaster_tags):
        results = _parse(frame_html(farcaster_tags))

        assert results.get("farcaster") is results.farcaster
        assert results.get(Specification.FARCASTER_V2) is results.farcaster_v2

    def test_serializes_to_json(self, frame_html, farcaster_tags):
        payload = _parse(frame_html(farcaster_tags)).model_dump(mode="json")

        assert set(payload) >= {"farcaster", "openframes", "farcaster_v2"}
        assert payload["farcaster"]["status"] == "success"
        assert payload["farcaster"]["frame"]["buttons"][1]["action"] == "link"


class TestGetFrame:
    """Single dialect convenience wrapper."""

    def test_defaults_to_primary_dialect(self, frame_html, farcaster_tags):
        result = get_frame(
            frame_html(farcaster_tags),
            frame_url=FRAME_URL,
            fallback_post_url=FRAME_URL,
        )

        assert isinstance(result, ParseResult)
        assert result.specification == Specification.FARCASTER

    def test_selects_dialect(self, frame_html, farcaster_tags):
        result = get_frame(
            frame_html(farcaster_tags),
            frame_url=FRAME_URL,
            fallback_post_url=FRAME_URL,
            specification="openframes",
            from_request_method="POST",
        )
        assert result.specification == Specification.OPENFRAMES
