"""
Button Parser Tests
===================

Tests for indexed button extraction shared by both flat dialects.
"""

from frames_engine.models.frame import ButtonAction
from frames_engine.models.reports import Specification
from frames_engine.parsing.buttons import parse_buttons
from frames_engine.parsing.document import FrameDocument
from frames_engine.parsing.reporter import Reporter


PREFIX = "fc:frame:button"


def _parse(frame_html, tags, prefix=PREFIX):
    reporter = Reporter(Specification.FARCASTER)
    buttons = parse_buttons(FrameDocument(frame_html(tags)), reporter, prefix)
    return buttons, reporter.to_dict()


def _messages(reports, key):
    return [report.message for report in reports.get(key, [])]


class TestButtonActions:
    """Per action validation."""

    def test_action_defaults_to_post(self, frame_html):
        buttons, reports = _parse(frame_html, [("fc:frame:button:1", "Go")])

        assert reports == {}
        assert buttons[0].action == ButtonAction.POST
        assert buttons[0].label == "Go"

    def test_link_requires_target(self, frame_html):
        buttons, reports = _parse(
            frame_html,
            [("fc:frame:button:1", "Docs"), ("fc:frame:button:1:action", "link")],
        )

        assert buttons == []
        assert _messages(reports, "fc:frame:button:1:target") == ["Missing button target url"]

    def test_link_with_target(self, frame_html):
        buttons, _ = _parse(
            frame_html,
            [
                ("fc:frame:button:1", "Docs"),
                ("fc:frame:button:1:action", "link"),
                ("fc:frame:button:1:target", "https://example.com/docs"),
            ],
        )
        assert buttons[0].target == "https://example.com/docs"

    def test_mint_target_must_be_caip10(self, frame_html):
        buttons, reports = _parse(
            frame_html,
            [
                ("fc:frame:button:1", "Mint"),
                ("fc:frame:button:1:action", "mint"),
                ("fc:frame:button:1:target", "https://example.com/nft"),
            ],
        )

        assert buttons == []
        assert _messages(reports, "fc:frame:button:1:target") == ["Invalid CAIP-10 URL"]

    def test_mint_with_caip10_target(self, frame_html):
        target = "eip155:7777777:0x060f3edd18c47f59bd23d063bbeb9aa4a8fec6df"
        buttons, reports = _parse(
            frame_html,
            [
                ("fc:frame:button:1", "Mint"),
                ("fc:frame:button:1:action", "mint"),
                ("fc:frame:button:1:target", target),
            ],
        )

        assert reports == {}
        assert buttons[0].action == ButtonAction.MINT
        assert buttons[0].target == target

    def test_tx_keeps_post_url(self, frame_html):
        buttons, reports = _parse(
            frame_html,
            [
                ("fc:frame:button:1", "Buy"),
                ("fc:frame:button:1:action", "tx"),
                ("fc:frame:button:1:target", "https://example.com/txdata"),
                ("fc:frame:button:1:post_url", "https://example.com/tx-result"),
            ],
        )

        assert reports == {}
        assert buttons[0].action == ButtonAction.TX
        assert buttons[0].post_url == "https://example.com/tx-result"

    def test_tx_requires_target(self, frame_html):
        buttons, reports = _parse(
            frame_html,
            [("fc:frame:button:1", "Buy"), ("fc:frame:button:1:action", "tx")],
        )

        assert buttons == []
        assert "fc:frame:button:1:target" in reports

    def test_invalid_action(self, frame_html):
        buttons, reports = _parse(
            frame_html,
            [("fc:frame:button:1", "Go"), ("fc:frame:button:1:action", "teleport")],
        )

        assert buttons == []
        assert _messages(reports, "fc:frame:button:1:action") == ["Invalid button action"]

    def test_invalid_post_target(self, frame_html):
        buttons, reports = _parse(
            frame_html,
            [("fc:frame:button:1", "Go"), ("fc:frame:button:1:target", "not a url")],
        )

        assert buttons == []
        assert _messages(reports, "fc:frame:button:1:target") == ["Invalid URL"]

    def test_missing_label(self, frame_html):
        buttons, reports = _parse(frame_html, [("fc:frame:button:1:action", "post")])

        assert buttons == []
        assert _messages(reports, "fc:frame:button:1") == ["Missing button label"]


class TestButtonSequence:
    """Index handling across buttons."""

    def test_buttons_are_returned_in_index_order(self, frame_html):
        buttons, _ = _parse(
            frame_html,
            [("fc:frame:button:2", "Second"), ("fc:frame:button:1", "First")],
        )
        assert [button.label for button in buttons] == ["First", "Second"]

    def test_gap_is_reported_and_buttons_are_compacted(self, frame_html):
        """A gap is an error on the first index after it; buttons are kept."""
        buttons, reports = _parse(
            frame_html,
            [("fc:frame:button:1", "One"), ("fc:frame:button:3", "Three")],
        )

        assert [button.label for button in buttons] == ["One", "Three"]
        assert _messages(reports, "fc:frame:button:3") == ["Button sequence is not continuous"]

    def test_only_first_gap_is_reported(self, frame_html):
        _, reports = _parse(
            frame_html,
            [("fc:frame:button:2", "Two"), ("fc:frame:button:4", "Four")],
        )

        assert "fc:frame:button:2" in reports
        assert "fc:frame:button:4" not in reports

    def test_index_above_four_is_unrecognized(self, frame_html):
        buttons, reports = _parse(
            frame_html,
            [("fc:frame:button:1", "One"), ("fc:frame:button:5", "Five")],
        )

        assert len(buttons) == 1
        assert _messages(reports, "fc:frame:button:5") == ["Unrecognized meta tag"]

    def test_duplicate_tag_keeps_first(self, frame_html):
        buttons, reports = _parse(
            frame_html,
            [("fc:frame:button:1", "First"), ("fc:frame:button:1", "Again")],
        )

        assert buttons[0].label == "First"
        assert _messages(reports, "fc:frame:button:1") == ["Duplicate meta tag"]

    def test_cross_client_prefix(self, frame_html):
        buttons, reports = _parse(
            frame_html,
            [("of:button:1", "Open"), ("fc:frame:button:1", "Ignored")],
            prefix="of:button",
        )

        assert reports == {}
        assert [button.label for button in buttons] == ["Open"]
