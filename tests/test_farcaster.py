"""
Primary Dialect Tests
=====================

Tests for parse_farcaster_frame ("fc:frame:*" meta tags).
"""

from frames_engine.models.frame import ButtonAction
from frames_engine.models.reports import IssueLevel, ParseStatus, Specification
from frames_engine.parsing.common import DEFAULT_TITLE_MESSAGE, MISSING_TITLE_MESSAGE
from frames_engine.parsing.document import FrameDocument
from frames_engine.parsing.farcaster import parse_farcaster_frame
from frames_engine.parsing.reporter import Reporter


FALLBACK_URL = "https://example.com/frame"


def _parse(html, from_request_method="GET"):
    return parse_farcaster_frame(
        FrameDocument(html),
        reporter=Reporter(Specification.FARCASTER),
        fallback_post_url=FALLBACK_URL,
        from_request_method=from_request_method,
    )


def _without(tags, key):
    return [(k, v) for k, v in tags if k != key]


class TestValidFrame:
    """A complete, valid frame."""

    def test_success(self, frame_html, farcaster_tags):
        result = _parse(frame_html(farcaster_tags))

        assert result.status == ParseStatus.SUCCESS
        assert result.is_success
        assert result.specification == Specification.FARCASTER
        assert result.reports == {}

    def test_fields(self, frame_html, farcaster_tags):
        frame = _parse(frame_html(farcaster_tags)).frame

        assert frame.version == "vNext"
        assert frame.image == "https://example.com/image.png"
        assert frame.og_image == "https://example.com/og.png"
        assert frame.post_url == "https://example.com/post"
        assert frame.title == "Test frame"
        assert [button.action for button in frame.buttons] == [ButtonAction.POST, ButtonAction.LINK]

    def test_optional_fields(self, frame_html, farcaster_tags):
        tags = farcaster_tags + [
            ("fc:frame:image:aspect_ratio", "1:1"),
            ("fc:frame:input:text", "Say something"),
            ("fc:frame:state", '{"count": 1}'),
        ]
        frame = _parse(frame_html(tags)).frame

        assert frame.image_aspect_ratio == "1:1"
        assert frame.input_text == "Say something"
        assert frame.state == '{"count": 1}'

    def test_date_version(self, frame_html, farcaster_tags):
        tags = _without(farcaster_tags, "fc:frame") + [("fc:frame", "2024-02-09")]
        assert _parse(frame_html(tags)).frame.version == "2024-02-09"


class TestErrors:
    """Invalid documents return partial frames with reports."""

    def test_missing_version(self, frame_html, farcaster_tags):
        result = _parse(frame_html(_without(farcaster_tags, "fc:frame")))

        assert result.status == ParseStatus.FAILURE
        assert result.reports["fc:frame"][0].message == 'Missing required meta tag "fc:frame"'
        # everything else still parsed
        assert result.frame.image == "https://example.com/image.png"
        assert len(result.frame.buttons) == 2

    def test_invalid_version(self, frame_html, farcaster_tags):
        tags = _without(farcaster_tags, "fc:frame") + [("fc:frame", "v2")]
        result = _parse(frame_html(tags))

        assert result.frame.version is None
        assert result.reports["fc:frame"][0].message == 'Invalid version "v2"'

    def test_missing_image(self, frame_html, farcaster_tags):
        result = _parse(frame_html(_without(farcaster_tags, "fc:frame:image")))

        assert result.status == ParseStatus.FAILURE
        assert result.reports["fc:frame:image"][0].level == IssueLevel.ERROR

    def test_invalid_aspect_ratio(self, frame_html, farcaster_tags):
        result = _parse(frame_html(farcaster_tags + [("fc:frame:image:aspect_ratio", "4:3")]))

        assert result.frame.image_aspect_ratio is None
        assert "fc:frame:image:aspect_ratio" in result.reports

    def test_long_input_text(self, frame_html, farcaster_tags):
        result = _parse(frame_html(farcaster_tags + [("fc:frame:input:text", "x" * 40)]))

        assert result.status == ParseStatus.FAILURE
        assert result.frame.input_text is None

    def test_long_post_url(self, frame_html, farcaster_tags):
        tags = _without(farcaster_tags, "fc:frame:post_url") + [
            ("fc:frame:post_url", "https://example.com/" + "p" * 300),
        ]
        result = _parse(frame_html(tags))

        assert result.frame.post_url is None
        assert "256 bytes" in result.reports["fc:frame:post_url"][0].message

    def test_errors_are_collected_in_one_pass(self, frame_html):
        result = _parse(frame_html([("fc:frame:button:1:action", "post")]))

        assert {"fc:frame", "fc:frame:image", "fc:frame:button:1"} <= set(result.reports)


class TestFallbacksAndWarnings:
    """Post URL fallback, og:image and title warnings."""

    def test_post_url_falls_back(self, frame_html, farcaster_tags):
        result = _parse(frame_html(_without(farcaster_tags, "fc:frame:post_url")))
        assert result.frame.post_url == FALLBACK_URL

    def test_missing_og_image_is_a_warning(self, frame_html, farcaster_tags):
        result = _parse(frame_html(_without(farcaster_tags, "og:image")))

        assert result.status == ParseStatus.SUCCESS
        assert result.reports["og:image"][0].level == IssueLevel.WARNING

    def test_post_responses_skip_page_warnings(self, frame_html, farcaster_tags):
        html = frame_html(_without(farcaster_tags, "og:image"), title=None)
        result = _parse(html, from_request_method="POST")

        assert result.reports == {}

    def test_missing_title_warning(self, frame_html, farcaster_tags):
        result = _parse(frame_html(farcaster_tags, title=None))

        assert result.frame.title is None
        assert result.reports["title"][0].message == MISSING_TITLE_MESSAGE
        assert result.status == ParseStatus.SUCCESS

    def test_default_title_warning(self, frame_html, farcaster_tags):
        result = _parse(frame_html(farcaster_tags, title="frame"))

        assert result.frame.title == "frame"
        assert result.reports["title"][0].message == DEFAULT_TITLE_MESSAGE

    def test_og_title_wins(self, frame_html, farcaster_tags):
        result = _parse(frame_html(farcaster_tags + [("og:title", "Open Graph")]))
        assert result.frame.title == "Open Graph"
