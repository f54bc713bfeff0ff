"""
Flattening Tests
================

Tests for get_frame_flattened and the HTML renderers, including the
flatten -> render -> parse round trip.
"""

from frames_engine import __version__
from frames_engine.models.frame import AcceptedProtocol, ButtonAction, Frame, FrameButton
from frames_engine.parsing import get_frame
from frames_engine.serialization import (
    get_frame_flattened,
    get_frame_html,
    get_frame_html_head,
    render_meta_tags,
)


FRAME_URL = "https://example.com/frame"


def _frame(**overrides):
    values = dict(
        version="vNext",
        image="https://example.com/image.png",
        og_image="https://example.com/og.png",
        post_url="https://example.com/post",
        buttons=[
            FrameButton(label="Next"),
            FrameButton(action=ButtonAction.LINK, label="Docs", target="https://example.com/docs"),
        ],
    )
    values.update(overrides)
    return Frame(**values)


class TestFlatten:
    """Frame -> tag map."""

    def test_primary_tags(self):
        flat = get_frame_flattened(_frame())

        assert flat["fc:frame"] == "vNext"
        assert flat["fc:frame:image"] == "https://example.com/image.png"
        assert flat["og:image"] == "https://example.com/og.png"
        assert flat["fc:frame:post_url"] == "https://example.com/post"
        assert flat["fc:frame:button:1"] == "Next"
        assert flat["fc:frame:button:1:action"] == "post"
        assert flat["fc:frame:button:2:target"] == "https://example.com/docs"

    def test_library_version_is_always_written(self):
        assert get_frame_flattened(_frame())["frames.js:version"] == __version__
        assert get_frame_flattened(_frame(), frames_version="1.2.3")["frames.js:version"] == "1.2.3"

    def test_og_image_defaults_to_image(self):
        flat = get_frame_flattened(_frame(og_image=None))
        assert flat["og:image"] == "https://example.com/image.png"

    def test_absent_fields_are_skipped(self):
        flat = get_frame_flattened(_frame())

        assert "fc:frame:state" not in flat
        assert "fc:frame:input:text" not in flat
        assert not any(key.startswith("of:") for key in flat)

    def test_button_post_url_only_for_posting_actions(self):
        flat = get_frame_flattened(_frame(buttons=[
            FrameButton(action=ButtonAction.TX, label="Buy", target="https://example.com/tx",
                        post_url="https://example.com/done"),
            FrameButton(action=ButtonAction.LINK, label="Docs", target="https://example.com/docs",
                        post_url="https://example.com/ignored"),
        ]))

        assert flat["fc:frame:button:1:post_url"] == "https://example.com/done"
        assert "fc:frame:button:2:post_url" not in flat

    def test_cross_client_tags_with_accepts(self):
        frame = _frame(accepts=[AcceptedProtocol(id="farcaster", version="vNext")], state="s")
        flat = get_frame_flattened(frame)

        assert flat["of:accepts:farcaster"] == "vNext"
        assert flat["of:version"] == "vNext"
        assert flat["of:image"] == "https://example.com/image.png"
        assert flat["of:state"] == "s"
        assert flat["of:button:2:action"] == "link"


class TestRendering:
    """Tag map -> HTML."""

    def test_values_are_escaped(self):
        html = render_meta_tags({"fc:frame:state": '{"a":"<b>&"}'})
        assert html == (
            '<meta name="fc:frame:state" '
            'content="{&quot;a&quot;:&quot;&lt;b&gt;&amp;&quot;}"/>'
        )

    def test_head_excludes_og_title(self):
        head = get_frame_html_head(_frame(title="Title"))
        assert "og:title" not in head
        assert 'name="fc:frame"' in head

    def test_default_document_title(self):
        html = get_frame_html(_frame())
        assert "<title>frame</title>" in html
        assert "og:title" not in html

    def test_explicit_titles(self):
        html = get_frame_html(_frame(), title="Page", og_title="Shared")
        assert "<title>Page</title>" in html
        assert '<meta property="og:title" content="Shared"/>' in html


class TestRoundTrip:
    """A flattened frame parses back to the same frame."""

    def test_primary_dialect(self):
        frame = _frame(
            title="My frame",
            image_aspect_ratio="1:1",
            input_text="Say something",
            state='{"count": 1, "note": "<b> & \'quotes\'"}',
        )

        result = get_frame(get_frame_html(frame), frame_url=FRAME_URL, fallback_post_url=FRAME_URL)

        assert result.is_success
        assert result.reports == {}
        assert result.frame == frame

    def test_parsed_frame_survives(self, frame_html, farcaster_tags):
        parsed = get_frame(frame_html(farcaster_tags), frame_url=FRAME_URL, fallback_post_url=FRAME_URL)

        reparsed = get_frame(
            get_frame_html(parsed.frame),
            frame_url=FRAME_URL,
            fallback_post_url=FRAME_URL,
        )

        assert reparsed.frame == parsed.frame
