"""
Test Configuration
==================

Pytest fixtures and test configuration for FramesEngine.

Network collaborators are replaced by in-memory fakes:
    - FakeTransport: proxy transport used by FrameSession
    - FakeHttpClient: frame server client used by the proxy app
    - manifest_signer: ed25519 app key producing signed manifests
"""

import asyncio
import html
import json
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from frames_engine.client import FetchedDocument
from frames_engine.interaction.transport import ProxyResponse
from frames_engine.models.frame import Frame
from frames_engine.models.reports import ParseStatus, Specification
from frames_engine.models.results import ParseResult
from frames_engine.signatures.json_signature import (
    AppKeyVerification,
    EncodedJFS,
    construct_account_association_payload,
    sign,
)


Tags = Sequence[Tuple[str, str]]

FARCASTER_TAGS: List[Tuple[str, str]] = [
    ("fc:frame", "vNext"),
    ("fc:frame:image", "https://example.com/image.png"),
    ("og:image", "https://example.com/og.png"),
    ("fc:frame:post_url", "https://example.com/post"),
    ("fc:frame:button:1", "Next"),
    ("fc:frame:button:2", "Docs"),
    ("fc:frame:button:2:action", "link"),
    ("fc:frame:button:2:target", "https://example.com/docs"),
]


def build_html(tags: Tags, title: Optional[str] = "Test frame", body: str = "") -> str:
    """HTML document declaring tags as <meta property=...> elements."""
    meta = "".join(
        f'<meta property="{html.escape(key)}" content="{html.escape(value)}"/>'
        for key, value in tags
    )
    title_tag = f"<title>{html.escape(title)}</title>" if title is not None else ""
    return (
        "<!DOCTYPE html><html><head>"
        f"{title_tag}{meta}"
        f"</head><body>{body}</body></html>"
    )


@pytest.fixture
def frame_html():
    """Factory building an HTML document from (key, content) pairs."""
    return build_html


@pytest.fixture
def farcaster_tags() -> List[Tuple[str, str]]:
    """A valid primary dialect frame with a post and a link button."""
    return list(FARCASTER_TAGS)


@pytest.fixture
def frame_v2_data() -> Dict[str, Any]:
    """A valid JSON-embedded frame."""
    return {
        "version": "next",
        "imageUrl": "https://example.com/image.png",
        "button": {
            "title": "Launch",
            "action": {
                "type": "launch_frame",
                "name": "Example App",
                "url": "https://example.com/app",
                "splashImageUrl": "https://example.com/splash.png",
                "splashBackgroundColor": "#eeeeee",
            },
        },
    }


# =============================================================================
# Interaction fakes
# =============================================================================

def frame_payload(frame: Frame, specification: Specification = Specification.FARCASTER) -> Dict[str, Any]:
    """JSON payload the GET/action proxy returns for a parsed frame."""
    return ParseResult(
        status=ParseStatus.SUCCESS,
        frame=frame,
        specification=specification,
    ).model_dump(mode="json")


class FakeTransport:
    """Scripted proxy transport; queued exceptions are raised."""

    def __init__(self, get_responses: Optional[List[Any]] = None, post_responses: Optional[List[Any]] = None) -> None:
        self.get_responses = list(get_responses or [])
        self.post_responses = list(post_responses or [])
        self.get_calls: List[Tuple[str, str]] = []
        self.post_calls: List[Tuple[Dict[str, str], Dict[str, Any]]] = []

    def get_frame(self, url: str, specification: str) -> ProxyResponse:
        self.get_calls.append((url, specification))
        return self._next(self.get_responses)

    def post_action(self, search_params: Dict[str, str], body: Dict[str, Any]) -> ProxyResponse:
        self.post_calls.append((search_params, body))
        return self._next(self.post_responses)

    @staticmethod
    def _next(responses: List[Any]) -> ProxyResponse:
        response = responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class SignerlessState:
    """Signer state of a user who has not connected a signer yet."""

    has_signer = False

    def __init__(self) -> None:
        self.signerless_presses = 0

    def sign_frame_action(self, context):
        raise AssertionError("sign_frame_action must not be called without a signer")

    def on_signerless_frame_press(self) -> None:
        self.signerless_presses += 1


@pytest.fixture
def frame_payload_factory():
    return frame_payload


@pytest.fixture
def make_transport():
    """Factory for FakeTransport."""
    return FakeTransport


@pytest.fixture
def signerless_state() -> SignerlessState:
    return SignerlessState()


@pytest.fixture
def ok_response():
    """Factory for a 200 ProxyResponse."""
    def build(payload: Any, status: int = 200) -> ProxyResponse:
        return ProxyResponse(status=status, payload=payload)
    return build


# =============================================================================
# Proxy app fakes
# =============================================================================

class FakeHttpClient:
    """Frame server stand-in for the proxy app."""

    def __init__(self) -> None:
        self.documents: Dict[str, FetchedDocument] = {}
        self.post_response: Optional[FetchedDocument] = None
        self.get_error: Optional[Exception] = None
        self.posts: List[Tuple[str, Dict[str, Any], bool]] = []

    def get(self, url: str) -> FetchedDocument:
        if self.get_error is not None:
            raise self.get_error
        return self.documents[url]

    def post(self, url: str, json_body: Dict[str, Any], follow_redirects: bool = True) -> FetchedDocument:
        self.posts.append((url, json_body, follow_redirects))
        return self.post_response


@pytest.fixture
def fake_http_client() -> FakeHttpClient:
    return FakeHttpClient()


# =============================================================================
# Manifest signing
# =============================================================================

class ManifestSigner:
    """Signs account associations with a freshly generated app key."""

    def __init__(self, fid: int = 1234) -> None:
        self.fid = fid
        self._private_key = Ed25519PrivateKey.generate()
        public_bytes = self._private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        self.public_key_hex = "0x" + public_bytes.hex()

    def sign_message(self, message: str) -> str:
        return "0x" + self._private_key.sign(message.encode("ascii")).hex()

    def association(self, domain: str) -> EncodedJFS:
        return asyncio.run(
            sign(
                fid=self.fid,
                signer_type="app_key",
                key=self.public_key_hex,
                payload=construct_account_association_payload(domain),
                sign_message=self.sign_message,
            )
        )


@pytest.fixture
def manifest_signer() -> ManifestSigner:
    return ManifestSigner()


@pytest.fixture
def registered_app_key():
    """verify_app_key capability accepting every key."""
    def verify_app_key(fid: int, key: str) -> AppKeyVerification:
        return AppKeyVerification(valid=True, app_fid=9152)
    return verify_app_key


@pytest.fixture
def manifest_document():
    """Factory for a fetched manifest body."""
    def build(data: Any, status: int = 200) -> FetchedDocument:
        text = data if isinstance(data, str) else json.dumps(data)
        return FetchedDocument(
            status=status,
            text=text,
            headers={"content-type": "application/json"},
        )
    return build
