"""
Frame HTTP Client
=================

Blocking HTTP client used to talk to third party frame servers.

This client:
    - Fetches frame HTML documents (GET)
    - Fetches domain manifests from the well-known path (GET)
    - Forwards signed frame actions (POST), optionally without following
      redirects so post_redirect responses can be surfaced as a location

Only server side code (the proxy app, manifest validation) uses this client.
Interactive sessions never call frame servers directly; they go through the
proxy endpoints.

Example:
    client = FrameHttpClient(timeout=10.0)
    document = client.get("https://example.com/frame")
    print(document.status, document.text[:80])
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests


logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "frames-engine/0.1"


class FetchError(Exception):
    """Network level failure (DNS, connection, timeout)."""
    pass


@dataclass(frozen=True)
class FetchedDocument:
    """
    Response of a frame server.

    Attributes:
        status: HTTP status code
        text: Decoded body
        headers: Response headers (lowercased keys)
        url: Final URL after redirects
    """

    status: int
    text: str
    headers: Dict[str, str] = field(default_factory=dict)
    url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def location(self) -> Optional[str]:
        return self.headers.get("location")

    @property
    def is_json(self) -> bool:
        return "/json" in self.headers.get("content-type", "")

    def __repr__(self) -> str:
        return f"FetchedDocument(status={self.status}, url={self.url!r}, bytes={len(self.text)})"


class FrameHttpClient:
    """
    requests based client for frame servers.

    Attributes:
        timeout: Per request timeout in seconds
        user_agent: User-Agent header sent with every request
    """

    def __init__(
        self,
        timeout: float = 15.0,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._session = session or requests.Session()

    def get(self, url: str) -> FetchedDocument:
        """
        GET url, following redirects.

        Raises:
            FetchError: On network failure
        """
        return self._request("GET", url)

    def post(
        self,
        url: str,
        json_body: Dict[str, Any],
        follow_redirects: bool = True,
    ) -> FetchedDocument:
        """
        POST a JSON body to url.

        Args:
            url: Frame server URL
            json_body: Frame action body
            follow_redirects: False for post_redirect buttons

        Raises:
            FetchError: On network failure
        """
        return self._request("POST", url, json=json_body, allow_redirects=follow_redirects)

    def _request(self, method: str, url: str, **kwargs: Any) -> FetchedDocument:
        headers = {"User-Agent": self.user_agent}
        if method == "POST":
            headers["Content-Type"] = "application/json"

        try:
            response = self._session.request(
                method,
                url,
                headers=headers,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise FetchError(str(e)) from e

        logger.info(f"{method} {url} -> {response.status_code}")

        return FetchedDocument(
            status=response.status_code,
            text=response.text,
            headers={key.lower(): value for key, value in response.headers.items()},
            url=response.url,
        )
