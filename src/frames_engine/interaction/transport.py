"""
Proxy Transport
===============

HTTP client for the GET and action proxy endpoints.

Sessions never call third party frame servers directly. Every load goes
through the GET proxy and every button press through the action proxy:

    GET  {get_proxy_url}?url=...&specification=...
    POST {action_proxy_url}?postType=...&postUrl=...&specification=...

Response Handling:
    2xx   -> ProxyResponse with the decoded payload
    4xx   -> ProxyResponse (servers return structured validation errors)
    5xx   -> ProxyRequestError
    network failure -> ProxyRequestError without a status

The transport is blocking (requests); FrameSession runs it in a worker
thread with asyncio.to_thread.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests


logger = logging.getLogger(__name__)


class ProxyRequestError(Exception):
    """
    Proxy request failed.

    Attributes:
        status: HTTP status, None when no response was received
        payload: Decoded response body, if any
    """

    def __init__(self, message: str, status: Optional[int] = None, payload: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.payload = payload


@dataclass(frozen=True)
class ProxyResponse:
    """Decoded proxy response."""

    status: int
    payload: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class ProxyTransport:
    """
    requests based client for the proxy endpoints.

    Attributes:
        get_proxy_url: URL of the GET proxy (e.g. "http://localhost:8080/frames")
        action_proxy_url: URL of the action proxy
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        get_proxy_url: str,
        action_proxy_url: Optional[str] = None,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.get_proxy_url = get_proxy_url
        self.action_proxy_url = action_proxy_url or get_proxy_url
        self.timeout = timeout
        self._session = session or requests.Session()

    def get_frame(self, url: str, specification: str) -> ProxyResponse:
        """Load a frame through the GET proxy."""
        return self._send(
            "GET",
            self.get_proxy_url,
            params={"url": url, "specification": specification},
        )

    def post_action(self, search_params: Dict[str, str], body: Dict[str, Any]) -> ProxyResponse:
        """Send a signed frame action through the action proxy."""
        return self._send(
            "POST",
            self.action_proxy_url,
            params=search_params,
            json=body,
        )

    def _send(self, method: str, url: str, **kwargs: Any) -> ProxyResponse:
        start = time.monotonic()

        try:
            response = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise ProxyRequestError(f"Failed to reach frame proxy: {e}") from e

        elapsed_ms = (time.monotonic() - start) * 1000
        target = kwargs.get("params", {}).get("url") or kwargs.get("params", {}).get("postUrl")
        logger.info(f"{method} proxy target={target} status={response.status_code} ({elapsed_ms:.0f}ms)")

        payload = _decode_body(response)

        if response.status_code >= 500:
            raise ProxyRequestError(
                "The server returned an error but it does not contain message property. "
                f"Status code: {response.status_code}",
                status=response.status_code,
                payload=payload,
            )

        return ProxyResponse(status=response.status_code, payload=payload)


def _decode_body(response: requests.Response) -> Any:
    if "/json" in response.headers.get("content-type", ""):
        try:
            return response.json()
        except ValueError:
            return response.text
    return response.text
