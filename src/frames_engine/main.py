"""
FramesEngine Proxy Application
==============================

FastAPI application exposing the proxy endpoints used by FrameSession.

Clients never talk to frame servers directly: loads and button presses are
relayed through this service so third party servers see neither the client
IP nor a cross origin request.

Endpoints:
    GET  /                  - Service information
    GET  /health            - Liveness check
    GET  /frames            - GET proxy: fetch a frame URL and parse it
    POST /frames            - Action proxy: forward a frame action

GET /frames:
    ?url=...                 required, 400 {"message": "Invalid URL"} if absent
    ?specification=...       optional; one dialect result, otherwise all

POST /frames:
    ?postUrl=...             frame server URL the action body is posted to
    ?postType=...            post | post_redirect | tx | ...
    ?specification=...       dialect to parse the response with (farcaster)

    post_redirect  -> {"location": ...} when the server answers with a redirect
    4xx {message}  -> passed through with the same status
    tx             -> transaction data JSON passed through
    otherwise      -> parse result of the returned HTML
"""

import asyncio
import json
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from frames_engine.client import FetchError, FrameHttpClient
from frames_engine.config import settings, setup_logging
from frames_engine.models.reports import Specification
from frames_engine.parsing.manifest import ManifestFetcher, SignatureVerifier
from frames_engine.parsing.orchestrator import get_frame, parse_frames_with_reports
from frames_engine.signatures.hub import HubAppKeyVerifier
from frames_engine.signatures.json_signature import EncodedJFS, verify


logger = logging.getLogger(__name__)

POST_REDIRECT = "post_redirect"
TRANSACTION = "tx"


# =============================================================================
# Global State
# =============================================================================

_http_client: Optional[FrameHttpClient] = None
_manifest_client: Optional[FrameHttpClient] = None
_app_key_verifier: Optional[HubAppKeyVerifier] = None
_startup_time: float = time.time()


def get_http_client() -> FrameHttpClient:
    """Client used for frame documents and actions."""
    global _http_client
    if _http_client is None:
        _http_client = FrameHttpClient(
            timeout=settings.proxy.request_timeout_seconds,
            user_agent=settings.proxy.user_agent,
        )
    return _http_client


def get_manifest_fetcher() -> ManifestFetcher:
    """GET used for domain manifests (shorter timeout)."""
    global _manifest_client
    if _manifest_client is None:
        _manifest_client = FrameHttpClient(
            timeout=settings.parsing.manifest_timeout_seconds,
            user_agent=settings.proxy.user_agent,
        )
    return _manifest_client.get


def get_signature_verifier() -> SignatureVerifier:
    """Account association verifier backed by the configured hub."""
    global _app_key_verifier
    if _app_key_verifier is None:
        _app_key_verifier = HubAppKeyVerifier(
            hub_url=settings.signer.hub_url,
            api_key=settings.signer.hub_api_key,
        )

    app_key_verifier = _app_key_verifier

    def verify_signature(signature: EncodedJFS) -> bool:
        return verify(signature, verify_app_key=app_key_verifier)

    return verify_signature


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging and warm up outbound clients."""
    global _startup_time

    setup_logging(settings)

    _startup_time = time.time()
    logger.info(f"Starting {settings.engine.name} {settings.engine.version}")
    logger.info(
        f"Parsing: strict={settings.parsing.strict}, "
        f"parse_manifest={settings.parsing.parse_manifest}"
    )

    get_http_client()

    yield

    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="FramesEngine",
    description="Frame parsing and interaction proxy",
    version=settings.engine.version,
    lifespan=lifespan,
)


def _message(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"message": message}, status_code=status_code)


def _parse_specification(value: Optional[str]) -> Optional[Specification]:
    if value is None:
        return None
    try:
        return Specification(value)
    except ValueError:
        return None


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": "FramesEngine",
        "name": settings.engine.name,
        "version": settings.engine.version,
        "status": "running",
    })


@app.get("/health")
async def health() -> JSONResponse:
    """Liveness check, always 200 while the process is up."""
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _startup_time, 1),
    })


@app.get("/frames")
async def get_frames(
    url: Optional[str] = None,
    specification: Optional[str] = None,
    client: FrameHttpClient = Depends(get_http_client),
    manifest_fetcher: ManifestFetcher = Depends(get_manifest_fetcher),
    signature_verifier: SignatureVerifier = Depends(get_signature_verifier),
) -> JSONResponse:
    """
    GET proxy.

    Fetches url and parses it with every dialect. Returns the result of the
    requested dialect, or all of them when no specification is given.
    """
    if not url:
        return _message("Invalid URL", 400)

    selected = _parse_specification(specification)
    if specification is not None and selected is None:
        return _message("Invalid specification", 400)

    try:
        document = await asyncio.to_thread(client.get, url)
        results = await asyncio.to_thread(
            parse_frames_with_reports,
            document.text,
            frame_url=url,
            fallback_post_url=url,
            strict=settings.parsing.strict,
            parse_manifest=settings.parsing.parse_manifest,
            manifest_fetcher=manifest_fetcher,
            signature_verifier=signature_verifier,
            well_known_path=settings.parsing.manifest_well_known_path,
        )
    except FetchError as e:
        logger.error(f"GET proxy failed to fetch {url}: {e}")
        return _message(str(e), 500)
    except Exception as e:
        logger.exception(f"GET proxy failed for {url}")
        return _message(str(e), 500)

    if selected is None:
        return JSONResponse(results.model_dump(mode="json"))

    return JSONResponse(results.get(selected).model_dump(mode="json"))


@app.post("/frames")
async def post_frames(
    request: Request,
    post_url: Optional[str] = Query(default=None, alias="postUrl"),
    post_type: Optional[str] = Query(default=None, alias="postType"),
    specification: str = Specification.FARCASTER.value,
    client: FrameHttpClient = Depends(get_http_client),
    manifest_fetcher: ManifestFetcher = Depends(get_manifest_fetcher),
    signature_verifier: SignatureVerifier = Depends(get_signature_verifier),
) -> JSONResponse:
    """
    Action proxy.

    Forwards the frame action body to postUrl and translates the frame
    server response into something the session can classify.
    """
    if not post_url:
        return _message("Invalid URL", 400)

    selected = _parse_specification(specification)
    if selected is None:
        return _message("Invalid specification", 400)

    try:
        body: Any = await request.json()
    except ValueError:
        return _message("Invalid frame action body", 400)

    is_post_redirect = post_type == POST_REDIRECT

    try:
        response = await asyncio.to_thread(
            client.post, post_url, body, not is_post_redirect
        )
    except FetchError as e:
        logger.error(f"Action proxy failed to reach {post_url}: {e}")
        return _message(str(e), 500)

    if is_post_redirect and 300 <= response.status < 400 and response.location:
        return JSONResponse({"location": response.location})

    if 400 <= response.status < 500:
        error = _json_or_none(response.text)
        if isinstance(error, dict) and "message" in error:
            return _message(str(error["message"]), response.status)

    if post_type == TRANSACTION:
        transaction = _json_or_none(response.text)
        if transaction is None:
            logger.error(f"Transaction data from {post_url} is not valid JSON")
            return _message("Transaction response is not a valid JSON value", 500)
        return JSONResponse(transaction)

    fallback_post_url = _untrusted_url(body) or post_url

    try:
        result = await asyncio.to_thread(
            get_frame,
            response.text,
            frame_url=fallback_post_url,
            fallback_post_url=fallback_post_url,
            specification=selected,
            from_request_method="POST",
            strict=settings.parsing.strict,
            parse_manifest=settings.parsing.parse_manifest,
            manifest_fetcher=manifest_fetcher,
            signature_verifier=signature_verifier,
            well_known_path=settings.parsing.manifest_well_known_path,
        )
    except Exception as e:
        logger.exception(f"Action proxy failed to parse response from {post_url}")
        return _message(str(e), 500)

    return JSONResponse(result.model_dump(mode="json"))


def _json_or_none(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        return None


def _untrusted_url(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    untrusted: Dict[str, Any] = body.get("untrustedData") or {}
    url = untrusted.get("url") if isinstance(untrusted, dict) else None
    return url if isinstance(url, str) and url else None


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    setup_logging(settings)

    port = int(os.environ.get("PORT", settings.server.port))

    uvicorn.run(
        "frames_engine.main:app",
        host=settings.server.host,
        port=port,
        reload=False,
    )
