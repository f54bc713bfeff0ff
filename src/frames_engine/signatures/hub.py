"""
Hub App Key Verifier
====================

Checks that an app key is registered on-chain to a fid by querying a
Farcaster hub HTTP API.

The hub returns the signer events of the fid. The key is valid when one of
the events adds it; the event metadata is an ABI encoded SignedKeyRequest
tuple whose first word is the fid of the app that requested the key.
"""

import base64
import binascii
import logging
from typing import Dict, List, Optional

import requests
from pydantic import BaseModel, Field

from frames_engine.signatures.json_signature import AppKeyVerification


logger = logging.getLogger(__name__)

DEFAULT_HUB_URL = "https://hub-api.neynar.com"


class AppKeyVerificationError(Exception):
    """Hub request failed or returned an unexpected response."""
    pass


class _SignerEventBody(BaseModel):
    key: str = ""
    metadata: str = ""


class _SignerEvent(BaseModel):
    signer_event_body: Optional[_SignerEventBody] = Field(default=None, alias="signerEventBody")


class _OnChainSigners(BaseModel):
    """Shape of /v1/onChainSignersByFid that the check relies on."""

    events: List[_SignerEvent]


def decode_request_fid(metadata_b64: str) -> int:
    """
    Extract requestFid from ABI encoded SignedKeyRequest metadata.

    Layout: word 0 is the offset of the dynamic tuple, word 1 is requestFid.
    """
    try:
        raw = base64.b64decode(metadata_b64)
    except (ValueError, binascii.Error) as e:
        raise AppKeyVerificationError("Error decoding metadata") from e

    if len(raw) < 64:
        raise AppKeyVerificationError("Error decoding metadata")

    return int.from_bytes(raw[32:64], "big")


class HubAppKeyVerifier:
    """
    verify_app_key capability backed by a hub HTTP API.

    Example:
        verifier = HubAppKeyVerifier(api_key=os.environ["NEYNAR_API_KEY"])
        verify(signature, verify_app_key=verifier)
    """

    def __init__(
        self,
        hub_url: str = DEFAULT_HUB_URL,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.hub_url = hub_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._session = session or requests.Session()

    def __call__(self, fid: int, app_key: str) -> AppKeyVerification:
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["x-api-key"] = self.api_key

        try:
            response = self._session.get(
                f"{self.hub_url}/v1/onChainSignersByFid",
                params={"fid": str(fid)},
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise AppKeyVerificationError(f"Error fetching from Hub API: {e}") from e

        if response.status_code != 200:
            raise AppKeyVerificationError(
                "Error fetching from Hub API, non-200 status code received"
            )

        # pydantic.ValidationError is a ValueError
        try:
            signers = _OnChainSigners.model_validate(response.json())
        except ValueError as e:
            raise AppKeyVerificationError("Error parsing Hub response") from e

        app_key_lower = app_key.lower()

        for event in signers.events:
            body = event.signer_event_body
            if body is None or body.key.lower() != app_key_lower:
                continue

            app_fid = decode_request_fid(body.metadata)
            logger.debug(f"App key for fid={fid} registered by app fid={app_fid}")
            return AppKeyVerification(valid=True, app_fid=app_fid)

        return AppKeyVerification(valid=False)
