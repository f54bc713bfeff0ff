"""
Domain Manifest Parser
======================

Fetches and validates the domain manifest of a JSON-embedded frame.

Pipeline:
    1. GET {frame origin}{well_known_path}
    2. Decode the JSON body
    3. Structural validation (account association, frame config, triggers)
    4. Account association verification: the signed payload must declare
       the frame hostname as its domain, and the JFS signature must verify

Design Rules:
    - Every failure is reported, nothing is raised to the caller
    - Fetch, decode, structure and verification problems use distinct
      report wording so callers can tell "could not get it" apart from
      "got it but it does not belong to this domain"
    - The manifest is fetched fresh on every call, nothing is cached
"""

import copy
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Set, Tuple
from urllib.parse import urlsplit

from pydantic import Field, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from frames_engine.client import FetchError, FetchedDocument, FrameHttpClient
from frames_engine.models.manifest import (
    AccountAssociation,
    FarcasterManifest,
    ManifestFrameConfig,
    TriggerConfig,
)
from frames_engine.models.reports import ParseStatus
from frames_engine.models.results import ManifestParseResult
from frames_engine.parsing.reporter import Reporter
from frames_engine.parsing.validators import is_https_url, is_valid_hex_color, is_valid_url
from frames_engine.signatures.hub import AppKeyVerificationError, HubAppKeyVerifier
from frames_engine.signatures.json_signature import (
    EncodedJFS,
    InvalidJFSHeaderError,
    InvalidJFSPayloadError,
    InvalidJFSSignatureError,
    JFSVerificationUnavailableError,
    decode_header,
    decode_payload,
    verify,
)


logger = logging.getLogger(__name__)

DEFAULT_WELL_KNOWN_PATH = "/.well-known/farcaster.json"

MANIFEST_KEY = "fc:manifest"
ASSOCIATION_KEY = "fc:manifest.accountAssociation"
FRAME_CONFIG_KEY = "fc:manifest.frame"
TRIGGERS_KEY = "fc:manifest.triggers"

TRIGGER_TYPES = ("cast", "composer")

ManifestFetcher = Callable[[str], FetchedDocument]
SignatureVerifier = Callable[[EncodedJFS], bool]

# top level property -> (name used in messages, message when it has the wrong shape)
_SECTIONS = {
    "accountAssociation": ("account association", "Account association must be an object"),
    "frame": ("frame config", "Frame config must be an object"),
    "triggers": ("trigger", "Triggers must be an array"),
}

_FRAME_CONFIG_URLS = ("homeUrl", "iconUrl", "splashImageUrl", "webhookUrl")


def get_manifest_url(frame_url: str, well_known_path: str = DEFAULT_WELL_KNOWN_PATH) -> str:
    """Manifest location on the origin of frame_url."""
    parts = urlsplit(frame_url)
    return f"{parts.scheme}://{parts.netloc}{well_known_path}"


def default_signature_verifier(signature: EncodedJFS) -> bool:
    """
    Verify with the hub backed app key check.

    Custody signatures need an injected verifier and raise
    JFSVerificationUnavailableError here.
    """
    return verify(signature, verify_app_key=HubAppKeyVerifier())


# =============================================================================
# Declaration Schema
# =============================================================================

def _check_url(value: Optional[str], info: ValidationInfo) -> Optional[str]:
    if value is None:
        return value

    if not is_valid_url(value):
        raise PydanticCustomError("invalid_url", "must be a valid URL")

    strict = bool(info.context and info.context.get("strict"))
    if strict and not is_https_url(value):
        raise PydanticCustomError("insecure_url", "must use https")

    return value


class _AssociationDeclaration(AccountAssociation):
    header: str
    payload: str
    signature: str


class _FrameConfigDeclaration(ManifestFrameConfig):
    version: str
    name: str
    home_url: str = Field(..., alias="homeUrl")
    icon_url: str = Field(..., alias="iconUrl")

    @field_validator("home_url", "icon_url", "splash_image_url", "webhook_url")
    @classmethod
    def check_url(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        return _check_url(value, info)

    @field_validator("splash_background_color")
    @classmethod
    def check_color(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_valid_hex_color(value):
            raise PydanticCustomError("hex_color", "must be a valid hex color")
        return value


class _TriggerDeclaration(TriggerConfig):
    id: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)

    @field_validator("type")
    @classmethod
    def check_type(cls, value: str) -> str:
        if value not in TRIGGER_TYPES:
            raise PydanticCustomError("trigger_type", "Trigger type must be either 'cast' or 'composer'")
        return value

    @field_validator("url")
    @classmethod
    def check_url(cls, value: str, info: ValidationInfo) -> str:
        return _check_url(value, info)


class _ManifestDeclaration(FarcasterManifest):
    """Required sections of a manifest; strict is read from the context."""

    account_association: _AssociationDeclaration = Field(..., alias="accountAssociation")
    frame: _FrameConfigDeclaration
    triggers: Optional[List[_TriggerDeclaration]] = None


# =============================================================================
# Parser
# =============================================================================

def parse_farcaster_manifest(
    frame_url: str,
    *,
    reporter: Reporter,
    strict: bool = False,
    fetcher: Optional[ManifestFetcher] = None,
    verifier: Optional[SignatureVerifier] = None,
    well_known_path: str = DEFAULT_WELL_KNOWN_PATH,
) -> ManifestParseResult:
    """
    Fetch and validate the manifest for the origin of frame_url.

    Args:
        frame_url: URL the frame was loaded from
        reporter: Reporter collecting manifest reports
        strict: Require https URLs (otherwise non-https is a warning)
        fetcher: Callable performing the GET, defaults to FrameHttpClient
        verifier: Callable verifying the account association signature
        well_known_path: Path of the manifest on the origin

    Returns:
        ManifestParseResult with the (possibly partial) manifest
    """
    fetcher = fetcher or FrameHttpClient(timeout=10.0).get
    verifier = verifier or default_signature_verifier
    manifest_url = get_manifest_url(frame_url, well_known_path)

    try:
        response = fetcher(manifest_url)
    except FetchError as e:
        logger.warning(f"Manifest fetch failed for {manifest_url}: {e}")
        reporter.error(MANIFEST_KEY, f"Failed to fetch frame manifest, {e}")
        return _failure(reporter)

    if response.status != 200:
        logger.warning(f"Manifest fetch for {manifest_url} returned {response.status}")
        reporter.error(
            MANIFEST_KEY,
            f"Failed to fetch frame manifest, status code: {response.status}",
        )
        return _failure(reporter)

    try:
        data = json.loads(response.text)
    except ValueError:
        reporter.error(
            MANIFEST_KEY,
            "Failed to parse frame manifest, it is not a valid JSON value",
        )
        return _failure(reporter)

    if not isinstance(data, dict):
        reporter.error(MANIFEST_KEY, "Manifest must be an object")
        return _failure(reporter)

    errors: List[Dict[str, Any]] = []
    try:
        _ManifestDeclaration.model_validate(data, context={"strict": strict})
    except ValidationError as e:
        errors = e.errors()

    for error in errors:
        reporter.error(*_describe(error))

    valid = _without(data, errors)
    if not strict:
        _warn_insecure_urls(data, errors, reporter)

    manifest = FarcasterManifest.model_validate(valid)

    association = manifest.account_association
    if (
        association is not None
        and association.header
        and association.payload
        and association.signature
    ):
        _verify_account_association(association, frame_url, reporter, verifier)

    status = ParseStatus.FAILURE if reporter.has_errors() else ParseStatus.SUCCESS
    logger.debug(f"manifest parse: url={manifest_url}, status={status.value}")

    return ManifestParseResult(status=status, manifest=manifest, reports=reporter.to_dict())


def _failure(reporter: Reporter) -> ManifestParseResult:
    return ManifestParseResult(status=ParseStatus.FAILURE, reports=reporter.to_dict())


# =============================================================================
# Structure
# =============================================================================

def _report_key(loc: Tuple[Any, ...]) -> str:
    """("triggers", 0, "type") -> "fc:manifest.triggers[0].type"."""
    key = MANIFEST_KEY
    for part in loc:
        key += f"[{part}]" if isinstance(part, int) else f".{part}"
    return key


def _describe(error: Dict[str, Any]) -> Tuple[str, str]:
    """Report key and message for one validation error."""
    loc = tuple(error["loc"])
    kind = error["type"]
    section = loc[0]
    subject, wrong_shape = _SECTIONS.get(section, (section, f"{section} is invalid"))

    if len(loc) == 1:
        if kind == "missing" or error.get("input") is None:
            return MANIFEST_KEY, f'Missing required property "{section}" in manifest'
        return _report_key(loc), wrong_shape

    name = loc[-1]
    if isinstance(name, int):
        return _report_key(loc), "Trigger must be an object"

    if kind in ("missing", "string_too_short"):
        return _report_key(loc), f'Missing required property "{name}" in {subject}'
    if kind == "string_type":
        return _report_key(loc), f'Property "{name}" in {subject} must be a string'
    if kind == "trigger_type":
        return _report_key(loc), error["msg"]

    return _report_key(loc), f'Property "{name}" in {subject} {error["msg"]}'


def _failed_triggers(errors: List[Dict[str, Any]]) -> Set[int]:
    return {
        error["loc"][1]
        for error in errors
        if error["loc"][0] == "triggers" and len(error["loc"]) > 1
    }


def _without(data: Dict[str, Any], errors: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Copy of data holding only what validated.

    An invalid trigger is dropped as a whole; elsewhere only the failing
    property is removed.
    """
    valid = copy.deepcopy(data)

    for error in errors:
        *parents, name = error["loc"]
        if parents and parents[0] == "triggers":
            continue

        node: Any = valid
        for part in parents:
            node = node.get(part) if isinstance(node, dict) else None
        if isinstance(node, dict):
            node.pop(name, None)

    if isinstance(valid.get("triggers"), list):
        failed = _failed_triggers(errors)
        valid["triggers"] = [
            trigger
            for index, trigger in enumerate(valid["triggers"])
            if index not in failed
        ]

    return valid


def _warn_insecure_urls(data: Dict[str, Any], errors: List[Dict[str, Any]], reporter: Reporter) -> None:
    """Non-strict mode: valid http URLs are kept with a warning."""
    failed = {tuple(error["loc"]) for error in errors}

    config = data.get("frame")
    if isinstance(config, dict):
        for name in _FRAME_CONFIG_URLS:
            value = config.get(name)
            if ("frame", name) in failed or not isinstance(value, str):
                continue
            if not is_https_url(value):
                reporter.warn(
                    f"{FRAME_CONFIG_KEY}.{name}",
                    f'Property "{name}" in frame config should use https',
                )

    triggers = data.get("triggers")
    if isinstance(triggers, list):
        failed_triggers = _failed_triggers(errors)
        for index, trigger in enumerate(triggers):
            if index in failed_triggers or is_https_url(trigger["url"]):
                continue
            reporter.warn(f"{TRIGGERS_KEY}[{index}].url", 'Property "url" in trigger should use https')


# =============================================================================
# Verification
# =============================================================================

def _verify_account_association(
    association: AccountAssociation,
    frame_url: str,
    reporter: Reporter,
    verifier: SignatureVerifier,
) -> None:
    header_key = f"{ASSOCIATION_KEY}.header"
    payload_key = f"{ASSOCIATION_KEY}.payload"
    signature_key = f"{ASSOCIATION_KEY}.signature"

    try:
        decode_header(association.header)
    except InvalidJFSHeaderError as e:
        reporter.error(header_key, f"Failed to decode account association header: {e}")
        return

    try:
        payload: Dict[str, Any] = decode_payload(association.payload)
    except InvalidJFSPayloadError as e:
        reporter.error(payload_key, f"Failed to decode account association payload: {e}")
        return

    hostname = urlsplit(frame_url).hostname or ""
    domain = payload.get("domain")
    if domain != hostname:
        logger.warning(f"Manifest domain {domain!r} does not match frame host {hostname!r}")
        reporter.error(
            payload_key,
            f'Account association domain "{domain}" does not match frame domain "{hostname}"',
        )

    signature = EncodedJFS(
        header=association.header,
        payload=association.payload,
        signature=association.signature,
    )

    try:
        valid = verifier(signature)
    except JFSVerificationUnavailableError as e:
        reporter.warn(signature_key, f"Account association signature was not verified: {e}")
        return
    except (InvalidJFSSignatureError, AppKeyVerificationError) as e:
        logger.warning(f"Manifest signature verification failed: {e}")
        reporter.error(signature_key, f"Failed to verify account association signature: {e}")
        return
    except Exception as e:
        # Injected verifiers may fail in any way; the manifest result still stands
        logger.exception(f"Manifest signature verifier raised: {e}")
        reporter.error(signature_key, f"Failed to verify account association signature: {e}")
        return

    if not valid:
        reporter.error(signature_key, "Invalid account association signature")

