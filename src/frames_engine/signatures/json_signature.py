"""
JSON Farcaster Signature
========================

Encoding, signing and verification of JSON Farcaster Signatures (JFS),
the detached signature format used by domain manifests to associate a
domain with a Farcaster account.

Format:
    header    = base64url(JSON {"fid": int > 0, "type": "custody"|"app_key", "key": "0x..."})
    payload   = base64url(JSON object), e.g. {"domain": "example.com"}
    signature = base64url(signature bytes)
    compact   = "{header}.{payload}.{signature}"

    The signed message is the ASCII string "{header}.{payload}".

Signer Types:
    app_key: ed25519 signature made with the app key in the header. After
        the signature checks out, the key must also be registered to the
        fid, which is checked through a verify_app_key capability.
    custody: the signature bytes are the hex text of an Ethereum personal
        message signature made by the custody address. Recovery and the
        on-chain custody lookup are delegated to a verify_custody
        capability.
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey


logger = logging.getLogger(__name__)

SIGNER_TYPES = ("custody", "app_key")


# =============================================================================
# Errors
# =============================================================================

class InvalidJFSHeaderError(Exception):
    """Header is not base64url JSON with a valid fid, type and key."""
    pass


class InvalidJFSPayloadError(Exception):
    """Payload is not base64url encoded JSON object."""
    pass


class InvalidJFSSignatureError(Exception):
    """Signature cannot be decoded for the declared signer type."""
    pass


class InvalidJFSCompactSignatureError(Exception):
    """Compact form is not three dot separated segments."""
    pass


class JFSVerificationUnavailableError(Exception):
    """No capability was configured to verify this signer type."""
    pass


# =============================================================================
# Types
# =============================================================================

@dataclass(frozen=True)
class JFSHeader:
    """Decoded JFS header."""

    fid: int
    type: str
    key: str


@dataclass(frozen=True)
class EncodedJFS:
    """Encoded JFS triple, as stored in a manifest account association."""

    header: str
    payload: str
    signature: str

    @property
    def compact(self) -> str:
        return f"{self.header}.{self.payload}.{self.signature}"

    def to_dict(self) -> Dict[str, str]:
        return {"header": self.header, "payload": self.payload, "signature": self.signature}


@dataclass(frozen=True)
class AppKeyVerification:
    """Result of checking that an app key is registered to a fid."""

    valid: bool
    app_fid: Optional[int] = None


VerifyAppKey = Callable[[int, str], AppKeyVerification]
VerifyCustody = Callable[[int, str, str, str], bool]
SignMessage = Callable[[str], Union[str, Awaitable[str]]]


# =============================================================================
# base64url
# =============================================================================

def base64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def base64url_decode(value: str) -> bytes:
    padded = value + "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


# =============================================================================
# Encoding / decoding
# =============================================================================

def encode_header(fid: int, signer_type: str, key: str) -> str:
    data = json.dumps({"fid": fid, "type": signer_type, "key": key}, separators=(",", ":"))
    return base64url_encode(data.encode("utf-8"))


def decode_header(encoded_header: str) -> JFSHeader:
    """
    Decode and validate a JFS header.

    Raises:
        InvalidJFSHeaderError: On any decoding or validation failure
    """
    try:
        value = json.loads(base64url_decode(encoded_header).decode("utf-8"))
    except (ValueError, UnicodeDecodeError, binascii.Error) as e:
        raise InvalidJFSHeaderError("Header is not base64url encoded JSON") from e

    if not isinstance(value, dict):
        raise InvalidJFSHeaderError("Header must be an object")

    fid = value.get("fid")
    if isinstance(fid, bool) or not isinstance(fid, int) or fid <= 0:
        raise InvalidJFSHeaderError("Header fid must be a positive integer")

    signer_type = value.get("type")
    if signer_type not in SIGNER_TYPES:
        raise InvalidJFSHeaderError("Header type must be 'custody' or 'app_key'")

    key = value.get("key")
    if not isinstance(key, str) or not key.startswith("0x") or len(key) <= 2:
        raise InvalidJFSHeaderError("Header key must be a 0x prefixed hex string")

    return JFSHeader(fid=fid, type=signer_type, key=key)


def encode_payload(data: Dict[str, Any]) -> str:
    return base64url_encode(json.dumps(data, separators=(",", ":")).encode("utf-8"))


def decode_payload(encoded_payload: str) -> Dict[str, Any]:
    """
    Raises:
        InvalidJFSPayloadError: If the payload is not a JSON object
    """
    try:
        value = json.loads(base64url_decode(encoded_payload).decode("utf-8"))
    except (ValueError, UnicodeDecodeError, binascii.Error) as e:
        raise InvalidJFSPayloadError("Payload is not base64url encoded JSON") from e

    if not isinstance(value, dict):
        raise InvalidJFSPayloadError("Payload must be an object")

    return value


def encode_signature(signature: bytes) -> str:
    return base64url_encode(signature)


def decode_app_key_signature(signature: str) -> bytes:
    try:
        return base64url_decode(signature)
    except (ValueError, binascii.Error) as e:
        raise InvalidJFSSignatureError("Signature is not base64url encoded") from e


def decode_custody_signature(signature: str) -> str:
    """Custody signatures are base64url encoded "0x..." hex text."""
    try:
        decoded = base64url_decode(signature).decode("utf-8")
    except (ValueError, UnicodeDecodeError, binascii.Error) as e:
        raise InvalidJFSSignatureError("Signature is not base64url encoded") from e

    if not decoded.startswith("0x"):
        raise InvalidJFSSignatureError("Invalid signature, must contain hex text")

    return decoded


def construct_account_association_payload(domain: str) -> Dict[str, Any]:
    return {"domain": domain}


# =============================================================================
# Sign / verify
# =============================================================================

async def sign(
    *,
    fid: int,
    signer_type: str,
    key: str,
    payload: Dict[str, Any],
    sign_message: SignMessage,
) -> EncodedJFS:
    """
    Produce a JFS for payload.

    Args:
        fid: Account fid
        signer_type: "custody" or "app_key"
        key: Custody address or app public key, 0x prefixed hex
        payload: JSON object to sign
        sign_message: Signs the "{header}.{payload}" message. For app keys it
            returns the 0x hex of the raw ed25519 signature, for custody the
            0x hex text of the Ethereum signature. May be sync or async

    Returns:
        EncodedJFS triple
    """
    if signer_type not in SIGNER_TYPES:
        raise ValueError(f"Unknown signer type: {signer_type}")

    encoded_header = encode_header(fid, signer_type, key)
    encoded_payload = encode_payload(payload)

    signature = sign_message(f"{encoded_header}.{encoded_payload}")
    if not isinstance(signature, str):
        signature = await signature

    if signer_type == "app_key":
        signature_bytes = bytes.fromhex(_strip_hex_prefix(signature))
    else:
        signature_bytes = signature.encode("utf-8")

    return EncodedJFS(
        header=encoded_header,
        payload=encoded_payload,
        signature=encode_signature(signature_bytes),
    )


def verify(
    signature: EncodedJFS,
    *,
    verify_app_key: Optional[VerifyAppKey] = None,
    verify_custody: Optional[VerifyCustody] = None,
) -> bool:
    """
    Verify a JFS.

    Returns:
        True when the signature is valid for the header signer

    Raises:
        InvalidJFSHeaderError: Header cannot be decoded
        InvalidJFSPayloadError: Payload segment is not base64url text
        InvalidJFSSignatureError: Signature cannot be decoded
        JFSVerificationUnavailableError: The signer type needs a capability
            that was not provided
    """
    header = decode_header(signature.header)

    # The decoded header proves its segment is ASCII; the payload is signed undecoded
    try:
        message = f"{signature.header}.{signature.payload}".encode("ascii")
    except UnicodeEncodeError as e:
        raise InvalidJFSPayloadError("Payload is not base64url encoded") from e

    if header.type == "app_key":
        signature_bytes = decode_app_key_signature(signature.signature)

        if not verify_ed25519(signature_bytes, message, header.key):
            logger.info(f"JFS app key signature mismatch for fid={header.fid}")
            return False

        if verify_app_key is None:
            raise JFSVerificationUnavailableError(
                "App key signatures require a verify_app_key capability"
            )

        result = verify_app_key(header.fid, header.key)
        return result.valid

    signature_hex = decode_custody_signature(signature.signature)

    if verify_custody is None:
        raise JFSVerificationUnavailableError(
            "Custody signatures require a verify_custody capability"
        )

    return bool(verify_custody(header.fid, header.key, signature_hex, message.decode("ascii")))


def verify_compact(compact_signature: str, **capabilities: Any) -> bool:
    """Verify a "{header}.{payload}.{signature}" string."""
    parts = compact_signature.split(".")

    if len(parts) != 3 or not all(parts):
        raise InvalidJFSCompactSignatureError("Compact signature must have three segments")

    header, payload, signature = parts
    return verify(EncodedJFS(header=header, payload=payload, signature=signature), **capabilities)


def verify_ed25519(signature: bytes, message: bytes, public_key_hex: str) -> bool:
    """Check an ed25519 signature; malformed keys or signatures are invalid."""
    try:
        public_key = Ed25519PublicKey.from_public_bytes(
            bytes.fromhex(_strip_hex_prefix(public_key_hex))
        )
        public_key.verify(signature, message)
    except (InvalidSignature, ValueError):
        return False
    return True


def _strip_hex_prefix(value: str) -> str:
    return value[2:] if value.startswith("0x") else value
