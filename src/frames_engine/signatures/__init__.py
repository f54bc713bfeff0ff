"""
Signatures
==========

JSON Farcaster Signature support used to validate domain manifests.

Components:
    - json_signature: encode, decode, sign and verify JFS triples
    - hub: app key registration check against a hub HTTP API
"""

from frames_engine.signatures.hub import (
    AppKeyVerificationError,
    HubAppKeyVerifier,
)
from frames_engine.signatures.json_signature import (
    AppKeyVerification,
    EncodedJFS,
    InvalidJFSCompactSignatureError,
    InvalidJFSHeaderError,
    InvalidJFSPayloadError,
    InvalidJFSSignatureError,
    JFSHeader,
    JFSVerificationUnavailableError,
    construct_account_association_payload,
    decode_header,
    decode_payload,
    encode_header,
    encode_payload,
    sign,
    verify,
    verify_compact,
)

__all__ = [
    "AppKeyVerification",
    "AppKeyVerificationError",
    "EncodedJFS",
    "HubAppKeyVerifier",
    "InvalidJFSCompactSignatureError",
    "InvalidJFSHeaderError",
    "InvalidJFSPayloadError",
    "InvalidJFSSignatureError",
    "JFSHeader",
    "JFSVerificationUnavailableError",
    "construct_account_association_payload",
    "decode_header",
    "decode_payload",
    "encode_header",
    "encode_payload",
    "sign",
    "verify",
    "verify_compact",
]
