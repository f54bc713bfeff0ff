"""
Frame Action Models
===================

Wire envelope POSTed to a frame server when a button is pressed, plus the
client context it is built from.

Input Contract (frame action body):
    {
        "untrustedData": {
            "url": "https://example.com/frame",
            "timestamp": 112233,
            "network": 1,
            "buttonIndex": 1,
            "castId": {"fid": 1, "hash": "0x0000..."},
            "state": "...",
            "inputText": "...",
            "address": "0x...",
            "transactionId": "0x..."
        },
        "trustedData": {"messageBytes": "..."}
    }

Wire keys are camelCase. Python attributes are snake_case and populated by
either name.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


ZERO_CAST_HASH = "0x" + "0" * 40
FALLBACK_CONNECTED_ADDRESS = "0x" + "0" * 39 + "1"


class CastId(BaseModel):
    """Identifier of the cast the frame is embedded in."""

    fid: int = Field(..., ge=0, description="Author fid")
    hash: str = Field(..., description="Cast hash")


class FrameContext(BaseModel):
    """
    Client side context threaded into every signed action.

    Attributes:
        cast_id: Cast that embeds the frame
        connected_address: Wallet address used for tx buttons
    """

    cast_id: CastId = Field(
        default_factory=lambda: CastId(fid=1, hash=ZERO_CAST_HASH),
        alias="castId",
        description="Embedding cast",
    )
    connected_address: str = Field(
        default=FALLBACK_CONNECTED_ADDRESS,
        alias="connectedAddress",
        description="Connected wallet address",
    )

    class Config:
        """Pydantic model configuration."""

        populate_by_name = True


class UntrustedData(BaseModel):
    """Client asserted part of a frame action."""

    url: str = Field(..., description="URL of the frame being acted on")
    timestamp: int = Field(..., description="Action timestamp")
    network: Optional[int] = Field(default=None, description="Farcaster network")
    button_index: int = Field(..., ge=1, le=4, alias="buttonIndex")
    cast_id: Optional[CastId] = Field(default=None, alias="castId")
    state: Optional[str] = Field(default=None, description="Opaque frame state")
    input_text: Optional[str] = Field(default=None, alias="inputText")
    address: Optional[str] = Field(default=None, description="Connected address")
    transaction_id: Optional[str] = Field(default=None, alias="transactionId")
    fid: Optional[int] = Field(default=None, description="Acting user fid")

    class Config:
        """Pydantic model configuration."""

        populate_by_name = True


class TrustedData(BaseModel):
    """Signed part of a frame action (hex encoded message bytes)."""

    message_bytes: str = Field(default="", alias="messageBytes")

    class Config:
        """Pydantic model configuration."""

        populate_by_name = True


class FrameActionPayload(BaseModel):
    """Complete frame action body."""

    untrusted_data: UntrustedData = Field(..., alias="untrustedData")
    trusted_data: TrustedData = Field(default_factory=TrustedData, alias="trustedData")

    class Config:
        """Pydantic model configuration."""

        populate_by_name = True

    def to_wire(self) -> Dict[str, Any]:
        """Serialize with camelCase keys, dropping unset fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SignedFrameAction(BaseModel):
    """Query parameters and body ready to send to the action proxy."""

    search_params: Dict[str, str] = Field(default_factory=dict)
    body: Dict[str, Any] = Field(default_factory=dict)
