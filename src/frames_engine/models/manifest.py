"""
Domain Manifest Models
======================

Signed, domain scoped descriptor served from a well-known path on the
origin of a JSON-embedded frame.

Manifest Contract:
    {
        "accountAssociation": {
            "header": "<base64url JFS header>",
            "payload": "<base64url JFS payload>",
            "signature": "<base64url JFS signature>"
        },
        "frame": {
            "version": "next",
            "name": "App name",
            "homeUrl": "https://example.com",
            "iconUrl": "https://example.com/icon.png"
        },
        "triggers": [{"type": "cast", "id": "score", "url": "https://..."}]
    }

All fields are optional on the model so that a partially valid manifest can
be returned next to its reports. Models validate from the camelCase wire
keys or the snake_case attribute names.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class AccountAssociation(BaseModel):
    """JSON Farcaster Signature triple binding a domain to an account."""

    header: Optional[str] = Field(default=None, description="Base64url header")
    payload: Optional[str] = Field(default=None, description="Base64url payload")
    signature: Optional[str] = Field(default=None, description="Base64url signature")


class ManifestFrameConfig(BaseModel):
    """Frame application metadata declared by the manifest."""

    version: Optional[str] = Field(default=None, description="Manifest version")
    name: Optional[str] = Field(default=None, description="App name")
    home_url: Optional[str] = Field(default=None, alias="homeUrl", description="Default launch URL")
    icon_url: Optional[str] = Field(default=None, alias="iconUrl", description="App icon URL")
    splash_image_url: Optional[str] = Field(
        default=None,
        alias="splashImageUrl",
        description="Splash image URL",
    )
    splash_background_color: Optional[str] = Field(
        default=None,
        alias="splashBackgroundColor",
        description="Splash background hex color",
    )
    webhook_url: Optional[str] = Field(default=None, alias="webhookUrl", description="Event webhook URL")

    class Config:
        """Pydantic model configuration."""

        populate_by_name = True


class TriggerConfig(BaseModel):
    """Cast or composer trigger exposed by the frame application."""

    type: str = Field(..., description="'cast' or 'composer'")
    id: str = Field(..., description="Unique trigger id")
    url: str = Field(..., description="Handler URL")
    name: Optional[str] = Field(default=None, description="Name override")


class FarcasterManifest(BaseModel):
    """Manifest fetched from /.well-known/farcaster.json."""

    account_association: Optional[AccountAssociation] = Field(
        default=None,
        alias="accountAssociation",
        description="Signed domain association",
    )
    frame: Optional[ManifestFrameConfig] = Field(default=None, description="App metadata")
    triggers: Optional[List[TriggerConfig]] = Field(default=None, description="Triggers")

    class Config:
        """Pydantic model configuration."""

        populate_by_name = True
