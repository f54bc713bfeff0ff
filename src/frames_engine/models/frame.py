"""
Frame Models
============

Structured representations of a parsed frame.

A Frame is the unified, post-parse shape shared by the two flat meta tag
dialects. Every field is optional so that a parser can hand back a partial
frame holding whatever did validate when the document has errors.

FrameV2 is the shape of the JSON-embedded dialect, which declares a single
launch button instead of up to four indexed buttons.

Button Contract:
    - link: target is an absolute URL
    - mint: target is a CAIP-10 like "namespace:chainId:address[:tokenId]"
    - post / post_redirect: target optional, falls back to the frame post URL
    - tx: target required, optional post_url for the transaction result
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ButtonAction(str, Enum):
    """Button action kinds."""

    POST = "post"
    POST_REDIRECT = "post_redirect"
    LINK = "link"
    MINT = "mint"
    TX = "tx"


class FrameButton(BaseModel):
    """
    A single frame button.

    Attributes:
        action: What pressing the button does
        label: User visible text
        target: Action target (URL or CAIP-10 string depending on action)
        post_url: Where to submit the result of a tx (or post) action
    """

    action: ButtonAction = Field(default=ButtonAction.POST, description="Button action")
    label: str = Field(..., description="Button label")
    target: Optional[str] = Field(default=None, description="Action target")
    post_url: Optional[str] = Field(default=None, description="Result submission URL")


class AcceptedProtocol(BaseModel):
    """Client protocol declared by an "of:accepts:{id}" tag."""

    id: str = Field(..., description="Protocol identifier, e.g. 'farcaster'")
    version: str = Field(..., description="Protocol version accepted")


class Frame(BaseModel):
    """
    Frame parsed from flat meta tags.

    Attributes:
        version: "vNext" or a YYYY-MM-DD date string
        image: Frame image URL (http, https or data URL)
        og_image: Open Graph fallback image
        image_aspect_ratio: "1:1" or "1.91:1"
        input_text: Placeholder of the text input, when present
        post_url: Target for interactions
        state: Opaque state string passed back on the next action
        buttons: 0 to 4 buttons in index order
        accepts: Accepted client protocols (cross-client dialect)
        title: Document title
    """

    version: Optional[str] = Field(default=None, description="Frame version")
    image: Optional[str] = Field(default=None, description="Frame image URL")
    og_image: Optional[str] = Field(default=None, description="og:image URL")
    image_aspect_ratio: Optional[str] = Field(default=None, description="Aspect ratio")
    input_text: Optional[str] = Field(default=None, description="Input placeholder")
    post_url: Optional[str] = Field(default=None, description="Post URL")
    state: Optional[str] = Field(default=None, description="Opaque state")
    buttons: Optional[List[FrameButton]] = Field(default=None, description="Buttons")
    accepts: Optional[List[AcceptedProtocol]] = Field(
        default=None,
        description="Accepted client protocols",
    )
    title: Optional[str] = Field(default=None, description="Document title")

    class Config:
        """Pydantic model configuration."""

        json_schema_extra = {
            "example": {
                "version": "vNext",
                "image": "https://example.com/image.png",
                "og_image": "https://example.com/og.png",
                "post_url": "https://example.com/frame",
                "buttons": [
                    {"action": "post", "label": "Next"},
                    {"action": "link", "label": "Docs", "target": "https://example.com"},
                ],
            }
        }


# =============================================================================
# JSON-embedded dialect
# =============================================================================

class FrameV2Action(BaseModel):
    """Launch action of a JSON-embedded frame button."""

    type: Optional[str] = Field(default=None, description="Always 'launch_frame'")
    name: Optional[str] = Field(default=None, description="App name")
    url: Optional[str] = Field(default=None, description="Launch URL")
    splash_image_url: Optional[str] = Field(
        default=None,
        alias="splashImageUrl",
        description="Splash image",
    )
    splash_background_color: Optional[str] = Field(
        default=None,
        alias="splashBackgroundColor",
        description="Splash background hex color",
    )

    class Config:
        """Pydantic model configuration."""

        populate_by_name = True


class FrameV2Button(BaseModel):
    """Single launch button of a JSON-embedded frame."""

    title: Optional[str] = Field(default=None, description="Button title")
    action: Optional[FrameV2Action] = Field(default=None, description="Launch action")


class FrameV2(BaseModel):
    """
    Frame declared as a JSON blob in a single "fc:frame" meta tag.

    Validates from the camelCase wire keys; attributes and dumps are
    snake_case.
    """

    version: Optional[str] = Field(default=None, description="Frame version")
    image_url: Optional[str] = Field(default=None, alias="imageUrl", description="Frame image URL")
    button: Optional[FrameV2Button] = Field(default=None, description="Launch button")
    title: Optional[str] = Field(default=None, description="Document title, informational")

    class Config:
        """Pydantic model configuration."""

        populate_by_name = True
