"""
Frame Action Signers
====================

Signer capability used by FrameSession to build the request for a button
press.

A signer turns a SignerActionContext into a SignedFrameAction: the query
parameters for the action proxy ({postType, postUrl}) and the JSON body
posted to the frame server.

Implementations:
    - UnsignedFrameSigner: unsigned envelope with empty trusted data, used
      with dangerous_skip_signing and in tests
    - Any object matching the SignerState protocol (Farcaster message
      signers, typed data signers, ...)
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Optional, Protocol, Union

from frames_engine.models.action import (
    FrameActionPayload,
    FrameContext,
    SignedFrameAction,
    TrustedData,
    UntrustedData,
)
from frames_engine.models.frame import ButtonAction, FrameButton


logger = logging.getLogger(__name__)

# 2021-01-01T00:00:00Z, start of Farcaster time
FARCASTER_EPOCH = 1609459200
FARCASTER_MAINNET = 1


def get_farcaster_time() -> int:
    """Seconds since the Farcaster epoch."""
    return int(time.time()) - FARCASTER_EPOCH


@dataclass(frozen=True)
class SignerActionContext:
    """
    Everything a signer needs to build a frame action.

    Attributes:
        url: URL of the frame being acted on (home frame URL)
        target: URL the action is posted to
        button: Pressed button
        button_index: 1-based button index
        frame_context: Cast and wallet context
        input_text: Input text, if the frame has an input
        state: Frame state
        transaction_id: Transaction id for the tx follow-up POST
        address: Connected wallet address
    """

    url: str
    target: str
    button: FrameButton
    button_index: int
    frame_context: FrameContext = field(default_factory=FrameContext)
    input_text: Optional[str] = None
    state: Optional[str] = None
    transaction_id: Optional[str] = None
    address: Optional[str] = None


class SignerState(Protocol):
    """
    Signer capability injected into FrameSession.

    sign_frame_action may be a plain or a coroutine function.
    """

    @property
    def has_signer(self) -> bool:
        ...

    def sign_frame_action(
        self, context: SignerActionContext
    ) -> Union[SignedFrameAction, Awaitable[SignedFrameAction]]:
        ...

    def on_signerless_frame_press(self) -> None:
        """Called when a button needing a signer is pressed without one."""
        ...


def get_post_type(context: SignerActionContext) -> str:
    """A tx button posts its transaction id as a regular post."""
    if context.transaction_id:
        return ButtonAction.POST.value
    return ButtonAction(context.button.action).value


class UnsignedFrameSigner:
    """
    Signer producing unsigned frame actions.

    The body has the regular untrustedData section and empty messageBytes,
    so frame servers that validate messages will reject it.
    """

    has_signer = True

    def sign_frame_action(self, context: SignerActionContext) -> SignedFrameAction:
        frame_context = context.frame_context

        payload = FrameActionPayload(
            untrusted_data=UntrustedData(
                url=context.url,
                timestamp=get_farcaster_time(),
                network=FARCASTER_MAINNET,
                button_index=context.button_index,
                cast_id=frame_context.cast_id,
                state=context.state,
                input_text=context.input_text,
                address=context.address or frame_context.connected_address,
                transaction_id=context.transaction_id,
            ),
            trusted_data=TrustedData(message_bytes=""),
        )

        return SignedFrameAction(
            search_params={
                "postType": get_post_type(context),
                "postUrl": context.target or "",
            },
            body=payload.to_wire(),
        )

    def on_signerless_frame_press(self) -> None:
        logger.warning("Button pressed without a signer")
