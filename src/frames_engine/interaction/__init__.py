"""
Interaction Module
==================

Client side interaction loop for frames.

This module provides:
    - reduce_frames_stack: Pure reducer over the frames stack history
    - ProxyTransport: requests client for the GET and action proxies
    - UnsignedFrameSigner / SignerState: Signer capability
    - FrameSession: Button press state machine
    - SignerApprovalPoller: Polls a pending signer approval

Example:
    from frames_engine.interaction import FrameSession, ProxyTransport, UnsignedFrameSigner

    session = FrameSession(
        transport=ProxyTransport("http://localhost:8080/frames"),
        signer_state=UnsignedFrameSigner(),
        home_url="https://example.com/frame",
    )
    asyncio.run(session.start())
"""

from frames_engine.interaction.stack import (
    DoneStackItem,
    FrameGetRequest,
    FramePostRequest,
    FramesStack,
    MessageStackItem,
    PendingStackItem,
    RequestErrorStackItem,
    StackItemStatus,
    initial_frames_stack,
    reduce_frames_stack,
)
from frames_engine.interaction.transport import ProxyRequestError, ProxyResponse, ProxyTransport
from frames_engine.interaction.signers import SignerActionContext, SignerState, UnsignedFrameSigner
from frames_engine.interaction.session import FrameSession, FrameSessionError, MissingPostTargetError
from frames_engine.interaction.poller import SignerApprovalPoller


__all__ = [
    "DoneStackItem",
    "FrameGetRequest",
    "FramePostRequest",
    "FrameSession",
    "FrameSessionError",
    "FramesStack",
    "MessageStackItem",
    "MissingPostTargetError",
    "PendingStackItem",
    "ProxyRequestError",
    "ProxyResponse",
    "ProxyTransport",
    "RequestErrorStackItem",
    "SignerActionContext",
    "SignerApprovalPoller",
    "SignerState",
    "StackItemStatus",
    "UnsignedFrameSigner",
    "initial_frames_stack",
    "reduce_frames_stack",
]
