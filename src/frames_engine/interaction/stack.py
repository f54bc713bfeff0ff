"""
Frames Stack
============

History of a frame interaction session and the reducer that updates it.

The stack is a tuple of stack items, most recent first. Every request
starts as a PendingStackItem and is later replaced, in the same slot, by a
done, request error or message item. Replacement is keyed by the pending
item's timestamp, so a slow request completing after a newer one still
lands in its own slot.

Design Rules:
    - The reducer is pure: it never mutates the stack it receives
    - A completion for a pending item that is no longer on the stack
      (e.g. after CLEAR) returns the stack unchanged
    - Timestamps are unique per session (see FrameSession)

Example:
    stack = initial_frames_stack()
    stack = reduce_frames_stack(stack, LoadAction(item=pending))
    stack = reduce_frames_stack(stack, DoneAction(pending_item=pending, item=done))
"""

import logging
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional, Tuple, Union

from frames_engine.models.action import SignedFrameAction
from frames_engine.models.frame import Frame, FrameButton
from frames_engine.models.results import AnyParseResult, ParseFramesWithReportsResult


logger = logging.getLogger(__name__)


class StackItemStatus(str, Enum):
    """Kind of a stack item."""

    PENDING = "pending"
    DONE = "done"
    REQUEST_ERROR = "requestError"
    MESSAGE = "message"


class MessageType(str, Enum):
    INFO = "info"
    ERROR = "error"


def now_ms() -> int:
    return int(time.time() * 1000)


# =============================================================================
# Requests
# =============================================================================

@dataclass(frozen=True)
class FrameGetRequest:
    """Initial load of a frame through the GET proxy."""

    url: str
    method: str = field(default="GET", init=False)


@dataclass(frozen=True)
class FramePostRequest:
    """
    Button press sent through the action proxy.

    Attributes:
        source_frame: Frame the button belongs to
        button: Pressed button
        button_index: 1-based button index
        target: URL the action is posted to
        input_text: Input text, only when the frame declares an input
        state: Frame state echoed back to the server
        transaction_id: Transaction id for the second tx POST
        address: Connected wallet address (tx buttons)
        dangerous_skip_signing: Post an unsigned envelope
    """

    source_frame: Frame
    button: FrameButton
    button_index: int
    target: str
    input_text: Optional[str] = None
    state: Optional[str] = None
    transaction_id: Optional[str] = None
    address: Optional[str] = None
    dangerous_skip_signing: bool = False
    method: str = field(default="POST", init=False)


FrameRequest = Union[FrameGetRequest, FramePostRequest]

FrameResult = Union[ParseFramesWithReportsResult, AnyParseResult]


# =============================================================================
# Stack items
# =============================================================================

@dataclass(frozen=True)
class PendingStackItem:
    """Request in flight."""

    timestamp: int
    request: FrameRequest
    url: str
    signed_action: Optional[SignedFrameAction] = None
    status: StackItemStatus = field(default=StackItemStatus.PENDING, init=False)


@dataclass(frozen=True)
class DoneStackItem:
    """Request that produced a frame."""

    timestamp: int
    request: FrameRequest
    url: str
    frame: FrameResult
    speed: float = 0.0
    response_status: int = 200
    signed_action: Optional[SignedFrameAction] = None
    status: StackItemStatus = field(default=StackItemStatus.DONE, init=False)


@dataclass(frozen=True)
class RequestErrorStackItem:
    """Request that failed (network, server error, unexpected response)."""

    timestamp: int
    request: FrameRequest
    url: str
    request_error: Exception
    speed: float = 0.0
    response_status: int = 500
    response_body: Any = None
    signed_action: Optional[SignedFrameAction] = None
    status: StackItemStatus = field(default=StackItemStatus.REQUEST_ERROR, init=False)


@dataclass(frozen=True)
class MessageStackItem:
    """Request answered with a message instead of a frame."""

    timestamp: int
    request: FrameRequest
    url: str
    message: str
    type: MessageType = MessageType.INFO
    speed: float = 0.0
    response_status: int = 200
    signed_action: Optional[SignedFrameAction] = None
    status: StackItemStatus = field(default=StackItemStatus.MESSAGE, init=False)


StackItem = Union[PendingStackItem, DoneStackItem, RequestErrorStackItem, MessageStackItem]
FramesStack = Tuple[StackItem, ...]


# =============================================================================
# Actions
# =============================================================================

@dataclass(frozen=True)
class LoadAction:
    item: PendingStackItem


@dataclass(frozen=True)
class DoneAction:
    pending_item: PendingStackItem
    item: Union[DoneStackItem, MessageStackItem]


@dataclass(frozen=True)
class RequestErrorAction:
    pending_item: PendingStackItem
    item: RequestErrorStackItem


@dataclass(frozen=True)
class AddRequestDetailsAction:
    """Attach the signed action (and the resolved URL) to a pending item."""

    pending_item: PendingStackItem
    signed_action: SignedFrameAction
    url: str


@dataclass(frozen=True)
class ClearAction:
    pass


@dataclass(frozen=True)
class ResetInitialFrameAction:
    result: FrameResult
    home_url: str
    timestamp: int = field(default_factory=now_ms)


FramesStackAction = Union[
    LoadAction,
    DoneAction,
    RequestErrorAction,
    AddRequestDetailsAction,
    ClearAction,
    ResetInitialFrameAction,
]


# =============================================================================
# Reducer
# =============================================================================

def initial_frames_stack(
    result: Optional[FrameResult] = None,
    home_url: Optional[str] = None,
) -> FramesStack:
    """Empty stack, or a stack holding a single done item for result."""
    if result is None:
        return ()
    return (_initial_item(result, home_url or "", now_ms()),)


def reduce_frames_stack(stack: FramesStack, action: FramesStackAction) -> FramesStack:
    """
    Apply action to stack.

    Returns:
        A new stack, or stack itself when nothing changes
    """
    if isinstance(action, LoadAction):
        return (action.item,) + tuple(stack)

    if isinstance(action, (DoneAction, RequestErrorAction)):
        return _replace_at(stack, action.pending_item.timestamp, lambda _: action.item)

    if isinstance(action, AddRequestDetailsAction):
        def attach(item: StackItem) -> StackItem:
            if not isinstance(item, PendingStackItem):
                return item
            return replace(item, signed_action=action.signed_action, url=action.url or item.url)

        return _replace_at(stack, action.pending_item.timestamp, attach)

    if isinstance(action, ClearAction):
        return ()

    if isinstance(action, ResetInitialFrameAction):
        head = stack[0] if stack else None

        if head is None:
            return (_initial_item(action.result, action.home_url, action.timestamp),)

        if isinstance(head, DoneStackItem) and head.frame is not action.result:
            item = _initial_item(action.result, action.home_url, action.timestamp)
            return (item,) + tuple(stack[1:])

        return stack

    raise TypeError(f"Unknown frames stack action: {action!r}")


def _replace_at(stack: FramesStack, timestamp: int, update) -> FramesStack:
    for index, item in enumerate(stack):
        if item.timestamp == timestamp:
            updated = update(item)
            if updated is item:
                return stack
            return stack[:index] + (updated,) + stack[index + 1:]

    logger.debug(f"No stack item with timestamp={timestamp}, ignoring completion")
    return stack


def _initial_item(result: FrameResult, home_url: str, timestamp: int) -> DoneStackItem:
    return DoneStackItem(
        timestamp=timestamp,
        request=FrameGetRequest(url=home_url),
        url=home_url,
        frame=result,
        speed=0.0,
        response_status=200,
    )
