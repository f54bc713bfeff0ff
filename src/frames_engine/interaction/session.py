"""
Frame Session
=============

Client side state machine driving one embedded frame.

A session owns a frames stack, the current input text and a loading
counter. Pressing a button dispatches on the button action:

    link           confirm, then open the target (no request)
    mint           hand the target to the on_mint callback (no request)
    tx             POST for transaction data, call on_transaction, then POST
                   the transaction id to button.post_url -> frame.post_url
                   -> button.target
    post           POST to button.target -> frame.post_url -> home URL
    post_redirect  same as post; the proxy answers with {"location": ...}

Every request goes through the proxy transport and through fetch_frame,
which records a pending stack item, measures the elapsed time and replaces
the pending item with the outcome:

    parse result           -> done item
    {"location": url}      -> redirect callback, stack unchanged
    {"message": text}      -> info message item
    {"frameUrl": url}      -> info message item, then a fresh post to url
    4xx {"message": text}  -> error message item (POST only)
    anything else          -> request error item

Design Rules:
    - Request failures never propagate: they become request error items and
      are reported through on_error (alert by default)
    - Wiring mistakes (pressing a button with no frame, unknown actions)
      raise FrameSessionError immediately
    - Collaborators (transport, signer, context, UI callbacks) are injected;
      callbacks may be plain functions or coroutine functions
    - Blocking transport calls run in a worker thread (asyncio.to_thread)

Example:
    session = FrameSession(
        transport=ProxyTransport("http://localhost:8080/frames"),
        signer_state=UnsignedFrameSigner(),
        home_url="https://example.com/frame",
    )
    await session.start()
    frame = session.current_frame
    await session.on_button_press(frame, frame.buttons[0], 0)
"""

import asyncio
import inspect
import json
import logging
import time
from dataclasses import replace
from typing import Any, Callable, Dict, Optional, Union

from pydantic import ValidationError as ModelValidationError

from frames_engine.interaction.signers import (
    SignerActionContext,
    SignerState,
    UnsignedFrameSigner,
)
from frames_engine.interaction.stack import (
    AddRequestDetailsAction,
    ClearAction,
    DoneAction,
    DoneStackItem,
    FrameGetRequest,
    FramePostRequest,
    FrameRequest,
    FrameResult,
    FramesStack,
    FramesStackAction,
    LoadAction,
    MessageStackItem,
    MessageType,
    PendingStackItem,
    RequestErrorAction,
    RequestErrorStackItem,
    ResetInitialFrameAction,
    StackItem,
    initial_frames_stack,
    reduce_frames_stack,
)
from frames_engine.interaction.transport import ProxyRequestError, ProxyResponse
from frames_engine.models.action import FrameContext, SignedFrameAction
from frames_engine.models.frame import ButtonAction, Frame, FrameButton, FrameV2
from frames_engine.models.reports import ParseStatus, Specification
from frames_engine.models.results import (
    FrameV2ParseResult,
    ParseFramesWithReportsResult,
    ParseResult,
)


logger = logging.getLogger(__name__)

UNEXPECTED_RESPONSE_MESSAGE = "The server returned an unexpected response."
MISSING_TRANSACTION_ID_MESSAGE = "onTransaction did not return transaction id"

Callback = Callable[..., Any]


class FrameSessionError(RuntimeError):
    """Session used incorrectly (wiring bug, not a runtime condition)."""
    pass


class MissingPostTargetError(Exception):
    """post / post_redirect button with no target after all fallbacks."""
    pass


async def _call(callback: Callback, *args: Any) -> Any:
    """Invoke a sync or async callback."""
    result = callback(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def _failed_response_message(status: int) -> str:
    return (
        "The server returned an error but it does not contain message property. "
        f"Status code: {status}"
    )


def parse_result_payload(payload: Any) -> Optional[FrameResult]:
    """
    Decode a proxy payload into a parse result.

    Returns:
        ParseFramesWithReportsResult, ParseResult or FrameV2ParseResult, or
        None when payload is not a parse result
    """
    if not isinstance(payload, dict):
        return None

    try:
        if "farcaster" in payload and "openframes" in payload:
            return ParseFramesWithReportsResult.model_validate(payload)

        if {"status", "frame", "specification"} <= payload.keys():
            if payload["specification"] == Specification.FARCASTER_V2.value:
                return FrameV2ParseResult.model_validate(payload)
            return ParseResult.model_validate(payload)
    except ModelValidationError as e:
        logger.warning(f"Proxy payload looks like a parse result but is invalid: {e}")

    return None


class FrameSession:
    """
    Interaction state machine for one frame.

    Attributes:
        transport: Proxy transport (get_frame / post_action)
        signer_state: Signer capability
        home_url: URL of the home frame
        frame_context: Cast and wallet context sent with actions
        specification: Dialect requested from the GET proxy
        dangerous_skip_signing: Post unsigned actions (except tx data)
    """

    def __init__(
        self,
        *,
        transport: Any,
        signer_state: SignerState,
        home_url: Optional[str] = None,
        frame: Optional[Union[Frame, FrameResult]] = None,
        frame_context: Optional[FrameContext] = None,
        specification: Union[Specification, str] = Specification.FARCASTER,
        dangerous_skip_signing: bool = False,
        extra_button_request_payload: Optional[Dict[str, Any]] = None,
        alert: Optional[Callback] = None,
        confirm: Optional[Callback] = None,
        open_url: Optional[Callback] = None,
        on_redirect: Optional[Callback] = None,
        on_link_button_click: Optional[Callback] = None,
        on_mint: Optional[Callback] = None,
        on_transaction: Optional[Callback] = None,
        on_error: Optional[Callback] = None,
    ) -> None:
        """
        Initialize session.

        Args:
            transport: Object with get_frame(url, specification) and
                post_action(search_params, body) returning ProxyResponse
            signer_state: Signer capability (see SignerState)
            home_url: Home frame URL, loaded by start() when no frame is given
            frame: Initial frame (Frame or parse result) rendered server side
            frame_context: Context sent with actions, defaults to FrameContext()
            specification: Dialect of the frames in this session
            dangerous_skip_signing: Use unsigned actions
            extra_button_request_payload: Merged into every action body
            alert: alert(message)
            confirm: confirm(message) -> bool
            open_url: open_url(url)
            on_redirect: on_redirect(location), default confirms then opens
            on_link_button_click: on_link_button_click(button)
            on_mint: on_mint(frame, button, target)
            on_transaction: on_transaction(frame, button, transaction_data)
                -> transaction id or None
            on_error: on_error(exception), default alerts the message
        """
        self.transport = transport
        self.signer_state = signer_state
        self.home_url = home_url
        self.frame_context = frame_context or FrameContext()
        self.specification = Specification(specification)
        self.dangerous_skip_signing = dangerous_skip_signing
        self.extra_button_request_payload = dict(extra_button_request_payload or {})

        self._alert = alert or self._default_alert
        self._confirm = confirm or self._default_confirm
        self._open_url = open_url or self._default_open_url
        self._on_redirect = on_redirect or self._default_on_redirect
        self._on_link_button_click = on_link_button_click or self._default_on_link_button_click
        self._on_mint = on_mint or self._default_on_mint
        self._on_transaction = on_transaction or self._default_on_transaction
        self._on_error = on_error or self._default_on_error

        self._unsigned_signer = UnsignedFrameSigner()
        self._initial_frame = frame
        self._stack: FramesStack = ()
        if frame is not None:
            self._stack = initial_frames_stack(self._to_result(frame), home_url)
        self._input_text = ""
        self._in_flight = 0
        self._last_timestamp = self._stack[0].timestamp if self._stack else 0

    # =========================================================================
    # State
    # =========================================================================

    @property
    def frames_stack(self) -> FramesStack:
        return self._stack

    @property
    def current_frame_stack_item(self) -> Optional[StackItem]:
        return self._stack[0] if self._stack else None

    @property
    def current_frame(self) -> Optional[Union[Frame, FrameV2]]:
        """Frame of the most recent stack item, if it is a done item."""
        item = self.current_frame_stack_item
        if not isinstance(item, DoneStackItem):
            return None

        result = item.frame
        if isinstance(result, ParseFramesWithReportsResult):
            result = result.get(self.specification)
        return result.frame

    @property
    def is_loading(self) -> bool:
        return self._in_flight > 0

    @property
    def input_text(self) -> str:
        return self._input_text

    def set_input_text(self, value: str) -> None:
        self._input_text = value

    def dispatch(self, action: FramesStackAction) -> None:
        self._stack = reduce_frames_stack(self._stack, action)

    def clear_frame_stack(self) -> None:
        self.dispatch(ClearAction())

    def reset_initial_frame(self, frame: Union[Frame, FrameResult]) -> None:
        """Show frame as the home frame unless it is already shown."""
        result = self._to_result(frame)
        self.dispatch(
            ResetInitialFrameAction(result=result, home_url=self.home_url or "", timestamp=self._next_timestamp())
        )

    def _to_result(self, frame: Union[Frame, FrameResult]) -> FrameResult:
        if not isinstance(frame, Frame):
            return frame

        # Reuse the shown result so passing the same frame again is a no-op
        head = self.current_frame_stack_item
        if isinstance(head, DoneStackItem) and getattr(head.frame, "frame", None) is frame:
            return head.frame

        specification = self.specification
        if specification == Specification.FARCASTER_V2:
            specification = Specification.FARCASTER

        return ParseResult(status=ParseStatus.SUCCESS, frame=frame, specification=specification)

    def _next_timestamp(self) -> int:
        timestamp = max(int(time.time() * 1000), self._last_timestamp + 1)
        self._last_timestamp = timestamp
        return timestamp

    # =========================================================================
    # Public API
    # =========================================================================

    async def start(self) -> None:
        """
        Load the home frame unless an initial frame was given.

        Raises:
            FrameSessionError: If there is neither an initial frame nor a home URL
        """
        if self._initial_frame is not None:
            self.reset_initial_frame(self._initial_frame)
            return

        if not self.home_url:
            raise FrameSessionError("Cannot start a session without a frame or a home URL")

        await self.fetch_frame(FrameGetRequest(url=self.home_url), should_clear=True)

    async def fetch_frame(self, request: FrameRequest, should_clear: bool = False) -> None:
        """
        Issue request through the proxy and record the outcome on the stack.

        Args:
            request: GET (initial load) or POST (button press) request
            should_clear: Clear the stack first (placeholder from server render)
        """
        self._in_flight += 1
        try:
            if isinstance(request, FrameGetRequest):
                await self._fetch_get(request, should_clear)
            elif ButtonAction(request.button.action) == ButtonAction.TX:
                await self._fetch_transaction(request, should_clear)
            else:
                await self._fetch_post(request, should_clear=should_clear)
        finally:
            self._in_flight -= 1

    async def on_button_press(self, frame: Optional[Frame], button: Optional[FrameButton], index: int) -> None:
        """
        Handle a press of button (0-based index) on frame.

        Raises:
            FrameSessionError: If no frame or button is given, or the index
                is out of range
        """
        if frame is None or button is None:
            raise FrameSessionError("on_button_press requires the displayed frame and a button")

        if not 0 <= index < 4:
            raise FrameSessionError(f"Invalid button index: {index}")

        action = ButtonAction(button.action)
        requires_signer = action not in (ButtonAction.LINK, ButtonAction.MINT)

        if requires_signer and not self.signer_state.has_signer and not self.dangerous_skip_signing:
            await _call(self.signer_state.on_signerless_frame_press)
            return

        input_text = self._input_text if frame.input_text is not None else None

        if action == ButtonAction.LINK:
            await _call(self._on_link_button_click, button)

        elif action == ButtonAction.MINT:
            await _call(self._on_mint, frame, button, button.target)

        elif action == ButtonAction.TX:
            await self.fetch_frame(
                FramePostRequest(
                    source_frame=frame,
                    button=button,
                    button_index=index + 1,
                    target=button.target or "",
                    input_text=input_text,
                    state=frame.state,
                    address=self.frame_context.connected_address,
                    dangerous_skip_signing=self.dangerous_skip_signing,
                )
            )

        elif action in (ButtonAction.POST, ButtonAction.POST_REDIRECT):
            target = button.target or frame.post_url or self.home_url

            if not target:
                error = MissingPostTargetError("missing target")
                logger.error(f"Button {index + 1} has no post target")
                await _call(self._on_error, error)
                return

            await self.fetch_frame(
                FramePostRequest(
                    source_frame=frame,
                    button=button,
                    button_index=index + 1,
                    target=target,
                    input_text=input_text,
                    state=frame.state,
                    dangerous_skip_signing=self.dangerous_skip_signing,
                )
            )
            self._input_text = ""

        else:
            raise FrameSessionError(f"Unrecognized frame button action: {action.value}")

    # =========================================================================
    # Requests
    # =========================================================================

    async def _fetch_get(self, request: FrameGetRequest, should_clear: bool) -> None:
        start = time.monotonic()

        if should_clear:
            self.dispatch(ClearAction())

        pending = PendingStackItem(timestamp=self._next_timestamp(), request=request, url=request.url)
        self.dispatch(LoadAction(item=pending))

        try:
            response = await asyncio.to_thread(
                self.transport.get_frame, request.url, self.specification.value
            )
        except Exception as e:
            await self._push_request_error(pending, e, start)
            return

        if not response.ok:
            await self._handle_failed_response(pending, response, start)
            return

        result = parse_result_payload(response.payload)
        if result is None:
            await self._push_request_error(
                pending,
                ProxyRequestError(UNEXPECTED_RESPONSE_MESSAGE, response.status, response.payload),
                start,
                response_status=500,
            )
            return

        self.dispatch(
            DoneAction(
                pending_item=pending,
                item=DoneStackItem(
                    timestamp=pending.timestamp,
                    request=request,
                    url=request.url,
                    frame=result,
                    speed=self._speed(start),
                    response_status=response.status,
                ),
            )
        )

    async def _fetch_post(
        self,
        request: FramePostRequest,
        *,
        pending: Optional[PendingStackItem] = None,
        start: Optional[float] = None,
        should_clear: bool = False,
    ) -> None:
        """
        Sign and POST request.

        When pending is given the request continues an earlier one (second
        tx POST) and reuses its stack slot.
        """
        start = start if start is not None else time.monotonic()

        if should_clear:
            self.dispatch(ClearAction())

        if pending is None:
            pending = PendingStackItem(
                timestamp=self._next_timestamp(),
                request=request,
                url=request.target or request.source_frame.post_url or self.home_url or "",
            )
            self.dispatch(LoadAction(item=pending))

        try:
            signed = await self._sign(request, force_real_signer=False)
        except Exception as e:
            await self._push_request_error(pending, e, start)
            return

        url = signed.search_params.get("postUrl") or pending.url
        self.dispatch(AddRequestDetailsAction(pending_item=pending, signed_action=signed, url=url))

        response = await self._post(pending, signed, start)
        if response is None:
            return

        payload = response.payload

        if isinstance(payload, dict) and "location" in payload:
            await _call(self._on_redirect, payload["location"])
            return

        if isinstance(payload, dict) and "message" in payload:
            self.dispatch(
                DoneAction(
                    pending_item=pending,
                    item=MessageStackItem(
                        timestamp=pending.timestamp,
                        request=pending.request,
                        url=url,
                        message=str(payload["message"]),
                        type=MessageType.INFO,
                        speed=self._speed(start),
                        response_status=response.status,
                        signed_action=signed,
                    ),
                )
            )
            return

        if isinstance(payload, dict) and "frameUrl" in payload:
            await self._follow_frame_url(request, pending, payload["frameUrl"], url, response, signed, start)
            return

        result = parse_result_payload(payload)
        if result is None:
            await self._push_request_error(
                pending,
                ProxyRequestError(UNEXPECTED_RESPONSE_MESSAGE, response.status, payload),
                start,
                response_status=500,
                signed_action=signed,
            )
            return

        self.dispatch(
            DoneAction(
                pending_item=pending,
                item=DoneStackItem(
                    timestamp=pending.timestamp,
                    request=pending.request,
                    url=url,
                    frame=result,
                    speed=self._speed(start),
                    response_status=response.status,
                    signed_action=signed,
                ),
            )
        )

    async def _follow_frame_url(
        self,
        request: FramePostRequest,
        pending: PendingStackItem,
        frame_url: str,
        url: str,
        response: ProxyResponse,
        signed: SignedFrameAction,
        start: float,
    ) -> None:
        self.dispatch(
            DoneAction(
                pending_item=pending,
                item=MessageStackItem(
                    timestamp=pending.timestamp,
                    request=pending.request,
                    url=url,
                    message=f"Frame URL received: {frame_url}",
                    type=MessageType.INFO,
                    speed=self._speed(start),
                    response_status=response.status,
                    signed_action=signed,
                ),
            )
        )

        button = FrameButton(action=ButtonAction.POST, label="action", target=frame_url)
        await self._fetch_post(
            FramePostRequest(
                source_frame=Frame(image="", version="vNext"),
                button=button,
                button_index=1,
                target=frame_url,
                input_text=request.input_text,
                state=request.state,
                dangerous_skip_signing=request.dangerous_skip_signing,
            )
        )

    async def _fetch_transaction(self, request: FramePostRequest, should_clear: bool) -> None:
        button = request.button
        if ButtonAction(button.action) != ButtonAction.TX:
            raise FrameSessionError("Invalid frame button action, tx expected")

        if should_clear:
            self.dispatch(ClearAction())

        start = time.monotonic()
        pending = PendingStackItem(
            timestamp=self._next_timestamp(),
            request=request,
            url=request.target or request.source_frame.post_url or self.home_url or "",
        )
        self.dispatch(LoadAction(item=pending))

        # transaction data is always requested with the real signer
        try:
            signed = await self._sign(request, force_real_signer=True)
        except Exception as e:
            await self._push_request_error(pending, e, start)
            return

        self.dispatch(
            AddRequestDetailsAction(
                pending_item=pending,
                signed_action=signed,
                url=signed.search_params.get("postUrl") or pending.url,
            )
        )

        response = await self._post(pending, signed, start)
        if response is None:
            return

        try:
            transaction_id = await _call(
                self._on_transaction, request.source_frame, button, response.payload
            )
        except Exception as e:
            await self._push_request_error(pending, e, start, signed_action=signed)
            return

        if not transaction_id:
            await self._push_request_error(
                pending,
                FrameSessionError(MISSING_TRANSACTION_ID_MESSAGE),
                start,
                signed_action=signed,
            )
            return

        # transaction ids are posted to a post_url, never to a plain target
        target = button.post_url or request.source_frame.post_url or button.target or ""
        await self._fetch_post(
            replace(request, transaction_id=transaction_id, target=target),
            pending=pending,
            start=start,
        )

    async def _post(
        self,
        pending: PendingStackItem,
        signed: SignedFrameAction,
        start: float,
    ) -> Optional[ProxyResponse]:
        """POST signed through the action proxy; None when the outcome is already recorded."""
        search_params = dict(signed.search_params)
        search_params["specification"] = self.specification.value
        body = {**self.extra_button_request_payload, **signed.body}

        try:
            response = await asyncio.to_thread(self.transport.post_action, search_params, body)
        except Exception as e:
            await self._push_request_error(pending, e, start, signed_action=signed)
            return None

        if not response.ok:
            await self._handle_failed_response(pending, response, start, signed)
            return None

        return response

    async def _sign(self, request: FramePostRequest, force_real_signer: bool) -> SignedFrameAction:
        context = SignerActionContext(
            url=self.home_url or request.target,
            target=request.target,
            button=request.button,
            button_index=request.button_index,
            frame_context=self.frame_context,
            input_text=request.input_text,
            state=request.state,
            transaction_id=request.transaction_id,
            address=request.address,
        )

        if request.dangerous_skip_signing and not force_real_signer:
            signer = self._unsigned_signer
        else:
            signer = self.signer_state

        return await _call(signer.sign_frame_action, context)

    # =========================================================================
    # Failures
    # =========================================================================

    async def _handle_failed_response(
        self,
        pending: PendingStackItem,
        response: ProxyResponse,
        start: float,
        signed_action: Optional[SignedFrameAction] = None,
    ) -> None:
        payload = response.payload

        if (
            400 <= response.status < 500
            and pending.request.method == "POST"
            and isinstance(payload, dict)
            and isinstance(payload.get("message"), str)
        ):
            self.dispatch(
                DoneAction(
                    pending_item=pending,
                    item=MessageStackItem(
                        timestamp=pending.timestamp,
                        request=pending.request,
                        url=self._current_url(pending),
                        message=payload["message"],
                        type=MessageType.ERROR,
                        speed=self._speed(start),
                        response_status=response.status,
                        signed_action=signed_action,
                    ),
                )
            )
            return

        error = ProxyRequestError(
            _failed_response_message(response.status),
            status=response.status,
            payload=payload,
        )
        await self._push_request_error(
            pending,
            error,
            start,
            response_status=response.status,
            signed_action=signed_action,
        )

    async def _push_request_error(
        self,
        pending: PendingStackItem,
        error: Exception,
        start: float,
        response_status: Optional[int] = None,
        signed_action: Optional[SignedFrameAction] = None,
    ) -> None:
        status = response_status or getattr(error, "status", None) or 500
        body = getattr(error, "payload", None)

        logger.error(f"Frame request to {pending.url} failed (status={status}): {error}")

        self.dispatch(
            RequestErrorAction(
                pending_item=pending,
                item=RequestErrorStackItem(
                    timestamp=pending.timestamp,
                    request=pending.request,
                    url=self._current_url(pending),
                    request_error=error,
                    speed=self._speed(start),
                    response_status=status,
                    response_body=body,
                    signed_action=signed_action,
                ),
            )
        )

        await _call(self._on_error, error)

    def _current_url(self, pending: PendingStackItem) -> str:
        """URL of the slot, including details added after signing."""
        for item in self._stack:
            if item.timestamp == pending.timestamp:
                return item.url
        return pending.url

    @staticmethod
    def _speed(start: float) -> float:
        return round(time.monotonic() - start, 2)

    # =========================================================================
    # Default callbacks
    # =========================================================================

    def _default_alert(self, message: str) -> None:
        logger.warning(f"Frame alert: {message}")

    def _default_confirm(self, message: str) -> bool:
        logger.info(f"Frame confirmation requested, declining: {message}")
        return False

    def _default_open_url(self, url: str) -> None:
        logger.info(f"Frame requested to open {url}")

    async def _default_on_redirect(self, location: str) -> None:
        if await _call(self._confirm, f"You are about to be redirected to {location}"):
            await _call(self._open_url, location)

    async def _default_on_link_button_click(self, button: FrameButton) -> None:
        if await _call(self._confirm, f"You are about to be redirected to {button.target}"):
            await _call(self._open_url, button.target)

    async def _default_on_mint(self, frame: Frame, button: FrameButton, target: Optional[str]) -> None:
        await _call(self._alert, f"Mint requested: {target}")

    async def _default_on_transaction(self, frame: Frame, button: FrameButton, transaction_data: Any) -> None:
        chain_id = transaction_data.get("chainId") if isinstance(transaction_data, dict) else None
        params = transaction_data.get("params") if isinstance(transaction_data, dict) else None
        await _call(
            self._alert,
            f"Requesting a transaction on chain with ID {chain_id} "
            f"with the following params: {json.dumps(params, indent=2)}",
        )
        return None

    async def _default_on_error(self, error: Exception) -> None:
        await _call(self._alert, str(error))
