"""
Signer Approval Poller
======================

Polls the status of a pending signer approval until it completes.

A signer that has to be approved in another app (e.g. a Farcaster signed
key request) is polled every signer.approval_poll_interval_seconds seconds
(2 by default). Polling pauses while the host UI is hidden and resumes
when it becomes visible again.

Design Rules:
    - One asyncio task per poller, owned by the poller
    - stop() is idempotent and safe to call from completion handlers
    - Polling ends by itself once the status is "completed"
    - A failing status check is logged and retried on the next tick

Example:
    poller = SignerApprovalPoller(check_status=signer.fetch_status)
    poller.start()
    ...
    await poller.wait()
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from frames_engine.config import settings


logger = logging.getLogger(__name__)

COMPLETED_STATUS = "completed"

StatusCheck = Callable[[], Union[str, Awaitable[str]]]


@dataclass
class PollerMetrics:
    """Counters exposed for observability."""

    checks: int = 0
    failures: int = 0
    last_status: Optional[str] = None


class SignerApprovalPoller:
    """
    Background task polling check_status until approval completes.

    Attributes:
        interval: Seconds between checks, from settings unless given
        on_complete: Optional callback invoked once with the final status
    """

    def __init__(
        self,
        check_status: StatusCheck,
        interval: Optional[float] = None,
        on_complete: Optional[Callable[[str], Any]] = None,
    ) -> None:
        self._check_status = check_status
        if interval is None:
            interval = settings.signer.approval_poll_interval_seconds
        self.interval = interval
        self.on_complete = on_complete

        self._task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()
        self._resume_event = asyncio.Event()
        self._resume_event.set()
        self._completed = False

        self.metrics = PollerMetrics()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def paused(self) -> bool:
        return not self._resume_event.is_set()

    @property
    def completed(self) -> bool:
        return self._completed

    def start(self) -> None:
        """Start polling; no-op if already running or completed."""
        if self.running or self._completed:
            return

        self._stop_event.clear()
        self._task = asyncio.create_task(self._run())
        logger.info(f"Signer approval polling started (interval={self.interval}s)")

    def pause(self) -> None:
        """Suspend polling (host UI hidden)."""
        self._resume_event.clear()

    def resume(self) -> None:
        """Continue polling (host UI visible again)."""
        self._resume_event.set()

    async def stop(self) -> None:
        """Stop polling and wait for the task to finish. Idempotent."""
        self._stop_event.set()
        self._resume_event.set()

        task = self._task
        self._task = None

        if task is None or task.done() or task is asyncio.current_task():
            return

        try:
            await task
        except asyncio.CancelledError:
            pass

    async def wait(self) -> None:
        """Wait until polling ends (completed or stopped)."""
        if self._task is not None:
            await asyncio.shield(self._task)

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            await self._resume_event.wait()
            if self._stop_event.is_set():
                break

            status = await self._check()
            if status == COMPLETED_STATUS:
                self._completed = True
                logger.info("Signer approval completed")
                if self.on_complete is not None:
                    result = self.on_complete(status)
                    if inspect.isawaitable(result):
                        await result
                break

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
                break
            except asyncio.TimeoutError:
                pass

        logger.debug("Signer approval polling stopped")

    async def _check(self) -> Optional[str]:
        self.metrics.checks += 1
        try:
            status = self._check_status()
            if inspect.isawaitable(status):
                status = await status
        except Exception as e:
            self.metrics.failures += 1
            logger.warning(f"Signer status check failed: {e}")
            return None

        self.metrics.last_status = status
        return status
