"""
Signer Approval Poller Tests
============================
"""

import asyncio

from frames_engine.interaction.poller import SignerApprovalPoller


def _statuses(*values):
    """Status check returning values in order, then repeating the last one."""
    queue = list(values)

    def check():
        if len(queue) > 1:
            return queue.pop(0)
        return queue[0]

    return check


class TestPolling:
    """Polling until completion."""

    def test_stops_when_completed(self):
        completed = []

        async def scenario():
            poller = SignerApprovalPoller(
                check_status=_statuses("pending", "pending", "completed"),
                interval=0.01,
                on_complete=completed.append,
            )
            poller.start()
            await asyncio.wait_for(poller.wait(), timeout=2)
            return poller

        poller = asyncio.run(scenario())

        assert poller.completed
        assert not poller.running
        assert poller.metrics.checks == 3
        assert poller.metrics.last_status == "completed"
        assert completed == ["completed"]

    def test_async_status_check_and_completion(self):
        completed = []

        async def check():
            return "completed"

        async def on_complete(status):
            completed.append(status)

        async def scenario():
            poller = SignerApprovalPoller(check_status=check, interval=0.01, on_complete=on_complete)
            poller.start()
            await asyncio.wait_for(poller.wait(), timeout=2)

        asyncio.run(scenario())
        assert completed == ["completed"]

    def test_failed_checks_are_retried(self):
        calls = []

        def check():
            calls.append(1)
            if len(calls) < 3:
                raise ConnectionError("hub unavailable")
            return "completed"

        async def scenario():
            poller = SignerApprovalPoller(check_status=check, interval=0.01)
            poller.start()
            await asyncio.wait_for(poller.wait(), timeout=2)
            return poller

        poller = asyncio.run(scenario())

        assert poller.completed
        assert poller.metrics.failures == 2
        assert poller.metrics.checks == 3

    def test_start_after_completion_is_a_no_op(self):
        async def scenario():
            poller = SignerApprovalPoller(check_status=_statuses("completed"), interval=0.01)
            poller.start()
            await asyncio.wait_for(poller.wait(), timeout=2)
            poller.start()
            return poller

        poller = asyncio.run(scenario())
        assert not poller.running
        assert poller.metrics.checks == 1


class TestLifecycle:
    """stop, pause and resume."""

    def test_stop_ends_polling(self):
        async def scenario():
            poller = SignerApprovalPoller(check_status=_statuses("pending"), interval=10)
            poller.start()
            await asyncio.sleep(0.05)
            await asyncio.wait_for(poller.stop(), timeout=2)
            await poller.stop()
            return poller

        poller = asyncio.run(scenario())

        assert not poller.running
        assert not poller.completed
        assert poller.metrics.checks == 1

    def test_pause_suspends_checks(self):
        async def scenario():
            poller = SignerApprovalPoller(check_status=_statuses("pending"), interval=0.01)
            poller.pause()
            poller.start()
            await asyncio.sleep(0.05)
            paused_checks = poller.metrics.checks

            poller.resume()
            await asyncio.sleep(0.05)
            await poller.stop()
            return paused_checks, poller.metrics.checks

        paused_checks, total_checks = asyncio.run(scenario())

        assert paused_checks == 0
        assert total_checks > 0

    def test_paused_poller_can_be_stopped(self):
        async def scenario():
            poller = SignerApprovalPoller(check_status=_statuses("pending"), interval=0.01)
            poller.pause()
            poller.start()
            await asyncio.wait_for(poller.stop(), timeout=2)
            return poller

        poller = asyncio.run(scenario())
        assert poller.metrics.checks == 0


class TestInterval:
    """Polling interval resolution."""

    def test_default_comes_from_settings(self, monkeypatch):
        from frames_engine.config import settings

        monkeypatch.setattr(settings.signer, "approval_poll_interval_seconds", 0.5)
        poller = SignerApprovalPoller(check_status=_statuses("pending"))

        assert poller.interval == 0.5

    def test_explicit_interval_wins(self, monkeypatch):
        from frames_engine.config import settings

        monkeypatch.setattr(settings.signer, "approval_poll_interval_seconds", 0.5)
        poller = SignerApprovalPoller(check_status=_statuses("pending"), interval=3)

        assert poller.interval == 3
