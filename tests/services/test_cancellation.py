"""Tests for CancelContext and cancel_scope."""

from __future__ import annotations

import os
import signal
import threading

import pytest

from elemental.domain.errors import OperationCancelledError
from elemental.services.cancellation import CancelContext, cancel_scope


class TestCancelContext:
    def test_initial_state(self) -> None:
        ctx = CancelContext.background()
        assert not ctx.cancelled
        assert ctx.reason is None
        assert not ctx.wait(0)

    def test_cancel_is_idempotent(self) -> None:
        ctx = CancelContext()
        assert ctx.cancel("first") is True
        assert ctx.cancel("second") is False
        assert ctx.cancelled
        assert ctx.reason == "first"
        assert ctx.wait(0)

    def test_callbacks_fire_once(self) -> None:
        ctx = CancelContext()
        seen: list[str | None] = []
        ctx.add_done_callback(lambda c: seen.append(c.reason))
        ctx.cancel("stop")
        ctx.cancel("again")
        assert seen == ["stop"]

    def test_callback_on_cancelled_context_runs_immediately(self) -> None:
        ctx = CancelContext()
        ctx.cancel()
        seen: list[bool] = []
        ctx.add_done_callback(lambda c: seen.append(c.cancelled))
        assert seen == [True]

    def test_detached_callback_does_not_fire(self) -> None:
        ctx = CancelContext()
        seen: list[str] = []
        detach = ctx.add_done_callback(lambda c: seen.append("fired"))
        detach()
        ctx.cancel()
        assert seen == []

    def test_raise_if_cancelled(self) -> None:
        ctx = CancelContext()
        ctx.raise_if_cancelled()
        ctx.cancel("received SIGTERM")
        with pytest.raises(OperationCancelledError, match="received SIGTERM"):
            ctx.raise_if_cancelled()

    def test_wait_wakes_on_cancel_from_other_thread(self) -> None:
        ctx = CancelContext()
        timer = threading.Timer(0.05, ctx.cancel)
        timer.start()
        try:
            assert ctx.wait(5)
        finally:
            timer.join()


class TestCancelScope:
    def test_derived_context_is_active_inside(self) -> None:
        with cancel_scope() as ctx:
            assert not ctx.cancelled
        assert ctx.cancelled

    def test_parent_cancellation_propagates(self) -> None:
        parent = CancelContext()
        with cancel_scope(parent) as ctx:
            parent.cancel("shutdown")
            assert ctx.cancelled
            assert ctx.reason == "shutdown"

    def test_already_cancelled_parent(self) -> None:
        parent = CancelContext()
        parent.cancel("early")
        with cancel_scope(parent) as ctx:
            assert ctx.cancelled

    def test_release_does_not_cancel_parent(self) -> None:
        parent = CancelContext()
        with cancel_scope(parent):
            pass
        assert not parent.cancelled

    def test_parent_detached_after_release(self) -> None:
        parent = CancelContext()
        with cancel_scope(parent) as ctx:
            pass
        parent.cancel("late")
        assert ctx.reason != "late"

    def test_signal_cancels_derived_context(self) -> None:
        with cancel_scope(signals=(signal.SIGTERM,)) as ctx:
            os.kill(os.getpid(), signal.SIGTERM)
            assert ctx.wait(5)
            assert ctx.reason == "received SIGTERM"

    def test_signal_handlers_restored(self) -> None:
        before = signal.getsignal(signal.SIGINT)
        with cancel_scope(signals=(signal.SIGINT,)):
            assert signal.getsignal(signal.SIGINT) is not before
        assert signal.getsignal(signal.SIGINT) is before

    def test_handlers_restored_when_body_raises(self) -> None:
        before = signal.getsignal(signal.SIGTERM)
        with pytest.raises(RuntimeError), cancel_scope(signals=(signal.SIGTERM,)):
            raise RuntimeError("engine failed")
        assert signal.getsignal(signal.SIGTERM) is before

    def test_off_main_thread_follows_parent(self) -> None:
        parent = CancelContext()
        before = signal.getsignal(signal.SIGTERM)
        result: dict[str, object] = {}

        def _work() -> None:
            with cancel_scope(parent) as ctx:
                result["handler"] = signal.getsignal(signal.SIGTERM)
                parent.cancel("from parent")
                result["cancelled"] = ctx.cancelled

        thread = threading.Thread(target=_work)
        thread.start()
        thread.join()
        assert result == {"handler": before, "cancelled": True}
