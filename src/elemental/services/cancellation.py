"""Cancellation contexts and their composition with OS signals.

A :class:`CancelContext` is a one-shot, thread-safe cancellation flag that
engines poll (``ctx.cancelled``) or block on (``ctx.wait()``). Every action
runs its engine under :func:`cancel_scope`, which derives a context that
becomes cancelled when the caller's context is cancelled, when SIGTERM or
SIGINT arrives, or when the scope is left.

INVARIANT: Leaving the scope restores the previous signal dispositions and
detaches from the parent, even when the body raises.
"""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from types import FrameType
from typing import Any

from elemental.domain.errors import OperationCancelledError

logger = logging.getLogger(__name__)

DEFAULT_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGTERM, signal.SIGINT)

DoneCallback = Callable[["CancelContext"], None]


class CancelContext:
    """Cooperative cancellation flag.

    Cancellation is idempotent: only the first :meth:`cancel` records a
    reason and fires the done callbacks.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        # Re-entrant: a signal handler may cancel while the main thread
        # holds the lock.
        self._lock = threading.RLock()
        self._reason: str | None = None
        self._callbacks: list[DoneCallback] = []

    @classmethod
    def background(cls) -> CancelContext:
        """A root context that is only cancelled explicitly."""
        return cls()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str = "canceled") -> bool:
        """Cancel the context. Returns False if it was already cancelled."""
        with self._lock:
            if self._event.is_set():
                return False
            self._reason = reason
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(self)
        return True

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or *timeout* elapses; True if cancelled."""
        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError(self._reason or "canceled")

    def add_done_callback(self, callback: DoneCallback) -> Callable[[], None]:
        """Call *callback* on cancellation; returns a function that detaches it.

        An already cancelled context calls *callback* immediately.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return lambda: self._discard(callback)
        callback(self)
        return lambda: None

    def _discard(self, callback: DoneCallback) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def __repr__(self) -> str:
        state = f"cancelled: {self._reason}" if self.cancelled else "active"
        return f"<CancelContext {state}>"


def _install_handlers(
    ctx: CancelContext, signals: Iterable[signal.Signals]
) -> dict[signal.Signals, Any]:
    """Route *signals* to ``ctx.cancel``; returns the previous handlers.

    Python only allows signal handlers on the main thread. Elsewhere the
    derived context still follows its parent.
    """
    if threading.current_thread() is not threading.main_thread():
        logger.debug("Not on the main thread, signal handlers not installed")
        return {}

    def _handler(signum: int, frame: FrameType | None) -> None:
        name = signal.Signals(signum).name
        if ctx.cancel(f"received {name}"):
            logger.warning("Received %s, canceling the running operation", name)

    previous: dict[signal.Signals, Any] = {}
    for sig in signals:
        previous[sig] = signal.signal(sig, _handler)
    return previous


def _restore_handlers(previous: dict[signal.Signals, Any]) -> None:
    for sig, handler in previous.items():
        signal.signal(sig, handler if handler is not None else signal.SIG_DFL)


@contextmanager
def cancel_scope(
    parent: CancelContext | None = None,
    *,
    signals: Iterable[signal.Signals] = DEFAULT_SIGNALS,
) -> Iterator[CancelContext]:
    """Derive a context cancelled by *parent*, by *signals*, or on exit.

    Usage::

        with cancel_scope(ctx) as run_ctx:
            engine.run(run_ctx, ...)
    """
    derived = CancelContext()
    previous = _install_handlers(derived, signals)
    if parent is not None:
        detach = parent.add_done_callback(lambda p: derived.cancel(p.reason or "canceled"))
    else:
        detach = lambda: None  # noqa: E731
    try:
        yield derived
    finally:
        detach()
        _restore_handlers(previous)
        derived.cancel("operation finished")
