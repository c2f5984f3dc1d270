"""Cancellation and deadline signal carried by a request."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from retryrequest.errors import CancellationError, DeadlineExceededError, RequestCancelledError


class CancelContext:
    """Thread-safe cancellation signal with an optional deadline.

    ``done()`` polls the signal. ``wait()`` blocks on an event rather than
    polling, so it wakes as soon as ``cancel()`` is called from any thread or
    the deadline passes. Cancelling a context cancels every derived context.
    """

    def __init__(
        self,
        *,
        timeout: float | None = None,
        deadline: float | None = None,
        parent: CancelContext | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        if timeout is not None:
            timeout_deadline = clock() + timeout
            deadline = timeout_deadline if deadline is None else min(deadline, timeout_deadline)
        self._deadline = deadline
        self._clock = clock
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._error: CancellationError | None = None
        self._children: list[CancelContext] = []
        self._parent = parent
        if parent is not None:
            parent._attach(self)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def _attach(self, child: CancelContext) -> None:
        with self._lock:
            error = self._error
            if error is None:
                self._children.append(child)
        if error is not None:
            child._finish(error)

    def _detach(self, child: CancelContext) -> None:
        with self._lock:
            if child in self._children:
                self._children.remove(child)

    def _finish(self, error: CancellationError) -> None:
        with self._lock:
            if self._error is not None:
                return
            self._error = error
            children, self._children = self._children, []
        self._event.set()
        if self._parent is not None:
            self._parent._detach(self)
            self._parent = None
        for child in children:
            child._finish(error)

    def cancel(self) -> None:
        if self.err() is None:
            self._finish(RequestCancelledError())

    def remaining(self) -> float | None:
        """Seconds until the deadline, ``None`` when unbounded."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._clock())

    def err(self) -> CancellationError | None:
        """Return the cancellation cause, the same instance on every call."""
        with self._lock:
            error = self._error
        if error is None and self._deadline is not None and self._clock() >= self._deadline:
            self._finish(DeadlineExceededError())
            with self._lock:
                error = self._error
        return error

    def done(self) -> bool:
        return self.err() is not None

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the context is done or ``timeout`` elapses."""
        if self.done():
            return True
        remaining = self.remaining()
        capped = remaining is not None and (timeout is None or remaining <= timeout)
        if capped:
            timeout = remaining
        if not self._event.wait(timeout=timeout) and capped:
            # The event can wake marginally before the clock reaches the deadline.
            self._finish(DeadlineExceededError())
        return self.done()

    def with_timeout(self, seconds: float) -> CancelContext:
        return CancelContext(timeout=seconds, parent=self, clock=self._clock)

    def child(self) -> CancelContext:
        return CancelContext(parent=self, clock=self._clock)

    def __enter__(self) -> CancelContext:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()

    def __repr__(self) -> str:
        state = "done" if self.done() else "live"
        return f"CancelContext(state={state}, remaining={self.remaining()})"


class _BackgroundContext(CancelContext):
    """Root context that never finishes."""

    def _attach(self, child: CancelContext) -> None:
        return None

    def cancel(self) -> None:
        return None

    def __exit__(self, *exc_info: object) -> None:
        return None


BACKGROUND: CancelContext = _BackgroundContext()
