"""Request-scoped deadline and cancellation carrier."""

from __future__ import annotations

import threading
import time

from .errors import RequestCancelledError


class RequestScope:
    """Carries an optional deadline and a cancellation flag across threads.

    One scope is created per HTTP request or WebSocket connection and handed
    to every upstream call made on its behalf. Cancelling the scope makes the
    next upstream call fail fast instead of issuing I/O.
    """

    def __init__(self, timeout: float | None = None) -> None:
        if timeout is not None and timeout <= 0:
            raise ValueError("timeout must be positive")
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, ``None`` when unbounded."""

        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self) -> None:
        if self.cancelled:
            raise RequestCancelledError("request scope cancelled")
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise RequestCancelledError("request deadline exceeded")

    def timeout_for(self, ceiling: float) -> float:
        """Return the shorter of ``ceiling`` and the time left in this scope."""

        self.check()
        remaining = self.remaining()
        if remaining is None:
            return ceiling
        return min(ceiling, remaining)
