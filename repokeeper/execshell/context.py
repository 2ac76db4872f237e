"""Cooperative cancellation for long multi-repository runs.

An :class:`ExecutionContext` travels with every operation and collaborator
call. Collaborators call :meth:`ExecutionContext.check` before starting work
and size their subprocess timeouts with :meth:`ExecutionContext.remaining`, so
a cancelled or expired run stops at the next command boundary.
"""

from __future__ import annotations

import threading
import time
import typing as typ

from .errors import ExecutionCancelledError


class ExecutionContext:
    """Cancellation flag plus an optional monotonic deadline."""

    def __init__(
        self,
        *,
        timeout: float | None = None,
        clock: typ.Callable[[], float] = time.monotonic,
    ) -> None:
        """Create a context that expires ``timeout`` seconds from now."""
        self._clock = clock
        self._cancelled = threading.Event()
        self._deadline = None if timeout is None else clock() + timeout

    @classmethod
    def background(cls) -> ExecutionContext:
        """Return a context with no deadline."""
        return cls()

    @property
    def deadline(self) -> float | None:
        """Monotonic deadline, or ``None`` when the run is unbounded."""
        return self._deadline

    @property
    def cancelled(self) -> bool:
        """Whether :meth:`cancel` has been called."""
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Request cancellation; safe to call from another thread."""
        self._cancelled.set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, never negative."""
        if self._deadline is None:
            return None
        return max(self._deadline - self._clock(), 0.0)

    def check(self) -> None:
        """Raise :class:`ExecutionCancelledError` when work must stop."""
        if self.cancelled:
            raise ExecutionCancelledError.cancelled()
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise ExecutionCancelledError.expired()
