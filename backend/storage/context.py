"""
Operation Context

Cancellable, deadline-bearing context passed as the first argument to
every storage and cache operation.

Cancellation is cooperative: operations call ``ctx.check()`` on entry and
fail fast. Work already in progress is never interrupted.
"""

import threading
import time
from typing import Optional


class ContextError(Exception):
    """Base class for context cancellation errors."""


class ContextCancelledError(ContextError):
    """Raised when the operation context was cancelled."""

    def __init__(self, message: str = "context canceled"):
        super().__init__(message)


class DeadlineExceededError(ContextError):
    """Raised when the operation context deadline has passed."""

    def __init__(self, message: str = "context deadline exceeded"):
        super().__init__(message)


class OperationContext:
    """
    Execution context carrying a cancellation flag and an optional deadline.

    Usage:
        ctx = OperationContext.with_timeout(30)
        data = cache.get(ctx, url)

        ctx.cancel()   # subsequent operations raise ContextCancelledError
    """

    def __init__(self, timeout: Optional[float] = None):
        self._cancelled = threading.Event()
        self._deadline: Optional[float] = None
        if timeout is not None:
            self._deadline = time.monotonic() + timeout

    @classmethod
    def background(cls) -> "OperationContext":
        """Context that is never cancelled and has no deadline."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> "OperationContext":
        return cls(timeout=seconds)

    @property
    def deadline(self) -> Optional[float]:
        """Deadline in ``time.monotonic()`` seconds, or None."""
        return self._deadline

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline (never negative), or None."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self) -> None:
        self._cancelled.set()

    def err(self) -> Optional[ContextError]:
        """Return the error describing why the context is done, or None."""
        if self._cancelled.is_set():
            return ContextCancelledError()
        if self.expired:
            return DeadlineExceededError()
        return None

    def check(self) -> None:
        """Raise the context error if the context is cancelled or expired."""
        error = self.err()
        if error is not None:
            raise error
