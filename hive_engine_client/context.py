"""
Deadline and cancellation signal carried by every network-bound operation.

A `CallContext` is created by the test driver and handed to each client call. Child contexts
created with `with_timeout` share the parent's cancellation signal and never outlive the
parent's deadline.
"""

import threading
import time

from .errors import RPCCancelledError, RPCTimeoutError


class CallContext:
    """Deadline and cancellation signal for one or more calls."""

    def __init__(
        self,
        timeout: float | None = None,
        *,
        cancel_event: threading.Event | None = None,
        deadline: float | None = None,
    ):
        """
        Create a context that expires `timeout` seconds from now.

        `deadline` is an absolute `time.monotonic()` value and takes precedence over `timeout`.
        """
        if deadline is None and timeout is not None:
            deadline = time.monotonic() + timeout
        self.deadline = deadline
        self._cancel_event = cancel_event if cancel_event is not None else threading.Event()

    def with_timeout(self, timeout: float) -> "CallContext":
        """Return a child context that expires after `timeout` seconds or with its parent."""
        deadline = time.monotonic() + timeout
        if self.deadline is not None:
            deadline = min(deadline, self.deadline)
        return CallContext(cancel_event=self._cancel_event, deadline=deadline)

    def cancel(self) -> None:
        """Cancel this context and every context derived from it."""
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        """Return whether the context was cancelled."""
        return self._cancel_event.is_set()

    @property
    def expired(self) -> bool:
        """Return whether the deadline has passed."""
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> float | None:
        """Return the seconds left until the deadline, or None when there is no deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def check(self) -> None:
        """Raise if the context was cancelled or its deadline has passed."""
        if self.cancelled:
            raise RPCCancelledError("call context was cancelled")
        if self.expired:
            raise RPCTimeoutError("call context deadline exceeded")

    def __repr__(self) -> str:
        """Return a short description of the context state."""
        return (
            f"CallContext(remaining={self.remaining()}, cancelled={self.cancelled})"
        )


def background() -> CallContext:
    """Return a context without deadline that is only stopped by an explicit cancel."""
    return CallContext()
