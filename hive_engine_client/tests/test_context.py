"""Test the call context deadline and cancellation handling."""

import pytest

from ..context import CallContext, background
from ..errors import RPCCancelledError, RPCTimeoutError, TransportError


def test_background_never_expires():
    """A background context has no deadline."""
    ctx = background()
    assert ctx.remaining() is None
    assert not ctx.expired
    ctx.check()


def test_timeout_expires():
    """A context stops being usable once its deadline passes."""
    ctx = CallContext(0.0)
    assert ctx.expired
    assert ctx.remaining() == 0.0
    with pytest.raises(RPCTimeoutError):
        ctx.check()


def test_child_never_outlives_parent():
    """A child deadline is capped by the parent's deadline."""
    parent = CallContext(0.5)
    child = parent.with_timeout(60)
    assert child.deadline == parent.deadline
    shorter = parent.with_timeout(0.1)
    assert shorter.deadline < parent.deadline


def test_cancel_propagates_to_children():
    """Cancelling a parent cancels every context derived from it."""
    parent = background()
    child = parent.with_timeout(60)
    parent.cancel()
    assert child.cancelled
    with pytest.raises(RPCCancelledError) as exc_info:
        child.check()
    assert isinstance(exc_info.value, TransportError)
