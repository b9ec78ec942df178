"""Test the block selector encoding."""

import pytest

from ..block_number import (
    FINALIZED,
    LATEST,
    PENDING,
    SAFE,
    BlockTag,
    from_block_number_arg,
    to_block_number_arg,
)


@pytest.mark.parametrize(
    "number,arg",
    [
        pytest.param(LATEST, "latest", id="latest"),
        pytest.param(PENDING, "pending", id="pending"),
        pytest.param(FINALIZED, "finalized", id="finalized"),
        pytest.param(SAFE, "safe", id="safe"),
        pytest.param(0, "0x0", id="genesis"),
        pytest.param(1, "0x1", id="one"),
        pytest.param(0x1F, "0x1f", id="lowercase_minimal_hex"),
        pytest.param(2**64, "0x10000000000000000", id="large"),
    ],
)
def test_block_number_args(number, arg: str):
    """Selectors encode to the JSON-RPC form and decode back to the same selector."""
    assert to_block_number_arg(number) == arg
    assert from_block_number_arg(arg) == number


def test_plain_ints_match_tags():
    """The sentinel values may also be passed as plain integers."""
    assert to_block_number_arg(-2) == "pending"
    assert to_block_number_arg(-3) == "finalized"
    assert to_block_number_arg(-4) == "safe"
    assert isinstance(from_block_number_arg("safe"), BlockTag)


@pytest.mark.parametrize("number", [-1, -5, -100])
def test_unknown_negative_rejected(number: int):
    """Negative numbers that are not sentinels are rejected."""
    with pytest.raises(ValueError):
        to_block_number_arg(number)


@pytest.mark.parametrize("arg", ["0x", "12", "earliest", ""])
def test_invalid_args_rejected(arg: str):
    """Arguments that are neither tags nor hex heights are rejected."""
    with pytest.raises(ValueError):
        from_block_number_arg(arg)
