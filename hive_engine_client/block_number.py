"""
Block selector encoding for `eth_getBlockByNumber` and friends.

`None` selects the latest block. Three negative sentinels select the `pending`, `finalized` and
`safe` blocks, which keeps them apart from every real (non-negative) block height.
"""

from enum import IntEnum

LATEST = None


class BlockTag(IntEnum):
    """Symbolic block selectors other than `latest`."""

    PENDING = -2
    FINALIZED = -3
    SAFE = -4


PENDING = BlockTag.PENDING
FINALIZED = BlockTag.FINALIZED
SAFE = BlockTag.SAFE

BlockNumber = int | None

_TAG_NAMES = {
    BlockTag.PENDING: "pending",
    BlockTag.FINALIZED: "finalized",
    BlockTag.SAFE: "safe",
}
_NAMES_TO_TAG = {name: tag for tag, name in _TAG_NAMES.items()}


def to_block_number_arg(number: BlockNumber) -> str:
    """Encode a block selector the way the JSON-RPC API expects it."""
    if number is None:
        return "latest"
    if number in _TAG_NAMES:
        return _TAG_NAMES[BlockTag(number)]
    if number < 0:
        raise ValueError(f"invalid block number {number}")
    return hex(number)


def from_block_number_arg(arg: str) -> BlockNumber:
    """Decode a JSON-RPC block selector back into `None`, a `BlockTag` or a block height."""
    if arg == "latest":
        return LATEST
    if arg in _NAMES_TO_TAG:
        return _NAMES_TO_TAG[arg]
    if not arg.startswith("0x") or len(arg) == 2:
        raise ValueError(f"invalid block number argument {arg!r}")
    return int(arg, 16)
