"""Conversions from the loosely-typed values found in JSON-RPC payloads."""

from re import sub
from typing import List, SupportsBytes, TypeAlias

BytesConvertible: TypeAlias = str | bytes | SupportsBytes | List[int]
FixedSizeBytesConvertible: TypeAlias = str | bytes | SupportsBytes | List[int] | int
NumberConvertible: TypeAlias = str | bytes | SupportsBytes | int


def to_bytes(input_bytes: BytesConvertible) -> bytes:
    """Convert a hex string, byte string or list of ints into bytes."""
    if input_bytes is None:
        raise ValueError("Cannot convert `None` input to bytes")

    if isinstance(input_bytes, (bytes, list, SupportsBytes)):
        return bytes(input_bytes)

    if isinstance(input_bytes, str):
        # Whitespace is allowed inside hex strings for readability
        input_bytes = sub(r"\s+", "", input_bytes)
        if input_bytes.startswith(("0x", "0X")):
            input_bytes = input_bytes[2:]
        if len(input_bytes) % 2 == 1:
            input_bytes = "0" + input_bytes
        return bytes.fromhex(input_bytes)

    raise TypeError(f"invalid type for `bytes`: {type(input_bytes).__name__}")


def to_fixed_size_bytes(
    input_bytes: FixedSizeBytesConvertible,
    size: int,
    *,
    left_padding: bool = False,
) -> bytes:
    """
    Convert the input into exactly `size` bytes.

    Integers are always left-padded. Any other input must already be `size` bytes long unless
    `left_padding` is requested.
    """
    if isinstance(input_bytes, int):
        return input_bytes.to_bytes(length=size, byteorder="big")
    converted = to_bytes(input_bytes)
    if len(converted) > size:
        raise ValueError(f"input is too large for fixed size bytes: {len(converted)} > {size}")
    if len(converted) < size:
        if not left_padding:
            raise ValueError(
                f"input is too small for fixed size bytes: {len(converted)} < {size}"
            )
        return converted.rjust(size, b"\x00")
    return converted


def to_number(input_number: NumberConvertible) -> int:
    """Convert a decimal/hex string, big-endian bytes or int into an int."""
    if isinstance(input_number, int):
        return input_number
    if isinstance(input_number, str):
        return int(input_number, 0)
    if isinstance(input_number, (bytes, SupportsBytes)):
        return int.from_bytes(bytes(input_number), byteorder="big")
    raise TypeError(f"invalid type for `number`: {type(input_number).__name__}")
