"""Primitive types exchanged with execution clients over JSON-RPC."""

from typing import Any, ClassVar, SupportsBytes, Type, TypeVar

from pydantic import GetCoreSchemaHandler
from pydantic_core.core_schema import (
    PlainValidatorFunctionSchema,
    no_info_plain_validator_function,
    to_string_ser_schema,
)

from .conversions import (
    BytesConvertible,
    FixedSizeBytesConvertible,
    NumberConvertible,
    to_bytes,
    to_fixed_size_bytes,
    to_number,
)

N = TypeVar("N", bound="Number")


class ToStringSchema:
    """
    Type converter that validates by calling the class constructor and serializes the value
    using its string representation.

    Values of a type the constructor cannot convert (e.g. a JSON `null`) are reported as
    validation errors instead of escaping as `TypeError`.
    """

    @staticmethod
    def __get_pydantic_core_schema__(
        source_type: Any, handler: GetCoreSchemaHandler
    ) -> PlainValidatorFunctionSchema:
        """Call the class constructor without info and append the serialization schema."""

        def validate(value: Any) -> Any:
            try:
                return source_type(value)
            except TypeError as e:
                raise ValueError(str(e)) from e

        return no_info_plain_validator_function(
            validate,
            serialization=to_string_ser_schema(),
        )


class Number(int, ToStringSchema):
    """Integer that can be parsed from decimal or `0x`-prefixed strings."""

    def __new__(cls, input_number: NumberConvertible | N):
        """Create a new Number object."""
        return super(Number, cls).__new__(cls, to_number(input_number))

    def __str__(self) -> str:
        """Return the decimal representation of the number."""
        return str(int(self))

    def hex(self) -> str:
        """Return the minimal hexadecimal representation of the number."""
        return hex(self)


class HexNumber(Number):
    """Number serialized as a minimal `0x`-prefixed quantity, as the JSON-RPC API expects."""

    def __str__(self) -> str:
        """Return the hexadecimal representation of the number."""
        return self.hex()


class Bytes(bytes, ToStringSchema):
    """Variable-length byte string serialized as `0x`-prefixed hex."""

    def __new__(cls, input_bytes: BytesConvertible = b""):
        """Create a new Bytes object."""
        if type(input_bytes) is cls:
            return input_bytes
        return super(Bytes, cls).__new__(cls, to_bytes(input_bytes))

    def __hash__(self) -> int:
        """Return the hash of the bytes."""
        return super(Bytes, self).__hash__()

    def __str__(self) -> str:
        """Return the hexadecimal representation of the bytes."""
        return self.hex()

    def hex(self, *args, **kwargs) -> str:
        """Return the `0x`-prefixed hexadecimal representation of the bytes."""
        return "0x" + super().hex(*args, **kwargs)


T = TypeVar("T", bound="FixedSizeBytes")


class FixedSizeBytes(Bytes):
    """Byte string of a fixed length; subclass with `FixedSizeBytes[length]`."""

    byte_length: ClassVar[int]
    _sized_: ClassVar[Type["FixedSizeBytes"]]

    def __class_getitem__(cls, length: int) -> Type["FixedSizeBytes"]:
        """Create a new FixedSizeBytes class with the given length."""

        class Sized(cls):  # type: ignore
            byte_length = length

        Sized._sized_ = Sized
        return Sized

    def __new__(cls, input_bytes: FixedSizeBytesConvertible | T, *, left_padding: bool = False):
        """Create a new FixedSizeBytes object."""
        if type(input_bytes) is cls:
            return input_bytes
        return super(FixedSizeBytes, cls).__new__(
            cls,
            to_fixed_size_bytes(input_bytes, cls.byte_length, left_padding=left_padding),
        )

    def __hash__(self) -> int:
        """Return the hash of the bytes."""
        return super(FixedSizeBytes, self).__hash__()

    def __eq__(self, other: object) -> bool:
        """
        Compare against another fixed size value, coercing hex strings, ints and raw bytes of
        the same length first.
        """
        if other is None:
            return False
        if not isinstance(other, FixedSizeBytes):
            if not isinstance(other, (str, int, bytes, SupportsBytes)):
                return NotImplemented
            try:
                other = self._sized_(other)
            except ValueError:
                return False
        return super().__eq__(other)

    def __ne__(self, other: object) -> bool:
        """Compare two FixedSizeBytes objects to be not equal."""
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result


class Address(FixedSizeBytes[20]):  # type: ignore
    """20-byte account address."""

    pass


class Hash(FixedSizeBytes[32]):  # type: ignore
    """32-byte block, transaction or state hash."""

    pass


class Bloom(FixedSizeBytes[256]):  # type: ignore
    """256-byte logs bloom filter."""

    pass


class HeaderNonce(FixedSizeBytes[8]):  # type: ignore
    """8-byte proof-of-work header nonce."""

    pass
