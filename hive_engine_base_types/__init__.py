"""
Common definitions and types.
"""

from .base_types import (
    Address,
    Bloom,
    Bytes,
    FixedSizeBytes,
    Hash,
    HeaderNonce,
    HexNumber,
    Number,
)
from .conversions import to_bytes, to_number
from .json import to_json
from .pydantic import CamelModel, HiveBaseModel

__all__ = (
    "Address",
    "Bloom",
    "Bytes",
    "CamelModel",
    "FixedSizeBytes",
    "Hash",
    "HeaderNonce",
    "HexNumber",
    "HiveBaseModel",
    "Number",
    "to_bytes",
    "to_json",
    "to_number",
)
