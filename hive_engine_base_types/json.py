"""JSON encoding of wire models and primitive types."""

from typing import Any, AnyStr, List

from .pydantic import HiveBaseModel


def to_json(input: HiveBaseModel | AnyStr | List[HiveBaseModel | AnyStr]) -> Any:
    """Convert a model, or a list of models, to its JSON-RPC parameter representation."""
    if isinstance(input, list):
        return [to_json(item) for item in input]
    elif isinstance(input, HiveBaseModel):
        return input.serialize(mode="json", by_alias=True)
    else:
        return str(input)
