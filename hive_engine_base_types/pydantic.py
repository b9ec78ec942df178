"""Base pydantic classes used to define the JSON-RPC wire models."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .mixins import ModelCustomizationsMixin


class HiveBaseModel(BaseModel, ModelCustomizationsMixin):
    """Base model for all wire models."""

    pass


class CamelModel(HiveBaseModel):
    """
    A base model that converts field names to camel case when serializing.

    For example, the field name `head_block_hash` is sent as `headBlockHash`. Unknown fields in
    client responses are ignored.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
    )
