"""Mixins shared by every pydantic model sent to or received from a client."""

from typing import Any, Literal


class ModelCustomizationsMixin:
    """
    Customizes the behavior of pydantic models.

    Applied to `HiveBaseModel`, so any serialization override that must hold for every wire
    type belongs here.
    """

    def serialize(
        self,
        mode: Literal["json", "python"],
        by_alias: bool,
        exclude_none: bool = True,
    ) -> Any:
        """
        Serialize the model to the specified format.

        :param mode: 'json' returns only JSON serializable types, 'python' may return
            arbitrary Python objects.
        :param by_alias: Whether to use the camelCase aliases for field names.
        :param exclude_none: Whether to drop fields set to None, default is True.
        """
        if not hasattr(self, "model_dump"):
            raise NotImplementedError(
                f"{self.__class__.__name__} does not have 'model_dump' method. "
                "Are you sure you are using a Pydantic model?"
            )
        return self.model_dump(mode=mode, by_alias=by_alias, exclude_none=exclude_none)
