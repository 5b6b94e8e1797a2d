"""Base pydantic models."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ForkCheckBaseModel(BaseModel):
    """Base model for all models of the fork checks."""

    def serialize(
        self,
        mode: Literal["json", "python"],
        by_alias: bool,
        exclude_none: bool = True,
    ) -> dict[str, Any]:
        """
        Serialize the model with the given parameters.

        :param mode: 'json' only produces JSON serializable types, 'python' may produce
            any python object.
        :param by_alias: Whether to use aliases for field names.
        :param exclude_none: Whether to exclude fields with None values, default is True.
        """
        return self.model_dump(mode=mode, by_alias=by_alias, exclude_none=exclude_none)


class CamelModel(ForkCheckBaseModel):
    """
    A base model that converts field names to camel case when serializing.

    For example, the field name `base_fee_per_gas` is read from and written to
    JSON-RPC payloads as `baseFeePerGas`.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
    )
