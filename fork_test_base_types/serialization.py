"""RLP serialization mixin."""

from typing import Any, ClassVar, List

import ethereum_rlp as eth_rlp
from ethereum_types.numeric import Uint

from .base_types import Bytes


def to_serializable_element(v: Any) -> Any:
    """Return an element that can be passed to `eth_rlp.encode`."""
    if isinstance(v, int):
        return Uint(v)
    elif isinstance(v, bytes):
        return v
    elif isinstance(v, list):
        return [to_serializable_element(item) for item in v]
    elif isinstance(v, RLPSerializable):
        return v.to_list(signing=False)
    elif v is None:
        return b""
    raise TypeError(f"Unable to serialize element {v} of type {type(v)}.")


class RLPSerializable:
    """Class that adds RLP serialization to another class."""

    rlp_fields: ClassVar[List[str]]
    rlp_signing_fields: ClassVar[List[str]]

    def get_rlp_fields(self) -> List[str]:
        """
        Return an ordered list of field names to be included in RLP serialization.

        By default, the `rlp_fields` class variable is used.
        """
        return self.rlp_fields

    def get_rlp_signing_fields(self) -> List[str]:
        """
        Return an ordered list of field names to be included in the signing payload.

        By default, the `rlp_signing_fields` class variable is used.
        """
        return self.rlp_signing_fields

    def get_rlp_prefix(self) -> bytes:
        """Return a prefix prepended to the serialized object, empty by default."""
        return b""

    def get_rlp_signing_prefix(self) -> bytes:
        """Return a prefix prepended to the signing payload, empty by default."""
        return b""

    def to_list(self, signing: bool = False) -> List[Any]:
        """Return the object as a list that can be passed to `eth_rlp.encode`."""
        fields = self.get_rlp_signing_fields() if signing else self.get_rlp_fields()
        values: List[Any] = []
        for field in fields:
            try:
                values.append(to_serializable_element(getattr(self, field)))
            except Exception as e:
                raise ValueError(
                    f'Unable to rlp serialize field "{field}" '
                    f'in object type "{self.__class__.__name__}"'
                ) from e
        return values

    def rlp_signing_bytes(self) -> Bytes:
        """Return the serialized payload that gets hashed and signed."""
        return Bytes(self.get_rlp_signing_prefix() + eth_rlp.encode(self.to_list(signing=True)))

    def rlp(self) -> Bytes:
        """Return the serialized object."""
        return Bytes(self.get_rlp_prefix() + eth_rlp.encode(self.to_list(signing=False)))
