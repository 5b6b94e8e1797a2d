"""Composite types built from the base primitives."""

from typing import ClassVar, List

from .base_types import Address, Hash
from .pydantic import CamelModel
from .serialization import RLPSerializable


class AccessList(CamelModel, RLPSerializable):
    """One access list entry: an address and the storage keys touched under it."""

    address: Address
    storage_keys: List[Hash]

    rlp_fields: ClassVar[List[str]] = ["address", "storage_keys"]
