"""Common definitions and types."""

from .base_types import Address, Bytes, FixedSizeBytes, Hash, HexNumber, Number, Wei
from .composite_types import AccessList
from .conversions import to_bytes, to_number
from .pydantic import CamelModel, ForkCheckBaseModel
from .serialization import RLPSerializable

__all__ = (
    "AccessList",
    "Address",
    "Bytes",
    "CamelModel",
    "FixedSizeBytes",
    "ForkCheckBaseModel",
    "Hash",
    "HexNumber",
    "Number",
    "RLPSerializable",
    "Wei",
    "to_bytes",
    "to_number",
)
