"""Number and byte primitives shared by transactions, receipts and RPC responses."""

from typing import Any, ClassVar, SupportsBytes, Type, TypeVar

from Crypto.Hash import keccak
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
    """Pydantic schema that builds the type from its constructor and serializes it as `str`."""

    @staticmethod
    def __get_pydantic_core_schema__(
        source_type: Any, handler: GetCoreSchemaHandler
    ) -> PlainValidatorFunctionSchema:
        """Call the class constructor as validator and serialize with `str()`."""
        return no_info_plain_validator_function(
            source_type,
            serialization=to_string_ser_schema(),
        )


class Number(int, ToStringSchema):
    """Integer that can be parsed from decimal strings, hex quantities or bytes."""

    def __new__(cls, input_number: NumberConvertible | N):
        """Create a new Number object."""
        return super(Number, cls).__new__(cls, to_number(input_number))

    def __str__(self) -> str:
        """Return the decimal representation."""
        return str(int(self))

    def hex(self) -> str:
        """Return the hexadecimal representation."""
        return hex(self)


class HexNumber(Number):
    """Number serialized as a JSON-RPC hex quantity."""

    def __str__(self) -> str:
        """Return the hexadecimal representation."""
        return self.hex()


class Wei(Number):
    """
    Amount of wei that can also be written with a unit, e.g. `"1 ether"` or
    `"10**9 wei"`.
    """

    UNITS: ClassVar[dict[str, int]] = {
        "wei": 1,
        "kwei": 10**3,
        "mwei": 10**6,
        "gwei": 10**9,
        "szabo": 10**12,
        "finney": 10**15,
        "ether": 10**18,
    }

    def __new__(cls, input_number: NumberConvertible | N):
        """Create a new Wei object."""
        if isinstance(input_number, str):
            words = input_number.split()
            if not 1 <= len(words) <= 2:
                raise ValueError(f"invalid wei amount: {input_number!r}")
            multiplier = 1
            if len(words) == 2:
                unit = words[1].lower()
                if unit not in cls.UNITS:
                    raise ValueError(f"invalid unit {unit}")
                multiplier = cls.UNITS[unit]
            value_str = words[0]
            if "**" in value_str:
                base, exp = value_str.split("**")
                value = int(base) ** int(exp)
            elif value_str.startswith("0x"):
                value = int(value_str, 16)
            elif value_str.isdigit():
                value = int(value_str)
            else:
                value = float(value_str)
            return super(Number, cls).__new__(cls, int(value * multiplier))
        return super(Number, cls).__new__(cls, to_number(input_number))


class Bytes(bytes, ToStringSchema):
    """Variable length bytes rendered as a 0x-prefixed hex string."""

    def __new__(cls, input_bytes: BytesConvertible = b""):
        """Create a new Bytes object."""
        if type(input_bytes) is cls:
            return input_bytes
        return super(Bytes, cls).__new__(cls, to_bytes(input_bytes))

    def __hash__(self) -> int:
        """Return the hash of the bytes."""
        return super(Bytes, self).__hash__()

    def __str__(self) -> str:
        """Return the hexadecimal representation."""
        return self.hex()

    def hex(self, *args, **kwargs) -> str:
        """Return the 0x-prefixed hexadecimal representation."""
        return "0x" + super().hex(*args, **kwargs)

    def keccak256(self) -> "Hash":
        """Return the keccak256 hash of the bytes."""
        k = keccak.new(digest_bits=256)
        return Hash(k.update(bytes(self)).digest())


T = TypeVar("T", bound="FixedSizeBytes")


class FixedSizeBytes(Bytes):
    """Bytes of a fixed length; subclass with `FixedSizeBytes[n]`."""

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
            cls, to_fixed_size_bytes(input_bytes, cls.byte_length, left_padding=left_padding)
        )

    def __hash__(self) -> int:
        """Return the hash of the bytes."""
        return super(FixedSizeBytes, self).__hash__()

    def __eq__(self, other: object) -> bool:
        """Compare against any value convertible to the same size."""
        if other is None:
            return False
        if not isinstance(other, FixedSizeBytes):
            if not isinstance(other, (str, int, bytes, SupportsBytes)):
                return NotImplemented
            other = self._sized_(other, left_padding=True)
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
    """32-byte hash or storage key."""

    pass
