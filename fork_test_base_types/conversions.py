"""Conversions between the loosely typed values returned by JSON-RPC and python values."""

from re import sub
from typing import SupportsBytes, TypeAlias

BytesConvertible: TypeAlias = str | bytes | SupportsBytes | list[int]
FixedSizeBytesConvertible: TypeAlias = str | bytes | SupportsBytes | list[int] | int
NumberConvertible: TypeAlias = str | bytes | SupportsBytes | int


def to_bytes(input_bytes: BytesConvertible) -> bytes:
    """Convert hex strings, byte-likes and lists of ints into bytes."""
    if input_bytes is None:
        raise ValueError("cannot convert `None` to bytes")

    if isinstance(input_bytes, (bytes, list, SupportsBytes)):
        return bytes(input_bytes)

    if isinstance(input_bytes, str):
        # Whitespace is allowed inside hex literals for readability
        hex_str = sub(r"\s+", "", input_bytes)
        if hex_str.startswith("0x"):
            hex_str = hex_str[2:]
        if len(hex_str) % 2 == 1:
            hex_str = "0" + hex_str
        return bytes.fromhex(hex_str)

    raise TypeError(f"invalid type for `bytes`: {type(input_bytes)}")


def to_fixed_size_bytes(
    input_bytes: FixedSizeBytesConvertible,
    size: int,
    *,
    left_padding: bool = False,
) -> bytes:
    """
    Convert the input into exactly `size` bytes.

    Integers are always left-padded. Other inputs must have the exact size unless
    `left_padding` is set.
    """
    if isinstance(input_bytes, int):
        return input_bytes.to_bytes(length=size, byteorder="big")
    input_bytes = to_bytes(input_bytes)
    if len(input_bytes) > size:
        raise ValueError(f"input is too large for fixed size bytes: {len(input_bytes)} > {size}")
    if len(input_bytes) < size:
        if left_padding:
            return input_bytes.rjust(size, b"\x00")
        raise ValueError(
            f"input is too small for fixed size bytes: {len(input_bytes)} < {size}, "
            "use `left_padding=True` to allow padding"
        )
    return input_bytes


def to_number(input_number: NumberConvertible) -> int:
    """Convert decimal strings, hex quantities and big-endian bytes into an int."""
    if isinstance(input_number, int):
        return input_number
    if isinstance(input_number, str):
        return int(input_number, 0)
    if isinstance(input_number, (bytes, SupportsBytes)):
        return int.from_bytes(bytes(input_number), byteorder="big")
    raise TypeError(f"invalid type for `number`: {type(input_number)}")
