"""Account-related types."""

from coincurve.keys import PrivateKey

from fork_test_base_types import Address, Hash
from fork_test_base_types.conversions import FixedSizeBytesConvertible

from .utils import public_key_to_address


class EOA(Address):
    """
    An Externally Owned Account (EOA) is an account controlled by a private key.

    The EOA is its address plus, when the tool is allowed to send from it, the
    corresponding private key. Both are fixed once the object is created.
    """

    key: Hash | None

    def __new__(
        cls,
        address: "FixedSizeBytesConvertible | Address | EOA | None" = None,
        *,
        key: FixedSizeBytesConvertible | None = None,
    ):
        """Create an EOA from its private key, its address, or both."""
        if isinstance(address, EOA):
            return address
        if key is not None:
            derived = public_key_to_address(
                PrivateKey(Hash(key, left_padding=True)).public_key.format(compressed=False)
            )
            if address is not None and Address(address) != derived:
                raise ValueError(f"private key does not belong to address {Address(address)}")
            address = derived
        elif address is None:
            raise ValueError("impossible to initialize EOA without address")
        instance = super(EOA, cls).__new__(cls, address)
        instance.key = Hash(key, left_padding=True) if key is not None else None
        return instance

    def __repr__(self) -> str:
        """Never include the private key."""
        return f"EOA({self.hex()})"
