"""Hashing and address derivation helpers."""

import ethereum_rlp as eth_rlp
from ethereum_types.numeric import Uint

from fork_test_base_types import Address, Bytes, Hash


def keccak256(data: bytes) -> Hash:
    """Calculate keccak256 hash of the given data."""
    return Bytes(data).keccak256()


def public_key_to_address(public_key: bytes) -> Address:
    """Derive an address from a 65-byte uncompressed secp256k1 public key."""
    assert len(public_key) == 65 and public_key[0] == 0x04, "public key must be uncompressed"
    return Address(keccak256(public_key[1:])[32 - 20 :])


def compute_create_address(sender: Address, nonce: int) -> Address:
    """Return the address of the contract created by `sender` with `nonce`."""
    hash_bytes = keccak256(eth_rlp.encode([bytes(sender), Uint(nonce)]))
    return Address(hash_bytes[32 - 20 :])
