"""Transaction-related types for the fork checks."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, ClassVar, List, Literal

from coincurve.keys import PrivateKey, PublicKey
from pydantic import AliasChoices, Field, model_validator

from fork_test_base_types import (
    AccessList,
    Address,
    Bytes,
    CamelModel,
    Hash,
    HexNumber,
    RLPSerializable,
)

from .utils import compute_create_address, keccak256, public_key_to_address


class TransactionType(IntEnum):
    """Transaction types."""

    LEGACY = 0
    ACCESS_LIST = 1
    DYNAMIC_FEE = 2


@dataclass(frozen=True)
class ResolvedFees:
    """
    Fee fields of a transaction as seen by the fee-market checks.

    Legacy and access-list transactions report their gas price in all three fields.
    Dynamic-fee transactions report their fee cap as gas price.
    """

    gas_price: int
    max_fee_per_gas: int
    max_priority_fee_per_gas: int


class Transaction(CamelModel, RLPSerializable):
    """Legacy, access-list or dynamic-fee transaction."""

    ty: HexNumber = Field(HexNumber(0), alias="type")
    chain_id: HexNumber = Field(HexNumber(1))
    nonce: HexNumber = Field(HexNumber(0))
    gas_price: HexNumber | None = None
    max_priority_fee_per_gas: HexNumber | None = None
    max_fee_per_gas: HexNumber | None = None
    gas_limit: HexNumber = Field(HexNumber(21_000), alias="gas")
    to: Address | None = None
    value: HexNumber = Field(HexNumber(0))
    data: Bytes = Field(Bytes(b""), alias="input")
    access_list: List[AccessList] | None = None

    v: HexNumber = Field(HexNumber(0), validation_alias=AliasChoices("v", "yParity"))
    r: HexNumber = Field(HexNumber(0))
    s: HexNumber = Field(HexNumber(0))

    protected: bool = Field(True, exclude=True)

    zero: ClassVar[Literal[0]] = 0

    class InvalidFeePaymentError(Exception):
        """Transaction described more than one fee payment type."""

        def __str__(self):
            """Print exception string."""
            return "only one type of fee payment field can be used in a single tx"

    class UnsignedTransactionError(Exception):
        """The operation needs a signature but the transaction carries none."""

        def __str__(self):
            """Print exception string."""
            return "transaction must be signed"

    @model_validator(mode="before")
    @classmethod
    def validate_to_as_empty_string(cls, data: Any) -> Any:
        """If the `to` field is an empty string, set the model value to None."""
        if isinstance(data, dict) and data.get("to") == "":
            data["to"] = None
        return data

    def model_post_init(self, __context):
        """Ensure transaction has no conflicting properties."""
        super().model_post_init(__context)

        if self.gas_price is not None and (
            self.max_fee_per_gas is not None or self.max_priority_fee_per_gas is not None
        ):
            raise Transaction.InvalidFeePaymentError()

        if "ty" not in self.model_fields_set:
            # Try to deduce transaction type from included fields
            if self.max_fee_per_gas is not None or self.max_priority_fee_per_gas is not None:
                self.ty = HexNumber(TransactionType.DYNAMIC_FEE)
            elif self.access_list is not None:
                self.ty = HexNumber(TransactionType.ACCESS_LIST)
            else:
                self.ty = HexNumber(TransactionType.LEGACY)

        if self.ty > TransactionType.DYNAMIC_FEE:
            raise NotImplementedError(f"transaction type {self.ty} not supported")
        if self.ty >= 1 and self.access_list is None:
            self.access_list = []
        if self.ty < 1:
            assert self.access_list is None, "access_list must be None"
        if self.ty < 2:
            assert self.max_fee_per_gas is None, "max_fee_per_gas must be None"
            assert self.max_priority_fee_per_gas is None, "max_priority_fee_per_gas must be None"

    @property
    def is_signed(self) -> bool:
        """Return whether the transaction carries a signature."""
        return self.r != 0 or self.s != 0

    def signing_hash(self) -> Hash:
        """Return the hash that gets signed by the sender."""
        return self.rlp_signing_bytes().keccak256()

    def signed(self, secret_key: Hash) -> "Transaction":
        """Return a signed copy of the transaction; the original is left untouched."""
        signature_bytes = PrivateKey(secret=bytes(secret_key)).sign_recoverable(
            self.rlp_signing_bytes(), hasher=keccak256
        )
        v, r, s = (
            signature_bytes[64],
            int.from_bytes(signature_bytes[0:32], byteorder="big"),
            int.from_bytes(signature_bytes[32:64], byteorder="big"),
        )
        if self.ty == 0:
            if self.protected:
                v += 35 + (self.chain_id * 2)
            else:  # not protected
                v += 27
        return self.model_copy(update={"v": HexNumber(v), "r": HexNumber(r), "s": HexNumber(s)})

    @property
    def signature_bytes(self) -> Bytes:
        """Returns the serialized bytes of the transaction signature."""
        if not self.is_signed:
            raise Transaction.UnsignedTransactionError()
        v = int(self.v)
        if self.ty == 0:
            if self.protected:
                v -= 35 + (self.chain_id * 2)
            else:
                v -= 27
        return Bytes(
            self.r.to_bytes(32, byteorder="big") + self.s.to_bytes(32, byteorder="big") + bytes([v])
        )

    def recover_sender(self) -> Address:
        """Return the address that signed the transaction."""
        public_key = PublicKey.from_signature_and_message(
            bytes(self.signature_bytes), bytes(self.signing_hash()), hasher=None
        )
        return public_key_to_address(public_key.format(compressed=False))

    def get_rlp_signing_fields(self) -> List[str]:
        """
        Return the list of values included in the envelope used for signing depending on
        the transaction type.
        """
        field_list: List[str]
        if self.ty == 2:
            # EIP-1559: https://eips.ethereum.org/EIPS/eip-1559
            field_list = [
                "chain_id",
                "nonce",
                "max_priority_fee_per_gas",
                "max_fee_per_gas",
                "gas_limit",
                "to",
                "value",
                "data",
                "access_list",
            ]
        elif self.ty == 1:
            # EIP-2930: https://eips.ethereum.org/EIPS/eip-2930
            field_list = [
                "chain_id",
                "nonce",
                "gas_price",
                "gas_limit",
                "to",
                "value",
                "data",
                "access_list",
            ]
        elif self.ty == 0:
            field_list = ["nonce", "gas_price", "gas_limit", "to", "value", "data"]
            if self.protected:
                # EIP-155: https://eips.ethereum.org/EIPS/eip-155
                field_list.extend(["chain_id", "zero", "zero"])
        else:
            raise NotImplementedError(f"signing for transaction type {self.ty} not implemented")

        for field in field_list:
            if field != "to":
                assert getattr(self, field) is not None, (
                    f"{field} must be set for type {self.ty} tx"
                )
        return field_list

    def get_rlp_fields(self) -> List[str]:
        """
        Return the list of values included in the list used for rlp encoding depending on
        the transaction type.
        """
        fields = self.get_rlp_signing_fields()
        if self.ty == 0 and self.protected:
            fields = fields[:-3]
        return fields + ["v", "r", "s"]

    def get_rlp_prefix(self) -> bytes:
        """Return the transaction type byte for typed transactions."""
        if self.ty > 0:
            return bytes([self.ty])
        return b""

    def get_rlp_signing_prefix(self) -> bytes:
        """Return the transaction type byte for typed transaction signing envelopes."""
        if self.ty > 0:
            return bytes([self.ty])
        return b""

    @property
    def hash(self) -> Hash:
        """Returns hash of the transaction."""
        if not self.is_signed:
            raise Transaction.UnsignedTransactionError()
        return self.rlp().keccak256()

    def created_contract(self, sender: Address) -> Address:
        """Return address of the contract created by the transaction."""
        if self.to is not None:
            raise ValueError("transaction is not a contract creation")
        return compute_create_address(sender, self.nonce)

    @property
    def resolved_fees(self) -> ResolvedFees:
        """Return the gas price, fee cap and tip cap compared by the fee-market checks."""
        if self.ty == TransactionType.DYNAMIC_FEE:
            assert self.max_fee_per_gas is not None and self.max_priority_fee_per_gas is not None
            return ResolvedFees(
                gas_price=int(self.max_fee_per_gas),
                max_fee_per_gas=int(self.max_fee_per_gas),
                max_priority_fee_per_gas=int(self.max_priority_fee_per_gas),
            )
        assert self.gas_price is not None
        return ResolvedFees(
            gas_price=int(self.gas_price),
            max_fee_per_gas=int(self.gas_price),
            max_priority_fee_per_gas=int(self.gas_price),
        )
