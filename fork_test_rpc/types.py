"""Types used in the RPC module for `eth` namespace requests."""

from typing import Any

from pydantic import Field, model_validator

from fork_test_base_types import Address, Hash, HexNumber
from fork_test_types import Transaction


class JSONRPCError(Exception):
    """Model to parse a JSON RPC error response."""

    code: int
    message: str
    data: Any

    def __init__(self, code: int | str, message: str, data: Any = None, **kwargs):
        """Initialize the JSONRPCError."""
        super().__init__(code, message)
        self.code = int(code)
        self.message = message
        self.data = data

    def __str__(self) -> str:
        """Return string representation of the JSONRPCError."""
        return f"JSONRPCError(code={self.code}, message={self.message})"


class TransactionByHashResponse(Transaction):
    """Represents the response of a transaction by hash request."""

    block_hash: Hash | None = None
    block_number: HexNumber | None = None

    transaction_hash: Hash = Field(..., alias="hash")
    sender: Address | None = Field(None, alias="from")

    reported_gas_price: HexNumber | None = None
    """`gasPrice` reported by the client for dynamic-fee transactions."""

    @model_validator(mode="before")
    @classmethod
    def adapt_clients_response(cls, data: Any) -> Any:
        """
        Perform modifications necessary to adapt the response returned by clients
        so it can be parsed by our model.
        """
        if isinstance(data, dict):
            data = dict(data)
            if "gasPrice" in data and "maxFeePerGas" in data:
                # Keep only one of the gas price fields.
                data["reportedGasPrice"] = data.pop("gasPrice")
            if data.get("type") in (None, "0x0", 0) and "v" in data:
                # Legacy transactions without EIP-155 replay protection use v = 27 or 28
                v = data["v"]
                data["protected"] = (int(v, 16) if isinstance(v, str) else int(v)) > 28
        return data

    @property
    def is_pending(self) -> bool:
        """Return whether the transaction is still waiting in the pool."""
        return self.block_number is None

    def model_post_init(self, __context):
        """
        Check that the transaction hash returned by the client matches the one calculated by
        us.
        """
        super().model_post_init(__context)
        assert self.transaction_hash == self.hash, (
            f"client returned hash {self.transaction_hash}, computed {self.hash}"
        )
