"""Transaction receipt types."""

from typing import List

from fork_test_base_types import Address, Bytes, CamelModel, Hash, HexNumber


class TransactionLog(CamelModel):
    """Transaction log."""

    address: Address
    topics: List[Hash]
    data: Bytes
    log_index: HexNumber | None = None
    removed: bool = False


class TransactionReceipt(CamelModel):
    """Transaction receipt."""

    transaction_hash: Hash
    block_hash: Hash | None = None
    block_number: HexNumber
    transaction_index: HexNumber | None = None
    gas_used: HexNumber
    cumulative_gas_used: HexNumber | None = None
    status: HexNumber | None = None
    effective_gas_price: HexNumber | None = None
    contract_address: Address | None = None
    logs: List[TransactionLog] | None = None

    @property
    def succeeded(self) -> bool:
        """Return whether the transaction executed without reverting."""
        return self.status == 1
