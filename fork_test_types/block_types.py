"""Block header fields read by the fee-market checks."""

from fork_test_base_types import CamelModel, Hash, HexNumber


class BlockFeeSnapshot(CamelModel):
    """Fee-related fields of a block header, as returned by `eth_getBlockByNumber`."""

    number: HexNumber
    hash: Hash | None = None
    base_fee_per_gas: HexNumber | None = None
    gas_used: HexNumber
    gas_limit: HexNumber

    @property
    def has_base_fee(self) -> bool:
        """Return whether the header carries a base fee."""
        return self.base_fee_per_gas is not None
