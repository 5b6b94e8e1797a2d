"""Named conditions reported by a node when it rejects a transaction or a call."""

from enum import Enum, auto, unique


class ExceptionBase(Enum):
    """Base class for exceptions."""

    def __str__(self) -> str:
        """Return string representation of the exception."""
        return f"{self.__class__.__name__}.{self.name}"


class UndefinedException(str):
    """Error message from the node that no known exception matched."""

    mapper_name: str | None

    def __new__(cls, value: str, *, mapper_name: str | None = None) -> "UndefinedException":
        """Create a new UndefinedException instance."""
        if isinstance(value, UndefinedException):
            return value
        instance = super().__new__(cls, value)
        instance.mapper_name = mapper_name
        return instance


@unique
class TransactionException(ExceptionBase):
    """Reasons for a node to refuse a submitted transaction."""

    TYPE_NOT_SUPPORTED = auto()
    """
    Transaction type is not supported on this chain configuration.
    """
    PRIORITY_GREATER_THAN_MAX_FEE_PER_GAS = auto()
    """
    Transaction's max-priority-fee-per-gas is greater than the max-fee-per-gas.
    """
    INSUFFICIENT_MAX_FEE_PER_GAS = auto()
    """
    Transaction's max-fee-per-gas is lower than the block base-fee.
    """
    INSUFFICIENT_ACCOUNT_FUNDS = auto()
    """
    Transaction's sender does not have enough funds to pay for the transaction.
    """
    NONCE_MISMATCH_TOO_LOW = auto()
    """
    Transaction nonce < sender.nonce.
    """
    INTRINSIC_GAS_TOO_LOW = auto()
    """
    Transaction's gas limit is too low.
    """
    GAS_PRICE_UNDERPRICED = auto()
    """
    Transaction pays less than the pool's minimum gas price, or does not outbid the
    pending transaction it replaces.
    """


@unique
class ExecutionException(ExceptionBase):
    """Reasons for a transaction or call to fail during EVM execution."""

    INVALID_OPCODE = auto()
    """
    Code executed an opcode that is not active at this block.
    """
