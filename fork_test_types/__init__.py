"""Account, transaction, receipt and block types used by the fork checks."""

from .account_types import EOA
from .block_types import BlockFeeSnapshot
from .receipt_types import TransactionLog, TransactionReceipt
from .transaction_types import ResolvedFees, Transaction, TransactionType
from .utils import compute_create_address, keccak256

__all__ = (
    "BlockFeeSnapshot",
    "EOA",
    "ResolvedFees",
    "Transaction",
    "TransactionLog",
    "TransactionReceipt",
    "TransactionType",
    "compute_create_address",
    "keccak256",
)
