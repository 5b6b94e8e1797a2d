"""JSON-RPC client for the node under test."""

from .rpc import BaseRPC, BlockNumberType, EthRPC, SendTransactionExceptionError
from .types import JSONRPCError, TransactionByHashResponse

__all__ = [
    "BaseRPC",
    "BlockNumberType",
    "EthRPC",
    "JSONRPCError",
    "SendTransactionExceptionError",
    "TransactionByHashResponse",
]
