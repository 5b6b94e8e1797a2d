"""Translate the error strings returned by a node into named exceptions."""

import re
from abc import ABC
from typing import ClassVar, Dict

from .exceptions import ExceptionBase, ExecutionException, TransactionException, UndefinedException


class ExceptionMapper(ABC):
    """Translate between named exceptions and the error strings returned by a client."""

    mapper_name: str
    _mapping_compiled_regex: Dict[ExceptionBase, re.Pattern]

    mapping_substring: ClassVar[Dict[ExceptionBase, str]]
    """
    Mapping of exception to substring that should be present in the error message.

    Items in this mapping are used for substring matching (`substring in message`).
    """

    mapping_regex: ClassVar[Dict[ExceptionBase, str]]
    """
    Mapping of exception to regex that should be present in the error message.

    Items in this mapping are compiled into regex patterns and then used for regex
    matching (`pattern.search(message)`).
    """

    def __init__(self) -> None:
        """Initialize the exception mapper."""
        assert self.mapping_substring is not None, "mapping_substring must be defined in subclass"
        assert self.mapping_regex is not None, "mapping_regex must be defined in subclass"
        self.mapper_name = self.__class__.__name__
        self._mapping_compiled_regex = {
            exception: re.compile(message) for exception, message in self.mapping_regex.items()
        }

    def message_to_exception(self, exception_string: str) -> ExceptionBase | UndefinedException:
        """Match an error message to an exception."""
        for exception, substring in self.mapping_substring.items():
            if substring in exception_string:
                return exception
        for exception, pattern in self._mapping_compiled_regex.items():
            if pattern.search(exception_string):
                return exception
        return UndefinedException(exception_string, mapper_name=self.mapper_name)


class GethExceptionMapper(ExceptionMapper):
    """Error strings of go-ethereum and the clients forked from it."""

    mapping_substring: ClassVar[Dict[ExceptionBase, str]] = {
        TransactionException.TYPE_NOT_SUPPORTED: "transaction type not supported",
        TransactionException.PRIORITY_GREATER_THAN_MAX_FEE_PER_GAS: (
            "max priority fee per gas higher than max fee per gas"
        ),
        TransactionException.INSUFFICIENT_MAX_FEE_PER_GAS: (
            "max fee per gas less than block base fee"
        ),
        TransactionException.INSUFFICIENT_ACCOUNT_FUNDS: (
            "insufficient funds for gas * price + value"
        ),
        TransactionException.NONCE_MISMATCH_TOO_LOW: "nonce too low",
        TransactionException.INTRINSIC_GAS_TOO_LOW: "intrinsic gas too low",
    }
    mapping_regex: ClassVar[Dict[ExceptionBase, str]] = {
        # erigon reports "tip higher than fee cap"
        TransactionException.PRIORITY_GREATER_THAN_MAX_FEE_PER_GAS: r"tip (higher than|above) fee cap",
        TransactionException.GAS_PRICE_UNDERPRICED: r"(replacement )?transaction underpriced",
        ExecutionException.INVALID_OPCODE: r"invalid opcode: \w+",
    }
