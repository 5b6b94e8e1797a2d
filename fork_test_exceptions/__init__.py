"""Exceptions for rejected transactions and failed executions."""

from .exception_mapper import ExceptionMapper, GethExceptionMapper
from .exceptions import (
    ExceptionBase,
    ExecutionException,
    TransactionException,
    UndefinedException,
)

__all__ = [
    "ExceptionBase",
    "ExceptionMapper",
    "ExecutionException",
    "GethExceptionMapper",
    "TransactionException",
    "UndefinedException",
]
