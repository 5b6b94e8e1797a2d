"""Height-gated execution of fork-transition checks against a live chain."""

from .builder import (
    OVERPRICE_AMOUNT,
    FeeConstructionError,
    SuggestedFees,
    TransactionBuilder,
    TransactionIntent,
)
from .policy import (
    ACCESS_LIST_TRANSFER_GAS,
    BASE_FEE,
    POLICY,
    CaseExpectation,
    ExpectationMismatchError,
    FeePolicyValidator,
    FeeRelation,
    TransactionCase,
)
from .poller import ChainPoller, ReceiptTimeoutError
from .registry import DuplicateTestCaseError, TestCase, TestCaseRegistry
from .scheduler import ForkWindowClosedError, PhaseResult, PhaseScheduler, RunResult
from .types import Phase, PhaseState

__all__ = (
    "ACCESS_LIST_TRANSFER_GAS",
    "BASE_FEE",
    "OVERPRICE_AMOUNT",
    "POLICY",
    "CaseExpectation",
    "ChainPoller",
    "DuplicateTestCaseError",
    "ExpectationMismatchError",
    "FeeConstructionError",
    "FeePolicyValidator",
    "FeeRelation",
    "ForkWindowClosedError",
    "Phase",
    "PhaseResult",
    "PhaseScheduler",
    "PhaseState",
    "ReceiptTimeoutError",
    "RunResult",
    "SuggestedFees",
    "TestCase",
    "TestCaseRegistry",
    "TransactionBuilder",
    "TransactionCase",
    "TransactionIntent",
)
