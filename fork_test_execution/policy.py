"""
Expected fee-market behavior before and after the fork, and the validator that checks
observed chain behavior against it.

Before the fork only legacy-priced transactions are valid and blocks carry no base fee.
After the fork dynamic-fee and access-list transactions are valid, the base fee is zero,
and the gas price of a dynamic-fee transaction equals its fee cap.
"""

from dataclasses import dataclass
from enum import Enum, auto
from functools import partial
from typing import Any, Callable, Dict, FrozenSet

from fork_test_base_types import AccessList, Address, Hash
from fork_test_exceptions import TransactionException
from fork_test_logging import get_logger
from fork_test_rpc import EthRPC, SendTransactionExceptionError
from fork_test_types import Transaction, TransactionReceipt

from .builder import TransactionBuilder
from .poller import ChainPoller
from .types import Phase

logger = get_logger(__name__)

# EIP-2930 intrinsic gas: G_transaction + G_accesslistaddress + G_accessliststorage
ACCESS_LIST_TRANSFER_GAS = 21_000 + 2_400 + 1_900


class TransactionCase(Enum):
    """Transaction shapes sent by the fee-market checks."""

    LEGACY = auto()
    DEFAULT_DYNAMIC_FEE = auto()
    SMALL_TIP_CAP_DYNAMIC_FEE = auto()
    SMALL_FEE_CAP_DYNAMIC_FEE = auto()
    ACCESS_LIST = auto()


class FeeRelation(Enum):
    """Relation between gas price, fee cap and tip cap of a mined transaction."""

    ALL_EQUAL = "gas price == fee cap == tip cap"
    TIP_CAP_BELOW_FEE_CAP = "gas price == fee cap > tip cap"


@dataclass(frozen=True)
class CaseExpectation:
    """Outcome expected for one transaction case in one phase."""

    rejected_with: FrozenSet[TransactionException] = frozenset()
    fee_relation: FeeRelation | None = None
    gas_used: int | None = None

    @property
    def accepted(self) -> bool:
        """Return whether the node is expected to accept the transaction."""
        return not self.rejected_with


def rejected(*exceptions: TransactionException) -> CaseExpectation:
    """Return an expectation of rejection for any of the given reasons."""
    return CaseExpectation(rejected_with=frozenset(exceptions))


POLICY: Dict[Phase, Dict[TransactionCase, CaseExpectation]] = {
    Phase.PRE_FORK: {
        TransactionCase.LEGACY: CaseExpectation(),
        TransactionCase.DEFAULT_DYNAMIC_FEE: rejected(TransactionException.TYPE_NOT_SUPPORTED),
        TransactionCase.SMALL_TIP_CAP_DYNAMIC_FEE: rejected(
            TransactionException.TYPE_NOT_SUPPORTED
        ),
        # Nodes may check fee ordering before the transaction type.
        TransactionCase.SMALL_FEE_CAP_DYNAMIC_FEE: rejected(
            TransactionException.TYPE_NOT_SUPPORTED,
            TransactionException.PRIORITY_GREATER_THAN_MAX_FEE_PER_GAS,
        ),
        TransactionCase.ACCESS_LIST: rejected(TransactionException.TYPE_NOT_SUPPORTED),
    },
    Phase.POST_FORK: {
        TransactionCase.LEGACY: CaseExpectation(),
        TransactionCase.DEFAULT_DYNAMIC_FEE: CaseExpectation(
            fee_relation=FeeRelation.ALL_EQUAL
        ),
        TransactionCase.SMALL_TIP_CAP_DYNAMIC_FEE: CaseExpectation(
            fee_relation=FeeRelation.TIP_CAP_BELOW_FEE_CAP
        ),
        TransactionCase.SMALL_FEE_CAP_DYNAMIC_FEE: rejected(
            TransactionException.PRIORITY_GREATER_THAN_MAX_FEE_PER_GAS
        ),
        TransactionCase.ACCESS_LIST: CaseExpectation(gas_used=ACCESS_LIST_TRANSFER_GAS),
    },
}

BASE_FEE: Dict[Phase, int | None] = {
    Phase.PRE_FORK: None,
    Phase.POST_FORK: 0,
}
"""Base fee of every block including an accepted transaction; None means absent."""


class ExpectationMismatchError(Exception):
    """Observed chain behavior differs from the expected behavior."""

    check: str
    expected: Any
    observed: Any

    def __init__(self, check: str, expected: Any, observed: Any):
        """Initialize the error with the name of the failed check and both values."""
        super().__init__(check, expected, observed)
        self.check = check
        self.expected = expected
        self.observed = observed

    def __str__(self) -> str:
        """Return string representation of the error."""
        return f"{self.check}: expected {self.expected}, observed {self.observed}"


def describe_base_fee(base_fee: int | None) -> str:
    """Render a base fee, absent or not, for error messages."""
    return "absent" if base_fee is None else str(int(base_fee))


class FeePolicyValidator:
    """Send the transaction cases of one phase and compare the outcome with `POLICY`."""

    def __init__(
        self,
        phase: Phase,
        builder: TransactionBuilder,
        poller: ChainPoller,
        client: EthRPC,
        receiver: Address,
    ):
        """Initialize the validator for `phase`; transfers go to `receiver`."""
        self.phase = phase
        self.builder = builder
        self.poller = poller
        self.client = client
        self.receiver = receiver

    def expectation(self, case: TransactionCase) -> CaseExpectation:
        """Return the expected outcome of `case` in this validator's phase."""
        return POLICY[self.phase][case]

    def submit(self, case: TransactionCase) -> Transaction:
        """Build and send the transaction for `case`."""
        senders: Dict[TransactionCase, Callable[[], Transaction]] = {
            TransactionCase.LEGACY: partial(self.builder.send_legacy, self.receiver),
            # Outbid transactions rejected or left pending before the fork.
            TransactionCase.DEFAULT_DYNAMIC_FEE: partial(
                self.builder.send_default_dynamic_fee,
                self.receiver,
                overprice=self.phase == Phase.POST_FORK,
            ),
            TransactionCase.SMALL_TIP_CAP_DYNAMIC_FEE: partial(
                self.builder.send_small_tip_cap_dynamic_fee, self.receiver
            ),
            TransactionCase.SMALL_FEE_CAP_DYNAMIC_FEE: partial(
                self.builder.send_small_fee_cap_dynamic_fee, self.receiver
            ),
            TransactionCase.ACCESS_LIST: partial(
                self.builder.send_access_list,
                self.receiver,
                [AccessList(address=self.receiver, storage_keys=[Hash(0)])],
            ),
        }
        return senders[case]()

    def check(self, case: TransactionCase) -> TransactionReceipt | None:
        """
        Send `case` and verify the outcome.

        Returns the receipt of an accepted transaction, or None for an expected
        rejection. Raises `ExpectationMismatchError` on any deviation.
        """
        expectation = self.expectation(case)
        try:
            tx = self.submit(case)
        except SendTransactionExceptionError as e:
            observed = e.exception if e.exception is not None else str(e)
            if expectation.accepted:
                raise ExpectationMismatchError("submission", "accepted", observed) from e
            if observed not in expectation.rejected_with:
                raise ExpectationMismatchError(
                    "submission",
                    " or ".join(sorted(str(reason) for reason in expectation.rejected_with)),
                    observed,
                ) from e
            logger.info("%s %s rejected as expected: %s", self.phase, case.name, observed)
            return None

        if not expectation.accepted:
            raise ExpectationMismatchError(
                "submission",
                " or ".join(sorted(str(reason) for reason in expectation.rejected_with)),
                f"accepted as {tx.hash}",
            )

        receipt = self.poller.wait_for_receipt(tx.hash)
        if not receipt.succeeded:
            status = None if receipt.status is None else int(receipt.status)
            raise ExpectationMismatchError("status", 1, status)

        if expectation.fee_relation is not None:
            self.check_fee_relation(tx, expectation.fee_relation)

        block = self.client.get_block_by_number(int(receipt.block_number))
        if block is None:
            raise ExpectationMismatchError("block", int(receipt.block_number), "missing")
        if block.base_fee_per_gas != BASE_FEE[self.phase]:
            raise ExpectationMismatchError(
                "base_fee",
                describe_base_fee(BASE_FEE[self.phase]),
                describe_base_fee(block.base_fee_per_gas),
            )

        if expectation.gas_used is not None and receipt.gas_used != expectation.gas_used:
            raise ExpectationMismatchError(
                "gas_used", expectation.gas_used, int(receipt.gas_used)
            )

        logger.info(
            "%s %s mined in block %d as expected", self.phase, case.name, receipt.block_number
        )
        return receipt

    def check_fee_relation(self, tx: Transaction, relation: FeeRelation) -> None:
        """
        Fetch the mined transaction and compare its resolved fees.

        The resolved gas price of a dynamic-fee transaction is its fee cap as read back
        from the node, not the `gasPrice` the node reports for it, so for such
        transactions the gas price half of each relation only confirms that the fee
        cap round-tripped. The reported gas price is logged for diagnostics.
        """
        mined = self.client.get_transaction_by_hash(tx.hash)
        if mined is None or mined.is_pending:
            raise ExpectationMismatchError("inclusion", "mined", "pending")
        fees = mined.resolved_fees
        if mined.reported_gas_price is not None:
            logger.verbose(
                "%s reported gas price %d, fee cap %d, tip cap %d",
                tx.hash,
                mined.reported_gas_price,
                fees.max_fee_per_gas,
                fees.max_priority_fee_per_gas,
            )
        if relation == FeeRelation.ALL_EQUAL:
            consistent = fees.gas_price == fees.max_fee_per_gas == fees.max_priority_fee_per_gas
        else:
            consistent = (
                fees.gas_price == fees.max_fee_per_gas
                and fees.max_priority_fee_per_gas < fees.max_fee_per_gas
            )
        if not consistent:
            raise ExpectationMismatchError("fees", relation.value, fees)

    def check_suggested_prices(self) -> None:
        """The suggested gas price must equal the suggested tip cap."""
        fees = self.builder.suggested_fees()
        if fees.gas_price != fees.max_priority_fee_per_gas:
            raise ExpectationMismatchError(
                "suggested_prices",
                f"gas price {fees.gas_price} == tip cap",
                f"tip cap {fees.max_priority_fee_per_gas}",
            )
        logger.info("%s suggested gas price equals tip cap (%d)", self.phase, fees.gas_price)
