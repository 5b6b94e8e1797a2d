"""Fixed-interval polling of the chain height and of transaction receipts."""

import time
from typing import Callable

from fork_test_base_types import Hash
from fork_test_logging import get_logger
from fork_test_rpc import EthRPC
from fork_test_types import TransactionReceipt

logger = get_logger(__name__)


class ReceiptTimeoutError(TimeoutError):
    """No receipt was returned for a transaction within the configured timeout."""

    tx_hash: Hash
    timeout: float
    last_error: Exception | None

    def __init__(self, tx_hash: Hash, timeout: float, last_error: Exception | None = None):
        """Initialize the error with the transaction hash and the last query error seen."""
        super().__init__(tx_hash, timeout)
        self.tx_hash = tx_hash
        self.timeout = timeout
        self.last_error = last_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        message = f"transaction {self.tx_hash} not mined after {self.timeout} seconds"
        if self.last_error is not None:
            message += f" (last query error: {self.last_error})"
        return message


class ChainPoller:
    """
    Wait for the chain to reach a height, or for a transaction to be mined.

    Both waits poll at a fixed interval. The height wait has no upper bound and stops at
    the first failed query; the receipt wait keeps polling through failed queries until
    `receipt_timeout` seconds have passed.
    """

    def __init__(
        self,
        client: EthRPC,
        *,
        block_poll_interval: float = 3,
        receipt_poll_interval: float = 5,
        receipt_timeout: float = 60,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the poller; `clock` and `sleep` can be replaced in tests."""
        self.client = client
        self.block_poll_interval = block_poll_interval
        self.receipt_poll_interval = receipt_poll_interval
        self.receipt_timeout = receipt_timeout
        self.clock = clock
        self.sleep = sleep

    def block_number(self) -> int:
        """Return the current chain height."""
        return self.client.block_number()

    def wait_for_block_number(self, target: int) -> int:
        """Block until the chain height is at least `target` and return the reached height."""
        while True:
            current = self.block_number()
            if current >= target:
                logger.verbose("Reached block %d (waiting for %d)", current, target)
                return current
            logger.verbose("Current block %d, waiting for %d", current, target)
            self.sleep(self.block_poll_interval)

    def wait_for_receipt(self, tx_hash: Hash) -> TransactionReceipt:
        """Block until the receipt of `tx_hash` is available or the timeout expires."""
        start_time = self.clock()
        last_error: Exception | None = None
        while True:
            try:
                receipt = self.client.get_transaction_receipt(tx_hash)
            except Exception as e:
                logger.verbose("Receipt query for %s failed: %s", tx_hash, e)
                last_error = e
            else:
                if receipt is not None:
                    logger.verbose("Transaction %s mined in block %d", tx_hash, receipt.block_number)
                    return receipt
            elapsed = self.clock() - start_time
            if elapsed >= self.receipt_timeout:
                raise ReceiptTimeoutError(tx_hash, self.receipt_timeout, last_error)
            self.sleep(min(self.receipt_poll_interval, self.receipt_timeout - elapsed))
