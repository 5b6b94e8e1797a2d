"""Tests for the chain poller, driven by a fake clock."""

from unittest.mock import MagicMock

import pytest

from fork_test_base_types import Hash
from fork_test_rpc import JSONRPCError
from fork_test_types import TransactionReceipt

from ..poller import ChainPoller, ReceiptTimeoutError

RECEIPT = TransactionReceipt(transaction_hash=Hash(1), block_number=5, gas_used=21_000, status=1)


class FakeClock:
    """Clock that only advances when the poller sleeps."""

    def __init__(self):
        """Start at zero."""
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        """Return the current time."""
        return self.now

    def sleep(self, seconds: float) -> None:
        """Advance the clock."""
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Return a fresh fake clock."""
    return FakeClock()


def make_poller(client, clock: FakeClock, **kwargs) -> ChainPoller:
    """Return a poller running on the fake clock."""
    return ChainPoller(client, clock=clock, sleep=clock.sleep, **kwargs)


def test_wait_for_block_number(clock: FakeClock):
    """The height is polled every `block_poll_interval` until the target is reached."""
    client = MagicMock()
    client.block_number.side_effect = [0, 1, 2, 3]
    assert make_poller(client, clock).wait_for_block_number(2) == 2
    assert clock.sleeps == [3, 3]


def test_wait_for_block_number_already_reached(clock: FakeClock):
    """A target at or below the current height returns without sleeping."""
    client = MagicMock()
    client.block_number.return_value = 20
    assert make_poller(client, clock).wait_for_block_number(12) == 20
    assert clock.sleeps == []


def test_wait_for_block_number_error_propagates(clock: FakeClock):
    """Height query errors are not retried."""
    client = MagicMock()
    client.block_number.side_effect = [1, JSONRPCError(-32000, "boom")]
    with pytest.raises(JSONRPCError):
        make_poller(client, clock).wait_for_block_number(5)
    assert clock.sleeps == [3]


def test_wait_for_receipt(clock: FakeClock):
    """Missing receipts and query errors are absorbed until the receipt shows up."""
    client = MagicMock()
    client.get_transaction_receipt.side_effect = [None, ConnectionError("reset"), RECEIPT]
    assert make_poller(client, clock).wait_for_receipt(Hash(1)) == RECEIPT
    assert clock.sleeps == [5, 5]


def test_wait_for_receipt_timeout(clock: FakeClock):
    """The timeout fires no earlier than configured and carries the last query error."""
    client = MagicMock()
    client.get_transaction_receipt.side_effect = [None, None, ConnectionError("reset")] + [
        None
    ] * 20
    poller = make_poller(client, clock, receipt_poll_interval=5, receipt_timeout=12)
    with pytest.raises(ReceiptTimeoutError) as exc_info:
        poller.wait_for_receipt(Hash(1))
    assert clock.now >= 12
    assert clock.sleeps == [5, 5, 2]
    assert isinstance(exc_info.value, TimeoutError)
    assert isinstance(exc_info.value.last_error, ConnectionError)
    assert "not mined after 12 seconds" in str(exc_info.value)
