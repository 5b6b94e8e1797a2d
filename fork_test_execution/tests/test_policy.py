"""Tests for the fee policy validator against an in-memory chain."""

import pytest

from fork_test_base_types import HexNumber
from fork_test_exceptions import TransactionException
from fork_test_logging import VERBOSE_LEVEL
from fork_test_types import EOA

from ..builder import TransactionBuilder
from ..policy import (
    ACCESS_LIST_TRANSFER_GAS,
    POLICY,
    ExpectationMismatchError,
    FeePolicyValidator,
    TransactionCase,
    describe_base_fee,
)
from ..poller import ChainPoller
from ..types import Phase
from .fake_chain import FakeChain

SENDER = EOA(key=0x9B28F36FBD67381120752D6172ECDCF10E06AB2D9A1367AAC00CDCD6AC7855D3)
RECEIVER = EOA(key=0xDDCD272732BFE889DA92201DA3527CB0FAA4F3BE06F5BAA9E9269B700DFA2C2C)


def make_validator(chain: FakeChain, phase: Phase) -> FeePolicyValidator:
    """Return a validator wired to `chain`."""
    builder = TransactionBuilder(chain, SENDER, chain_id=1337)  # type: ignore[arg-type]
    poller = ChainPoller(chain, sleep=lambda _: None)  # type: ignore[arg-type]
    return FeePolicyValidator(phase, builder, poller, chain, RECEIVER)  # type: ignore[arg-type]


def test_policy_tables_are_complete():
    """Every case has an expectation in both phases."""
    for phase in Phase:
        assert set(POLICY[phase]) == set(TransactionCase)


def test_small_fee_cap_rejection_reasons():
    """Before the fork either rejection reason is acceptable, after it only one."""
    pre = POLICY[Phase.PRE_FORK][TransactionCase.SMALL_FEE_CAP_DYNAMIC_FEE]
    post = POLICY[Phase.POST_FORK][TransactionCase.SMALL_FEE_CAP_DYNAMIC_FEE]
    assert pre.rejected_with == {
        TransactionException.TYPE_NOT_SUPPORTED,
        TransactionException.PRIORITY_GREATER_THAN_MAX_FEE_PER_GAS,
    }
    assert post.rejected_with == {TransactionException.PRIORITY_GREATER_THAN_MAX_FEE_PER_GAS}


@pytest.mark.parametrize("case", list(TransactionCase))
def test_pre_fork_chain_matches_pre_fork_policy(case: TransactionCase):
    """A chain before its fork satisfies every pre-fork expectation."""
    chain = FakeChain(fork_block=12, height=2)
    receipt = make_validator(chain, Phase.PRE_FORK).check(case)
    if case == TransactionCase.LEGACY:
        assert receipt is not None and receipt.succeeded
    else:
        assert receipt is None


@pytest.mark.parametrize("case", list(TransactionCase))
def test_post_fork_chain_matches_post_fork_policy(case: TransactionCase):
    """A chain after its fork satisfies every post-fork expectation."""
    chain = FakeChain(fork_block=12, height=12, gas_price=1_000, max_priority_fee_per_gas=1_000)
    receipt = make_validator(chain, Phase.POST_FORK).check(case)
    if case == TransactionCase.SMALL_FEE_CAP_DYNAMIC_FEE:
        assert receipt is None
    else:
        assert receipt is not None
        assert chain.blocks[int(receipt.block_number)].base_fee_per_gas == 0
    if case == TransactionCase.ACCESS_LIST:
        assert receipt is not None and receipt.gas_used == ACCESS_LIST_TRANSFER_GAS


def test_overprice_only_after_fork():
    """Default dynamic-fee transactions are overpriced in the post-fork phase only."""
    chain = FakeChain(fork_block=12, height=12, gas_price=1_000, max_priority_fee_per_gas=1_000)
    make_validator(chain, Phase.POST_FORK).check(TransactionCase.DEFAULT_DYNAMIC_FEE)
    assert chain.sent[-1].max_fee_per_gas == 11_000
    chain = FakeChain(fork_block=12, height=2)
    make_validator(chain, Phase.PRE_FORK).check(TransactionCase.DEFAULT_DYNAMIC_FEE)
    assert chain.sent[-1].max_fee_per_gas == 10**9


def test_unexpected_acceptance():
    """Typed transactions accepted before the fork are a submission mismatch."""
    chain = FakeChain(fork_block=12, height=12)
    with pytest.raises(ExpectationMismatchError) as exc_info:
        make_validator(chain, Phase.PRE_FORK).check(TransactionCase.ACCESS_LIST)
    assert exc_info.value.check == "submission"
    assert "accepted as" in str(exc_info.value.observed)


def test_unexpected_rejection():
    """Typed transactions rejected after the fork are a submission mismatch."""
    chain = FakeChain(fork_block=100, height=12)
    with pytest.raises(ExpectationMismatchError) as exc_info:
        make_validator(chain, Phase.POST_FORK).check(TransactionCase.DEFAULT_DYNAMIC_FEE)
    assert exc_info.value.check == "submission"
    assert exc_info.value.observed == TransactionException.TYPE_NOT_SUPPORTED


def test_wrong_rejection_reason():
    """A rejection for a different reason is a mismatch."""
    chain = FakeChain(fork_block=100, height=12)
    with pytest.raises(ExpectationMismatchError) as exc_info:
        make_validator(chain, Phase.POST_FORK).check(TransactionCase.SMALL_FEE_CAP_DYNAMIC_FEE)
    assert exc_info.value.expected == "TransactionException.PRIORITY_GREATER_THAN_MAX_FEE_PER_GAS"
    assert exc_info.value.observed == TransactionException.TYPE_NOT_SUPPORTED


def test_base_fee_mismatch():
    """A legacy transaction mined into a block with a base fee fails before the fork."""
    chain = FakeChain(fork_block=12, height=12)
    with pytest.raises(ExpectationMismatchError) as exc_info:
        make_validator(chain, Phase.PRE_FORK).check(TransactionCase.LEGACY)
    assert exc_info.value.check == "base_fee"
    assert (exc_info.value.expected, exc_info.value.observed) == ("absent", "0")


def test_post_fork_base_fee_mismatch():
    """A non-zero base fee after the fork is reported in decimal."""
    chain = FakeChain(fork_block=12, height=12)
    validator = make_validator(chain, Phase.POST_FORK)
    original_send = chain.send_transaction

    def send_with_base_fee(tx):
        tx_hash = original_send(tx)
        block = chain.blocks[chain.height]
        chain.blocks[chain.height] = block.model_copy(update={"base_fee_per_gas": HexNumber(5)})
        return tx_hash

    chain.send_transaction = send_with_base_fee  # type: ignore[method-assign]
    with pytest.raises(ExpectationMismatchError) as exc_info:
        validator.check(TransactionCase.LEGACY)
    assert exc_info.value.check == "base_fee"
    assert str(exc_info.value) == "base_fee: expected 0, observed 5"


def test_describe_base_fee():
    """Base fees render in decimal whatever their type."""
    assert describe_base_fee(None) == "absent"
    assert describe_base_fee(0) == "0"
    assert describe_base_fee(HexNumber("0x5")) == "5"


def test_gas_used_mismatch():
    """An access-list transfer charged more than its intrinsic gas fails the gas check."""
    chain = FakeChain(fork_block=12, height=12, extra_gas=100)
    with pytest.raises(ExpectationMismatchError) as exc_info:
        make_validator(chain, Phase.POST_FORK).check(TransactionCase.ACCESS_LIST)
    assert exc_info.value.check == "gas_used"
    assert exc_info.value.expected == ACCESS_LIST_TRANSFER_GAS
    assert exc_info.value.observed == ACCESS_LIST_TRANSFER_GAS + 100
    assert str(exc_info.value) == "gas_used: expected 25300, observed 25400"


def test_reported_gas_price_is_logged(caplog: pytest.LogCaptureFixture):
    """The gas price reported by the node for a dynamic-fee transaction is only logged."""
    chain = FakeChain(fork_block=12, height=12)
    validator = make_validator(chain, Phase.POST_FORK)
    original_send = chain.send_transaction

    def send_with_reported_gas_price(tx):
        tx_hash = original_send(tx)
        mined = chain.transactions[tx_hash]
        chain.transactions[tx_hash] = mined.model_copy(update={"reported_gas_price": 7})
        return tx_hash

    chain.send_transaction = send_with_reported_gas_price  # type: ignore[method-assign]
    with caplog.at_level(VERBOSE_LEVEL):
        assert validator.check(TransactionCase.DEFAULT_DYNAMIC_FEE) is not None
    assert "reported gas price 7" in caplog.text


def test_fee_relation_mismatch():
    """A mined dynamic-fee transaction whose tip cap is below its fee cap fails ALL_EQUAL."""
    chain = FakeChain(fork_block=12, height=12, gas_price=1_000, max_priority_fee_per_gas=10)
    with pytest.raises(ExpectationMismatchError) as exc_info:
        make_validator(chain, Phase.POST_FORK).check(TransactionCase.DEFAULT_DYNAMIC_FEE)
    assert exc_info.value.check == "fees"


def test_failed_status():
    """A reverted transaction fails the status check."""
    chain = FakeChain(fork_block=12, height=12)
    validator = make_validator(chain, Phase.POST_FORK)
    original_send = chain.send_transaction

    def send_and_revert(tx):
        tx_hash = original_send(tx)
        chain.receipts[tx_hash] = chain.receipts[tx_hash].model_copy(update={"status": 0})
        return tx_hash

    chain.send_transaction = send_and_revert  # type: ignore[method-assign]
    with pytest.raises(ExpectationMismatchError) as exc_info:
        validator.check(TransactionCase.LEGACY)
    assert exc_info.value.check == "status"


def test_suggested_prices():
    """The suggested gas price and tip cap must be equal."""
    chain = FakeChain(gas_price=5, max_priority_fee_per_gas=5)
    make_validator(chain, Phase.PRE_FORK).check_suggested_prices()
    chain.suggested_tip_cap = 4
    with pytest.raises(ExpectationMismatchError, match="suggested_prices"):
        make_validator(chain, Phase.POST_FORK).check_suggested_prices()
