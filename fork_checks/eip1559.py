"""
EIP-1559 fee market checks.

Before the fork dynamic-fee transactions are rejected and blocks have no base fee.
After the fork the base fee is zero, so gas price, fee cap and tip cap of a default
dynamic-fee transaction are all equal.
"""

from functools import partial
from typing import List

from fork_test_execution import TestCase, TransactionCase

from .context import ForkCheckContext


def pre_fork_cases(context: ForkCheckContext) -> List[TestCase]:
    """Return the pre-fork EIP-1559 cases."""
    check = context.pre_fork.check
    return [
        TestCase("eip1559_legacy_tx_pre_fork", partial(check, TransactionCase.LEGACY)),
        TestCase(
            "eip1559_default_dynamic_fee_tx_pre_fork",
            partial(check, TransactionCase.DEFAULT_DYNAMIC_FEE),
        ),
        TestCase(
            "eip1559_small_fee_cap_dynamic_fee_tx_pre_fork",
            partial(check, TransactionCase.SMALL_FEE_CAP_DYNAMIC_FEE),
        ),
        TestCase(
            "eip1559_small_tip_cap_dynamic_fee_tx_pre_fork",
            partial(check, TransactionCase.SMALL_TIP_CAP_DYNAMIC_FEE),
        ),
        TestCase("eip1559_suggested_prices_pre_fork", context.pre_fork.check_suggested_prices),
    ]


def post_fork_cases(context: ForkCheckContext) -> List[TestCase]:
    """Return the post-fork EIP-1559 cases."""
    check = context.post_fork.check
    return [
        TestCase("eip1559_legacy_tx_post_fork", partial(check, TransactionCase.LEGACY)),
        TestCase(
            "eip1559_default_dynamic_fee_tx_post_fork",
            partial(check, TransactionCase.DEFAULT_DYNAMIC_FEE),
        ),
        TestCase(
            "eip1559_small_tip_cap_dynamic_fee_tx_post_fork",
            partial(check, TransactionCase.SMALL_TIP_CAP_DYNAMIC_FEE),
        ),
        TestCase(
            "eip1559_small_fee_cap_dynamic_fee_tx_post_fork",
            partial(check, TransactionCase.SMALL_FEE_CAP_DYNAMIC_FEE),
        ),
        TestCase("eip1559_suggested_prices_post_fork", context.post_fork.check_suggested_prices),
    ]
