"""EIP-2930 access list checks."""

from functools import partial
from typing import List

from fork_test_execution import TestCase, TransactionCase

from .context import ForkCheckContext


def pre_fork_cases(context: ForkCheckContext) -> List[TestCase]:
    """Access-list transactions are rejected before the fork."""
    return [
        TestCase(
            "eip2930_access_list_tx_pre_fork",
            partial(context.pre_fork.check, TransactionCase.ACCESS_LIST),
        )
    ]


def post_fork_cases(context: ForkCheckContext) -> List[TestCase]:
    """Access-list transactions pay the access list gas after the fork."""
    return [
        TestCase(
            "eip2930_access_list_tx_post_fork",
            partial(context.post_fork.check, TransactionCase.ACCESS_LIST),
        )
    ]
