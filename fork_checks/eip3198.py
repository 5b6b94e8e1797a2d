"""
EIP-3198 BASEFEE opcode checks.

A contract whose runtime code returns BASEFEE is deployed in each phase. Before the
fork calling it fails with an invalid opcode; after the fork it returns zero.
"""

from functools import partial
from typing import List

from fork_test_base_types import Address, Bytes
from fork_test_exceptions import ExecutionException
from fork_test_execution import ExpectationMismatchError, TestCase
from fork_test_logging import get_logger
from fork_test_rpc import JSONRPCError

from .context import ForkCheckContext

logger = get_logger(__name__)

# BASEFEE PUSH1 0 MSTORE PUSH1 32 PUSH1 0 RETURN
BASEFEE_RUNTIME = Bytes("0x4860005260206000f3")
# Copies BASEFEE_RUNTIME into memory and returns it
BASEFEE_INITCODE = Bytes("0x684860005260206000f360005260096017f3")
DEPLOY_GAS_LIMIT = 300_000


def deploy_base_fee_contract(context: ForkCheckContext) -> Address:
    """Deploy the BASEFEE contract and check that its code is in place."""
    receipt, address = context.deploy(BASEFEE_INITCODE, DEPLOY_GAS_LIMIT)
    if not receipt.succeeded:
        raise ExpectationMismatchError("status", 1, receipt.status)
    code = context.client.get_code(address)
    if code != BASEFEE_RUNTIME:
        raise ExpectationMismatchError("deployed_code", BASEFEE_RUNTIME, code)
    return address


def check_base_fee_opcode_invalid(context: ForkCheckContext) -> None:
    """Calling BASEFEE before the fork fails with an invalid opcode."""
    address = deploy_base_fee_contract(context)
    try:
        result = context.client.call(address)
    except JSONRPCError as e:
        exception = context.client.map_error(e.message)
        if exception != ExecutionException.INVALID_OPCODE or "BASEFEE" not in e.message:
            raise ExpectationMismatchError(
                "call", "invalid opcode: BASEFEE", e.message
            ) from e
        logger.info("BASEFEE call failed as expected: %s", e.message)
        return
    raise ExpectationMismatchError("call", "invalid opcode: BASEFEE", f"returned {result}")


def check_base_fee_opcode_returns_zero(context: ForkCheckContext) -> None:
    """Calling BASEFEE after the fork returns the zero base fee."""
    address = deploy_base_fee_contract(context)
    result = context.client.call(address)
    if len(result) != 32 or int.from_bytes(result, byteorder="big") != 0:
        raise ExpectationMismatchError("base_fee", 0, result)
    logger.info("BASEFEE returned 0 as expected")


def pre_fork_cases(context: ForkCheckContext) -> List[TestCase]:
    """Return the pre-fork EIP-3198 cases."""
    return [
        TestCase(
            "eip3198_base_fee_opcode_pre_fork",
            partial(check_base_fee_opcode_invalid, context),
        )
    ]


def post_fork_cases(context: ForkCheckContext) -> List[TestCase]:
    """Return the post-fork EIP-3198 cases."""
    return [
        TestCase(
            "eip3198_base_fee_opcode_post_fork",
            partial(check_base_fee_opcode_returns_zero, context),
        )
    ]
