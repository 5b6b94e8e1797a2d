"""EIP-3541 checks: new code starting with the 0xEF byte is rejected after the fork."""

from functools import partial
from typing import List

from fork_test_base_types import Bytes
from fork_test_execution import ExpectationMismatchError, TestCase
from fork_test_logging import get_logger

from .context import ForkCheckContext

logger = get_logger(__name__)

# PUSH1 0xef PUSH1 0 MSTORE8 PUSH1 1 PUSH1 0 RETURN
EF_PREFIXED_INITCODE = Bytes("0x60ef60005360016000f3")
EF_PREFIXED_CODE = Bytes("0xef")
DEPLOY_GAS_LIMIT = 60_000


def check_ef_code_deployed(context: ForkCheckContext) -> None:
    """Before the fork code starting with 0xEF can be deployed."""
    receipt, address = context.deploy(EF_PREFIXED_INITCODE, DEPLOY_GAS_LIMIT)
    if not receipt.succeeded:
        raise ExpectationMismatchError("status", 1, receipt.status)
    code = context.client.get_code(address)
    if code != EF_PREFIXED_CODE:
        raise ExpectationMismatchError("deployed_code", EF_PREFIXED_CODE, code)
    logger.info("0xEF code deployed at %s as expected", address)


def check_ef_code_rejected(context: ForkCheckContext) -> None:
    """After the fork the same deployment fails."""
    receipt, address = context.deploy(EF_PREFIXED_INITCODE, DEPLOY_GAS_LIMIT)
    if receipt.succeeded:
        raise ExpectationMismatchError("status", 0, receipt.status)
    logger.info("0xEF code deployment to %s failed as expected", address)


def pre_fork_cases(context: ForkCheckContext) -> List[TestCase]:
    """Return the pre-fork EIP-3541 cases."""
    return [TestCase("eip3541_ef_code_pre_fork", partial(check_ef_code_deployed, context))]


def post_fork_cases(context: ForkCheckContext) -> List[TestCase]:
    """Return the post-fork EIP-3541 cases."""
    return [TestCase("eip3541_ef_code_post_fork", partial(check_ef_code_rejected, context))]
