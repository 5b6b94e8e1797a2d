"""Objects shared by the check suites of one run."""

from dataclasses import dataclass
from typing import Tuple

from fork_test_base_types import Address, Bytes
from fork_test_execution import (
    ChainPoller,
    ExpectationMismatchError,
    FeePolicyValidator,
    Phase,
    TransactionBuilder,
)
from fork_test_logging import get_logger
from fork_test_rpc import EthRPC
from fork_test_types import TransactionReceipt

logger = get_logger(__name__)


@dataclass
class ForkCheckContext:
    """Client, poller, builder, receiver and one fee policy validator per phase."""

    client: EthRPC
    poller: ChainPoller
    builder: TransactionBuilder
    receiver: Address
    pre_fork: FeePolicyValidator
    post_fork: FeePolicyValidator

    @classmethod
    def create(
        cls,
        client: EthRPC,
        poller: ChainPoller,
        builder: TransactionBuilder,
        receiver: Address,
    ) -> "ForkCheckContext":
        """Build the context and its two validators."""
        return cls(
            client=client,
            poller=poller,
            builder=builder,
            receiver=receiver,
            pre_fork=FeePolicyValidator(Phase.PRE_FORK, builder, poller, client, receiver),
            post_fork=FeePolicyValidator(Phase.POST_FORK, builder, poller, client, receiver),
        )

    def validator(self, phase: Phase) -> FeePolicyValidator:
        """Return the fee policy validator of `phase`."""
        return self.pre_fork if phase == Phase.PRE_FORK else self.post_fork

    def deploy(self, initcode: Bytes, gas_limit: int) -> Tuple[TransactionReceipt, Address]:
        """Deploy `initcode`, wait for the receipt and return it with the contract address."""
        tx, address = self.builder.deploy_contract(initcode, gas_limit)
        receipt = self.poller.wait_for_receipt(tx.hash)
        if receipt.contract_address is not None and receipt.contract_address != address:
            raise ExpectationMismatchError("contract_address", address, receipt.contract_address)
        logger.verbose("Deployment %s mined with status %s", tx.hash, receipt.status)
        return receipt, address
