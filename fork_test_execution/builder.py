"""Build, sign and submit the transactions exercised by the fork checks."""

import threading
from dataclasses import dataclass, field
from typing import List, Tuple

from fork_test_base_types import AccessList, Address, Bytes
from fork_test_logging import get_logger
from fork_test_rpc import EthRPC
from fork_test_types import EOA, Transaction, TransactionType

logger = get_logger(__name__)

OVERPRICE_AMOUNT = 10_000
"""Wei added to the suggested fees to outbid transactions left pending by earlier cases."""


class FeeConstructionError(ValueError):
    """The suggested fees make the intended fee ordering impossible."""

    pass


@dataclass(frozen=True)
class SuggestedFees:
    """Gas price and tip cap suggested by the node."""

    gas_price: int
    max_priority_fee_per_gas: int


@dataclass(frozen=True)
class TransactionIntent:
    """
    Everything needed to build a transaction except the nonce, which the builder assigns
    at submission time. `to` is None for contract creations.
    """

    kind: TransactionType
    to: Address | None
    value: int = 0
    gas_limit: int = 21_000
    gas_price: int | None = None
    max_fee_per_gas: int | None = None
    max_priority_fee_per_gas: int | None = None
    access_list: List[AccessList] | None = None
    data: Bytes = field(default_factory=Bytes)

    def __post_init__(self):
        """Check that the fee fields match the transaction kind."""
        if self.kind == TransactionType.DYNAMIC_FEE:
            if self.max_fee_per_gas is None or self.max_priority_fee_per_gas is None:
                raise ValueError("dynamic-fee intents need max_fee_per_gas and tip cap")
            if self.gas_price is not None:
                raise ValueError("dynamic-fee intents cannot set gas_price")
        else:
            if self.gas_price is None:
                raise ValueError(f"{self.kind.name} intents need gas_price")
            if self.max_fee_per_gas is not None or self.max_priority_fee_per_gas is not None:
                raise ValueError(f"{self.kind.name} intents cannot set dynamic fee fields")
        if self.kind == TransactionType.LEGACY and self.access_list is not None:
            raise ValueError("legacy intents cannot carry an access list")


class TransactionBuilder:
    """
    Turn transaction intents into signed transactions sent from one account.

    The builder can be shared between threads: the pending nonce lookup, signing and
    submission of one transaction happen under a lock so that two concurrent sends
    never reuse a nonce. Fee values are passed through unchecked; rejecting them is
    up to the node.
    """

    def __init__(
        self,
        client: EthRPC,
        sender: EOA,
        chain_id: int,
        *,
        transfer_value: int = 10**18,
        transfer_gas_limit: int = 21_000,
    ):
        """Initialize the builder for `sender` on chain `chain_id`."""
        if sender.key is None:
            raise ValueError("sender account has no private key")
        self.client = client
        self.sender = sender
        self.chain_id = chain_id
        self.transfer_value = transfer_value
        self.transfer_gas_limit = transfer_gas_limit
        self._lock = threading.Lock()

    def suggested_fees(self) -> SuggestedFees:
        """Return the gas price and tip cap currently suggested by the node."""
        return SuggestedFees(
            gas_price=self.client.gas_price(),
            max_priority_fee_per_gas=self.client.max_priority_fee_per_gas(),
        )

    def build(self, intent: TransactionIntent, nonce: int) -> Transaction:
        """Build and sign the transaction described by `intent`."""
        tx = Transaction(
            ty=intent.kind,
            chain_id=self.chain_id,
            nonce=nonce,
            gas_price=intent.gas_price,
            max_fee_per_gas=intent.max_fee_per_gas,
            max_priority_fee_per_gas=intent.max_priority_fee_per_gas,
            gas_limit=intent.gas_limit,
            to=intent.to,
            value=intent.value,
            data=intent.data,
            access_list=intent.access_list,
        )
        assert self.sender.key is not None
        return tx.signed(self.sender.key)

    def send(self, intent: TransactionIntent) -> Transaction:
        """
        Sign and submit `intent` with the sender's pending nonce.

        Returns the signed transaction; rejections by the node raise
        `SendTransactionExceptionError` and are not retried.
        """
        with self._lock:
            nonce = self.client.get_transaction_count(self.sender, "pending")
            tx = self.build(intent, nonce)
            logger.info(
                "Sending %s transaction %s (nonce %d, fees %s)",
                intent.kind.name,
                tx.hash,
                nonce,
                tx.resolved_fees,
            )
            self.client.send_transaction(tx)
        return tx

    def send_legacy(self, to: Address, *, value: int | None = None) -> Transaction:
        """Send a legacy transfer at the suggested gas price."""
        gas_price = self.client.gas_price()
        return self.send(
            TransactionIntent(
                kind=TransactionType.LEGACY,
                to=to,
                value=self.transfer_value if value is None else value,
                gas_limit=self.transfer_gas_limit,
                gas_price=gas_price,
            )
        )

    def send_dynamic_fee(
        self,
        to: Address,
        max_fee_per_gas: int,
        max_priority_fee_per_gas: int,
        *,
        value: int | None = None,
    ) -> Transaction:
        """Send a dynamic-fee transfer with the given fee cap and tip cap."""
        return self.send(
            TransactionIntent(
                kind=TransactionType.DYNAMIC_FEE,
                to=to,
                value=self.transfer_value if value is None else value,
                gas_limit=self.transfer_gas_limit,
                max_fee_per_gas=max_fee_per_gas,
                max_priority_fee_per_gas=max_priority_fee_per_gas,
            )
        )

    def send_default_dynamic_fee(self, to: Address, *, overprice: bool = False) -> Transaction:
        """
        Send a dynamic-fee transfer with the suggested gas price as fee cap and the
        suggested tip cap.

        With `overprice`, both are raised by `OVERPRICE_AMOUNT` so the transaction
        replaces anything the sender left pending.
        """
        fees = self.suggested_fees()
        max_fee_per_gas = fees.gas_price
        max_priority_fee_per_gas = fees.max_priority_fee_per_gas
        if overprice:
            max_fee_per_gas += OVERPRICE_AMOUNT
            max_priority_fee_per_gas += OVERPRICE_AMOUNT
        return self.send_dynamic_fee(to, max_fee_per_gas, max_priority_fee_per_gas)

    def send_small_fee_cap_dynamic_fee(self, to: Address) -> Transaction:
        """Send a dynamic-fee transfer whose fee cap is half of the suggested tip cap."""
        max_priority_fee_per_gas = self.client.max_priority_fee_per_gas()
        max_fee_per_gas = max_priority_fee_per_gas // 2
        if max_fee_per_gas >= max_priority_fee_per_gas:
            raise FeeConstructionError(
                f"suggested tip cap {max_priority_fee_per_gas} leaves no smaller fee cap"
            )
        return self.send_dynamic_fee(to, max_fee_per_gas, max_priority_fee_per_gas)

    def send_small_tip_cap_dynamic_fee(self, to: Address) -> Transaction:
        """Send a dynamic-fee transfer whose tip cap is half of the suggested gas price."""
        max_fee_per_gas = self.client.gas_price()
        max_priority_fee_per_gas = max_fee_per_gas // 2
        if max_priority_fee_per_gas >= max_fee_per_gas:
            raise FeeConstructionError(
                f"suggested gas price {max_fee_per_gas} leaves no smaller tip cap"
            )
        return self.send_dynamic_fee(to, max_fee_per_gas, max_priority_fee_per_gas)

    def send_access_list(
        self,
        to: Address,
        access_list: List[AccessList],
        *,
        gas_limit: int = 30_000,
        gas_price: int | None = None,
        value: int | None = None,
    ) -> Transaction:
        """Send an access-list transfer, at the suggested gas price unless one is given."""
        return self.send(
            TransactionIntent(
                kind=TransactionType.ACCESS_LIST,
                to=to,
                value=self.transfer_value if value is None else value,
                gas_limit=gas_limit,
                gas_price=self.client.gas_price() if gas_price is None else gas_price,
                access_list=access_list,
            )
        )

    def deploy_contract(
        self, initcode: Bytes, gas_limit: int, *, gas_price: int | None = None
    ) -> Tuple[Transaction, Address]:
        """Send a legacy contract creation and return it with the address it creates."""
        tx = self.send(
            TransactionIntent(
                kind=TransactionType.LEGACY,
                to=None,
                gas_limit=gas_limit,
                gas_price=self.client.gas_price() if gas_price is None else gas_price,
                data=Bytes(initcode),
            )
        )
        return tx, tx.created_contract(self.sender)
