"""JSON-RPC methods used to drive and observe the chain under test."""

from itertools import count
from typing import Any, ClassVar, Dict, Literal, Union

import requests
from pydantic import ValidationError

from fork_test_base_types import Address, Bytes, Hash
from fork_test_exceptions import ExceptionBase, ExceptionMapper, UndefinedException
from fork_test_logging import get_logger
from fork_test_types import BlockFeeSnapshot, Transaction, TransactionReceipt

from .types import JSONRPCError, TransactionByHashResponse

logger = get_logger(__name__)

BlockNumberType = Union[int, Literal["latest", "earliest", "pending"]]


class SendTransactionExceptionError(Exception):
    """Represent an exception that is raised when a transaction fails to be sent."""

    tx: Transaction | None = None
    exception: ExceptionBase | UndefinedException | None = None

    def __init__(
        self,
        *args,
        tx: Transaction | None = None,
        exception: ExceptionBase | UndefinedException | None = None,
    ):
        """Initialize SendTransactionExceptionError class with the given transaction."""
        super().__init__(*args)
        self.tx = tx
        self.exception = exception

    def __str__(self):
        """Return string representation of the exception."""
        message = super().__str__()
        if self.exception is not None:
            message = f"{message} ({self.exception})"
        if self.tx is not None:
            message = f"{message} Transaction={self.tx.model_dump_json(by_alias=True)}"
        return message


class BaseRPC:
    """Represents a base RPC class for every RPC call used by the fork checks."""

    namespace: ClassVar[str]
    response_validation_context: Any | None

    def __init__(
        self,
        url: str,
        extra_headers: Dict | None = None,
        *,
        request_timeout: float = 30,
        response_validation_context: Any | None = None,
    ):
        """Initialize BaseRPC class with the given url."""
        if extra_headers is None:
            extra_headers = {}
        self.url = url
        self.request_id_counter = count(1)
        self.extra_headers = extra_headers
        self.request_timeout = request_timeout
        self.response_validation_context = response_validation_context

    def __init_subclass__(cls) -> None:
        """Set namespace of the RPC class to the lowercase of the class name."""
        namespace = cls.__name__
        if namespace.endswith("RPC"):
            namespace = namespace[:-3]
        cls.namespace = namespace.lower()

    def post_request(self, method: str, *params: Any, extra_headers: Dict | None = None) -> Any:
        """Send JSON-RPC POST request to the client RPC server at port defined in the url."""
        if extra_headers is None:
            extra_headers = {}
        assert self.namespace, "RPC namespace not set"

        payload = {
            "jsonrpc": "2.0",
            "method": f"{self.namespace}_{method}",
            "params": params,
            "id": next(self.request_id_counter),
        }
        base_header = {
            "Content-Type": "application/json",
        }
        headers = base_header | self.extra_headers | extra_headers

        logger.debug("Request %s: %s", payload["id"], payload)
        response = requests.post(
            self.url, json=payload, headers=headers, timeout=self.request_timeout
        )
        response.raise_for_status()
        response_json = response.json()
        logger.debug("Response %s: %s", payload["id"], response_json)

        if "error" in response_json:
            raise JSONRPCError(**response_json["error"])

        assert "result" in response_json, "RPC response didn't contain a result field"
        result = response_json["result"]
        return result


class EthRPC(BaseRPC):
    """Represents an `eth_X` RPC class for the ethereum RPC methods used by the fork checks."""

    exception_mapper: ExceptionMapper | None

    def __init__(
        self,
        url: str,
        extra_headers: Dict | None = None,
        *,
        exception_mapper: ExceptionMapper | None = None,
        request_timeout: float = 30,
        response_validation_context: Any | None = None,
    ):
        """Initialize EthRPC class with the given url and exception mapper."""
        super().__init__(
            url,
            extra_headers,
            request_timeout=request_timeout,
            response_validation_context=response_validation_context,
        )
        self.exception_mapper = exception_mapper

    def map_error(self, message: str) -> ExceptionBase | UndefinedException:
        """Translate an error message returned by the client into a named exception."""
        if self.exception_mapper is None:
            return UndefinedException(message)
        return self.exception_mapper.message_to_exception(message)

    def block_number(self) -> int:
        """`eth_blockNumber`: Returns the number of the most recent block."""
        return int(self.post_request("blockNumber"), 16)

    def chain_id(self) -> int:
        """`eth_chainId`: Returns the chain id used for transaction signing."""
        return int(self.post_request("chainId"), 16)

    def get_block_by_number(
        self, block_number: BlockNumberType = "latest"
    ) -> BlockFeeSnapshot | None:
        """`eth_getBlockByNumber`: Returns the fee fields of a block header by number."""
        block = hex(block_number) if isinstance(block_number, int) else block_number
        response = self.post_request("getBlockByNumber", block, False)
        if response is None:
            return None
        return BlockFeeSnapshot.model_validate(response, context=self.response_validation_context)

    def get_code(self, address: Address, block_number: BlockNumberType = "latest") -> Bytes:
        """`eth_getCode`: Returns code at a given address."""
        block = hex(block_number) if isinstance(block_number, int) else block_number
        return Bytes(self.post_request("getCode", f"{address}", block))

    def get_transaction_count(
        self, address: Address, block_number: BlockNumberType = "pending"
    ) -> int:
        """`eth_getTransactionCount`: Returns the number of transactions sent from an address."""
        block = hex(block_number) if isinstance(block_number, int) else block_number
        return int(self.post_request("getTransactionCount", f"{address}", block), 16)

    def get_transaction_by_hash(self, transaction_hash: Hash) -> TransactionByHashResponse | None:
        """`eth_getTransactionByHash`: Returns transaction details."""
        response = self.post_request("getTransactionByHash", f"{transaction_hash}")
        if response is None:
            return None
        try:
            return TransactionByHashResponse.model_validate(
                response, context=self.response_validation_context
            )
        except ValidationError as e:
            logger.error("Unable to parse transaction %s: %s", transaction_hash, e.errors())
            raise e

    def get_transaction_receipt(self, transaction_hash: Hash) -> TransactionReceipt | None:
        """`eth_getTransactionReceipt`: Returns the receipt of a mined transaction."""
        response = self.post_request("getTransactionReceipt", f"{transaction_hash}")
        if response is None:
            return None
        return TransactionReceipt.model_validate(
            response, context=self.response_validation_context
        )

    def gas_price(self) -> int:
        """`eth_gasPrice`: Returns the gas price suggested by the client."""
        return int(self.post_request("gasPrice"), 16)

    def max_priority_fee_per_gas(self) -> int:
        """`eth_maxPriorityFeePerGas`: Returns the tip cap suggested by the client."""
        return int(self.post_request("maxPriorityFeePerGas"), 16)

    def call(
        self,
        to: Address,
        data: Bytes = Bytes(b""),
        *,
        sender: Address | None = None,
        block_number: BlockNumberType = "latest",
    ) -> Bytes:
        """`eth_call`: Executes a message call without creating a transaction."""
        call_object: Dict[str, str] = {"to": f"{to}", "data": f"{data}"}
        if sender is not None:
            call_object["from"] = f"{sender}"
        block = hex(block_number) if isinstance(block_number, int) else block_number
        return Bytes(self.post_request("call", call_object, block))

    def send_transaction(self, transaction: Transaction) -> Hash:
        """`eth_sendRawTransaction`: Send a signed transaction to the client."""
        try:
            result_hash = Hash(
                self.post_request("sendRawTransaction", f"{transaction.rlp().hex()}")
            )
        except JSONRPCError as e:
            raise SendTransactionExceptionError(
                e.message, tx=transaction, exception=self.map_error(e.message)
            ) from e
        if result_hash != transaction.hash:
            raise SendTransactionExceptionError(
                f"client returned hash {result_hash}, expected {transaction.hash}",
                tx=transaction,
            )
        return result_hash
