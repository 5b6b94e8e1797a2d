"""
A module for managing the configuration of a fork check run.

The configuration is read from a YAML file and validated with Pydantic. Every field has
a default that targets a local devnet forking at block 12, so an empty file is valid.

Classes:
- RPCConfig: Endpoint of the node under test.
- ChainConfig: Chain id and the heights gating each phase.
- AccountsConfig: Private keys of the funded sender and the receiver.
- PollingConfig: Poll intervals and receipt timeout.
- TransferConfig: Value and gas limit of the transfers.
- ForkCheckConfig: The overall configuration.
"""

from pathlib import Path
from typing import Dict, List

import yaml
from pydantic import BaseModel, Field, HttpUrl, ValidationError, field_validator, model_validator

from fork_checks import SUITES
from fork_test_base_types import Hash, Wei
from fork_test_types import EOA


class RPCConfig(BaseModel):
    """
    Represents the JSON-RPC endpoint of the node under test.

    Attributes:
    - url (HttpUrl): The URL of the endpoint.
    - headers (Dict[str, str]): Extra HTTP headers sent with every request.
    - request_timeout (float): Seconds before a single request is abandoned.

    """

    url: HttpUrl = HttpUrl("http://localhost:8545")
    headers: Dict[str, str] = {}
    request_timeout: float = Field(30, gt=0)


class ChainConfig(BaseModel):
    """
    Represents the chain parameters.

    The pre-fork phase starts once the chain reaches `pre_fork_block` and must send all
    of its transactions before `post_fork_block`, where the fork activates.
    """

    chain_id: int = Field(1337, ge=1)
    pre_fork_block: int = Field(2, ge=0)
    post_fork_block: int = Field(12, ge=1)

    @model_validator(mode="after")
    def check_fork_window(self) -> "ChainConfig":
        """The pre-fork height must come strictly before the post-fork height."""
        if self.pre_fork_block >= self.post_fork_block:
            raise ValueError(
                f"pre_fork_block ({self.pre_fork_block}) must be lower than "
                f"post_fork_block ({self.post_fork_block})"
            )
        return self


class AccountsConfig(BaseModel):
    """Private keys of the accounts used by the checks; the sender must be funded."""

    sender_key: Hash = Hash("0x9b28f36fbd67381120752d6172ecdcf10e06ab2d9a1367aac00cdcd6ac7855d3")
    receiver_key: Hash = Hash("0xddcd272732bfe889da92201da3527cb0faa4f3be06f5baa9e9269b700dfa2c2c")

    @property
    def sender(self) -> EOA:
        """Return the sending account."""
        return EOA(key=self.sender_key)

    @property
    def receiver(self) -> EOA:
        """Return the receiving account."""
        return EOA(key=self.receiver_key)


class PollingConfig(BaseModel):
    """Seconds between block height polls and receipt polls, and the receipt timeout."""

    block_interval: float = Field(3, gt=0)
    receipt_interval: float = Field(5, gt=0)
    receipt_timeout: float = Field(60, gt=0)


class TransferConfig(BaseModel):
    """
    Value and gas limit of the transfers sent by the fee-market checks.

    The value accepts units, e.g. `1 ether` or `10**9 gwei`.
    """

    value: Wei = Wei(10**18)
    gas_limit: int = Field(21_000, ge=21_000)

    @field_validator("value")
    @classmethod
    def check_value(cls, value: Wei) -> Wei:
        """Transfers cannot carry a negative value."""
        if value < 0:
            raise ValueError(f"transfer value must not be negative, got {value}")
        return value


class ForkCheckConfig(BaseModel):
    """
    Represents the overall configuration of a fork check run.

    Sections missing from the file keep their defaults.
    """

    rpc: RPCConfig = RPCConfig()
    chain: ChainConfig = ChainConfig()
    accounts: AccountsConfig = AccountsConfig()
    polling: PollingConfig = PollingConfig()
    transfer: TransferConfig = TransferConfig()
    suites: List[str] = Field(default_factory=lambda: list(SUITES))

    @field_validator("suites")
    @classmethod
    def check_suites(cls, suites: List[str]) -> List[str]:
        """Only known suites can be selected, each at most once."""
        unknown = [suite for suite in suites if suite not in SUITES]
        if unknown:
            raise ValueError(f"unknown suites {unknown}, expected any of {list(SUITES)}")
        if len(set(suites)) != len(suites):
            raise ValueError(f"suites listed more than once: {suites}")
        return suites

    @classmethod
    def from_yaml(cls, path: Path) -> "ForkCheckConfig":
        """Load and validate the configuration stored at `path`."""
        if not path.exists():
            raise FileNotFoundError(f"The configuration file '{path}' does not exist.")

        with path.open("r") as file:
            config_data = yaml.safe_load(file) or {}
        if not isinstance(config_data, dict):
            raise ValueError(f"Invalid configuration: expected a mapping in '{path}'")
        try:
            return cls(**config_data)
        except ValidationError as e:
            raise ValueError(f"Invalid configuration: {e}") from e
