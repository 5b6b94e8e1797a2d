"""Tests for loading the fork check configuration from YAML."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from fork_test_base_types import Hash
from fork_test_types import EOA

from ..fork_check import ChainConfig, ForkCheckConfig

SENDER = EOA(key=0x9B28F36FBD67381120752D6172ECDCF10E06AB2D9A1367AAC00CDCD6AC7855D3)


def write(tmp_path: Path, content: str) -> Path:
    """Write `content` to a config file and return its path."""
    path = tmp_path / "fork_check.yaml"
    path.write_text(content)
    return path


def test_defaults():
    """Without a file the configuration targets the local devnet."""
    config = ForkCheckConfig()
    assert str(config.rpc.url).startswith("http://localhost:8545")
    assert config.chain.chain_id == 1337
    assert config.chain.pre_fork_block == 2
    assert config.chain.post_fork_block == 12
    assert config.polling.block_interval == 3
    assert config.polling.receipt_interval == 5
    assert config.polling.receipt_timeout == 60
    assert config.transfer.value == 10**18
    assert config.transfer.gas_limit == 21_000
    assert config.suites == ["eip1559", "eip2930", "eip3198", "eip3541"]
    assert config.accounts.sender == SENDER
    assert config.accounts.sender.key is not None


def test_empty_file(tmp_path: Path):
    """An empty file keeps every default."""
    assert ForkCheckConfig.from_yaml(write(tmp_path, "")) == ForkCheckConfig()


def test_partial_file(tmp_path: Path):
    """Sections given in the file override only their own fields."""
    config = ForkCheckConfig.from_yaml(
        write(
            tmp_path,
            """
rpc:
  url: http://node:8545
  headers:
    Authorization: Bearer token
chain:
  chain_id: 7
  post_fork_block: 40
accounts:
  receiver_key: "0x0000000000000000000000000000000000000000000000000000000000000001"
suites: [eip3541]
""",
        )
    )
    assert str(config.rpc.url).startswith("http://node:8545")
    assert config.rpc.headers == {"Authorization": "Bearer token"}
    assert config.chain == ChainConfig(chain_id=7, pre_fork_block=2, post_fork_block=40)
    assert config.accounts.sender == SENDER
    assert config.accounts.receiver_key == Hash(1)
    assert config.suites == ["eip3541"]


def test_transfer_value_with_unit(tmp_path: Path):
    """The transfer value can be written with a unit."""
    config = ForkCheckConfig.from_yaml(write(tmp_path, "transfer:\n  value: 2 gwei\n"))
    assert config.transfer.value == 2 * 10**9


def test_unquoted_hex_key(tmp_path: Path):
    """YAML reads unquoted hex keys as integers."""
    config = ForkCheckConfig.from_yaml(
        write(
            tmp_path,
            "accounts:\n"
            "  sender_key: 0x9b28f36fbd67381120752d6172ecdcf10e06ab2d9a1367aac00cdcd6ac7855d3\n",
        )
    )
    assert config.accounts.sender == SENDER


@pytest.mark.parametrize(
    "pre_fork_block,post_fork_block",
    [(12, 12), (13, 12)],
)
def test_fork_window_must_be_open(pre_fork_block: int, post_fork_block: int):
    """The pre-fork height must be lower than the post-fork height."""
    with pytest.raises(ValidationError, match="must be lower than"):
        ChainConfig(pre_fork_block=pre_fork_block, post_fork_block=post_fork_block)


@pytest.mark.parametrize(
    "content,match",
    [
        ("chain:\n  pre_fork_block: 20\n", "must be lower than"),
        ("suites: [eip4844]\n", "unknown suites"),
        ("suites: [eip1559, eip1559]\n", "more than once"),
        ("polling:\n  receipt_timeout: 0\n", "receipt_timeout"),
        ("- just\n- a list\n", "expected a mapping"),
    ],
)
def test_invalid_content(tmp_path: Path, content: str, match: str):
    """Invalid files raise `ValueError` with the detail."""
    with pytest.raises(ValueError, match=match):
        ForkCheckConfig.from_yaml(write(tmp_path, content))


def test_missing_file(tmp_path: Path):
    """A missing file is reported as such."""
    with pytest.raises(FileNotFoundError):
        ForkCheckConfig.from_yaml(tmp_path / "missing.yaml")
