"""Tests for the `fork_check` click CLI."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest
import requests
from click.testing import CliRunner

from fork_test_execution import Phase, PhaseResult, PhaseState, RunResult
from fork_test_execution.tests.fake_chain import FakeChain
from fork_test_rpc import JSONRPCError

from ..fork_check import ChainIdMismatchError, check_chain_id, fork_check, load_config


@pytest.fixture
def runner():
    """Provides a Click CliRunner for invoking command-line interfaces."""
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_root_handlers():
    """Undo the logging configuration done by the command."""
    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers.copy()
    original_level = root_logger.level
    yield
    for handler in root_logger.handlers:
        if handler not in original_handlers:
            handler.close()
    root_logger.handlers = original_handlers
    root_logger.setLevel(original_level)


def passed_run() -> RunResult:
    """Return the result of a run where every case passed."""
    return RunResult(
        pre_fork=PhaseResult(Phase.PRE_FORK, PhaseState.PASSED, ["a"]),
        post_fork=PhaseResult(Phase.POST_FORK, PhaseState.PASSED, ["b"]),
    )


def test_fork_check_help(runner):
    """
    Test the `--help` option of the `fork_check` command.
    """
    result = runner.invoke(fork_check, ["--help"])
    assert result.exit_code == 0
    assert "--rpc-endpoint" in result.output
    assert "--skip-chain-id-check" in result.output


def test_all_tests_passed(runner):
    """
    The command prints the success line and exits with 0 when both phases pass.
    """
    chain = FakeChain(chain_id=1337)
    with (
        patch("cli.fork_check.EthRPC", return_value=chain) as eth_rpc,
        patch("cli.fork_check.PhaseScheduler") as scheduler,
    ):
        scheduler.return_value.run.return_value = passed_run()
        result = runner.invoke(
            fork_check,
            ["--rpc-endpoint", "http://node:8545", "--suite", "eip1559", "--log-level", "warning"],
        )
    assert result.exit_code == 0, result.output
    assert "ALL TESTS PASSED!" in result.output
    assert str(eth_rpc.call_args.args[0]).startswith("http://node:8545")
    kwargs = scheduler.call_args.kwargs
    assert kwargs["pre_fork_block"] == 2
    assert kwargs["post_fork_block"] == 12
    assert kwargs["pre_fork_cases"].names[0] == "eip1559_legacy_tx_pre_fork"
    assert all(name.startswith("eip1559") for name in kwargs["post_fork_cases"].names)


def test_fork_window_closed(runner):
    """
    A chain already past the fork fails the pre-fork phase while the post-fork phase
    still runs.
    """
    chain = FakeChain(chain_id=1337, fork_block=12, height=20)
    with patch("cli.fork_check.EthRPC", return_value=chain):
        result = runner.invoke(
            fork_check, ["--suite", "eip1559", "--suite", "eip2930", "--log-level", "warning"]
        )
    assert result.exit_code == 1
    assert "pre-fork: FAILED before running any case" in result.output
    assert "current block 20" in result.output
    assert "post-fork" not in result.output
    assert "ALL TESTS PASSED!" not in result.output


def test_post_fork_failure_names_the_case(runner):
    """
    A chain that never forks fails the first post-fork case that observes it.
    """
    chain = FakeChain(chain_id=1337, fork_block=10**9, height=20)
    with patch("cli.fork_check.EthRPC", return_value=chain):
        result = runner.invoke(
            fork_check,
            ["--suite", "eip1559", "--post-fork-block", "15", "--log-level", "warning"],
        )
    assert result.exit_code == 1
    assert "post-fork: eip1559_legacy_tx_post_fork FAILED: base_fee" in result.output


def test_chain_id_mismatch(runner):
    """
    The command stops before sending anything when the node reports another chain id.
    """
    chain = FakeChain(chain_id=1)
    with patch("cli.fork_check.EthRPC", return_value=chain):
        result = runner.invoke(fork_check, ["--log-level", "warning"])
    assert result.exit_code == 1
    assert "node reports chain id 1, expected 1337" in result.output
    assert chain.sent == []


@pytest.mark.parametrize(
    "error, message",
    [
        (requests.ConnectionError("connection refused"), "connection refused"),
        (JSONRPCError(-32601, "method not found"), "method not found"),
    ],
)
def test_unreachable_endpoint(runner, error: Exception, message: str):
    """
    A node that cannot answer the chain id query ends the command with an error line.
    """
    chain = FakeChain(chain_id=1337)
    with (
        patch("cli.fork_check.EthRPC", return_value=chain),
        patch.object(chain, "chain_id", side_effect=error),
    ):
        result = runner.invoke(fork_check, ["--log-level", "warning"])
    assert result.exit_code == 1
    assert "Error: " in result.output
    assert message in result.output
    assert not isinstance(result.exception, type(error))
    assert chain.sent == []


def test_invalid_fork_window_option(runner):
    """
    Command-line heights are validated like the configuration file.
    """
    result = runner.invoke(fork_check, ["--pre-fork-block", "20"])
    assert result.exit_code == 1
    assert "must be lower than" in result.output


def test_invalid_log_level(runner):
    """
    Test invoking `fork_check` with an unknown log level.
    """
    result = runner.invoke(fork_check, ["--log-level", "chatty"])
    assert result.exit_code == 2
    assert "Invalid log level 'chatty'" in result.output


def test_load_config_overrides(tmp_path: Path):
    """Options given on the command line replace the file values."""
    path = tmp_path / "fork_check.yaml"
    path.write_text("chain:\n  chain_id: 7\n  post_fork_block: 30\nsuites: [eip3198]\n")
    config = load_config(
        path,
        {
            "rpc": {"url": None},
            "chain": {"chain_id": None, "pre_fork_block": 5, "post_fork_block": None},
            "suites": ["eip3541"],
        },
    )
    assert config.chain.chain_id == 7
    assert config.chain.pre_fork_block == 5
    assert config.chain.post_fork_block == 30
    assert config.suites == ["eip3541"]


def test_check_chain_id():
    """The chain id check passes on a match and raises on a mismatch."""
    check_chain_id(FakeChain(chain_id=1337), 1337)  # type: ignore[arg-type]
    with pytest.raises(ChainIdMismatchError) as e:
        check_chain_id(FakeChain(chain_id=5), 1337)  # type: ignore[arg-type]
    assert e.value.reported == 5
