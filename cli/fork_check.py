"""
CLI entry point for checking a node across a fee-market fork.

The check sends transactions before and after the fork block of a running devnet and
verifies that the node switches rules exactly at the fork.
"""

import sys
from pathlib import Path
from typing import Any, Dict, Tuple

import click
import requests

from config import ForkCheckConfig
from fork_checks import SUITES, ForkCheckContext, collect_cases
from fork_test_exceptions import GethExceptionMapper
from fork_test_execution import ChainPoller, PhaseScheduler, RunResult, TransactionBuilder
from fork_test_logging import LogLevel, configure_logging, get_logger
from fork_test_rpc import EthRPC, JSONRPCError

logger = get_logger(__name__)


class ChainIdMismatchError(Exception):
    """The node reports a different chain id than the one transactions are signed for."""

    expected: int
    reported: int

    def __init__(self, expected: int, reported: int):
        """Initialize the error with both chain ids."""
        super().__init__(expected, reported)
        self.expected = expected
        self.reported = reported

    def __str__(self) -> str:
        """Return string representation of the error."""
        return (
            f"node reports chain id {self.reported}, expected {self.expected}; "
            "use --chain-id or --skip-chain-id-check"
        )


def parse_log_level(ctx: click.Context, param: click.Parameter, value: str) -> int:
    """Parse the `--log-level` option."""
    try:
        return LogLevel.from_cli(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def load_config(config_path: Path | None, overrides: Dict[str, Any]) -> ForkCheckConfig:
    """Load the configuration file, if any, and apply the command-line overrides."""
    config = ForkCheckConfig.from_yaml(config_path) if config_path else ForkCheckConfig()
    data = config.model_dump(mode="json")
    for section, values in overrides.items():
        if isinstance(values, dict):
            data[section].update({key: value for key, value in values.items() if value is not None})
        elif values is not None:
            data[section] = values
    return ForkCheckConfig.model_validate(data)


def check_chain_id(client: EthRPC, expected: int) -> None:
    """Compare the chain id reported by the node with the configured one."""
    reported = client.chain_id()
    if reported != expected:
        raise ChainIdMismatchError(expected, reported)
    logger.info("Node chain id %d matches", reported)


def run_checks(config: ForkCheckConfig, client: EthRPC) -> RunResult:
    """Assemble the checks selected by `config` and run both phases."""
    poller = ChainPoller(
        client,
        block_poll_interval=config.polling.block_interval,
        receipt_poll_interval=config.polling.receipt_interval,
        receipt_timeout=config.polling.receipt_timeout,
    )
    builder = TransactionBuilder(
        client,
        config.accounts.sender,
        config.chain.chain_id,
        transfer_value=config.transfer.value,
        transfer_gas_limit=config.transfer.gas_limit,
    )
    context = ForkCheckContext.create(client, poller, builder, config.accounts.receiver)
    pre_fork_cases, post_fork_cases = collect_cases(context, config.suites)
    logger.info(
        "Running %d pre-fork and %d post-fork cases from suites %s",
        len(pre_fork_cases),
        len(post_fork_cases),
        ", ".join(config.suites),
    )
    scheduler = PhaseScheduler(
        poller,
        pre_fork_block=config.chain.pre_fork_block,
        post_fork_block=config.chain.post_fork_block,
        pre_fork_cases=pre_fork_cases,
        post_fork_cases=post_fork_cases,
    )
    return scheduler.run()


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML configuration file; command-line options override its values.",
)
@click.option("--rpc-endpoint", default=None, help="JSON-RPC URL of the node under test.")
@click.option("--chain-id", type=int, default=None, help="Chain id used to sign transactions.")
@click.option(
    "--pre-fork-block", type=int, default=None, help="Block that starts the pre-fork checks."
)
@click.option(
    "--post-fork-block", type=int, default=None, help="Fork block; starts the post-fork checks."
)
@click.option(
    "--suite",
    "suites",
    multiple=True,
    type=click.Choice(list(SUITES)),
    help="Run only this suite; repeat to select several. Defaults to all suites.",
)
@click.option(
    "--skip-chain-id-check",
    is_flag=True,
    help="Do not compare the node's chain id with the configured one.",
)
@click.option(
    "--log-level",
    default="INFO",
    show_default=True,
    callback=parse_log_level,
    help="Logging level: a level name (including VERBOSE and FAIL) or a number.",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write the log to this file.",
)
def fork_check(
    config_path: Path | None,
    rpc_endpoint: str | None,
    chain_id: int | None,
    pre_fork_block: int | None,
    post_fork_block: int | None,
    suites: Tuple[str, ...],
    skip_chain_id_check: bool,
    log_level: int,
    log_file: Path | None,
) -> None:
    """
    Check that a node applies the pre-fork fee-market rules before the fork block and
    the post-fork rules from it on.
    """
    configure_logging(log_level=log_level, log_file=log_file)
    try:
        config = load_config(
            config_path,
            {
                "rpc": {"url": rpc_endpoint},
                "chain": {
                    "chain_id": chain_id,
                    "pre_fork_block": pre_fork_block,
                    "post_fork_block": post_fork_block,
                },
                "suites": list(suites) or None,
            },
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    client = EthRPC(
        str(config.rpc.url),
        config.rpc.headers,
        exception_mapper=GethExceptionMapper(),
        request_timeout=config.rpc.request_timeout,
    )
    if not skip_chain_id_check:
        try:
            check_chain_id(client, config.chain.chain_id)
        except (ChainIdMismatchError, JSONRPCError, requests.RequestException) as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    result = run_checks(config, client)
    if not result.passed:
        for failure in result.failures:
            click.echo(failure.describe(), err=True)
        sys.exit(1)
    click.echo("ALL TESTS PASSED!")


if __name__ == "__main__":
    fork_check()
