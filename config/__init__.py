"""
Initializes the config package.

The config package loads and validates the settings of a fork check run.
"""

# This import is done to facilitate cleaner imports in the project
# `from config import ForkCheckConfig` instead of `from config.fork_check import ForkCheckConfig`
from .fork_check import (
    AccountsConfig,
    ChainConfig,
    ForkCheckConfig,
    PollingConfig,
    RPCConfig,
    TransferConfig,
)

__all__ = [
    "AccountsConfig",
    "ChainConfig",
    "ForkCheckConfig",
    "PollingConfig",
    "RPCConfig",
    "TransferConfig",
]
