"""Logging with custom levels and UTC timestamps."""

from .logging import (
    FAIL_LEVEL,
    VERBOSE_LEVEL,
    ColorFormatter,
    ForkCheckLogger,
    LogLevel,
    UTCFormatter,
    configure_logging,
    get_logger,
)

__all__ = [
    "FAIL_LEVEL",
    "VERBOSE_LEVEL",
    "ColorFormatter",
    "ForkCheckLogger",
    "LogLevel",
    "UTCFormatter",
    "configure_logging",
    "get_logger",
]
