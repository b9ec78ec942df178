"""Logging configuration shared by the engine client and its pytest sessions."""

from .logging import (
    FAIL_LEVEL,
    VERBOSE_LEVEL,
    ColorFormatter,
    HiveLogger,
    LogLevel,
    UTCFormatter,
    configure_logging,
    get_logger,
)

__all__ = [
    "FAIL_LEVEL",
    "VERBOSE_LEVEL",
    "ColorFormatter",
    "HiveLogger",
    "LogLevel",
    "UTCFormatter",
    "configure_logging",
    "get_logger",
]
