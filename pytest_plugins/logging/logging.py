"""
Logging for the engine client and the pytest sessions that drive it.

Timestamps are always written in UTC with millisecond precision so that client-side logs can
be lined up against the execution client's own logs when a hive test fails.

This module provides both:
1. A standalone `configure_logging` usable by any script that builds an engine client.
2. A pytest plugin that configures logging and writes one log file per session/worker.
"""

import functools
import logging
import os
import sys
from datetime import datetime, timezone
from logging import LogRecord
from pathlib import Path
from typing import Any, ClassVar, Optional, Union, cast

import pytest

file_handler: Optional[logging.FileHandler] = None

VERBOSE_LEVEL = 15  # Between DEBUG (10) and INFO (20)
FAIL_LEVEL = 35  # Between WARNING (30) and ERROR (40)

logging.addLevelName(VERBOSE_LEVEL, "VERBOSE")
logging.addLevelName(FAIL_LEVEL, "FAIL")


class HiveLogger(logging.Logger):
    """Logger with the additional VERBOSE and FAIL levels."""

    def verbose(
        self,
        msg: object,
        *args: Any,
        exc_info: Union[BaseException, bool, None] = None,
        stack_info: bool = False,
        stacklevel: int = 1,
        extra: Optional[dict[str, Any]] = None,
    ) -> None:
        """
        Log a message with VERBOSE level severity (15).

        Used for JSON-RPC traffic: more detail than INFO, less noise than DEBUG.
        """
        if self.isEnabledFor(VERBOSE_LEVEL):
            self._log(VERBOSE_LEVEL, msg, args, exc_info, extra, stack_info, stacklevel)

    def fail(
        self,
        msg: object,
        *args: Any,
        exc_info: Union[BaseException, bool, None] = None,
        stack_info: bool = False,
        stacklevel: int = 1,
        extra: Optional[dict[str, Any]] = None,
    ) -> None:
        """Log a message with FAIL level severity (35), used for failed tests."""
        if self.isEnabledFor(FAIL_LEVEL):
            self._log(FAIL_LEVEL, msg, args, exc_info, extra, stack_info, stacklevel)


logging.setLoggerClass(HiveLogger)


def get_logger(name: str) -> HiveLogger:
    """Get a properly-typed logger with the custom logging levels."""
    return cast(HiveLogger, logging.getLogger(name))


logger = get_logger(__name__)


class UTCFormatter(logging.Formatter):
    """Log formatter that formats UTC timestamps with milliseconds and +00:00 suffix."""

    def formatTime(self, record, datefmt=None):  # noqa: D102,N802
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return dt.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3] + "+00:00"


class ColorFormatter(UTCFormatter):
    """Formatter that colors level names, unless running inside a hive container."""

    running_in_docker: ClassVar[bool] = Path("/.dockerenv").exists()

    COLORS = {
        logging.DEBUG: "\033[37m",
        VERBOSE_LEVEL: "\033[36m",
        logging.INFO: "\033[36m",
        logging.WARNING: "\033[33m",
        FAIL_LEVEL: "\033[35m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[41m",
    }
    RESET = "\033[0m"

    def format(self, record: LogRecord) -> str:
        """Apply the color to a copy of the record so other handlers see plain text."""
        record_copy = logging.makeLogRecord(record.__dict__)
        if not self.running_in_docker:
            color = self.COLORS.get(record_copy.levelno, self.RESET)
            record_copy.levelname = f"{color}{record_copy.levelname}{self.RESET}"
        return super().format(record_copy)


class LogLevel:
    """Help parse a log level provided on the command line or in `env.yaml`."""

    @classmethod
    def from_cli(cls, value: str | int) -> int:
        """Parse a level name ('INFO', 'verbose') or a numeric value."""
        if isinstance(value, int):
            return value
        try:
            return int(value)
        except ValueError:
            pass

        level = logging.getLevelName(value.upper())
        if isinstance(level, int):
            return level

        valid = ", ".join(logging.getLevelNamesMapping().keys())
        raise ValueError(f"Invalid log level '{value}'. Expected one of: {valid} or a number.")


def configure_logging(
    log_level: Union[int, str] = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    log_to_stdout: bool = True,
    log_format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    use_color: Optional[bool] = None,
) -> Optional[logging.FileHandler]:
    """
    Configure the root logger with the custom levels and formatters.

    Args:
        log_level: The logging level to use (name or numeric value)
        log_file: Path to the log file (if None, no file logging is set up)
        log_to_stdout: Whether to log to stdout
        log_format: The log format string
        use_color: Whether to use colors in stdout output (auto-detected if None)

    Returns:
        The file handler if log_file is provided, otherwise None

    """
    root_logger = logging.getLogger()
    root_logger.setLevel(LogLevel.from_cli(log_level))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    file_handler_instance = None
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(exist_ok=True, parents=True)
        file_handler_instance = logging.FileHandler(log_path, mode="w")
        file_handler_instance.setFormatter(UTCFormatter(fmt=log_format))
        root_logger.addHandler(file_handler_instance)

    if log_to_stdout:
        stream_handler = logging.StreamHandler(sys.stdout)
        if use_color is None:
            use_color = not ColorFormatter.running_in_docker
        formatter = ColorFormatter if use_color else UTCFormatter
        stream_handler.setFormatter(formatter(fmt=log_format))
        root_logger.addHandler(stream_handler)

    logger.verbose("Logging configured successfully.")
    return file_handler_instance


# ==============================================================================
# Pytest plugin integration
# ==============================================================================


def pytest_addoption(parser):  # noqa: D103
    logging_group = parser.getgroup(
        "logging", "Arguments related to logging from the engine client and tests."
    )
    logging_group.addoption(
        "--hive-log-level",  # --log-level is defined by pytest's built-in logging
        action="store",
        default="INFO",
        type=LogLevel.from_cli,
        dest="hive_log_level",
        help=(
            "The logging level to use in the test session: DEBUG, VERBOSE, INFO, WARNING, "
            "ERROR or CRITICAL, default - INFO. An integer in [0, 50] may be also provided."
        ),
    )


@functools.cache
def get_log_stem(argv0: str) -> str:
    """Generate the stem (prefix-timestamp) for log files, shared by all workers."""
    stem = Path(argv0).stem
    prefix = "pytest" if stem in ("", "-c", "__main__") else stem
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return f"{prefix}-{timestamp}"


@pytest.hookimpl(optionalhook=True)
def pytest_configure_node(node):
    """Share the log stem with xdist workers."""
    node.workerinput["log_stem"] = get_log_stem(sys.argv[0])


@pytest.hookimpl(tryfirst=True)
def pytest_configure(config: pytest.Config) -> None:
    """Initialize logging with a log file per xdist worker."""
    global file_handler

    log_stem = getattr(config, "workerinput", {}).get("log_stem") or get_log_stem(sys.argv[0])
    worker_id = os.getenv("PYTEST_XDIST_WORKER", "main")
    log_file_path = Path("logs") / f"{log_stem}-{worker_id}.log"
    config.option.hive_log_file_path = log_file_path

    file_handler = configure_logging(
        log_level=config.getoption("hive_log_level"),
        log_file=log_file_path,
        log_to_stdout=True,
    )


def pytest_report_header(config: pytest.Config) -> list[str]:
    """Show the log file path in the test session header."""
    if hive_log_file_path := config.option.hive_log_file_path:
        return [f"Log file: {hive_log_file_path}"]
    return []


def log_only_to_file(level: int, msg: str, *args) -> None:
    """Log a message only to the file handler, bypassing stdout."""
    if not file_handler or not logger.isEnabledFor(level):
        return
    record: LogRecord = logger.makeRecord(
        logger.name, level, fn=__file__, lno=0, msg=msg, args=args, exc_info=None
    )
    file_handler.handle(record)


def pytest_runtest_logreport(report: pytest.TestReport) -> None:
    """Log test outcome and duration to the file after the test body runs."""
    if report.when != "call":
        return
    if report.failed:
        log_only_to_file(FAIL_LEVEL, f"FAILED in {report.duration:.2f}s: {report.nodeid}")
    elif report.skipped:
        log_only_to_file(logging.INFO, f"SKIPPED: {report.nodeid}")
    else:
        log_only_to_file(logging.INFO, f"PASSED in {report.duration:.2f}s: {report.nodeid}")
