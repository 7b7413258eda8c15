"""Standardized logging system.

Provides three output modes:
- Human mode: [LEVEL] message (colored if TTY)
- Verbose mode: [LEVEL][HH:MM:SS] logger: message
- CI/JSON mode: {"level":"...","ts":"...","logger":"...","msg":"..."}

Log output goes to stderr so that reports written to stdout stay parseable.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TextIO

ROOT_LOGGER = "sprint0"


class LogMode(Enum):
    """Logging output mode."""

    HUMAN = "human"
    VERBOSE = "verbose"
    JSON = "json"


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    RED = "\033[31m"
    GRAY = "\033[90m"


LEVEL_COLORS = {
    logging.DEBUG: Colors.GRAY,
    logging.INFO: Colors.GREEN,
    logging.WARNING: Colors.YELLOW,
    logging.ERROR: Colors.RED,
    logging.CRITICAL: Colors.RED,
}


def _is_tty(stream: TextIO | None = None) -> bool:
    """Check if the stream is a TTY (supports colors)."""
    if stream is None:
        stream = sys.stderr
    return hasattr(stream, "isatty") and stream.isatty()


class HumanFormatter(logging.Formatter):
    """Formatter for human-readable output: [LEVEL] message."""

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record."""
        label = f"[{record.levelname}]"
        if self.use_colors:
            color = LEVEL_COLORS.get(record.levelno, Colors.RESET)
            label = f"{color}{label}{Colors.RESET}"
        return f"{label} {record.getMessage()}"


class VerboseFormatter(logging.Formatter):
    """Formatter for verbose output with timestamps and logger names.

    Format: [LEVEL][HH:MM:SS] sprint0.analyzers.impact: message
    """

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record with timestamp."""
        label = f"[{record.levelname}]"
        if self.use_colors:
            color = LEVEL_COLORS.get(record.levelno, Colors.RESET)
            label = f"{color}{label}{Colors.RESET}"
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        message = f"{label}[{timestamp}] {record.name}: {record.getMessage()}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


class JSONFormatter(logging.Formatter):
    """Formatter for JSON lines output (machine-readable)."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON."""
        log_entry: dict[str, Any] = {
            "level": record.levelname,
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "logger": record.name,
            "msg": record.getMessage(),
        }

        if hasattr(record, "extra_data"):
            log_entry.update(record.extra_data)

        return json.dumps(log_entry, default=str)


class Sprint0Logger(logging.Logger):
    """Custom logger with structured logging support."""

    def structured(
        self,
        level: int,
        msg: str,
        **kwargs: Any,
    ) -> None:
        """Log a message with additional structured data.

        Args:
            level: Log level
            msg: Log message
            **kwargs: Additional data to include in JSON output
        """
        if not self.isEnabledFor(level):
            return
        record = self.makeRecord(self.name, level, "(unknown)", 0, msg, (), None)
        if kwargs:
            record.extra_data = kwargs  # type: ignore
        self.handle(record)


logging.setLoggerClass(Sprint0Logger)


def get_logger(name: str = ROOT_LOGGER) -> Sprint0Logger:
    """Get a Sprint0 logger instance.

    Args:
        name: Logger name

    Returns:
        Sprint0Logger instance
    """
    return logging.getLogger(name)  # type: ignore


def setup_logging(
    mode: LogMode = LogMode.HUMAN,
    level: int = logging.INFO,
    stream: TextIO | None = None,
) -> None:
    """Configure the package logger with the specified mode.

    Args:
        mode: Output mode (human, verbose, json)
        level: Minimum log level
        stream: Output stream (default: stderr)
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()

    output = stream or sys.stderr
    use_colors = _is_tty(output)

    if mode == LogMode.JSON:
        formatter: logging.Formatter = JSONFormatter()
    elif mode == LogMode.VERBOSE:
        formatter = VerboseFormatter(use_colors=use_colors)
    else:
        formatter = HumanFormatter(use_colors=use_colors)

    handler = logging.StreamHandler(output)
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def configure_from_cli(
    verbose: bool = False,
    quiet: bool = False,
    ci: bool = False,
) -> None:
    """Configure logging based on CLI flags.

    Args:
        verbose: Enable verbose mode with timestamps
        quiet: Suppress info messages (warnings and errors only)
        ci: Enable JSON output for CI/CD
    """
    if ci:
        mode = LogMode.JSON
    elif verbose:
        mode = LogMode.VERBOSE
    else:
        mode = LogMode.HUMAN

    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    setup_logging(mode=mode, level=level)
