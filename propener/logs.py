"""
Logging bootstrap for Propener.

Run output goes to the console and is appended to logs/stdout.log, with
error lines tagged "[ERROR]" in the file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
from loguru import logger


CONSOLE_FORMAT = "{message}"


def _console_sink(message: Any) -> None:
    # click.echo resolves stdout/stderr at call time (works under CliRunner)
    click.echo(message, nl=False, err=message.record["level"].no >= logger.level("ERROR").no)


def _file_format(record: dict[str, Any]) -> str:
    if record["level"].no >= logger.level("ERROR").no:
        return "[ERROR] {message}\n"
    return "{message}\n"


def setup_logging(log_file: Path | None = None, verbose: bool = False) -> None:
    """Configure loguru sinks for console and the append-only log file."""
    # Remove default loguru handler
    logger.remove()

    logger.add(_console_sink, level="DEBUG" if verbose else "INFO", format=CONSOLE_FORMAT, colorize=False)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(str(log_file), level="INFO", format=_file_format, encoding="utf-8", colorize=False)
