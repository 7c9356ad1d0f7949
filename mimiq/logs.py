"""Logging setup: console output plus one log file per invocation."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import TextIO

from .models import CommandOutcome

LOGGER_NAME = "mimiq"
LOG_FILE_EXTENSION = "log"
LOG_FILE_TIMESTAMP = "%Y%m%d%H%M%S"
FILE_LOG_FORMAT = "[%(asctime)s] %(message)s"
FILE_DATE_FORMAT = "%H:%M:%S"


def get_logger() -> logging.Logger:
    """Return the application logger."""
    return logging.getLogger(LOGGER_NAME)


def configure_logging(verbose: bool = False, stream: TextIO | None = None) -> logging.Logger:
    """Attach a console handler to the application logger.

    Quiet mode shows INFO and above; verbose mode also shows DEBUG.
    Any previously attached handlers are closed and removed.

    Args:
        verbose: Show debug messages on the console.
        stream: Console stream (default: current sys.stdout).

    Returns:
        The configured logger.
    """
    logger = get_logger()
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream if stream is not None else sys.stdout)
    console.setLevel(logging.DEBUG if verbose else logging.INFO)
    console.setFormatter(logging.Formatter("%(message)s"))

    logger.addHandler(console)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return logger


def log_file_path(log_dir: Path, now: datetime | None = None) -> Path:
    """Timestamp-named log file inside ``log_dir``."""
    stamp = (now or datetime.now()).strftime(LOG_FILE_TIMESTAMP)
    return log_dir / f"{stamp}.{LOG_FILE_EXTENSION}"


@contextmanager
def log_file(logger: logging.Logger, log_dir: Path) -> Iterator[Path]:
    """Mirror every record of ``logger`` into an append-only file.

    Yields:
        Path of the log file.
    """
    path = log_file_path(log_dir)
    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt=FILE_DATE_FORMAT))
    logger.addHandler(handler)
    try:
        yield path
    finally:
        logger.removeHandler(handler)
        handler.close()


def log_multiline(logger: logging.Logger, text: str | None, level: int = logging.DEBUG) -> None:
    """Log each non-empty line of ``text`` as its own record."""
    if not text:
        return
    for line in text.splitlines():
        if line.strip():
            logger.log(level, line)


def log_command_output(logger: logging.Logger, outcome: CommandOutcome) -> None:
    """Write captured stdout and stderr of a command to the debug log."""
    logger.debug("command finished with status %d", outcome.exit_code)
    if outcome.stdout is None and outcome.stderr is None:
        logger.debug("no output")
        return
    log_multiline(logger, outcome.stdout)
    log_multiline(logger, outcome.stderr)
