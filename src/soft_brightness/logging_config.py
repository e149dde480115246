"""Logging setup for the daemon and the command line client."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

PACKAGE_LOGGER = "soft_brightness"


def setup_logging(verbose: bool = False, log_file: str | None = None) -> logging.Logger:
    """Configure the root logger with a console handler and an optional file handler.

    Returns the package logger, whose level the ``debug`` setting toggles at
    runtime through :func:`set_debug`.
    """

    if verbose:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"
        )

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        try:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, encoding="utf-8")
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
        except OSError as e:
            root.warning("Failed to create log file %s: %s", log_file, e)

    return set_debug(verbose)


def set_debug(enabled: bool) -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG if enabled else logging.INFO)
    return logger
