"""Logging utilities for nxquery commands."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "nxquery"
_CONSOLE_FORMAT = "[nxquery] %(levelname)s %(message)s"
_VERBOSE_CONSOLE_FORMAT = "[nxquery] %(levelname)s %(name)s: %(message)s"
# Passes run on the scheduler worker thread.
_FILE_FORMAT = "%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a component logger such as ``nxquery.extractor``."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route nxquery records to stderr and, when configured, to ``log_file``.

    Safe to call repeatedly: handlers from an earlier call are closed first,
    so ``watch`` restarts and tests never duplicate output or leak files.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_VERBOSE_CONSOLE_FORMAT if verbose else _CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        # The configured log folder may not exist yet.
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(level)
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(sink)

    return logger


__all__ = ["configure_logging", "get_logger"]
