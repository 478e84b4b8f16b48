"""Logging utilities for repoatlas commands."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "repoatlas"
_CONSOLE_FORMAT = "[repoatlas] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the repoatlas hierarchy (``repoatlas.<name>``)."""
    if not name:
        return logging.getLogger(_LOGGER_NAME)
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route repoatlas logs to stderr and, when ``log_file`` is given, to that file too.

    Scan progress and recovered failures (missing git, unreadable files) are
    DEBUG records, so ``verbose`` is what surfaces them.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # The CLI may run several times in one process (tests); replace, never stack.
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    logger.addHandler(_handler(logging.StreamHandler(), level, _CONSOLE_FORMAT))
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(
            _handler(logging.FileHandler(log_file, encoding="utf-8"), level, _FILE_FORMAT)
        )
    return logger


__all__ = ["configure_logging", "get_logger"]
