"""Logging setup shared by the CLI, the pipeline workers and the service."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "repodigest"

CONSOLE_FORMAT = "[repodigest] %(levelname)s %(message)s"
# Extraction and resolution run on pooled threads named repodigest-<stage>_<n>.
VERBOSE_CONSOLE_FORMAT = "[repodigest] %(levelname)s %(threadName)s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the ``repodigest`` hierarchy (``repodigest.<name>``)."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def _attach(logger: logging.Logger, handler: logging.Handler, level: int, fmt: str) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install console and optional file handlers on the ``repodigest`` logger.

    Verbose mode lowers the level to DEBUG and adds the worker thread and
    logger name to console lines. The file sink always records the thread.
    Calling this again replaces the previously installed handlers.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    _attach(
        logger,
        logging.StreamHandler(),
        level,
        VERBOSE_CONSOLE_FORMAT if verbose else CONSOLE_FORMAT,
    )
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _attach(logger, logging.FileHandler(log_file, encoding="utf-8"), level, FILE_FORMAT)

    return logger


__all__ = [
    "CONSOLE_FORMAT",
    "FILE_FORMAT",
    "VERBOSE_CONSOLE_FORMAT",
    "configure_logging",
    "get_logger",
]
