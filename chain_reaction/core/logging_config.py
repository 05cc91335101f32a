"""Unified logging configuration.

Library modules only ever call ``logging.getLogger(__name__)``; entry
points (the CLI, an embedding application, tests) call ``setup_logging``
once to attach handlers and pick a format.

Usage:
    from chain_reaction.core.logging_config import setup_logging, LogContext

    logger = setup_logging("chain_reaction", level="DEBUG", format_style="compact")
    with LogContext(logger, logging.WARNING):
        ...
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

__all__ = [
    "COMPACT_FORMAT",
    "DEFAULT_FORMAT",
    "DETAILED_FORMAT",
    "STRUCTURED_FORMAT",
    "LogContext",
    "configure_third_party_loggers",
    "get_logger",
    "level_from_env",
    "setup_logging",
]

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
COMPACT_FORMAT = "%(levelname)s %(name)s: %(message)s"
DETAILED_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "%(filename)s:%(lineno)d - %(message)s"
)
STRUCTURED_FORMAT = (
    '{"time": "%(asctime)s", "logger": "%(name)s", '
    '"level": "%(levelname)s", "message": "%(message)s"}'
)

_FORMATS = {
    "default": DEFAULT_FORMAT,
    "compact": COMPACT_FORMAT,
    "detailed": DETAILED_FORMAT,
    "structured": STRUCTURED_FORMAT,
}

NOISY_PACKAGES = ("urllib3", "asyncio", "hypothesis", "prometheus_client")

LOG_LEVEL_ENV = "CHAIN_REACTION_LOG_LEVEL"


def level_from_env(default: int | str = logging.INFO) -> int | str:
    """Log level from ``CHAIN_REACTION_LOG_LEVEL``, else ``default``."""
    value = os.environ.get(LOG_LEVEL_ENV)
    return value.upper() if value else default


def setup_logging(
    name: str,
    level: int | str = logging.INFO,
    log_file: str | Path | None = None,
    log_dir: str | Path | None = None,
    console: bool = True,
    format_style: str = "default",
    propagate: bool = False,
) -> logging.Logger:
    """Configure and return the logger called ``name``.

    Safe to call repeatedly: handlers of the same kind and target are only
    attached once.
    """
    logger = logging.getLogger(name)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)
    logger.propagate = propagate

    formatter = logging.Formatter(_FORMATS.get(format_style, DEFAULT_FORMAT))

    if console and not any(
        type(h) is logging.StreamHandler for h in logger.handlers
    ):
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if log_file is None and log_dir is not None:
        log_file = Path(log_dir) / f"{name.replace('.', '_')}.log"
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        target = str(path.resolve())
        if not any(
            isinstance(h, logging.FileHandler) and h.baseFilename == target
            for h in logger.handlers
        ):
            file_handler = logging.FileHandler(target)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def configure_third_party_loggers(
    quiet: bool = True, verbose_packages: Iterable[str] | None = None
) -> None:
    """Raise noisy third-party loggers to WARNING unless listed as verbose."""
    if not quiet:
        return
    keep = set(verbose_packages or ())
    for package in NOISY_PACKAGES:
        if package not in keep:
            logging.getLogger(package).setLevel(logging.WARNING)


class LogContext:
    """Temporarily change a logger's level inside a ``with`` block."""

    def __init__(self, logger: logging.Logger, level: int):
        self.logger = logger
        self.level = level
        self._previous: int | None = None

    def __enter__(self) -> logging.Logger:
        self._previous = self.logger.level
        self.logger.setLevel(self.level)
        return self.logger

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._previous is not None:
            self.logger.setLevel(self._previous)
