"""Shared logging utilities for consistent detection observability.

Usage example:
    from role_detection_engine.observability.logging import get_logger, log_elapsed

    logger = get_logger("role_detection_engine.detection")
    with log_elapsed(logger, "detect_roles") as elapsed:
        ...
    logger.info("Scored %s role profiles in %.1f ms", profile_count, elapsed.milliseconds)
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
_LEVEL_ENV_VAR = "ROLE_DETECTION_LOG_LEVEL"


def _resolve_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    text = (level or os.getenv(_LEVEL_ENV_VAR, "") or "INFO").strip().upper()
    resolved = logging.getLevelName(text)
    return resolved if isinstance(resolved, int) else logging.INFO


def get_logger(name: str, *, level: int | str | None = None) -> logging.Logger:
    """Return a standard logger configured for UTC timestamps.

    Args:
        name: Logger name (use a stable module-qualified name).
        level: Optional level override. Defaults to ``ROLE_DETECTION_LOG_LEVEL`` or INFO
            the first time a logger is configured.

    Returns:
        A logger with a single stream handler and a consistent UTC format.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT)
        formatter.converter = time.gmtime
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(_resolve_level(level))
        logger.propagate = False
    elif level is not None:
        logger.setLevel(_resolve_level(level))
    return logger


@dataclass
class Elapsed:
    """Mutable holder filled in when a ``log_elapsed`` block exits."""

    milliseconds: float = 0.0


@contextmanager
def log_elapsed(logger: logging.Logger, label: str) -> Iterator[Elapsed]:
    """Measure a block with a monotonic clock and log its duration at DEBUG."""
    elapsed = Elapsed()
    started = time.perf_counter()
    try:
        yield elapsed
    finally:
        elapsed.milliseconds = (time.perf_counter() - started) * 1000.0
        logger.debug("%s took %.2f ms", label, elapsed.milliseconds)
