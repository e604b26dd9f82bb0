"""Observability helpers."""

from .logging import Elapsed, get_logger, log_elapsed

__all__ = ["Elapsed", "get_logger", "log_elapsed"]
