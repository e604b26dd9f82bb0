"""Resilience utilities for catalog fetches.

Usage example:
    from role_detection_engine.infrastructure.resilience import CircuitBreaker, RetryPolicy

    circuit_breaker = CircuitBreaker(threshold=5, recovery_timeout_seconds=60.0)
    retry_policy = RetryPolicy(max_retries=2)
"""

from __future__ import annotations

import random
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import override

import requests

from ..exceptions import CircuitBreakerOpen
from ..protocols import CircuitBreaker as CircuitBreakerProtocol
from ..protocols import RetryPolicy as RetryPolicyProtocol


class BreakerState(StrEnum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreaker(CircuitBreakerProtocol):
    """Stops hammering a failing catalog store.

    Opens after `threshold` consecutive failures, then lets a single trial call through
    once `recovery_timeout_seconds` have passed. Safe to share between threads.
    """

    threshold: int = 5
    recovery_timeout_seconds: float = 60.0
    half_open_max_calls: int = 1
    clock: Callable[[], float] = time.monotonic
    consecutive_failures: int = field(default=0, init=False)
    state: BreakerState = field(default=BreakerState.CLOSED, init=False)
    open_until: float | None = field(default=None, init=False)
    half_open_calls: int = field(default=0, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @property
    def is_open(self) -> bool:
        return self.state == BreakerState.OPEN

    @override
    def record_success(self) -> None:
        with self._lock:
            self._close()

    @override
    def record_failure(self) -> None:
        with self._lock:
            self.consecutive_failures += 1
            if (
                self.state == BreakerState.HALF_OPEN
                or self.consecutive_failures >= self.threshold
            ):
                self._open(self.clock())

    @override
    def check(self) -> None:
        """Raise CircuitBreakerOpen unless a request may go out now."""
        with self._lock:
            if self.state == BreakerState.OPEN:
                if self.open_until is not None and self.clock() >= self.open_until:
                    self.state = BreakerState.HALF_OPEN
                    self.half_open_calls = 0
                else:
                    raise CircuitBreakerOpen(self.consecutive_failures, self.threshold)

            if self.state == BreakerState.HALF_OPEN:
                if self.half_open_calls >= self.half_open_max_calls:
                    raise CircuitBreakerOpen(self.consecutive_failures, self.threshold)
                self.half_open_calls += 1

    def reset(self) -> None:
        with self._lock:
            self._close()

    def _close(self) -> None:
        self.consecutive_failures = 0
        self.state = BreakerState.CLOSED
        self.open_until = None
        self.half_open_calls = 0

    def _open(self, now: float) -> None:
        self.state = BreakerState.OPEN
        self.open_until = now + self.recovery_timeout_seconds
        self.half_open_calls = 0


@dataclass
class RetryPolicy(RetryPolicyProtocol):
    """Exponential backoff for transient catalog store failures."""

    max_retries: int = 2
    backoff_factor: float = 0.25
    max_backoff_seconds: float = 5.0
    jitter_seconds: float = 0.05
    retry_statuses: tuple[int, ...] = (429, 500, 502, 503, 504)
    retry_exceptions: tuple[type[Exception], ...] = (requests.Timeout, requests.ConnectionError)

    @override
    def compute_backoff(self, attempt: int) -> float:
        base = min(self.max_backoff_seconds, self.backoff_factor * (2**attempt))
        if self.jitter_seconds > 0:
            base += random.uniform(0.0, self.jitter_seconds)
        return float(base)
