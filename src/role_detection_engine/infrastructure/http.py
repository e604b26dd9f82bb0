"""HTTP client for the role catalog document store.

Usage example:
    import requests

    from role_detection_engine.infrastructure.http import RequestsHttpClient
    from role_detection_engine.infrastructure.resilience import CircuitBreaker

    client = RequestsHttpClient(session=requests.Session(), circuit_breaker=CircuitBreaker())
    document = client.get_json("https://catalog.example.com/role-profiles")
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import override

import requests

from ..exceptions import CatalogFetchError
from ..protocols import CircuitBreaker, HttpClient, RetryPolicy
from .resilience import CircuitBreaker as CircuitBreakerImpl
from .resilience import RetryPolicy as RetryPolicyImpl

_BODY_PREVIEW = 300


def _response_details(response: requests.Response) -> str:
    """Return a compact status/body summary for error reporting."""
    body = " ".join(response.text.split())
    if len(body) > _BODY_PREVIEW:
        body = body[:_BODY_PREVIEW] + "..."
    return f"status={response.status_code}, body={body}"


class RequestsHttpClient(HttpClient):
    """JSON GETs with retry, backoff and a circuit breaker.

    - 404 returns None so callers can report "not found"
    - retryable statuses and transient network errors back off and retry
    - everything else counts against the circuit breaker and raises CatalogFetchError
    """

    def __init__(
        self,
        *,
        session: requests.Session,
        circuit_breaker: CircuitBreaker | None = None,
        retry_policy: RetryPolicy | None = None,
        timeout_seconds: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.session = session
        self.circuit_breaker = circuit_breaker or CircuitBreakerImpl()
        self.retry_policy = retry_policy or RetryPolicyImpl()
        self.timeout_seconds = timeout_seconds
        self._sleep = sleep

    @override
    def get_json(self, url: str) -> object | None:
        attempt = 0
        while True:
            self.circuit_breaker.check()
            try:
                response = self.session.get(url, timeout=self.timeout_seconds)
            except self.retry_policy.retry_exceptions as exc:
                if attempt < self.retry_policy.max_retries:
                    self._sleep(self.retry_policy.compute_backoff(attempt))
                    attempt += 1
                    continue
                self.circuit_breaker.record_failure()
                raise CatalogFetchError(url, f"network error: {exc}") from exc
            except requests.RequestException as exc:
                self.circuit_breaker.record_failure()
                raise CatalogFetchError(url, f"request failed: {exc}") from exc

            if response.status_code == 404:
                self.circuit_breaker.record_success()
                return None

            if response.status_code in self.retry_policy.retry_statuses:
                if attempt < self.retry_policy.max_retries:
                    self._sleep(self.retry_policy.compute_backoff(attempt))
                    attempt += 1
                    continue
                self.circuit_breaker.record_failure()
                raise CatalogFetchError(url, _response_details(response))

            if response.status_code >= 400:
                self.circuit_breaker.record_failure()
                raise CatalogFetchError(url, _response_details(response))

            try:
                payload: object = response.json()
            except ValueError as exc:
                self.circuit_breaker.record_failure()
                raise CatalogFetchError(url, "response is not valid JSON") from exc

            self.circuit_breaker.record_success()
            return payload


def build_catalog_http_client(
    *,
    circuit_breaker_threshold: int,
    circuit_breaker_timeout_seconds: float,
    timeout_seconds: float,
    max_retries: int = 2,
) -> RequestsHttpClient:
    session = requests.Session()
    session.headers["Accept"] = "application/json"
    circuit_breaker = CircuitBreakerImpl(
        threshold=circuit_breaker_threshold,
        recovery_timeout_seconds=circuit_breaker_timeout_seconds,
    )
    return RequestsHttpClient(
        session=session,
        circuit_breaker=circuit_breaker,
        retry_policy=RetryPolicyImpl(max_retries=max_retries),
        timeout_seconds=timeout_seconds,
    )
