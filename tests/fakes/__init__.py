"""Exports for test fakes."""

from .catalog import FakeRoleCatalogSource
from .clock import FakeClock, FakeMonotonic
from .filesystem import InMemoryFileSystem
from .http import FakeHttpClient, FakeHttpSession, FakeResponse
from .resilience import FakeCircuitBreaker

__all__ = [
    "FakeCircuitBreaker",
    "FakeClock",
    "FakeHttpClient",
    "FakeHttpSession",
    "FakeMonotonic",
    "FakeResponse",
    "FakeRoleCatalogSource",
    "InMemoryFileSystem",
]
