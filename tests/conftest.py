"""Pytest fixtures shared across the suite.

All tests are network-isolated - socket connections are blocked by default.
"""

from __future__ import annotations

import os
import socket
from collections.abc import Iterator

import pytest

from tests.support.errors import NetworkIsolationError


def _blocked_socket_connect(self: socket.socket, *args: object, **kwargs: object) -> None:
    """Raise an error if any test tries to make a real network connection."""
    _ = (self, kwargs)
    raise NetworkIsolationError(str(args))


@pytest.fixture(autouse=True)
def block_network_access(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Block all network access in tests.

    Tests that need HTTP should use FakeHttpSession or FakeHttpClient.
    """
    monkeypatch.setattr(socket.socket, "connect", _blocked_socket_connect)
    yield


@pytest.fixture(autouse=True)
def clear_role_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Start every test without ROLE_* variables from the outer environment."""
    for name in list(os.environ):
        if name.startswith("ROLE_"):
            monkeypatch.delenv(name, raising=False)
    yield
