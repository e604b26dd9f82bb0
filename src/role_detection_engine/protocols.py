"""Protocol definitions for dependency injection.

These protocols define the abstract interfaces the detection engine depends on,
enabling isolated unit testing with fake implementations.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .domain.role_profiles import RoleProfile
    from .infrastructure.cache import CacheStats


@runtime_checkable
class RoleCatalogSource(Protocol):
    """Abstract accessor for the external role profile catalog."""

    def fetch_role_catalog(self) -> tuple[RoleProfile, ...]:
        """Fetch every usable role profile.

        Raises:
            CatalogFetchError: When the catalog cannot be read or parsed.
        """
        ...

    def fetch_profile_by_id(self, profile_id: str) -> RoleProfile | None:
        """Fetch one profile, or None when the catalog has no such id."""
        ...


@runtime_checkable
class HttpClient(Protocol):
    """Abstract HTTP client for JSON document requests."""

    def get_json(self, url: str) -> object | None:
        """Fetch and decode a JSON document; None when the server answers 404.

        Raises:
            CatalogFetchError: On network, HTTP or decoding errors.
            CircuitBreakerOpen: When too many consecutive requests failed.
        """
        ...


@runtime_checkable
class FileSystem(Protocol):
    """Abstract filesystem for reading catalogs, candidates and config files."""

    def read_text(self, path: Path) -> str:
        """Read text file."""
        ...

    def write_text(self, content: str, path: Path) -> None:
        """Write text file."""
        ...

    def read_json(self, path: Path) -> object:
        """Read JSON file."""
        ...

    def write_json(self, data: Mapping[str, object], path: Path) -> None:
        """Write JSON file."""
        ...

    def exists(self, path: Path) -> bool:
        """Check if path exists."""
        ...


@runtime_checkable
class Clock(Protocol):
    """Source of the current time, injected so detection output stays reproducible."""

    def now(self) -> datetime:
        """Return the current timezone-aware UTC time."""
        ...


@runtime_checkable
class CircuitBreaker(Protocol):
    """Abstract circuit breaker for outbound requests."""

    def check(self) -> None:
        """Raise if the circuit is open."""
        ...

    def record_success(self) -> None:
        """Record a successful request."""
        ...

    def record_failure(self) -> None:
        """Record a failed request."""
        ...


@runtime_checkable
class RetryPolicy(Protocol):
    """Abstract retry policy for transient failures."""

    max_retries: int
    retry_statuses: tuple[int, ...]
    retry_exceptions: tuple[type[Exception], ...]

    def compute_backoff(self, attempt: int) -> float:
        """Return a delay for the next retry attempt."""
        ...


@runtime_checkable
class ProfileCatalog(Protocol):
    """Cached view of the role catalog used by the detection service."""

    def get_profiles(self) -> tuple[RoleProfile, ...]:
        """Return every cached profile, refreshing when stale.

        Raises:
            CatalogUnavailableError: When nothing can be served.
        """
        ...

    def get_profile(self, profile_id: str) -> RoleProfile | None:
        """Return one profile, or None when unknown or unreachable."""
        ...

    def invalidate(self, profile_id: str | None = None) -> None:
        """Mark the cached catalog stale."""
        ...

    def stats(self) -> CacheStats:
        """Return cache counters."""
        ...

    def close(self) -> None:
        """Release any background workers."""
        ...
