"""Custom exceptions for the role detection engine.

These exceptions provide clear error handling and enable testing of error paths.
"""

from __future__ import annotations


class RoleDetectionError(Exception):
    """Base exception for all role detection errors."""

    pass


class CatalogFetchError(RoleDetectionError):
    """Raised by a catalog source when the backing store cannot be read."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to fetch role catalog from {source}: {reason}")


class CatalogUnavailableError(RoleDetectionError):
    """Raised when no catalog can be served: the fetch failed and nothing is cached.

    The detection service turns this into a generic low-confidence analysis.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Role catalog unavailable and no cached snapshot exists: {reason}")


class RoleCatalogFileNotFoundError(RoleDetectionError):
    """Raised when a role catalog file cannot be found."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Role catalog file not found: {path}")


class RoleCatalogValidationError(RoleDetectionError):
    """Raised when a role catalog document fails schema validation."""

    def __init__(self, source: str, detail: str) -> None:
        super().__init__(f"Invalid role catalog ({source}): {detail}")


class CandidateValidationError(RoleDetectionError):
    """Raised when a candidate profile document fails schema validation."""

    def __init__(self, source: str, detail: str) -> None:
        super().__init__(f"Invalid candidate profile ({source}): {detail}")


class InvalidDetectionConfigError(RoleDetectionError):
    """Raised when a detection config breaks one of its invariants."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = tuple(problems)
        super().__init__("Invalid detection config: " + "; ".join(problems))


class ConfigFileNotFoundError(RoleDetectionError):
    """Raised when a detection config file is missing."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Config file not found: {path}")


class ConfigFileParseError(RoleDetectionError):
    """Raised when a detection config file is not valid TOML."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Could not parse config file {path}: {detail}")


class ConfigFileValidationError(RoleDetectionError):
    """Raised when a detection config file fails schema validation."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Invalid config file {path}: {detail}")


class CircuitBreakerOpen(RoleDetectionError):
    """Raised when the circuit breaker trips due to repeated catalog fetch failures.

    Callers should serve cached data until the breaker half-opens.
    """

    def __init__(self, failure_count: int, threshold: int) -> None:
        self.failure_count = failure_count
        self.threshold = threshold
        super().__init__(
            f"Circuit breaker tripped: {failure_count} consecutive failures "
            f"(threshold: {threshold}). Skipping catalog fetch."
        )
