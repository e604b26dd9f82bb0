"""Concrete infrastructure implementations and shared helpers."""

from .cache import CacheStats, RoleCatalogCache
from .catalog_sources import (
    BundledRoleCatalogSource,
    HttpRoleCatalogSource,
    JsonFileRoleCatalogSource,
)
from .clock import SystemClock
from .filesystem import LocalFileSystem
from .http import RequestsHttpClient, build_catalog_http_client
from .resilience import CircuitBreaker, RetryPolicy

__all__ = [
    "BundledRoleCatalogSource",
    "CacheStats",
    "CircuitBreaker",
    "HttpRoleCatalogSource",
    "JsonFileRoleCatalogSource",
    "LocalFileSystem",
    "RequestsHttpClient",
    "RetryPolicy",
    "RoleCatalogCache",
    "SystemClock",
    "build_catalog_http_client",
]
