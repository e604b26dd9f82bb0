"""Composition root for wiring the detection service and CLI dependencies."""

from __future__ import annotations

from pathlib import Path

from .application.service import RoleDetectionService
from .cli import CliDependencies, create_app
from .config import DetectionConfig, EngineSettings
from .infrastructure import (
    BundledRoleCatalogSource,
    HttpRoleCatalogSource,
    JsonFileRoleCatalogSource,
    LocalFileSystem,
    RoleCatalogCache,
    build_catalog_http_client,
)
from .observability import get_logger
from .protocols import FileSystem, RoleCatalogSource


def build_catalog_source(*, settings: EngineSettings, fs: FileSystem) -> RoleCatalogSource:
    """Pick the catalog source: HTTP store, then a local file, then the bundled catalog."""
    logger = get_logger("role_detection_engine.composition")
    if settings.catalog_url:
        logger.info("Using role catalog at %s", settings.catalog_url)
        client = build_catalog_http_client(
            circuit_breaker_threshold=settings.circuit_breaker_threshold,
            circuit_breaker_timeout_seconds=settings.circuit_breaker_timeout_seconds,
            timeout_seconds=settings.http_timeout_seconds,
        )
        return HttpRoleCatalogSource(base_url=settings.catalog_url, client=client)
    if settings.catalog_path:
        logger.info("Using role catalog file %s", settings.catalog_path)
        return JsonFileRoleCatalogSource(path=Path(settings.catalog_path), fs=fs)
    return BundledRoleCatalogSource()


def build_detection_service(
    *,
    settings: EngineSettings,
    config: DetectionConfig | None = None,
    fs: FileSystem | None = None,
) -> RoleDetectionService:
    """Build a detection service with a catalog cache over the configured source."""
    source = build_catalog_source(settings=settings, fs=fs or LocalFileSystem())
    cache = RoleCatalogCache(
        source,
        ttl_seconds=settings.cache_ttl_seconds,
        fetch_timeout_seconds=settings.fetch_timeout_seconds,
    )
    return RoleDetectionService(cache=cache, config=config)


def build_cli_dependencies(*, settings: EngineSettings) -> CliDependencies:
    """Build concrete dependencies for CLI commands."""
    fs = LocalFileSystem()
    return CliDependencies(fs=fs, service=build_detection_service(settings=settings, fs=fs))


app = create_app(build_cli_dependencies)
