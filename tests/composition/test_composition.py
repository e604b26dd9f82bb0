"""Tests for the composition root."""

from typer.testing import CliRunner

from role_detection_engine import __version__
from role_detection_engine.composition import app, build_catalog_source, build_detection_service
from role_detection_engine.config import EngineSettings
from role_detection_engine.infrastructure import (
    BundledRoleCatalogSource,
    HttpRoleCatalogSource,
    JsonFileRoleCatalogSource,
)
from tests.fakes import InMemoryFileSystem


def test_url_takes_precedence_over_path() -> None:
    settings = EngineSettings(catalog_url="https://store.test/", catalog_path="roles.json")

    source = build_catalog_source(settings=settings, fs=InMemoryFileSystem())

    assert isinstance(source, HttpRoleCatalogSource)
    assert source.base_url == "https://store.test"


def test_path_selects_json_file_source() -> None:
    source = build_catalog_source(
        settings=EngineSettings(catalog_path="roles.json"), fs=InMemoryFileSystem()
    )

    assert isinstance(source, JsonFileRoleCatalogSource)
    assert str(source.path) == "roles.json"


def test_bundled_catalog_is_the_default() -> None:
    source = build_catalog_source(settings=EngineSettings(), fs=InMemoryFileSystem())

    assert isinstance(source, BundledRoleCatalogSource)


def test_detection_service_serves_bundled_catalog() -> None:
    service = build_detection_service(settings=EngineSettings(cache_ttl_seconds=60))

    profiles = service.list_profiles()

    assert len(profiles) == 6
    assert service.get_profile("ux_designer") is not None
    assert service.get_stats().cache.profile_count == 6


def test_composed_app_prints_version() -> None:
    result = CliRunner().invoke(app, ["--version"])

    assert result.exit_code == 0, result.output
    assert __version__ in result.output
