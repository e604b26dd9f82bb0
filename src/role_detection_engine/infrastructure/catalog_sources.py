"""Role catalog sources: local JSON file, HTTP document store and the bundled default.

Usage example:
    from pathlib import Path

    from role_detection_engine.infrastructure.catalog_sources import JsonFileRoleCatalogSource
    from role_detection_engine.infrastructure.filesystem import LocalFileSystem

    source = JsonFileRoleCatalogSource(path=Path("role_profiles.json"), fs=LocalFileSystem())
    profiles = source.fetch_role_catalog()
"""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import override
from urllib.parse import quote

from ..domain.role_profiles import RoleProfile
from ..exceptions import CatalogFetchError, RoleCatalogValidationError
from ..protocols import FileSystem, HttpClient, RoleCatalogSource
from ..role_catalog import load_role_catalog, parse_role_catalog, parse_role_profile

BUNDLED_CATALOG_PACKAGE = "role_detection_engine.data"
BUNDLED_CATALOG_FILE = "default_role_profiles.json"


def _find(profiles: tuple[RoleProfile, ...], profile_id: str) -> RoleProfile | None:
    for profile in profiles:
        if profile.id == profile_id:
            return profile
    return None


class JsonFileRoleCatalogSource(RoleCatalogSource):
    """Catalog stored as one JSON document on a filesystem."""

    def __init__(self, *, path: Path, fs: FileSystem) -> None:
        self.path = path
        self.fs = fs

    @override
    def fetch_role_catalog(self) -> tuple[RoleProfile, ...]:
        try:
            return load_role_catalog(path=self.path, fs=self.fs)
        except OSError as exc:
            raise CatalogFetchError(str(self.path), str(exc)) from exc

    @override
    def fetch_profile_by_id(self, profile_id: str) -> RoleProfile | None:
        return _find(self.fetch_role_catalog(), profile_id)


class HttpRoleCatalogSource(RoleCatalogSource):
    """Catalog served by a document-store HTTP API.

    ``GET {base_url}/role-profiles`` returns the catalog document and
    ``GET {base_url}/role-profiles/{id}`` returns a single profile.
    """

    def __init__(self, *, base_url: str, client: HttpClient) -> None:
        self.base_url = base_url.rstrip("/")
        self.client = client

    @override
    def fetch_role_catalog(self) -> tuple[RoleProfile, ...]:
        url = f"{self.base_url}/role-profiles"
        payload = self.client.get_json(url)
        if payload is None:
            raise CatalogFetchError(url, "catalog not found")
        return parse_role_catalog(payload, source=url)

    @override
    def fetch_profile_by_id(self, profile_id: str) -> RoleProfile | None:
        url = f"{self.base_url}/role-profiles/{quote(profile_id, safe='')}"
        payload = self.client.get_json(url)
        if payload is None:
            return None
        return parse_role_profile(payload, source=url)


class BundledRoleCatalogSource(RoleCatalogSource):
    """Default catalog shipped inside the package; used when nothing else is configured."""

    def __init__(self) -> None:
        self._profiles: tuple[RoleProfile, ...] | None = None

    @override
    def fetch_role_catalog(self) -> tuple[RoleProfile, ...]:
        if self._profiles is None:
            resource = resources.files(BUNDLED_CATALOG_PACKAGE).joinpath(BUNDLED_CATALOG_FILE)
            try:
                payload: object = json.loads(resource.read_text(encoding="utf-8"))
            except ValueError as exc:
                raise RoleCatalogValidationError(BUNDLED_CATALOG_FILE, str(exc)) from exc
            self._profiles = parse_role_catalog(payload, source=BUNDLED_CATALOG_FILE)
        return self._profiles

    @override
    def fetch_profile_by_id(self, profile_id: str) -> RoleProfile | None:
        return _find(self.fetch_role_catalog(), profile_id)
