"""Filesystem implementations for infrastructure.

Usage example:
    from pathlib import Path

    from role_detection_engine.infrastructure.filesystem import LocalFileSystem

    fs = LocalFileSystem()
    catalog = fs.read_json(Path("data/role_profiles.json"))
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path

from ..protocols import FileSystem


class LocalFileSystem(FileSystem):
    """Local filesystem implementation."""

    def read_text(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def write_text(self, content: str, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def read_json(self, path: Path) -> object:
        payload: object = json.loads(path.read_text(encoding="utf-8"))
        return payload

    def write_json(self, data: Mapping[str, object], path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")

    def exists(self, path: Path) -> bool:
        return path.exists()
