"""Plain-data views of detection results for JSON output."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from ..domain.results import RoleProfileAnalysis


def analysis_to_dict(analysis: RoleProfileAnalysis) -> dict[str, Any]:
    """Convert an analysis into JSON-ready primitives; enum members serialise as their values."""
    return asdict(analysis)
