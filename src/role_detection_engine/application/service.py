"""Public entry point: detect roles for a candidate against the cached catalog.

Usage example:
    from role_detection_engine.application.service import RoleDetectionService
    from role_detection_engine.infrastructure.cache import RoleCatalogCache
    from role_detection_engine.infrastructure.catalog_sources import BundledRoleCatalogSource

    service = RoleDetectionService(cache=RoleCatalogCache(BundledRoleCatalogSource()))
    analysis = service.detect_roles(candidate)
    print(analysis.primary_role.role_name, analysis.overall_confidence)
"""

from __future__ import annotations

import threading
from collections import Counter
from collections.abc import Collection
from dataclasses import dataclass
from datetime import date
from types import MappingProxyType

from ..config import DetectionConfig
from ..domain.analysis import AnalysisContext, build_analysis
from ..domain.candidate import CandidateProfile
from ..domain.results import RoleProfileAnalysis
from ..domain.role_profiles import RoleProfile
from ..exceptions import CatalogUnavailableError
from ..infrastructure.cache import CacheStats
from ..infrastructure.clock import SystemClock
from ..observability import get_logger, log_elapsed
from ..protocols import Clock, ProfileCatalog
from .detection import DetectionOutcome, detect_roles, fallback_match

FALLBACK_ADJUSTMENT = "Fallback: role catalog unavailable"
NO_PROFILES_ADJUSTMENT = "Fallback: no usable role profiles"
NO_MATCH_ADJUSTMENT = "Fallback: no role met the confidence threshold"
DEFAULT_SEARCH_LIMIT = 10


@dataclass(frozen=True)
class DetectionStats:
    total_detections: int
    fallback_detections: int
    primary_roles: MappingProxyType[str, int]
    average_confidence: float | None
    cache: CacheStats


class RoleDetectionService:
    """Runs detection with a swappable config and keeps running totals.

    Every call returns a structurally complete analysis: when the catalog cannot
    be served at all the result is a single generic low-confidence role.
    """

    def __init__(
        self,
        *,
        cache: ProfileCatalog,
        config: DetectionConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.cache = cache
        self.clock = clock or SystemClock()
        self._config = (config or DetectionConfig()).validate()
        self._config_lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self._total = 0
        self._fallbacks = 0
        self._confidence_sum = 0.0
        self._primary_roles: Counter[str] = Counter()
        self._logger = get_logger("role_detection_engine.service")

    def configure(self, config: DetectionConfig) -> None:
        """Replace the default config for later calls.

        Raises:
            InvalidDetectionConfigError: When the new config is invalid; the old one stays.
        """
        validated = config.validate()
        with self._config_lock:
            self._config = validated
        self._logger.info(
            "Detection config updated (threshold %.2f, results %s-%s)",
            validated.confidence_threshold,
            validated.min_results,
            validated.max_results,
        )

    def get_config(self) -> DetectionConfig:
        with self._config_lock:
            return self._config

    def detect_roles(
        self,
        candidate: CandidateProfile,
        config: DetectionConfig | None = None,
        *,
        as_of: date | None = None,
        target_roles: Collection[str] | None = None,
    ) -> RoleProfileAnalysis:
        """Rank catalog roles for ``candidate``.

        ``config`` applies to this call only. ``as_of`` anchors "current" positions
        and recency; it defaults to today's date from the injected clock.
        ``target_roles`` limits detection to those profile ids.

        Raises:
            InvalidDetectionConfigError: When ``config`` is given and invalid.
        """
        effective = config.validate() if config is not None else self.get_config()
        now = self.clock.now()
        reference_date = as_of or now.date()

        outcome: DetectionOutcome | None = None
        with log_elapsed(self._logger, "Role detection") as elapsed:
            try:
                profiles = self.cache.get_profiles()
            except CatalogUnavailableError as exc:
                self._logger.warning("Serving fallback analysis: %s", exc.reason)
            else:
                outcome = detect_roles(
                    candidate,
                    profiles,
                    effective,
                    as_of=reference_date,
                    target_roles=target_roles,
                )

        if outcome is None or not outcome.matches:
            analysis = self._fallback_analysis(
                candidate, effective, outcome, elapsed.milliseconds, now.isoformat()
            )
            self._record(analysis, fallback=True)
            return analysis

        analysis = build_analysis(
            candidate,
            outcome.matches,
            primary_profile=outcome.primary_profile,
            context=AnalysisContext(
                total_roles_analyzed=outcome.total_roles_analyzed,
                original_threshold=outcome.original_threshold,
                adjusted_threshold=outcome.adjusted_threshold,
                adjustments=outcome.adjustments,
                weighting_version=effective.weights.version,
                processing_time_ms=elapsed.milliseconds,
                generated_at=now.isoformat(),
                fuzzy_threshold=effective.fuzzy_threshold,
            ),
        )
        self._record(analysis, fallback=False)
        return analysis

    def list_profiles(self) -> tuple[RoleProfile, ...]:
        """Return the cached catalog, or an empty tuple when none can be served."""
        try:
            return self.cache.get_profiles()
        except CatalogUnavailableError as exc:
            self._logger.warning("Role catalog unavailable: %s", exc.reason)
            return ()

    def get_profile(self, profile_id: str) -> RoleProfile | None:
        return self.cache.get_profile(profile_id)

    def profiles_by_category(self, category: str) -> tuple[RoleProfile, ...]:
        """Active profiles in ``category`` (case-insensitive), ordered by name."""
        wanted = category.strip().lower()
        return tuple(
            sorted(
                (
                    profile
                    for profile in self.list_profiles()
                    if profile.is_active and profile.category.lower() == wanted
                ),
                key=lambda profile: profile.name,
            )
        )

    def search_profiles(
        self, query: str, limit: int = DEFAULT_SEARCH_LIMIT
    ) -> tuple[RoleProfile, ...]:
        """Search active profiles by name, description, keywords and required skills.

        Matching is a case-insensitive substring test; results keep catalog order.
        """
        needle = query.strip().lower()
        if not needle or limit <= 0:
            return ()
        found = [
            profile
            for profile in self.list_profiles()
            if profile.is_active and _profile_mentions(profile, needle)
        ]
        return tuple(found[:limit])

    def invalidate_catalog(self, profile_id: str | None = None) -> None:
        self.cache.invalidate(profile_id)

    def get_stats(self) -> DetectionStats:
        with self._stats_lock:
            return DetectionStats(
                total_detections=self._total,
                fallback_detections=self._fallbacks,
                primary_roles=MappingProxyType(dict(self._primary_roles)),
                average_confidence=self._confidence_sum / self._total if self._total else None,
                cache=self.cache.stats(),
            )

    def close(self) -> None:
        """Release the catalog cache's worker threads."""
        self.cache.close()

    def _fallback_analysis(
        self,
        candidate: CandidateProfile,
        config: DetectionConfig,
        outcome: DetectionOutcome | None,
        processing_time_ms: float,
        generated_at: str,
    ) -> RoleProfileAnalysis:
        if outcome is None:
            reason = "role catalog unavailable"
            adjustments: tuple[str, ...] = (FALLBACK_ADJUSTMENT,)
            analyzed = 0
        elif outcome.total_roles_analyzed == 0:
            reason = "no usable role profiles"
            adjustments = (*outcome.adjustments, NO_PROFILES_ADJUSTMENT)
            analyzed = 0
        else:
            reason = "no role met the confidence threshold"
            adjustments = (*outcome.adjustments, NO_MATCH_ADJUSTMENT)
            analyzed = outcome.total_roles_analyzed
        return build_analysis(
            candidate,
            (fallback_match(reason),),
            primary_profile=None,
            context=AnalysisContext(
                total_roles_analyzed=analyzed,
                original_threshold=config.confidence_threshold,
                adjusted_threshold=config.confidence_threshold,
                adjustments=adjustments,
                weighting_version=config.weights.version,
                processing_time_ms=processing_time_ms,
                generated_at=generated_at,
                fuzzy_threshold=config.fuzzy_threshold,
            ),
        )

    def _record(self, analysis: RoleProfileAnalysis, *, fallback: bool) -> None:
        with self._stats_lock:
            self._total += 1
            self._confidence_sum += analysis.overall_confidence
            self._primary_roles[analysis.primary_role.role_id] += 1
            if fallback:
                self._fallbacks += 1


def _profile_mentions(profile: RoleProfile, needle: str) -> bool:
    return (
        needle in profile.name.lower()
        or needle in profile.description.lower()
        or any(needle in keyword.lower() for keyword in profile.keywords)
        or any(needle in skill.lower() for skill in profile.required_skills)
    )
