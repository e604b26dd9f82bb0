"""Detection orchestration: score every profile, filter, relax and backfill.

Usage example:
    from datetime import date

    from role_detection_engine.application.detection import detect_roles
    from role_detection_engine.config import DetectionConfig

    outcome = detect_roles(candidate, profiles, DetectionConfig(), as_of=date(2024, 1, 1))
    assert len(outcome.matches) <= DetectionConfig().max_results
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date

from ..config import DetectionConfig, DynamicThresholdConfig
from ..domain.analysis import build_match_result
from ..domain.candidate import CandidateProfile
from ..domain.results import FitAnalysis, RoleMatchResult, RoleScore
from ..domain.role_profiles import RoleProfile, profile_validation_errors
from ..domain.scoring import ScoringRules, clamp, score_role
from ..observability import get_logger

FALLBACK_ROLE_ID = "general_professional"
FALLBACK_ROLE_NAME = "General Professional"
FALLBACK_CONFIDENCE = 0.3

_THRESHOLD_DIGITS = 4


@dataclass(frozen=True)
class DetectionOutcome:
    """Ranked matches plus the facts the analysis reports about how they were chosen."""

    matches: tuple[RoleMatchResult, ...]
    primary_profile: RoleProfile | None
    total_roles_analyzed: int
    original_threshold: float
    adjusted_threshold: float
    adjustments: tuple[str, ...]


@dataclass(frozen=True)
class _Scored:
    profile: RoleProfile
    score: RoleScore


def usable_profiles(
    profiles: Sequence[RoleProfile], adjustments: list[str] | None = None
) -> tuple[RoleProfile, ...]:
    """Drop profiles that fail domain validation, logging and noting each one.

    Inactive profiles are left out without a note.
    """
    logger = get_logger("role_detection_engine.detection")
    usable: list[RoleProfile] = []
    seen: set[str] = set()
    for profile in profiles:
        if not profile.is_active:
            logger.debug("Ignoring inactive role profile %s", profile.id)
            continue
        errors = profile_validation_errors(profile)
        if profile.id in seen:
            errors.append("duplicate id")
        if errors:
            label = profile.id.strip() or "<blank id>"
            logger.warning("Skipping role profile %s: %s", label, "; ".join(errors))
            if adjustments is not None:
                adjustments.append(f"Skipped profile {label}: {'; '.join(errors)}")
            continue
        seen.add(profile.id)
        usable.append(profile)
    return tuple(usable)


def score_profiles(
    candidate: CandidateProfile,
    profiles: Sequence[RoleProfile],
    *,
    rules: ScoringRules,
    as_of: date,
    workers: int = 1,
) -> tuple[RoleScore, ...]:
    """Score every profile, in input order. Scoring is pure, so workers share nothing."""

    def score(profile: RoleProfile) -> RoleScore:
        return score_role(candidate, profile, rules=rules, as_of=as_of)

    if workers <= 1 or len(profiles) <= 1:
        return tuple(score(profile) for profile in profiles)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="role-scoring") as pool:
        return tuple(pool.map(score, profiles))


def relaxation_ladder(original: float, dynamic: DynamicThresholdConfig) -> tuple[float, ...]:
    """Thresholds to try, in order, after ``original`` produced too few results."""
    if not dynamic.enabled or dynamic.max_iterations <= 0:
        return ()
    level = min(original, dynamic.initial_threshold)
    if level >= original:
        level -= dynamic.decrement_step
    ladder: list[float] = []
    while len(ladder) < dynamic.max_iterations:
        candidate_level = round(max(dynamic.minimum_threshold, level), _THRESHOLD_DIGITS)
        floor_reached = bool(ladder) and candidate_level >= ladder[-1]
        if floor_reached or candidate_level >= original:
            break
        ladder.append(candidate_level)
        level = candidate_level - dynamic.decrement_step
    return tuple(ladder)


def restrict_to_targets(
    profiles: Sequence[RoleProfile], target_roles: Collection[str], adjustments: list[str]
) -> tuple[RoleProfile, ...]:
    """Keep only the profiles named in ``target_roles``, noting ids the catalog lacks."""
    wanted = set(target_roles)
    kept = tuple(profile for profile in profiles if profile.id in wanted)
    known = {profile.id for profile in kept}
    missing = sorted(wanted - known)
    adjustments.append(f"Restricted to {len(known)} target role(s)")
    if missing:
        adjustments.append(f"Unknown target role(s): {', '.join(missing)}")
    return kept


def _select(ranked: Sequence[_Scored], threshold: float, limit: int) -> list[_Scored]:
    return [item for item in ranked if item.score.confidence >= threshold][:limit]


def detect_roles(
    candidate: CandidateProfile,
    profiles: Sequence[RoleProfile],
    config: DetectionConfig,
    *,
    as_of: date,
    target_roles: Collection[str] | None = None,
) -> DetectionOutcome:
    """Rank role profiles for ``candidate``.

    ``target_roles`` limits detection to those profile ids.

    Returns between ``min_results`` and ``max_results`` matches whenever the catalog
    holds at least ``min_results`` usable profiles; a smaller catalog returns every
    usable profile. Matches below the threshold that were added to reach the minimum
    carry ``low_confidence=True``.
    """
    logger = get_logger("role_detection_engine.detection")
    adjustments: list[str] = []
    if target_roles is not None:
        profiles = restrict_to_targets(profiles, target_roles, adjustments)
    usable = usable_profiles(profiles, adjustments)
    original = config.confidence_threshold

    scores = score_profiles(
        candidate,
        usable,
        rules=config.scoring_rules,
        as_of=as_of,
        workers=config.scoring_workers,
    )
    ranked = sorted(
        (_Scored(profile, score) for profile, score in zip(usable, scores, strict=True)),
        key=lambda item: (-item.score.confidence, item.profile.id),
    )

    effective = original
    selected = _select(ranked, effective, config.max_results)
    if len(selected) < config.min_results:
        for level in relaxation_ladder(original, config.dynamic_threshold):
            effective = level
            selected = _select(ranked, effective, config.max_results)
            if len(selected) >= config.min_results:
                break
        if effective != original:
            adjustments.append(
                f"Dynamic threshold lowered from {original:.2f} to {effective:.2f}"
            )

    confidences = {item.profile.id: item.score.confidence for item in selected}
    backfilled: set[str] = set()
    if len(selected) < config.min_results:
        chosen = {item.profile.id for item in selected}
        excluded = [item for item in ranked if item.profile.id not in chosen]
        needed = min(config.min_results - len(selected), len(excluded))
        anchor = min([effective, *confidences.values()])
        step = config.adjustments.backfill_step
        for offset, item in enumerate(excluded[:needed], start=1):
            synthetic = clamp(min(item.score.confidence, anchor - offset * step))
            confidences[item.profile.id] = synthetic
            backfilled.add(item.profile.id)
            selected.append(item)
        if needed:
            adjustments.append(
                f"Added {needed} low-confidence role(s) to meet the minimum of "
                f"{config.min_results} results"
            )
        if len(selected) < config.min_results:
            adjustments.append(
                f"Catalog has {len(usable)} usable profile(s), fewer than the minimum of "
                f"{config.min_results}"
            )

    matches = tuple(
        build_match_result(
            candidate,
            item.profile,
            item.score,
            as_of=as_of,
            confidence=confidences[item.profile.id],
            low_confidence=item.profile.id in backfilled,
            fuzzy_threshold=config.fuzzy_threshold,
            settings=config.recommendations,
        )
        for item in selected
    )
    logger.info(
        "Ranked %s of %s role profiles (threshold %.2f, effective %.2f)",
        len(matches),
        len(usable),
        original,
        effective,
    )
    return DetectionOutcome(
        matches=matches,
        primary_profile=selected[0].profile if selected else None,
        total_roles_analyzed=len(usable),
        original_threshold=original,
        adjusted_threshold=effective,
        adjustments=tuple(adjustments),
    )


def fallback_match(reason: str) -> RoleMatchResult:
    """Generic low-confidence result served when no role profile can be scored."""
    return RoleMatchResult(
        role_id=FALLBACK_ROLE_ID,
        role_name=FALLBACK_ROLE_NAME,
        confidence=FALLBACK_CONFIDENCE,
        factors=(),
        enhancement_potential=0,
        recommendations=(),
        scoring_rationale=(
            f"No role profile could be compared ({reason}); "
            "returning a generic professional profile at low confidence."
        ),
        fit_analysis=FitAnalysis(
            strengths=(),
            gaps=("Role-specific analysis unavailable",),
            overall_assessment="Role detection could not compare against any role profile",
        ),
        low_confidence=True,
    )
