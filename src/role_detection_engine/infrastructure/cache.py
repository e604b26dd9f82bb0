"""Time-boxed, thread-safe cache of the role catalog.

Usage example:
    from role_detection_engine.infrastructure.cache import RoleCatalogCache
    from role_detection_engine.infrastructure.catalog_sources import BundledRoleCatalogSource

    cache = RoleCatalogCache(BundledRoleCatalogSource(), ttl_seconds=3600)
    profiles = cache.get_profiles()
    cache.invalidate()

The cache holds one immutable snapshot. A refresh fetches a whole new catalog and
swaps it in; readers that arrive while another thread refreshes keep reading the
previous snapshot. A failed or timed-out fetch falls back to the last good snapshot.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from types import MappingProxyType
from typing import override

from ..domain.role_profiles import RoleProfile
from ..exceptions import CatalogUnavailableError, RoleDetectionError
from ..observability import get_logger
from ..protocols import ProfileCatalog, RoleCatalogSource


@dataclass(frozen=True)
class CatalogSnapshot:
    """Immutable catalog snapshot keyed by profile id, in catalog order."""

    profiles: MappingProxyType[str, RoleProfile]
    loaded_at: float

    @property
    def ordered(self) -> tuple[RoleProfile, ...]:
        return tuple(self.profiles.values())


@dataclass(frozen=True)
class CacheStats:
    hits: int
    misses: int
    refreshes: int
    fallbacks: int
    profile_count: int
    age_seconds: float | None
    stale: bool


class RoleCatalogCache(ProfileCatalog):
    """Catalog cache with a single refreshing writer and lock-free readers."""

    def __init__(
        self,
        source: RoleCatalogSource,
        *,
        ttl_seconds: float = 3600.0,
        fetch_timeout_seconds: float = 10.0,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.source = source
        self.ttl_seconds = ttl_seconds
        self.fetch_timeout_seconds = fetch_timeout_seconds
        self._monotonic = monotonic
        self._snapshot: CatalogSnapshot | None = None
        self._stale = False
        self._generation = 0
        self._generation_lock = threading.Lock()
        self._refresh_lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None
        self._pool_lock = threading.Lock()
        self._inflight: tuple[Future[tuple[RoleProfile, ...]], int] | None = None
        self._hits = 0
        self._misses = 0
        self._refreshes = 0
        self._fallbacks = 0
        self._logger = get_logger("role_detection_engine.cache")

    @override
    def get_profiles(self) -> tuple[RoleProfile, ...]:
        """Return the catalog, refreshing it when stale.

        Raises:
            CatalogUnavailableError: When the fetch fails and nothing was ever cached.
        """
        return self._current_snapshot().ordered

    @override
    def get_profile(self, profile_id: str) -> RoleProfile | None:
        """Return one profile from the snapshot, reading through to the source on a miss."""
        try:
            snapshot = self._current_snapshot()
        except CatalogUnavailableError:
            snapshot = None
        if snapshot is not None and profile_id in snapshot.profiles:
            return snapshot.profiles[profile_id]
        try:
            return self._run_with_timeout(lambda: self.source.fetch_profile_by_id(profile_id))
        except (RoleDetectionError, FutureTimeoutError) as exc:
            self._logger.warning("Profile lookup for %s failed: %s", profile_id, exc)
            return None

    @override
    def invalidate(self, profile_id: str | None = None) -> None:
        """Mark the snapshot stale. It stays available as the last-good fallback.

        A refresh already in flight does not clear a later invalidation.
        """
        with self._generation_lock:
            self._generation += 1
            self._stale = True
        if profile_id is None:
            self._logger.info("Role catalog invalidated")
        else:
            self._logger.info("Role catalog invalidated for profile %s", profile_id)

    @override
    def stats(self) -> CacheStats:
        snapshot = self._snapshot
        with self._stats_lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                refreshes=self._refreshes,
                fallbacks=self._fallbacks,
                profile_count=len(snapshot.profiles) if snapshot is not None else 0,
                age_seconds=None
                if snapshot is None
                else self._monotonic() - snapshot.loaded_at,
                stale=snapshot is None or not self._is_fresh(snapshot),
            )

    @override
    def close(self) -> None:
        with self._pool_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=False, cancel_futures=True)
                self._executor = None

    def _is_fresh(self, snapshot: CatalogSnapshot) -> bool:
        return not self._stale and self._monotonic() - snapshot.loaded_at < self.ttl_seconds

    def _count(self, name: str) -> None:
        with self._stats_lock:
            setattr(self, name, getattr(self, name) + 1)

    def _current_snapshot(self) -> CatalogSnapshot:
        snapshot = self._snapshot
        if snapshot is not None and self._is_fresh(snapshot):
            self._count("_hits")
            return snapshot
        self._count("_misses")

        if snapshot is not None:
            # Another thread is refreshing: keep serving the previous snapshot
            if not self._refresh_lock.acquire(blocking=False):
                return snapshot
        elif not self._refresh_lock.acquire(timeout=self.fetch_timeout_seconds):
            raise CatalogUnavailableError("timed out waiting for the first catalog load")

        try:
            current = self._snapshot
            if current is not None and self._is_fresh(current):
                return current
            return self._refresh(current)
        finally:
            self._refresh_lock.release()

    def _refresh(self, previous: CatalogSnapshot | None) -> CatalogSnapshot:
        try:
            profiles, generation = self._fetch_catalog()
        except (RoleDetectionError, FutureTimeoutError) as exc:
            reason = str(exc) or type(exc).__name__
            self._count("_fallbacks")
            if previous is None:
                self._logger.error("Role catalog fetch failed with no cached snapshot: %s", reason)
                raise CatalogUnavailableError(reason) from exc
            self._logger.warning(
                "Role catalog fetch failed; serving last good snapshot: %s", reason
            )
            return previous

        snapshot = CatalogSnapshot(
            profiles=MappingProxyType({profile.id: profile for profile in profiles}),
            loaded_at=self._monotonic(),
        )
        with self._generation_lock:
            self._snapshot = snapshot
            self._stale = generation != self._generation
        self._count("_refreshes")
        self._logger.info("Role catalog refreshed: %s profiles", len(snapshot.profiles))
        return snapshot

    def _fetch_catalog(self) -> tuple[tuple[RoleProfile, ...], int]:
        """Fetch the catalog, returning it with the invalidation generation it started at."""
        # A fetch that outlived its timeout is awaited again rather than duplicated
        inflight = self._inflight
        if inflight is None or inflight[0].done():
            with self._generation_lock:
                generation = self._generation
            inflight = (self._pool().submit(self.source.fetch_role_catalog), generation)
            self._inflight = inflight
        future, generation = inflight
        profiles = future.result(timeout=self.fetch_timeout_seconds)
        self._inflight = None
        return profiles, generation

    def _run_with_timeout[T](self, call: Callable[[], T]) -> T:
        future = self._pool().submit(call)
        return future.result(timeout=self.fetch_timeout_seconds)

    def _pool(self) -> ThreadPoolExecutor:
        with self._pool_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=2, thread_name_prefix="role-catalog"
                )
            return self._executor
