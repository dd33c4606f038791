"""
Cache-aside holder for the full employee directory snapshot.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional, TYPE_CHECKING

from shared.logging import get_logger
from ..models import DirectorySnapshot

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


CACHE_TYPE = "employees"


class EmployeeDirectoryCache:
    """Holds the last fetched directory snapshot until explicitly invalidated.

    The first ``get_all`` after construction or invalidation loads the
    directory through ``loader`` (the retry-wrapped upstream fetch-all) and
    publishes the result; later calls return the published tuple without
    contacting upstream. There is no time-based expiry.

    Concurrent misses within one invalidation epoch share a single loader
    task, so a burst of readers causes one upstream call and every reader
    gets that call's result or error. ``invalidate`` starts a new epoch: a
    load begun earlier still answers the readers already waiting on it but
    is not published.
    """

    def __init__(
        self,
        loader: Callable[[], Awaitable[Any]],
        *,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self._loader = loader
        self.metrics = metrics
        self.logger = get_logger("directory.cache")

        self._snapshot: Optional[DirectorySnapshot] = None
        self._inflight: Optional["asyncio.Task[DirectorySnapshot]"] = None
        self._epoch = 0

        self._hits = 0
        self._misses = 0
        self._refreshes = 0
        self._invalidations = 0

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def snapshot(self) -> Optional[DirectorySnapshot]:
        """Currently published snapshot, if any."""
        return self._snapshot

    async def get_all(self) -> DirectorySnapshot:
        """Return the published snapshot, loading it first on a miss."""
        snapshot = self._snapshot
        if snapshot is not None:
            self._hits += 1
            self._record("cache_hits_total")
            self.logger.debug("Directory cache hit", size=len(snapshot), epoch=self._epoch)
            return snapshot

        self._misses += 1
        self._record("cache_misses_total")

        # No await between the check and the assignment, so only one task per epoch
        if self._inflight is None:
            self.logger.info("Directory cache miss, loading from upstream", epoch=self._epoch)
            self._inflight = asyncio.ensure_future(self._load(self._epoch))
        else:
            self.logger.debug("Directory cache miss, joining in-flight load", epoch=self._epoch)

        # Shielded so one cancelled reader does not cancel the load for the rest
        return await asyncio.shield(self._inflight)

    def invalidate(self) -> None:
        """Discard the published snapshot; the next read reloads."""
        self._snapshot = None
        self._inflight = None
        self._epoch += 1
        self._invalidations += 1
        self._record("cache_invalidations_total")
        if self.metrics is not None:
            self.metrics.set_gauge("cached_employees", 0)
        self.logger.info("Cache eviction - clearing employees cache", epoch=self._epoch)

    def stats(self) -> Dict[str, Any]:
        """Counters describing cache behaviour since construction."""
        return {
            "hits": self._hits,
            "misses": self._misses,
            "refreshes": self._refreshes,
            "invalidations": self._invalidations,
            "epoch": self._epoch,
            "cached": self._snapshot is not None,
            "size": len(self._snapshot) if self._snapshot is not None else 0,
        }

    async def _load(self, epoch: int) -> DirectorySnapshot:
        task = asyncio.current_task()
        try:
            outcome = await self._loader()
            # Raises the mapped error; nothing gets published on failure
            employees = outcome.unwrap("fetch_all")
        finally:
            if self._inflight is task:
                self._inflight = None

        snapshot: DirectorySnapshot = tuple(employees)
        self._refreshes += 1

        if epoch == self._epoch:
            self._snapshot = snapshot
            if self.metrics is not None:
                self.metrics.set_gauge("cached_employees", len(snapshot))
            self.logger.info("Published directory snapshot", size=len(snapshot), epoch=epoch)
        else:
            self.logger.info(
                "Discarding directory snapshot from a previous epoch",
                size=len(snapshot),
                loaded_epoch=epoch,
                current_epoch=self._epoch
            )
        return snapshot

    def _record(self, metric_name: str) -> None:
        if self.metrics is not None:
            self.metrics.increment_counter(metric_name, cache_type=CACHE_TYPE)
