"""
Fetch-and-hold cache for the live VATSIM data feed.

One :class:`NetworkSnapshotCache` is created by the bot and injected into every
listing publisher. Readers call :meth:`NetworkSnapshotCache.get_snapshot`,
which only touches the network on a cold start; a recurring task started with
:meth:`NetworkSnapshotCache.start_scheduled_refresh` keeps the snapshot fresh.

Refreshes never overlap: while a fetch is in flight any further trigger is a
no-op, and a cold-start reader awaits the in-flight fetch instead of issuing
its own. A successful fetch swaps in a new immutable snapshot with a single
attribute assignment; a failed fetch leaves the previous snapshot in place.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict

from vatsim_listing import maintenance

from .models import NetworkSnapshot, utc_now

logger = logging.getLogger(__name__)

FetchFn = Callable[[], Awaitable[Dict[str, Any]]]


class NetworkSnapshotCache:
    """Holds the most recent successfully fetched :class:`NetworkSnapshot`."""

    def __init__(self, fetch: FetchFn) -> None:
        self._fetch = fetch
        self._snapshot: NetworkSnapshot | None = None
        self._inflight: asyncio.Task[bool] | None = None
        self._refresh_task: asyncio.Task | None = None

    @property
    def snapshot(self) -> NetworkSnapshot | None:
        """Current snapshot without triggering a fetch."""
        return self._snapshot

    async def get_snapshot(self) -> NetworkSnapshot | None:
        """
        Return the current snapshot, fetching it first on a cold start.

        Returns ``None`` only when no fetch has ever succeeded.
        """
        if self._snapshot is None:
            inflight = self._inflight
            if inflight is not None and not inflight.done():
                await asyncio.shield(inflight)
            else:
                await self.refresh_once()
        return self._snapshot

    async def refresh_once(self) -> bool:
        """
        Fetch the feed and swap in a new snapshot.

        Returns ``True`` when a new snapshot was stored. Returns ``False`` when
        the fetch failed or another refresh was already in flight.
        """
        if self._inflight is not None and not self._inflight.done():
            logger.debug("VATSIM refresh already in flight; skipping trigger")
            return False

        self._inflight = asyncio.create_task(self._fetch_and_swap())
        return await asyncio.shield(self._inflight)

    async def _fetch_and_swap(self) -> bool:
        try:
            raw = await self._fetch()
            snapshot = NetworkSnapshot.from_raw(raw, fetched_at=utc_now())
        except Exception:
            logger.exception("Error retrieving VATSIM data; keeping previous snapshot")
            return False

        self._snapshot = snapshot
        logger.info(
            "Retrieved VATSIM data (%d pilots, %d controllers, updated %s)",
            len(snapshot.pilots),
            len(snapshot.controllers),
            snapshot.overview.last_updated,
        )
        return True

    # ------------------------------------------------------------------ #
    # SCHEDULING
    # ------------------------------------------------------------------ #

    @property
    def is_scheduled(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    async def start_scheduled_refresh(self, interval: float) -> asyncio.Task:
        """Refresh now and every ``interval`` seconds; repeated calls are no-ops."""
        if self.is_scheduled:
            return self._refresh_task

        logger.info("Starting VATSIM refresh (interval=%ss)", interval)
        await self.refresh_once()
        if not self.is_scheduled:
            self._refresh_task = await maintenance.startup(
                self.refresh_once, interval, name="vatsim-refresh"
            )
        return self._refresh_task

    async def stop_scheduled_refresh(self) -> None:
        await maintenance.shutdown(self._refresh_task)
        self._refresh_task = None


__all__ = ["NetworkSnapshotCache", "FetchFn"]
