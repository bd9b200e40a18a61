"""
Per-guild publisher for the VATSIM listing message.

Each tick the publisher:

1. Re-fetches the remembered listing message. A message that no longer
   exists, is not editable by the bot, or is older than
   ``MESSAGE_RETENTION`` is forgotten (Discord refuses edits and bulk
   deletes on old messages). A message that cannot be fetched
   ``MAX_FETCH_FAILURES`` ticks in a row is forgotten as well.
2. Builds fresh content from the guild's links, the guild's members and the
   shared snapshot cache.
3. Deletes every other message among the latest ``PRUNE_LIMIT`` so the
   channel only shows the listing (best effort).
4. Edits the remembered message, or sends a new one and remembers its id.

Failures are logged and swallowed so the recurring task keeps running.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

from vatsim_listing import maintenance
from vatsim_listing.network.cache import NetworkSnapshotCache
from vatsim_listing.network.models import utc_now
from vatsim_listing.users.store import UserLinkStore

from .correlator import MemberRecord, correlate
from .renderer import AirportLookup, render
from .state import ListingState, ListingStateStore

logger = logging.getLogger(__name__)

MESSAGE_RETENTION = datetime.timedelta(days=13)
PRUNE_LIMIT = 100
MAX_FETCH_FAILURES = 3
BULK_DELETE_BATCH = 100


@dataclass(frozen=True, slots=True)
class ListingMessage:
    id: str
    created_at: datetime.datetime
    editable: bool


class ListingChannel(Protocol):
    """Chat-platform operations the publisher needs for one destination."""

    async def fetch_members(self) -> List[MemberRecord]: ...

    async def fetch_message(self, message_id: str) -> Optional[ListingMessage]: ...

    async def recent_message_ids(self, limit: int) -> List[str]: ...

    async def bulk_delete(self, message_ids: List[str]) -> None: ...

    async def send(self, content: str) -> str: ...

    async def edit(self, message_id: str, content: str) -> None: ...


class ListingPublisher:
    """Keeps one listing message per guild up to date."""

    def __init__(
        self,
        name: str,
        channel: ListingChannel,
        link_store: UserLinkStore,
        snapshot_cache: NetworkSnapshotCache,
        airport_lookup: AirportLookup,
        *,
        show_flights: bool = True,
        show_controllers: bool = True,
        state_store: ListingStateStore | None = None,
        clock: Callable[[], datetime.datetime] = utc_now,
    ) -> None:
        self.name = name
        self.channel = channel
        self.link_store = link_store
        self.snapshot_cache = snapshot_cache
        self.airport_lookup = airport_lookup
        self.show_flights = show_flights
        self.show_controllers = show_controllers
        self._state_store = state_store
        self._clock = clock
        self.state = ListingState()
        self._state_loaded = state_store is None
        self._fetch_failures = 0
        self._task: asyncio.Task | None = None

    # ------------------------------------------------------------------ #
    # PUBLISH CYCLE
    # ------------------------------------------------------------------ #

    async def publish(self) -> bool:
        """Run one publish cycle; returns ``True`` when the listing was written."""
        try:
            return await self._publish()
        except Exception:
            logger.exception("[%s] Error updating VATSIM listing", self.name)
            return False

    async def _publish(self) -> bool:
        if not self._state_loaded:
            self.state = await self._state_store.load()
            self._state_loaded = True

        now = self._clock()
        message = await self._resolve_message(now)

        content = await self.build_content(now)
        if not content:
            logger.debug("[%s] Nothing to publish this cycle", self.name)
            return False

        await self._prune(keep_id=message.id if message else None)

        if message is not None:
            await self.channel.edit(message.id, content)
            message_id = message.id
        else:
            message_id = await self.channel.send(content)

        await self._remember(ListingState(message_id=message_id, last_rendered_at=now))
        logger.info("[%s] Updated VATSIM listing", self.name)
        return True

    async def build_content(self, now: datetime.datetime | None = None) -> str:
        if not (self.show_flights or self.show_controllers):
            return ""

        links, members, snapshot = await asyncio.gather(
            self.link_store.get_all(),
            self.channel.fetch_members(),
            self.snapshot_cache.get_snapshot(),
        )
        rows = correlate(links, members, snapshot)
        return render(
            rows.pilots,
            rows.controllers,
            snapshot.overview if snapshot else None,
            self.airport_lookup,
            now=now or self._clock(),
            show_flights=self.show_flights,
            show_controllers=self.show_controllers,
        )

    async def _resolve_message(self, now: datetime.datetime) -> Optional[ListingMessage]:
        message_id = self.state.message_id
        if not message_id:
            return None

        try:
            message = await self.channel.fetch_message(message_id)
        except Exception:
            self._fetch_failures += 1
            if self._fetch_failures < MAX_FETCH_FAILURES:
                raise
            logger.exception(
                "[%s] Could not fetch the VATSIM listing message %d times. A new message will be created.",
                self.name,
                self._fetch_failures,
            )
            await self._remember(ListingState())
            return None

        self._fetch_failures = 0
        if message is None:
            logger.info(
                "[%s] The previous VATSIM listing message no longer exists. A new message will be created.",
                self.name,
            )
            await self._remember(ListingState())
            return None

        if not message.editable or now - message.created_at > MESSAGE_RETENTION:
            logger.info(
                "[%s] The VATSIM listing message is no longer editable. It will be replaced by a new message.",
                self.name,
            )
            await self._remember(ListingState())
            return None

        return message

    async def _prune(self, keep_id: str | None) -> None:
        try:
            recent = await self.channel.recent_message_ids(PRUNE_LIMIT)
            stale = [mid for mid in recent if mid != keep_id]
            for start in range(0, len(stale), BULK_DELETE_BATCH):
                await self.channel.bulk_delete(stale[start:start + BULK_DELETE_BATCH])
            if stale:
                logger.info("[%s] Removed %d other message(s) from the listing channel", self.name, len(stale))
        except Exception:
            logger.exception("[%s] Failed to clear the listing channel", self.name)

    async def _remember(self, state: ListingState) -> None:
        self.state = state
        self._fetch_failures = 0
        if self._state_store is not None:
            await self._state_store.save(state)

    # ------------------------------------------------------------------ #
    # SCHEDULING
    # ------------------------------------------------------------------ #

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self, interval: float) -> asyncio.Task:
        """Publish now and every ``interval`` seconds; repeated calls are no-ops."""
        if self.is_running:
            return self._task

        await self.publish()
        if not self.is_running:
            self._task = await maintenance.startup(
                self.publish, interval, name=f"listing-{self.name}"
            )
            logger.info("[%s] Scheduled VATSIM listing updates (interval=%ss)", self.name, interval)
        return self._task

    async def stop(self) -> None:
        await maintenance.shutdown(self._task)
        self._task = None


__all__ = [
    "BULK_DELETE_BATCH",
    "ListingChannel",
    "ListingMessage",
    "ListingPublisher",
    "MAX_FETCH_FAILURES",
    "MESSAGE_RETENTION",
    "PRUNE_LIMIT",
]
