"""
Persisted links between Discord members and VATSIM accounts.

Each scope (one configured guild) owns a JSON file holding a list of links::

    [{"discordId": "1234", "username": "alice", "vatsimId": 1000001}, ...]

Only ``vatsimId`` is guaranteed present; links added by an admin carry a
``username`` but no ``discordId``. The field names are part of the on-disk
contract and must not change.

A scope never holds two links sharing a ``discordId`` or a ``vatsimId``:
:meth:`UserLinkStore.save` replaces any link matching either key. Mutations
are in-memory and mark the store dirty; :meth:`UserLinkStore.flush_if_dirty`
is run on a schedule (see :class:`UserLinkStoreFactory`) to write the list
back to disk.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from vatsim_listing import maintenance

logger = logging.getLogger(__name__)

FILE_ENCODING = "utf-8"


class UserLinkStoreError(RuntimeError):
    """Raised when a persisted link file exists but cannot be read."""


@dataclass(frozen=True, slots=True)
class UserLink:
    vatsim_id: int
    discord_id: Optional[str] = None
    username: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "UserLink":
        discord_id = raw.get("discordId")
        return cls(
            vatsim_id=int(raw["vatsimId"]),
            discord_id=str(discord_id) if discord_id not in (None, "") else None,
            username=raw.get("username"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.discord_id is not None:
            out["discordId"] = self.discord_id
        if self.username is not None:
            out["username"] = self.username
        out["vatsimId"] = self.vatsim_id
        return out


@dataclass(frozen=True, slots=True)
class LinkFilter:
    """AND-combined lookup keys. A filter with no keys matches nothing."""

    discord_id: Optional[str] = None
    vatsim_id: Optional[int] = None

    def is_empty(self) -> bool:
        return self.discord_id is None and self.vatsim_id is None

    def matches(self, link: UserLink) -> bool:
        if self.is_empty():
            return False
        if self.discord_id is not None and link.discord_id != self.discord_id:
            return False
        if self.vatsim_id is not None and link.vatsim_id != self.vatsim_id:
            return False
        return True


def _read_links(path: Path) -> Optional[List[UserLink]]:
    if not path.exists():
        return None
    text = path.read_text(encoding=FILE_ENCODING)
    if not text.strip():
        return []
    raw = json.loads(text)
    if not isinstance(raw, list):
        raise ValueError("expected a JSON array of links")
    return [UserLink.from_dict(item) for item in raw]


def _write_links(path: Path, links: List[UserLink]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("w", encoding=FILE_ENCODING) as handle:
        json.dump([link.to_dict() for link in links], handle, indent=4)
    os.replace(tmp, path)


class UserLinkStore:
    """In-memory link list for one scope, lazily loaded and flushed on demand."""

    def __init__(self, path: str | Path, scope: str | None = None) -> None:
        self.path = Path(path)
        self.scope = scope or self.path.stem
        self._links: List[UserLink] | None = None
        self._load_lock = asyncio.Lock()
        # Mutations bump ``_version``; a flush records the version it wrote.
        self._version = 0
        self._flushed_version = 0

    @property
    def dirty(self) -> bool:
        return self._version != self._flushed_version

    async def get_all(self) -> List[UserLink]:
        """Return a copy of every link, loading the backing file on first use."""
        return list(await self._ensure_loaded())

    async def find(self, link_filter: LinkFilter) -> Optional[UserLink]:
        """Return the first link matching ``link_filter`` (``None`` for an empty filter)."""
        if link_filter.is_empty():
            return None
        for link in await self._ensure_loaded():
            if link_filter.matches(link):
                return link
        return None

    async def save(self, link: UserLink) -> None:
        """Add ``link``, replacing any link that shares its discord id or vatsim id."""
        links = await self._ensure_loaded()
        kept = [
            existing
            for existing in links
            if existing.vatsim_id != link.vatsim_id
            and (link.discord_id is None or existing.discord_id != link.discord_id)
        ]
        kept.append(link)
        self._links = kept
        self._version += 1
        logger.info("[%s] Saved VATSIM link %s", self.scope, link)

    async def delete(self, link_filter: LinkFilter) -> bool:
        """Remove at most one link matching ``link_filter``; return whether one was removed."""
        if link_filter.is_empty():
            logger.warning("[%s] Refusing to delete with an empty link filter", self.scope)
            return False

        links = await self._ensure_loaded()
        for idx, link in enumerate(links):
            if link_filter.matches(link):
                self._links = links[:idx] + links[idx + 1:]
                self._version += 1
                logger.info("[%s] Deleted VATSIM link %s", self.scope, link)
                return True
        return False

    async def flush_if_dirty(self) -> bool:
        """
        Persist the full list if it changed since the last successful flush.

        Failures are logged and leave the store dirty so the next scheduled
        flush retries. Returns ``True`` when a write happened.
        """
        if not self.dirty or self._links is None:
            return False

        version = self._version
        links = list(self._links)
        try:
            await asyncio.to_thread(_write_links, self.path, links)
        except Exception:
            logger.exception("[%s] Error saving VATSIM links to %s", self.scope, self.path)
            return False

        self._flushed_version = version
        logger.info("[%s] Saved %d VATSIM link(s)", self.scope, len(links))
        return True

    async def _ensure_loaded(self) -> List[UserLink]:
        if self._links is not None:
            return self._links

        async with self._load_lock:
            if self._links is None:
                try:
                    loaded = await asyncio.to_thread(_read_links, self.path)
                except (OSError, ValueError, KeyError, TypeError) as exc:
                    logger.error("[%s] Error loading VATSIM links from %s: %s", self.scope, self.path, exc)
                    raise UserLinkStoreError(f"Cannot load links from {self.path}") from exc

                if loaded is None:
                    logger.warning("[%s] VATSIM links file %s does not exist", self.scope, self.path)
                    loaded = []
                self._links = loaded
        return self._links


class UserLinkStoreFactory:
    """Creates one :class:`UserLinkStore` per scope and flushes them together."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self._stores: Dict[str, UserLinkStore] = {}
        self._flush_task: asyncio.Task | None = None

    def get(self, scope: str) -> UserLinkStore:
        store = self._stores.get(scope)
        if store is None:
            store = UserLinkStore(self.directory / f"{scope}.json", scope=scope)
            self._stores[scope] = store
        return store

    async def flush_all(self) -> None:
        for store in list(self._stores.values()):
            await store.flush_if_dirty()

    async def start_scheduled_flush(self, interval: float) -> asyncio.Task:
        if self._flush_task is None or self._flush_task.done():
            logger.info("Starting VATSIM link flush (interval=%ss)", interval)
            self._flush_task = await maintenance.startup(
                self.flush_all, interval, name="user-link-flush"
            )
        return self._flush_task

    async def stop_scheduled_flush(self) -> None:
        await maintenance.shutdown(self._flush_task)
        self._flush_task = None


__all__ = [
    "LinkFilter",
    "UserLink",
    "UserLinkStore",
    "UserLinkStoreError",
    "UserLinkStoreFactory",
]
