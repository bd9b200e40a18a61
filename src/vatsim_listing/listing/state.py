"""
Best-effort persistence of the listing message id per guild.

State files are small JSON documents::

    {"message_id": "1234567890", "last_rendered_at": "2024-05-01T12:00:00+00:00"}

Losing the file only means the next publish posts a fresh message, so read
and write failures are logged and never raised.
"""

from __future__ import annotations

import asyncio
import datetime
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ListingState:
    message_id: Optional[str] = None
    last_rendered_at: Optional[datetime.datetime] = None

    def to_dict(self) -> dict:
        return {
            "message_id": self.message_id,
            "last_rendered_at": self.last_rendered_at.isoformat() if self.last_rendered_at else None,
        }

    @classmethod
    def from_dict(cls, raw: dict) -> "ListingState":
        rendered = raw.get("last_rendered_at")
        message_id = raw.get("message_id")
        return cls(
            message_id=str(message_id) if message_id else None,
            last_rendered_at=datetime.datetime.fromisoformat(rendered) if rendered else None,
        )


class ListingStateStore:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    async def load(self) -> ListingState:
        if not self.path.exists():
            return ListingState()
        try:
            return await asyncio.to_thread(self._read)
        except (OSError, ValueError, TypeError, AttributeError) as exc:
            logger.warning("Ignoring unreadable listing state %s: %s", self.path, exc)
            return ListingState()

    async def save(self, state: ListingState) -> None:
        try:
            await asyncio.to_thread(self._write, state)
        except OSError as exc:
            logger.warning("Failed to persist listing state %s: %s", self.path, exc)

    def _read(self) -> ListingState:
        with self.path.open("r", encoding="utf-8") as handle:
            return ListingState.from_dict(json.load(handle))

    def _write(self, state: ListingState) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tmp.open("w", encoding="utf-8") as handle:
            json.dump(state.to_dict(), handle)
        # Atomic rename keeps partially written files from being observed.
        os.replace(tmp, self.path)


__all__ = ["ListingState", "ListingStateStore"]
