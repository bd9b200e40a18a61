"""HTTP client for the VATSIM data feed."""

from __future__ import annotations

import logging
from typing import Any, Dict

import aiohttp

logger = logging.getLogger(__name__)


class VatsimClient:
    """Fetch the raw VATSIM data document over a shared aiohttp session."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        data_url: str,
        timeout: float = 30,
    ) -> None:
        self._session = session
        self._data_url = data_url
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def fetch_data(self) -> Dict[str, Any]:
        """
        GET the data feed and decode it as JSON.

        Raises :class:`aiohttp.ClientError` (or :class:`asyncio.TimeoutError`)
        on transport failures and non-2xx responses; the snapshot cache is
        responsible for logging and retrying.
        """
        async with self._session.get(self._data_url, timeout=self._timeout) as resp:
            resp.raise_for_status()
            # The feed is occasionally served without a JSON content type.
            payload = await resp.json(content_type=None)

        logger.debug("Fetched VATSIM data from %s", self._data_url)
        return payload


__all__ = ["VatsimClient"]
