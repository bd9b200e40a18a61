"""
Static airport directory.

Loaded once at startup from the ``mwgg/Airports`` dataset
(https://github.com/mwgg/Airports), a JSON object keyed by ICAO code::

    {"KJFK": {"icao": "KJFK", "name": "...", "city": "...", "country": "US",
              "lat": 40.63980103, "lon": -73.77890015, ...}, ...}

Lookups are synchronous and in-memory.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Airport:
    identifier: str
    latitude: float
    longitude: float
    name: str = ""
    city: str = ""
    country: str = ""


class AirportDirectory:
    """Case-insensitive ``identifier -> Airport`` lookup."""

    def __init__(self, airports: Mapping[str, Airport] | None = None) -> None:
        self._airports: Dict[str, Airport] = {
            key.upper(): airport for key, airport in (airports or {}).items()
        }

    def __len__(self) -> int:
        return len(self._airports)

    def lookup(self, identifier: str | None) -> Optional[Airport]:
        if not identifier:
            return None
        return self._airports.get(identifier.strip().upper())


def _parse_airport(key: str, raw: Dict[str, Any]) -> Optional[Airport]:
    try:
        latitude = float(raw["lat"])
        longitude = float(raw["lon"])
    except (KeyError, TypeError, ValueError):
        return None
    return Airport(
        identifier=str(raw.get("icao") or key),
        latitude=latitude,
        longitude=longitude,
        name=str(raw.get("name") or ""),
        city=str(raw.get("city") or ""),
        country=str(raw.get("country") or ""),
    )


def load_airports(path: str | Path) -> AirportDirectory:
    """
    Read the airport dataset at ``path``.

    A missing file yields an empty directory (progress bars are then omitted);
    entries without usable coordinates are skipped.
    """
    target = Path(path)
    if not target.is_file():
        logger.warning("Airport data file %s not found; flight progress disabled", target)
        return AirportDirectory()

    with target.open("r", encoding="utf-8") as handle:
        raw = json.load(handle)

    airports: Dict[str, Airport] = {}
    skipped = 0
    for key, entry in raw.items():
        airport = _parse_airport(key, entry or {})
        if airport is None:
            skipped += 1
            continue
        airports[key] = airport

    if skipped:
        logger.info("Skipped %d airport(s) without coordinates", skipped)
    logger.info("Loaded airport data (%d airports)", len(airports))
    return AirportDirectory(airports)


__all__ = ["Airport", "AirportDirectory", "load_airports"]
