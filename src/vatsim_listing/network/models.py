"""Immutable value types for one VATSIM data feed snapshot.

Feed schema (subset consumed here, ``https://data.vatsim.net/v3/vatsim-data.json``):

```
{"general": {"version", "connected_clients", "unique_users", "update_timestamp"},
 "pilots": [{"cid", "name", "callsign", "latitude", "longitude", "altitude",
             "groundspeed", "heading", "logon_time",
             "flight_plan": {"flight_rules", "aircraft", "aircraft_short",
                             "departure", "arrival", "alternate", "altitude",
                             "route"} | null}],
 "controllers": [{"cid", "name", "callsign", "frequency", "facility",
                  "rating", "logon_time"}]}
```

Everything is parsed once into frozen dataclasses; a snapshot is replaced
wholesale on refresh and never mutated.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from dateutil import parser as date_parser


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime.datetime]:
    """Parse a feed timestamp into an aware UTC datetime (``None`` if absent)."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime.datetime):
        parsed = value
    else:
        # isoparse truncates the feed's 7-digit fractions to microseconds
        parsed = date_parser.isoparse(str(value))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed.astimezone(datetime.timezone.utc)


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True, slots=True)
class NetworkOverview:
    version: int
    connections: int
    users: int
    last_updated: Optional[datetime.datetime]

    @classmethod
    def from_raw(cls, raw: Dict[str, Any] | None) -> "NetworkOverview":
        raw = raw or {}
        return cls(
            version=_int(raw.get("version")),
            connections=_int(raw.get("connected_clients")),
            users=_int(raw.get("unique_users")),
            last_updated=parse_timestamp(raw.get("update_timestamp")),
        )


@dataclass(frozen=True, slots=True)
class FlightPlan:
    departure: str
    arrival: str
    aircraft_short: str = ""
    aircraft: str = ""
    flight_rules: str = ""
    alternate: str = ""
    altitude: str = ""
    route: str = ""

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "FlightPlan":
        return cls(
            departure=_str(raw.get("departure")),
            arrival=_str(raw.get("arrival")),
            aircraft_short=_str(raw.get("aircraft_short")),
            aircraft=_str(raw.get("aircraft")),
            flight_rules=_str(raw.get("flight_rules")),
            alternate=_str(raw.get("alternate")),
            altitude=_str(raw.get("altitude")),
            route=_str(raw.get("route")),
        )


@dataclass(frozen=True, slots=True)
class NetworkPilot:
    vatsim_id: int
    callsign: str
    latitude: float
    longitude: float
    flight_plan: Optional[FlightPlan] = None
    name: str = ""
    altitude: int = 0
    groundspeed: int = 0
    heading: int = 0
    online_since: Optional[datetime.datetime] = None

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "NetworkPilot":
        plan = raw.get("flight_plan")
        return cls(
            vatsim_id=_int(raw.get("cid")),
            callsign=_str(raw.get("callsign")),
            latitude=_float(raw.get("latitude")),
            longitude=_float(raw.get("longitude")),
            flight_plan=FlightPlan.from_raw(plan) if plan else None,
            name=_str(raw.get("name")),
            altitude=_int(raw.get("altitude")),
            groundspeed=_int(raw.get("groundspeed")),
            heading=_int(raw.get("heading")),
            online_since=parse_timestamp(raw.get("logon_time")),
        )


@dataclass(frozen=True, slots=True)
class NetworkController:
    vatsim_id: int
    callsign: str
    online_since: Optional[datetime.datetime]
    name: str = ""
    frequency: str = ""
    facility: int = 0
    rating: int = 0

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "NetworkController":
        return cls(
            vatsim_id=_int(raw.get("cid")),
            callsign=_str(raw.get("callsign")),
            online_since=parse_timestamp(raw.get("logon_time")),
            name=_str(raw.get("name")),
            frequency=_str(raw.get("frequency")),
            facility=_int(raw.get("facility")),
            rating=_int(raw.get("rating")),
        )


@dataclass(frozen=True, slots=True)
class NetworkSnapshot:
    overview: NetworkOverview
    pilots: Tuple[NetworkPilot, ...] = ()
    controllers: Tuple[NetworkController, ...] = ()
    fetched_at: datetime.datetime = field(default_factory=utc_now)

    @classmethod
    def from_raw(
        cls, raw: Dict[str, Any], fetched_at: datetime.datetime | None = None
    ) -> "NetworkSnapshot":
        if not isinstance(raw, dict):
            raise ValueError(f"Unexpected VATSIM payload type: {type(raw).__name__}")
        return cls(
            overview=NetworkOverview.from_raw(raw.get("general")),
            pilots=tuple(NetworkPilot.from_raw(p) for p in raw.get("pilots") or []),
            controllers=tuple(
                NetworkController.from_raw(c) for c in raw.get("controllers") or []
            ),
            fetched_at=fetched_at or utc_now(),
        )


__all__ = [
    "FlightPlan",
    "NetworkController",
    "NetworkOverview",
    "NetworkPilot",
    "NetworkSnapshot",
    "parse_timestamp",
    "utc_now",
]
