"""
Fixed-width text rendering of the VATSIM listing.

Output layout (Discord markdown)::

    **Flights**
    ```<header>
    <dashes>
    <row>
    ```
    **Air Traffic Control**
    ```<header>
    <dashes>
    <row>
    ```
    _VATSIM data last updated on YYYY-MM-DD HHMMZ_

Every column is as wide as its heading or its longest cell, whichever is
larger, followed by the column's padding. The departure column also carries
the flight progress bar: ``PROGRESS_INTERVALS`` glyphs, ``+`` for completed
buckets and ``-`` for remaining ones.

:func:`render` is referentially transparent once ``now`` is supplied; the
publisher compares rendered strings, so nothing here may depend on hidden
state.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence

from vatsim_listing.aviation.airports import Airport
from vatsim_listing.aviation.geo import distance_km
from vatsim_listing.network.models import NetworkOverview, NetworkPilot, utc_now

from .correlator import ControllerRow, PilotRow

AirportLookup = Callable[[str], Optional[Airport]]

COLUMN_SEPARATOR = 3
PROGRESS_INTERVALS = 20
PROGRESS_EPSILON = 0.5
PROGRESS_COMPLETE = 99.5
FILLED = "+"
EMPTY = "-"
AIRPORT_CODE_WIDTH = 4

FLIGHTS_HEADING = "**Flights**"
CONTROLLERS_HEADING = "**Air Traffic Control**"
CODE_FENCE = "```"
NO_FLIGHTPLAN = "No flightplan filed"
NO_PILOTS = "No pilots are currently online."
NO_CONTROLLERS = "No controllers are currently online."
TIMESTAMP_FORMAT = "%Y-%m-%d %H%M"


# ----------------------------- Columns ----------------------------- #


@dataclass(frozen=True, slots=True)
class Column:
    heading: str
    width: int
    padding: int
    align_right: bool = False

    def cell(self, value: str | None) -> str:
        value = value or ""
        size = self.width + self.padding
        return value.rjust(size) if self.align_right else value.ljust(size)


def make_column(
    heading: str, max_length: int, padding: int, align_right: bool = False
) -> Column:
    return Column(heading, max(len(heading), max_length), padding, align_right)


def _max_length(values: Iterable[str | None]) -> int:
    return max((len(v or "") for v in values), default=0)


def _table(columns: Sequence[Column], rows: Iterable[str]) -> str:
    header = "".join(column.cell(column.heading) for column in columns)
    lines = [header, "-" * len(header), *rows]
    return "".join(f"{line}\n" for line in lines)


def _name_cell(display_name: str, is_member: bool) -> str:
    return ("*" if is_member else " ") + display_name


# ----------------------------- Progress ----------------------------- #


def percent_complete(pilot: NetworkPilot, departure: Airport, arrival: Airport) -> float:
    remaining = distance_km(pilot.latitude, pilot.longitude, arrival.latitude, arrival.longitude)
    total = distance_km(departure.latitude, departure.longitude, arrival.latitude, arrival.longitude)
    if total <= 0:
        return 0.0
    return 100 * abs(total - remaining) / total


def progress_bar(percent: float, intervals: int = PROGRESS_INTERVALS) -> str:
    """Quantize ``percent`` into ``intervals`` filled/empty glyphs."""
    glyphs: List[str] = []
    for i in range(intervals):
        floor = 100 * i / intervals
        filled = (percent > PROGRESS_EPSILON and percent >= floor) or percent >= PROGRESS_COMPLETE
        glyphs.append(FILLED if filled else EMPTY)
    return "".join(glyphs)


def _departure_cell(pilot: NetworkPilot, code_width: int, airport_lookup: AirportLookup) -> str:
    plan = pilot.flight_plan
    cell = plan.departure.ljust(code_width + 1)
    departure = airport_lookup(plan.departure)
    arrival = airport_lookup(plan.arrival) if plan.arrival else None
    if departure is not None and arrival is not None:
        cell += progress_bar(percent_complete(pilot, departure, arrival))
    return cell


# ----------------------------- Sections ----------------------------- #


def render_pilots(rows: Sequence[PilotRow], airport_lookup: AirportLookup) -> str:
    if not rows:
        return f"{NO_PILOTS}\n"

    plans = [row.pilot.flight_plan for row in rows if row.pilot.flight_plan]
    code_width = max(
        AIRPORT_CODE_WIDTH,
        _max_length(p.departure for p in plans),
        _max_length(p.arrival for p in plans),
    )

    name_col = make_column(" User", _max_length(r.display_name for r in rows) + 1, COLUMN_SEPARATOR)
    callsign_col = make_column("ID", _max_length(r.pilot.callsign for r in rows), COLUMN_SEPARATOR)
    aircraft_col = make_column("A/C", _max_length(p.aircraft_short for p in plans), COLUMN_SEPARATOR)
    departure_col = make_column("DEP", code_width, 1 + PROGRESS_INTERVALS + 1)
    arrival_col = make_column("ARR", code_width, 0, align_right=True)
    columns = [name_col, callsign_col, aircraft_col, departure_col, arrival_col]

    lines: List[str] = []
    for row in rows:
        plan = row.pilot.flight_plan
        line = name_col.cell(_name_cell(row.display_name, row.is_member))
        line += callsign_col.cell(row.pilot.callsign)
        line += aircraft_col.cell(plan.aircraft_short if plan else None)
        if plan is not None and plan.departure:
            line += departure_col.cell(_departure_cell(row.pilot, code_width, airport_lookup))
            line += arrival_col.cell(plan.arrival)
        else:
            line += departure_col.cell(NO_FLIGHTPLAN)
        lines.append(line)

    return _table(columns, lines)


def format_online_duration(since: datetime.datetime | None, now: datetime.datetime) -> str:
    """Elapsed time as ``HH:MM``; hours do not wrap at 24."""
    if since is None:
        return ""
    seconds = max(0, int((now - since).total_seconds()))
    hours, remainder = divmod(seconds, 3600)
    return f"{hours:02d}:{remainder // 60:02d}"


def render_controllers(rows: Sequence[ControllerRow], now: datetime.datetime) -> str:
    if not rows:
        return f"{NO_CONTROLLERS}\n"

    name_col = make_column(" User", _max_length(r.display_name for r in rows) + 1, COLUMN_SEPARATOR)
    callsign_col = make_column("ID", _max_length(r.controller.callsign for r in rows), COLUMN_SEPARATOR)
    online_col = make_column("Online", 6, 0)
    columns = [name_col, callsign_col, online_col]

    lines = [
        name_col.cell(_name_cell(row.display_name, row.is_member))
        + callsign_col.cell(row.controller.callsign)
        + online_col.cell(format_online_duration(row.controller.online_since, now))
        for row in rows
    ]
    return _table(columns, lines)


def format_timestamp(value: datetime.datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(datetime.timezone.utc)
    return value.strftime(TIMESTAMP_FORMAT)


def render_footer(overview: NetworkOverview | None, now: datetime.datetime) -> str:
    if overview is not None and overview.last_updated is not None:
        return f"_VATSIM data last updated on {format_timestamp(overview.last_updated)}Z_"
    return f"_Unable to retrieve VATSIM data as of {format_timestamp(now)}Z_"


def render(
    pilot_rows: Sequence[PilotRow],
    controller_rows: Sequence[ControllerRow],
    overview: NetworkOverview | None,
    airport_lookup: AirportLookup,
    *,
    now: datetime.datetime | None = None,
    show_flights: bool = True,
    show_controllers: bool = True,
) -> str:
    """Render both listing sections and the freshness footer."""
    now = now or utc_now()
    content = ""

    if show_flights:
        content += f"{FLIGHTS_HEADING}\n{CODE_FENCE}"
        content += render_pilots(pilot_rows, airport_lookup)
        content += f"{CODE_FENCE}\n"

    if show_controllers:
        content += f"{CONTROLLERS_HEADING}\n{CODE_FENCE}"
        content += render_controllers(controller_rows, now)
        content += f"{CODE_FENCE}\n"

    content += render_footer(overview, now)
    return content


__all__ = [
    "AirportLookup",
    "Column",
    "PROGRESS_INTERVALS",
    "format_online_duration",
    "make_column",
    "percent_complete",
    "progress_bar",
    "render",
    "render_controllers",
    "render_footer",
    "render_pilots",
]
