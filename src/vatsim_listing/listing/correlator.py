"""
Join stored links, live guild members and the network snapshot.

:func:`correlate` is pure: it performs no I/O and returns the same rows for
the same inputs. Each link contributes at most one pilot row (its first
connection as a pilot in feed order) and at most one controller row (its
first staffed position). Text-only information broadcasts (``*_ATIS``) and
callsigns without a sector separator are not staffed positions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from vatsim_listing.network.models import NetworkController, NetworkPilot, NetworkSnapshot
from vatsim_listing.users.store import UserLink

SECTOR_SEPARATOR = "_"
ATIS_SUFFIX = "_atis"


@dataclass(frozen=True, slots=True)
class MemberRecord:
    member_id: str
    display_name: str


@dataclass(frozen=True, slots=True)
class PilotRow:
    display_name: str
    is_member: bool
    pilot: NetworkPilot


@dataclass(frozen=True, slots=True)
class ControllerRow:
    display_name: str
    is_member: bool
    controller: NetworkController


@dataclass(frozen=True, slots=True)
class CorrelatedRows:
    pilots: Tuple[PilotRow, ...] = ()
    controllers: Tuple[ControllerRow, ...] = ()


def is_staffed_position(callsign: str) -> bool:
    """True for sectorised callsigns that are not ATIS broadcasts."""
    return SECTOR_SEPARATOR in callsign and not callsign.lower().endswith(ATIS_SUFFIX)


def sort_key(display_name: str) -> Tuple[str, str]:
    """Case-insensitive ordering; on ties lowercase sorts before uppercase."""
    return display_name.casefold(), display_name.swapcase()


def _resolve_name(link: UserLink, member: Optional[MemberRecord]) -> str:
    if member is not None and member.display_name:
        return member.display_name
    return link.username or ""


def correlate(
    links: Iterable[UserLink],
    members: Iterable[MemberRecord],
    snapshot: NetworkSnapshot | None,
) -> CorrelatedRows:
    if snapshot is None:
        return CorrelatedRows()

    members_by_id: Dict[str, MemberRecord] = {}
    for member in members:
        members_by_id.setdefault(member.member_id, member)

    pilots_by_id: Dict[int, NetworkPilot] = {}
    for pilot in snapshot.pilots:
        pilots_by_id.setdefault(pilot.vatsim_id, pilot)

    controllers_by_id: Dict[int, NetworkController] = {}
    for controller in snapshot.controllers:
        if is_staffed_position(controller.callsign):
            controllers_by_id.setdefault(controller.vatsim_id, controller)

    pilot_rows: List[PilotRow] = []
    controller_rows: List[ControllerRow] = []
    for link in links:
        member = members_by_id.get(link.discord_id) if link.discord_id else None
        name = _resolve_name(link, member)

        pilot = pilots_by_id.get(link.vatsim_id)
        if pilot is not None:
            pilot_rows.append(PilotRow(name, member is not None, pilot))

        controller = controllers_by_id.get(link.vatsim_id)
        if controller is not None:
            controller_rows.append(ControllerRow(name, member is not None, controller))

    pilot_rows.sort(key=lambda row: sort_key(row.display_name))
    controller_rows.sort(key=lambda row: sort_key(row.display_name))
    return CorrelatedRows(tuple(pilot_rows), tuple(controller_rows))


__all__ = [
    "ControllerRow",
    "CorrelatedRows",
    "MemberRecord",
    "PilotRow",
    "correlate",
    "is_staffed_position",
    "sort_key",
]
