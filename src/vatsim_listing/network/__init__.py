"""VATSIM network feed models and the shared snapshot cache."""

from .cache import NetworkSnapshotCache
from .models import (
    FlightPlan,
    NetworkController,
    NetworkOverview,
    NetworkPilot,
    NetworkSnapshot,
)

__all__ = [
    "FlightPlan",
    "NetworkController",
    "NetworkOverview",
    "NetworkPilot",
    "NetworkSnapshot",
    "NetworkSnapshotCache",
]
