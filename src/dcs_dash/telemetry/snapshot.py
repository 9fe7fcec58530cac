"""Live telemetry snapshot shared between ingestion and rendering.

The store keeps one immutable record per top-level group (flight, engine,
mech).  The ingestion side builds a complete replacement record and swaps it
in under a lock, so the render side always sees each group either entirely
before or entirely after an update.  Groups are swapped independently and may
therefore be read from different instants.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Union

__all__ = [
    "ENGINE",
    "FLIGHT",
    "GROUPS",
    "MECH",
    "EngineState",
    "FlightState",
    "GroupTimes",
    "MechState",
    "Provenance",
    "Reading",
    "SidePair",
    "SnapshotStore",
    "TelemetrySnapshot",
]

FLIGHT = "flight"
ENGINE = "engine"
MECH = "mech"
GROUPS = (FLIGHT, ENGINE, MECH)


class Provenance(str, Enum):
    """Whether a value was read directly or derived by the normaliser."""

    MEASURED = "measured"
    ESTIMATED = "estimated"
    INFERRED = "inferred"


@dataclass(frozen=True, slots=True)
class Reading:
    value: float
    provenance: Provenance = Provenance.MEASURED

    @property
    def derived(self) -> bool:
        return self.provenance is not Provenance.MEASURED


@dataclass(frozen=True, slots=True)
class SidePair:
    """Left/right slots of an engine channel."""

    left: Optional[Reading] = None
    right: Optional[Reading] = None

    @property
    def present(self) -> bool:
        return self.left is not None or self.right is not None


@dataclass(frozen=True, slots=True)
class FlightState:
    name: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    alt_msl: Optional[float] = None
    alt_agl: Optional[float] = None
    ias: Optional[float] = None
    tas: Optional[float] = None
    mach: Optional[float] = None
    aoa: Optional[float] = None
    vv: Optional[float] = None
    pitch: Optional[float] = None
    bank: Optional[float] = None
    yaw: Optional[float] = None
    accel_x: Optional[float] = None
    accel_y: Optional[float] = None
    accel_z: Optional[float] = None


@dataclass(frozen=True, slots=True)
class EngineState:
    rpm: SidePair = field(default_factory=SidePair)
    throttle: SidePair = field(default_factory=SidePair)
    nozzle: SidePair = field(default_factory=SidePair)
    nozzle_present: bool = False
    temperature: SidePair = field(default_factory=SidePair)
    fuel_flow: SidePair = field(default_factory=SidePair)
    manifold: SidePair = field(default_factory=SidePair)
    manifold_present: bool = False


@dataclass(frozen=True, slots=True)
class MechState:
    gear: Optional[Reading] = None
    flaps: Optional[Reading] = None
    airbrake: Optional[Reading] = None
    hook: Optional[Reading] = None
    wing: Optional[Reading] = None
    wow: Optional[Reading] = None


GroupState = Union[FlightState, EngineState, MechState]


@dataclass(frozen=True, slots=True)
class GroupTimes:
    """Monotonic timestamp of the last update per group (``None`` = never)."""

    flight: Optional[float] = None
    engine: Optional[float] = None
    mech: Optional[float] = None


@dataclass(frozen=True, slots=True)
class TelemetrySnapshot:
    """Point-in-time copy of the live telemetry."""

    flight: FlightState = field(default_factory=FlightState)
    engine: EngineState = field(default_factory=EngineState)
    mech: MechState = field(default_factory=MechState)
    updated: GroupTimes = field(default_factory=GroupTimes)

    @property
    def received(self) -> bool:
        updated = self.updated
        return any(
            stamp is not None for stamp in (updated.flight, updated.engine, updated.mech)
        )


_GROUP_TYPES = {FLIGHT: FlightState, ENGINE: EngineState, MECH: MechState}


class SnapshotStore:
    """Single-writer, single-reader holder of the live snapshot."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot = TelemetrySnapshot()

    def read(self) -> TelemetrySnapshot:
        with self._lock:
            return self._snapshot

    def write_group(self, group: str, state: GroupState, *, at: float) -> None:
        """Replace ``group`` with ``state`` and stamp it with ``at``."""

        expected = _GROUP_TYPES.get(group)
        if expected is None:
            raise KeyError(f"unknown snapshot group {group!r}")
        if not isinstance(state, expected):
            raise TypeError(
                f"group {group!r} expects {expected.__name__}, got {type(state).__name__}"
            )
        with self._lock:
            current = self._snapshot
            self._snapshot = replace(
                current,
                **{group: state},
                updated=replace(current.updated, **{group: float(at)}),
            )

    def stale_groups(self, now: float, stale_after: float) -> frozenset[str]:
        """Return the groups seen at least once but not within ``stale_after``."""

        updated = self.read().updated
        stale = set()
        for group in GROUPS:
            stamp = getattr(updated, group)
            if stamp is not None and now - stamp >= stale_after:
                stale.add(group)
        return frozenset(stale)
