"""Resolve decoded samples into the canonical snapshot.

The normaliser merges each :class:`~dcs_dash.telemetry.decoder.RawSample`
into the :class:`~dcs_dash.telemetry.snapshot.SnapshotStore`:

* fields absent from a sample keep their previous value;
* a scalar engine channel applies to the left side only;
* throttle is estimated from RPM when the exporter omits it;
* weight-on-wheels is inferred from AGL, vertical speed and TAS when the
  exporter omits it;
* every ratio is clamped into ``[0, 1]``.
"""

from __future__ import annotations

import time
from dataclasses import replace
from typing import Callable, Optional, Tuple

from .decoder import Channel, Paired, RawEngine, RawMech, RawSample, Scalar
from .history import HistoryBuffer
from .snapshot import (
    ENGINE,
    FLIGHT,
    MECH,
    EngineState,
    FlightState,
    MechState,
    Provenance,
    Reading,
    SidePair,
    SnapshotStore,
)
from .units import clamp_ratio

__all__ = [
    "WOW_MAX_AGL",
    "WOW_MAX_TAS",
    "WOW_MAX_VERTICAL_SPEED",
    "Normalizer",
    "estimate_throttle",
    "infer_weight_on_wheels",
    "resolve_channel",
]


WOW_MAX_AGL = 0.5
WOW_MAX_VERTICAL_SPEED = 1.0
WOW_MAX_TAS = 2.0


def resolve_channel(channel: Optional[Channel]) -> Tuple[Optional[float], Optional[float]]:
    """Return the ``(left, right)`` slots described by ``channel``."""

    if channel is None:
        return None, None
    if isinstance(channel, Scalar):
        return channel.value, None
    if isinstance(channel, Paired):
        return channel.left, channel.right
    raise TypeError(f"unsupported channel variant {type(channel).__name__}")


def estimate_throttle(rpm_percent: float) -> float:
    return clamp_ratio(rpm_percent / 100.0)


def infer_weight_on_wheels(
    alt_agl: Optional[float], vv: Optional[float], tas: Optional[float]
) -> bool:
    """Return ``True`` when the aircraft is evidently resting on the ground."""

    if alt_agl is None or vv is None or tas is None:
        return False
    return alt_agl < WOW_MAX_AGL and abs(vv) < WOW_MAX_VERTICAL_SPEED and tas < WOW_MAX_TAS


def _pick(new: Optional[float], old: Optional[float]) -> Optional[float]:
    return old if new is None else new


_FLIGHT_FIELDS = (
    "name",
    "lat",
    "lon",
    "alt_msl",
    "alt_agl",
    "ias_ms",
    "tas_ms",
    "mach",
    "aoa_rad",
    "vv_ms",
    "attitude",
    "accel",
)


def _carries_flight(sample: RawSample) -> bool:
    return any(getattr(sample, name) is not None for name in _FLIGHT_FIELDS)


def _merge_side(
    current: Optional[Reading],
    value: Optional[float],
    provenance: Provenance,
    *,
    ratio: bool,
) -> Optional[Reading]:
    if value is None:
        return current
    if ratio:
        value = clamp_ratio(value)
    return Reading(value, provenance)


def _merge_pair(
    current: SidePair,
    channel: Optional[Channel],
    *,
    ratio: bool = False,
    provenance: Provenance = Provenance.MEASURED,
) -> SidePair:
    left, right = resolve_channel(channel)
    return SidePair(
        left=_merge_side(current.left, left, provenance, ratio=ratio),
        right=_merge_side(current.right, right, provenance, ratio=ratio),
    )


def _merge_ratio(
    current: Optional[Reading],
    value: Optional[float],
    provenance: Provenance = Provenance.MEASURED,
) -> Optional[Reading]:
    return _merge_side(current, value, provenance, ratio=True)


class Normalizer:
    """Apply decoded samples to a snapshot store and history buffers."""

    def __init__(
        self,
        store: SnapshotStore,
        ias_history: HistoryBuffer,
        alt_history: HistoryBuffer,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store
        self.ias_history = ias_history
        self.alt_history = alt_history
        self._clock = clock

    def apply(self, sample: RawSample) -> None:
        now = self._clock()
        current = self.store.read()

        flight = self._merge_flight(current.flight, sample)
        if _carries_flight(sample):
            self.store.write_group(FLIGHT, flight, at=now)

        if sample.engine is not None:
            engine = self._merge_engine(current.engine, sample.engine)
            self.store.write_group(ENGINE, engine, at=now)

        mech = self._merge_mech(current.mech, sample.mech, flight)
        if sample.mech is not None or mech != current.mech:
            self.store.write_group(MECH, mech, at=now)

        if sample.ias_ms is not None:
            self.ias_history.append(sample.ias_ms)
        if sample.alt_msl is not None:
            self.alt_history.append(sample.alt_msl)

    @staticmethod
    def _merge_flight(current: FlightState, sample: RawSample) -> FlightState:
        attitude = sample.attitude
        accel = sample.accel
        return replace(
            current,
            name=sample.name if sample.name else current.name,
            lat=_pick(sample.lat, current.lat),
            lon=_pick(sample.lon, current.lon),
            alt_msl=_pick(sample.alt_msl, current.alt_msl),
            alt_agl=_pick(sample.alt_agl, current.alt_agl),
            ias=_pick(sample.ias_ms, current.ias),
            tas=_pick(sample.tas_ms, current.tas),
            mach=_pick(sample.mach, current.mach),
            aoa=_pick(sample.aoa_rad, current.aoa),
            vv=_pick(sample.vv_ms, current.vv),
            pitch=_pick(attitude.pitch if attitude else None, current.pitch),
            bank=_pick(attitude.bank if attitude else None, current.bank),
            yaw=_pick(attitude.yaw if attitude else None, current.yaw),
            accel_x=_pick(accel.x if accel else None, current.accel_x),
            accel_y=_pick(accel.y if accel else None, current.accel_y),
            accel_z=_pick(accel.z if accel else None, current.accel_z),
        )

    @staticmethod
    def _merge_engine(current: EngineState, raw: RawEngine) -> EngineState:
        rpm = _merge_pair(current.rpm, raw.rpm)

        direct = (
            Provenance.ESTIMATED if raw.throttle_estimated else Provenance.MEASURED
        )
        throttle = _merge_pair(current.throttle, raw.throttle, ratio=True, provenance=direct)
        thr_left, thr_right = resolve_channel(raw.throttle)
        rpm_left, rpm_right = resolve_channel(raw.rpm)
        if thr_left is None and rpm_left is not None:
            throttle = replace(
                throttle, left=Reading(estimate_throttle(rpm_left), Provenance.ESTIMATED)
            )
        if thr_right is None and rpm_right is not None:
            throttle = replace(
                throttle, right=Reading(estimate_throttle(rpm_right), Provenance.ESTIMATED)
            )

        nozzle = _merge_pair(current.nozzle, raw.nozzle, ratio=True)
        manifold = _merge_pair(current.manifold, raw.manifold)
        return EngineState(
            rpm=rpm,
            throttle=throttle,
            nozzle=nozzle,
            nozzle_present=bool(
                current.nozzle_present or raw.nozzle_present or nozzle.present
            ),
            temperature=_merge_pair(current.temperature, raw.temperature),
            fuel_flow=_merge_pair(current.fuel_flow, raw.fuel_flow),
            manifold=manifold,
            manifold_present=bool(
                current.manifold_present or raw.manifold_present or manifold.present
            ),
        )

    @staticmethod
    def _merge_mech(
        current: MechState, raw: Optional[RawMech], flight: FlightState
    ) -> MechState:
        if raw is None:
            raw = RawMech()
        if raw.wow is not None:
            provenance = Provenance.INFERRED if raw.wow_guess else Provenance.MEASURED
            wow = _merge_ratio(current.wow, raw.wow, provenance)
        elif current.wow is not None and current.wow.provenance is Provenance.MEASURED:
            wow = current.wow
        elif infer_weight_on_wheels(flight.alt_agl, flight.vv, flight.tas):
            wow = Reading(1.0, Provenance.INFERRED)
        elif current.wow is not None and None not in (flight.alt_agl, flight.vv, flight.tas):
            # An inferred contact is released once the kinematics disagree.
            wow = Reading(0.0, Provenance.INFERRED)
        else:
            wow = current.wow
        return MechState(
            gear=_merge_ratio(current.gear, raw.gear),
            flaps=_merge_ratio(current.flaps, raw.flaps),
            airbrake=_merge_ratio(current.airbrake, raw.airbrake),
            hook=_merge_ratio(current.hook, raw.hook),
            wing=_merge_ratio(current.wing, raw.wing),
            wow=wow,
        )
