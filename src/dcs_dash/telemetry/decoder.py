"""Decoder for the exporter's newline-delimited JSON datagrams.

Each UDP datagram carries one or more JSON objects separated by ``\\n``.
Every numeric field is optional: the exporter writes ``null`` for values it
cannot read (including NaN and infinities), and the decoder maps those to
``None`` so that "not available" is never confused with zero.

Engine channels are vehicle dependent.  Single-engine airframes usually
report a bare number while twins report ``{"L": .., "R": ..}``,
``{"left": .., "right": ..}`` or a two-element array.  The decoder keeps the
distinction as a :data:`Channel` variant and leaves the policy decision to
:mod:`dcs_dash.telemetry.normalizer`.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union

__all__ = [
    "Acceleration",
    "Attitude",
    "Channel",
    "MalformedPacket",
    "Paired",
    "RawEngine",
    "RawMech",
    "RawSample",
    "Scalar",
    "decode_datagram",
    "decode_frame",
    "split_frames",
]


class MalformedPacket(ValueError):
    """Raised when a frame is not a structured JSON object."""


@dataclass(frozen=True, slots=True)
class Scalar:
    """A channel reported as a single number."""

    value: float


@dataclass(frozen=True, slots=True)
class Paired:
    """A channel reported per side."""

    left: Optional[float] = None
    right: Optional[float] = None


Channel = Union[Scalar, Paired]


@dataclass(frozen=True, slots=True)
class Attitude:
    pitch: Optional[float] = None
    bank: Optional[float] = None
    yaw: Optional[float] = None


@dataclass(frozen=True, slots=True)
class Acceleration:
    x: Optional[float] = None
    y: Optional[float] = None
    z: Optional[float] = None


@dataclass(frozen=True, slots=True)
class RawEngine:
    rpm: Optional[Channel] = None
    throttle: Optional[Channel] = None
    throttle_estimated: Optional[bool] = None
    nozzle: Optional[Channel] = None
    nozzle_present: Optional[bool] = None
    temperature: Optional[Channel] = None
    fuel_flow: Optional[Channel] = None
    manifold: Optional[Channel] = None
    manifold_present: Optional[bool] = None


@dataclass(frozen=True, slots=True)
class RawMech:
    gear: Optional[float] = None
    flaps: Optional[float] = None
    airbrake: Optional[float] = None
    hook: Optional[float] = None
    wing: Optional[float] = None
    wow: Optional[float] = None
    wow_guess: Optional[bool] = None


@dataclass(frozen=True, slots=True)
class RawSample:
    """One decoded telemetry frame; every field may be absent."""

    name: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    alt_msl: Optional[float] = None
    alt_agl: Optional[float] = None
    ias_ms: Optional[float] = None
    tas_ms: Optional[float] = None
    mach: Optional[float] = None
    aoa_rad: Optional[float] = None
    vv_ms: Optional[float] = None
    attitude: Optional[Attitude] = None
    accel: Optional[Acceleration] = None
    engine: Optional[RawEngine] = None
    mech: Optional[RawMech] = None


_LEFT_KEYS = ("l", "left")
_RIGHT_KEYS = ("r", "right")


def _number(value: Any) -> Optional[float]:
    # bool is an int subclass; a JSON true in a numeric slot is not a reading.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    if not math.isfinite(number):
        return None
    return number


def _flag(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    number = _number(value)
    if number is None:
        return None
    return number != 0.0


def _text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value


def _ratio_input(value: Any) -> Optional[float]:
    """Coerce mechanical positions which may be numbers, booleans or ``{value}``."""

    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, Mapping):
        return _number(value.get("value"))
    return _number(value)


def _mapping(value: Any) -> Optional[Mapping[str, Any]]:
    if isinstance(value, Mapping):
        return value
    return None


def _side(payload: Mapping[str, Any], keys: Sequence[str]) -> Optional[float]:
    for key, value in payload.items():
        if isinstance(key, str) and key.lower() in keys:
            return _number(value)
    return None


def _channel(value: Any) -> Optional[Channel]:
    if isinstance(value, Mapping):
        left = _side(value, _LEFT_KEYS)
        right = _side(value, _RIGHT_KEYS)
        if left is None and right is None:
            return None
        return Paired(left, right)
    if isinstance(value, (list, tuple)):
        left = _number(value[0]) if len(value) > 0 else None
        right = _number(value[1]) if len(value) > 1 else None
        if left is None and right is None:
            return None
        return Paired(left, right)
    number = _number(value)
    if number is None:
        return None
    return Scalar(number)


def _attitude(value: Any) -> Optional[Attitude]:
    payload = _mapping(value)
    if payload is None:
        return None
    return Attitude(
        pitch=_number(payload.get("pitch")),
        bank=_number(payload.get("bank")),
        yaw=_number(payload.get("yaw")),
    )


def _acceleration(value: Any) -> Optional[Acceleration]:
    payload = _mapping(value)
    if payload is None:
        return None
    return Acceleration(
        x=_number(payload.get("x")),
        y=_number(payload.get("y")),
        z=_number(payload.get("z")),
    )


def _engine(value: Any) -> Optional[RawEngine]:
    payload = _mapping(value)
    if payload is None:
        return None
    return RawEngine(
        rpm=_channel(payload.get("rpm")),
        throttle=_channel(payload.get("thrtl")),
        throttle_estimated=_flag(payload.get("thrtl_est")),
        nozzle=_channel(payload.get("noz")),
        nozzle_present=_flag(payload.get("noz_present")),
        temperature=_channel(payload.get("temp")),
        fuel_flow=_channel(payload.get("fuelf")),
        manifold=_channel(payload.get("map")),
        manifold_present=_flag(payload.get("map_present")),
    )


def _mech(value: Any) -> Optional[RawMech]:
    payload = _mapping(value)
    if payload is None:
        return None
    return RawMech(
        gear=_ratio_input(payload.get("gear")),
        flaps=_ratio_input(payload.get("flaps")),
        airbrake=_ratio_input(payload.get("airbrake")),
        hook=_ratio_input(payload.get("hook")),
        wing=_ratio_input(payload.get("wing")),
        wow=_ratio_input(payload.get("wow")),
        wow_guess=_flag(payload.get("wow_guess")),
    )


def decode_frame(frame: bytes | str) -> RawSample:
    """Decode a single JSON telemetry frame.

    Raises :class:`MalformedPacket` when ``frame`` is not UTF-8 text holding a
    JSON object.  Unknown keys are ignored and known keys with an unexpected
    type are treated as absent.
    """

    if isinstance(frame, (bytes, bytearray, memoryview)):
        try:
            text = bytes(frame).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedPacket(f"frame is not valid UTF-8: {exc}") from exc
    else:
        text = frame
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedPacket(f"frame is not valid JSON: {exc.msg}") from exc
    except (ValueError, RecursionError) as exc:
        # Integers past the digit limit and pathological nesting.
        raise MalformedPacket(f"frame cannot be decoded: {exc}") from exc
    if not isinstance(payload, dict):
        raise MalformedPacket(
            f"frame must be a JSON object, got {type(payload).__name__}"
        )

    return RawSample(
        name=_text(payload.get("name")),
        lat=_number(payload.get("lat")),
        lon=_number(payload.get("lon")),
        alt_msl=_number(payload.get("alt_msl")),
        alt_agl=_number(payload.get("alt_agl")),
        ias_ms=_number(payload.get("ias_ms")),
        tas_ms=_number(payload.get("tas_ms")),
        mach=_number(payload.get("mach")),
        aoa_rad=_number(payload.get("aoa_rad")),
        vv_ms=_number(payload.get("vv_ms")),
        attitude=_attitude(payload.get("att")),
        accel=_acceleration(payload.get("accel")),
        engine=_engine(payload.get("engine")),
        mech=_mech(payload.get("mech")),
    )


def split_frames(payload: bytes) -> list[bytes]:
    """Return the non-blank newline-delimited frames in ``payload``."""

    frames: list[bytes] = []
    for line in bytes(payload).split(b"\n"):
        stripped = line.strip()
        if stripped:
            frames.append(stripped)
    return frames


def decode_datagram(payload: bytes) -> list[RawSample]:
    """Decode every frame carried by ``payload``.

    The first invalid frame aborts decoding with :class:`MalformedPacket`.
    """

    return [decode_frame(frame) for frame in split_frames(payload)]
