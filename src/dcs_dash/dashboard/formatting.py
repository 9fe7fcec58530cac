"""Display strings for the dashboard panels.

Every helper renders an absent value as :data:`PLACEHOLDER` padded to the
width the value would have used, so columns stay aligned while the exporter
warms up or when an airframe does not provide a channel.
"""

from __future__ import annotations

from typing import Callable, Optional

from ..telemetry.snapshot import (
    EngineState,
    FlightState,
    MechState,
    Reading,
    SidePair,
)
from ..telemetry.units import ms_to_kmh, ms_to_knots, rad_to_deg, ratio_to_percent

__all__ = [
    "PLACEHOLDER",
    "attitude_lines",
    "flight_lines",
    "format_pair",
    "format_value",
    "header_text",
    "systems_lines",
]

PLACEHOLDER = "---"


def format_value(
    value: Optional[float],
    fmt: str,
    *,
    width: int = 0,
    convert: Callable[[float], float] | None = None,
) -> str:
    """Format ``value`` with ``fmt`` or return the padded placeholder."""

    if value is None:
        return PLACEHOLDER.rjust(width)
    if convert is not None:
        value = convert(value)
    return format(value, fmt).rjust(width)


def _reading_value(reading: Optional[Reading]) -> Optional[float]:
    return None if reading is None else reading.value


def format_pair(
    label: str,
    pair: SidePair,
    *,
    percent: bool = False,
) -> str:
    convert = ratio_to_percent if percent else None
    left = format_value(_reading_value(pair.left), ".1f", width=6, convert=convert)
    right = format_value(_reading_value(pair.right), ".1f", width=6, convert=convert)
    return f"{label}: L {left}  R {right}"


def header_text(flight: FlightState, *, stale: bool = False, waiting: bool = False) -> str:
    name = flight.name or "?"
    lat = format_value(flight.lat, ".5f")
    lon = format_value(flight.lon, ".5f")
    status = ""
    if waiting:
        status = "   [waiting for telemetry]"
    elif stale:
        status = "   [STALE]"
    return (
        f" DCS Dash | Airframe: {name}   POS: {lat}, {lon}{status}"
        "   q / Esc / Ctrl+C to exit "
    )


def flight_lines(flight: FlightState) -> list[str]:
    ias_kt = format_value(flight.ias, ".1f", width=6, convert=ms_to_knots)
    ias_kmh = format_value(flight.ias, ".1f", width=6, convert=ms_to_kmh)
    tas_kt = format_value(flight.tas, ".1f", width=6, convert=ms_to_knots)
    alt = format_value(flight.alt_msl, ".0f", width=8)
    agl = format_value(flight.alt_agl, ".0f", width=7)
    mach = format_value(flight.mach, ".2f", width=4)
    vv = format_value(flight.vv, ".1f", width=6)
    return [
        f"IAS: {ias_kt} kt ({ias_kmh} km/h)",
        f"TAS: {tas_kt} kt",
        f"ALT MSL: {alt} m   AGL: {agl} m",
        f"Mach: {mach}   VV: {vv} m/s",
    ]


def attitude_lines(flight: FlightState) -> list[str]:
    aoa = format_value(flight.aoa, ".2f", width=5, convert=rad_to_deg)
    pitch = format_value(flight.pitch, ".2f", width=6, convert=rad_to_deg)
    bank = format_value(flight.bank, ".2f", width=6, convert=rad_to_deg)
    yaw = format_value(flight.yaw, ".2f", width=6, convert=rad_to_deg)
    ax = format_value(flight.accel_x, ".2f", width=5)
    ay = format_value(flight.accel_y, ".2f", width=5)
    az = format_value(flight.accel_z, ".2f", width=5)
    return [
        f"AoA: {aoa}°",
        f"Pitch: {pitch}°  Bank: {bank}°  Yaw: {yaw}°",
        f"Accel G: X {ax}  Y {ay}  Z {az}",
    ]


def _any_derived(pair: SidePair) -> bool:
    return any(reading is not None and reading.derived for reading in (pair.left, pair.right))


def _mech_line(label: str, reading: Optional[Reading], *, guess_label: str = "") -> str:
    if reading is not None and reading.derived and guess_label:
        label = f"{label} {guess_label}"
    return f"{label}: {format_value(_reading_value(reading), '.2f', width=5)}"


def systems_lines(engine: EngineState, mech: MechState) -> list[str]:
    lines: list[str] = []
    if engine.rpm.present:
        lines.append(format_pair("RPM %", engine.rpm))
    throttle_label = "THR % (est)" if _any_derived(engine.throttle) else "THR %"
    lines.append(format_pair(throttle_label, engine.throttle, percent=True))
    if engine.nozzle_present:
        lines.append(format_pair("NOZ %", engine.nozzle, percent=True))
    if engine.temperature.present:
        lines.append(format_pair("TEMP", engine.temperature))
    if engine.fuel_flow.present:
        lines.append(format_pair("FF", engine.fuel_flow))
    if engine.manifold_present:
        lines.append(format_pair("MAP", engine.manifold))

    lines.append("")
    lines.extend(
        [
            _mech_line("Gear", mech.gear),
            _mech_line("Flaps", mech.flaps),
            _mech_line("Airbrk", mech.airbrake),
            _mech_line("Hook", mech.hook),
            _mech_line("Wing", mech.wing),
            _mech_line("WoW", mech.wow, guess_label="(guess)"),
        ]
    )
    return lines
