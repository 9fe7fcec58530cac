"""Frame composition and pane navigation for the dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import AbstractSet, Optional, Sequence

from ..telemetry.snapshot import ENGINE, FLIGHT, MECH, TelemetrySnapshot
from ..telemetry.units import ms_to_knots
from ..visualization.sparkline import (
    ASCII_SPARKLINE_BLOCKS,
    DEFAULT_SPARKLINE_BLOCKS,
    render_sparkline,
)
from .formatting import (
    attitude_lines,
    flight_lines,
    format_value,
    header_text,
    systems_lines,
)

__all__ = [
    "Chart",
    "Direction",
    "Frame",
    "Pane",
    "Panel",
    "ViewState",
    "compose_frame",
    "move_focus",
]


class Pane(Enum):
    FLIGHT = "flight"
    ATTITUDE = "attitude"
    SYSTEMS = "systems"
    IAS_CHART = "ias_chart"
    ALT_CHART = "alt_chart"


class Direction(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


_TOP_ROW = (Pane.FLIGHT, Pane.ATTITUDE, Pane.SYSTEMS)


def move_focus(focused: Pane, direction: Direction) -> Pane:
    """Return the pane reached from ``focused`` when moving in ``direction``.

    Left/right cycle through the top row and do nothing on the charts;
    down walks from the top row to the IAS chart and then the altitude chart.
    """

    if direction in (Direction.LEFT, Direction.RIGHT):
        if focused not in _TOP_ROW:
            return focused
        step = 1 if direction is Direction.RIGHT else -1
        return _TOP_ROW[(_TOP_ROW.index(focused) + step) % len(_TOP_ROW)]
    if direction is Direction.DOWN:
        if focused in _TOP_ROW:
            return Pane.IAS_CHART
        return Pane.ALT_CHART
    if focused is Pane.ALT_CHART:
        return Pane.IAS_CHART
    if focused is Pane.IAS_CHART:
        return Pane.FLIGHT
    return focused


@dataclass(frozen=True)
class ViewState:
    focused: Pane = Pane.FLIGHT
    fullscreen: Optional[Pane] = None

    def move(self, direction: Direction) -> "ViewState":
        if self.fullscreen is not None:
            return self
        return replace(self, focused=move_focus(self.focused, direction))

    def toggle_fullscreen(self) -> "ViewState":
        if self.fullscreen is self.focused:
            return replace(self, fullscreen=None)
        return replace(self, fullscreen=self.focused)


@dataclass(frozen=True)
class Panel:
    pane: Pane
    title: str
    lines: tuple[str, ...]
    focused: bool = False


@dataclass(frozen=True)
class Chart:
    pane: Pane
    title: str
    sparkline: str
    focused: bool = False


@dataclass(frozen=True)
class Frame:
    header: str
    panels: tuple[Panel, ...]
    charts: tuple[Chart, ...]
    fullscreen: Optional[Pane] = None
    stale: frozenset[str] = field(default_factory=frozenset)

    def pane(self, pane: Pane) -> Panel | Chart:
        for item in (*self.panels, *self.charts):
            if item.pane is pane:
                return item
        raise KeyError(pane)


def _title(base: str, stale: bool) -> str:
    return f"{base} [STALE]" if stale else base


def _chart(
    pane: Pane,
    label: str,
    unit: str,
    samples: Sequence[float],
    *,
    width: int,
    ascii_only: bool,
    focused: bool,
) -> Chart:
    latest = format_value(samples[-1] if samples else None, ".0f")
    blocks = ASCII_SPARKLINE_BLOCKS if ascii_only else DEFAULT_SPARKLINE_BLOCKS
    spark = render_sparkline(samples, width=width, floor=0.0, blocks=blocks)
    return Chart(pane=pane, title=f"{label} ({unit})  {latest}", sparkline=spark, focused=focused)


def compose_frame(
    snapshot: TelemetrySnapshot,
    ias_history: Sequence[float],
    alt_history: Sequence[float],
    *,
    view: ViewState = ViewState(),
    stale: AbstractSet[str] = frozenset(),
    chart_width: int = 80,
    ascii_only: bool = False,
) -> Frame:
    """Build the display-ready frame for one render tick.

    ``ias_history`` is in m/s and ``alt_history`` in metres, oldest first.
    """

    def is_focused(pane: Pane) -> bool:
        return view.fullscreen is None and view.focused is pane

    flight_stale = FLIGHT in stale
    systems_stale = ENGINE in stale or MECH in stale
    panels = (
        Panel(
            Pane.FLIGHT,
            _title("Flight", flight_stale),
            tuple(flight_lines(snapshot.flight)),
            is_focused(Pane.FLIGHT),
        ),
        Panel(
            Pane.ATTITUDE,
            _title("Att/Accel", flight_stale),
            tuple(attitude_lines(snapshot.flight)),
            is_focused(Pane.ATTITUDE),
        ),
        Panel(
            Pane.SYSTEMS,
            _title("Systems", systems_stale),
            tuple(systems_lines(snapshot.engine, snapshot.mech)),
            is_focused(Pane.SYSTEMS),
        ),
    )
    charts = (
        _chart(
            Pane.IAS_CHART,
            "IAS",
            "kt",
            [ms_to_knots(value) for value in ias_history],
            width=chart_width,
            ascii_only=ascii_only,
            focused=is_focused(Pane.IAS_CHART),
        ),
        _chart(
            Pane.ALT_CHART,
            "Altitude MSL",
            "m",
            list(alt_history),
            width=chart_width,
            ascii_only=ascii_only,
            focused=is_focused(Pane.ALT_CHART),
        ),
    )
    header = header_text(
        snapshot.flight,
        stale=bool(stale),
        waiting=not snapshot.received,
    )
    return Frame(
        header=header,
        panels=panels,
        charts=charts,
        fullscreen=view.fullscreen,
        stale=frozenset(stale),
    )
