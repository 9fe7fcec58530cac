"""Frame composition, formatting and focus navigation."""

from __future__ import annotations

import pytest

from dcs_dash.dashboard import Direction, Pane, ViewState, compose_frame, move_focus
from dcs_dash.dashboard.formatting import (
    PLACEHOLDER,
    format_pair,
    format_value,
    header_text,
    systems_lines,
)
from dcs_dash.telemetry import HistoryBuffer, Normalizer, SnapshotStore
from dcs_dash.telemetry.snapshot import EngineState, FlightState, MechState, SidePair
from tests.helpers import ManualClock, decode_one


@pytest.mark.parametrize(
    "start, direction, expected",
    [
        (Pane.FLIGHT, Direction.RIGHT, Pane.ATTITUDE),
        (Pane.SYSTEMS, Direction.RIGHT, Pane.FLIGHT),
        (Pane.FLIGHT, Direction.LEFT, Pane.SYSTEMS),
        (Pane.ATTITUDE, Direction.DOWN, Pane.IAS_CHART),
        (Pane.IAS_CHART, Direction.DOWN, Pane.ALT_CHART),
        (Pane.ALT_CHART, Direction.DOWN, Pane.ALT_CHART),
        (Pane.ALT_CHART, Direction.UP, Pane.IAS_CHART),
        (Pane.IAS_CHART, Direction.UP, Pane.FLIGHT),
        (Pane.SYSTEMS, Direction.UP, Pane.SYSTEMS),
        (Pane.IAS_CHART, Direction.LEFT, Pane.IAS_CHART),
    ],
)
def test_move_focus(start: Pane, direction: Direction, expected: Pane) -> None:
    assert move_focus(start, direction) is expected


def test_fullscreen_freezes_focus() -> None:
    view = ViewState(focused=Pane.SYSTEMS).toggle_fullscreen()

    assert view.move(Direction.LEFT) == view
    assert view.toggle_fullscreen() == ViewState(focused=Pane.SYSTEMS)


def test_format_value_placeholder_keeps_width() -> None:
    assert format_value(None, ".1f", width=6) == "   " + PLACEHOLDER
    assert format_value(1.25, ".1f", width=6) == "   1.2"
    assert format_value(2.0, ".0f", convert=lambda value: value * 10) == "20"


def test_format_pair_renders_percent() -> None:
    engine = _engine(thrtl={"L": 0.5, "R": 0.755})

    assert format_pair("THR %", engine.throttle, percent=True) == "THR %: L   50.0  R   75.5"


def test_header_shows_airframe_and_position() -> None:
    text = header_text(FlightState(name="F/A-18C", lat=41.123456, lon=-3.5))

    assert "Airframe: F/A-18C" in text
    assert "POS: 41.12346, -3.50000" in text
    assert "q / Esc / Ctrl+C to exit" in text


def test_header_placeholders_before_telemetry() -> None:
    text = header_text(FlightState(), waiting=True)

    assert "Airframe: ?" in text
    assert "POS: ---, ---" in text
    assert "[waiting for telemetry]" in text


def _engine(**engine: object) -> EngineState:
    store = SnapshotStore()
    normalizer = Normalizer(store, HistoryBuffer(2), HistoryBuffer(2), clock=ManualClock())
    normalizer.apply(decode_one(engine=engine))
    return store.read().engine


def test_systems_rows_follow_presence() -> None:
    lines = systems_lines(EngineState(), MechState())

    assert lines[0].startswith("THR %:")
    assert not any(line.startswith(("RPM", "NOZ", "MAP", "TEMP", "FF")) for line in lines)
    assert lines[-1] == "WoW:   ---"


def test_estimated_throttle_is_labelled() -> None:
    engine = _engine(rpm={"L": 80.0, "R": 82.0}, noz_present=True, map=29.5)

    lines = systems_lines(engine, MechState())

    assert lines[0] == "RPM %: L   80.0  R   82.0"
    assert lines[1] == "THR % (est): L   80.0  R   82.0"
    assert lines[2].startswith("NOZ %:")
    assert any(line.startswith("MAP:") for line in lines)


def test_inferred_wow_is_labelled_as_guess() -> None:
    store = SnapshotStore()
    normalizer = Normalizer(store, HistoryBuffer(2), HistoryBuffer(2), clock=ManualClock())
    normalizer.apply(decode_one(alt_agl=0.1, vv_ms=0.0, tas_ms=0.0, mech={"gear": 1}))
    snapshot = store.read()

    lines = systems_lines(snapshot.engine, snapshot.mech)

    assert "Gear:  1.00" in lines
    assert "WoW (guess):  1.00" in lines


def test_compose_frame_charts_use_display_units() -> None:
    snapshot = SnapshotStore().read()

    frame = compose_frame(
        snapshot,
        [50.0, 100.0],
        [1000.0, 1200.0],
        chart_width=10,
        ascii_only=True,
    )

    ias, alt = frame.charts
    assert ias.title == "IAS (kt)  194"
    assert alt.title == "Altitude MSL (m)  1200"
    assert len(ias.sparkline) == 2
    assert ias.sparkline.isascii()
    assert frame.pane(Pane.FLIGHT).focused
    assert not frame.pane(Pane.IAS_CHART).focused


def test_compose_frame_empty_history_has_placeholder_title() -> None:
    frame = compose_frame(SnapshotStore().read(), [], [])

    assert frame.charts[0].title == "IAS (kt)  ---"
    assert frame.charts[1].sparkline == ""


def test_fullscreen_frame_has_no_focus_highlight() -> None:
    view = ViewState(focused=Pane.ALT_CHART).toggle_fullscreen()

    frame = compose_frame(SnapshotStore().read(), [], [], view=view)

    assert frame.fullscreen is Pane.ALT_CHART
    assert not any(item.focused for item in (*frame.panels, *frame.charts))


def test_side_pair_presence() -> None:
    assert SidePair().present is False
