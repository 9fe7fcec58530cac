"""Sparkline rendering."""

from __future__ import annotations

import math

from dcs_dash.visualization.sparkline import (
    ASCII_SPARKLINE_BLOCKS,
    DEFAULT_SPARKLINE_BLOCKS,
    render_sparkline,
)


def test_empty_series_renders_nothing() -> None:
    assert render_sparkline([]) == ""


def test_ramp_uses_lowest_and_highest_blocks() -> None:
    line = render_sparkline([0.0, 1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0])

    assert line == DEFAULT_SPARKLINE_BLOCKS
    assert len(line) == 8


def test_flat_series_renders_baseline() -> None:
    assert render_sparkline([3.0, 3.0, 3.0]) == DEFAULT_SPARKLINE_BLOCKS[0] * 3


def test_width_keeps_most_recent_samples() -> None:
    line = render_sparkline([0.0, 100.0, 0.0, 10.0], width=2)

    assert len(line) == 2
    assert line[0] == DEFAULT_SPARKLINE_BLOCKS[0]
    assert line[1] == DEFAULT_SPARKLINE_BLOCKS[-1]


def test_zero_width_renders_nothing() -> None:
    assert render_sparkline([1.0, 2.0], width=0) == ""


def test_floor_anchors_the_scale() -> None:
    line = render_sparkline([50.0, 100.0], floor=0.0, blocks="0123")

    # 50 of 100 on a four-step palette rounds to the middle-high step.
    assert line == "23"


def test_values_below_floor_clamp_to_lowest_block() -> None:
    assert render_sparkline([-5.0, 10.0], floor=0.0, blocks="ab") == "ab"


def test_non_finite_values_are_skipped() -> None:
    line = render_sparkline([math.nan, 1.0, math.inf, 2.0])

    assert len(line) == 2


def test_ascii_palette() -> None:
    line = render_sparkline([0.0, 1.0], blocks=ASCII_SPARKLINE_BLOCKS)

    assert line == ASCII_SPARKLINE_BLOCKS[0] + ASCII_SPARKLINE_BLOCKS[-1]
    assert line.isascii()


def test_extreme_finite_range_renders_flat() -> None:
    assert render_sparkline([-1e308, 1e308], blocks="ab") == "aa"
