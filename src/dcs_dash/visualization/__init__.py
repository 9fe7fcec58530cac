"""Visualisation helpers for DCS Dash."""

from dcs_dash.visualization.sparkline import (
    ASCII_SPARKLINE_BLOCKS,
    DEFAULT_SPARKLINE_BLOCKS,
    render_sparkline,
)

__all__ = ["ASCII_SPARKLINE_BLOCKS", "DEFAULT_SPARKLINE_BLOCKS", "render_sparkline"]
