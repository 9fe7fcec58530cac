"""Terminal dashboard: frame composition, curses backend and render loop."""

from __future__ import annotations

from .layout import Chart, Direction, Frame, Pane, Panel, ViewState, compose_frame, move_focus
from .render import DEFAULT_STALE_AFTER, DEFAULT_TICK, QUIT_KEYS, RenderLoop
from .screen import CursesDisplay, Display

__all__ = [
    "Chart",
    "CursesDisplay",
    "DEFAULT_STALE_AFTER",
    "DEFAULT_TICK",
    "Direction",
    "Display",
    "Frame",
    "Pane",
    "Panel",
    "QUIT_KEYS",
    "RenderLoop",
    "ViewState",
    "compose_frame",
    "move_focus",
]
