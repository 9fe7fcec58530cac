"""Curses backend painting dashboard frames.

The layout mirrors the classic cockpit dashboard: a three-row status header,
a row of three text panels and two full-width sparkline charts sharing the
remaining height.  A fullscreen pane replaces everything below the header.
"""

from __future__ import annotations

import curses
import logging
import sys
from typing import Optional, Protocol, Sequence

from .layout import Chart, Frame, Panel

__all__ = ["CursesDisplay", "Display", "KEY_NAMES"]


logger = logging.getLogger(__name__)


HEADER_ROWS = 3
PANEL_ROWS = 12
_FOCUS_PAIR = 1
_STALE_PAIR = 2

KEY_NAMES = {
    27: "esc",
    3: "ctrl+c",
    10: "enter",
    13: "enter",
    curses.KEY_ENTER: "enter",
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
    curses.KEY_RESIZE: "resize",
}


class Display(Protocol):
    """Surface the render loop draws onto."""

    def chart_width(self) -> int: ...

    def draw(self, frame: Frame) -> None: ...

    def read_keys(self) -> list[str]: ...


def _key_name(code: int) -> Optional[str]:
    if code in KEY_NAMES:
        return KEY_NAMES[code]
    if 32 <= code < 127:
        return "space" if code == 32 else chr(code)
    return None


def _safe_addstr(win, y: int, x: int, text: str, attr: int = 0) -> None:
    """Add ``text`` clipped to the window without raising on small terminals."""

    height, width = win.getmaxyx()
    if y < 0 or y >= height or x < 0 or x >= width or not text:
        return
    text = text[: width - x]
    try:
        win.addstr(y, x, text, attr)
    except curses.error:
        # Writing the bottom-right cell moves the cursor off-screen and raises
        # even though the text was drawn.
        return


class CursesDisplay:
    """Full-screen terminal display backed by :mod:`curses`."""

    def __init__(self, *, ascii_only: bool = False) -> None:
        self.ascii_only = ascii_only
        self._screen = None
        self._colors = False

    def open(self) -> "CursesDisplay":
        if self._screen is not None:
            return self
        screen = curses.initscr()
        curses.noecho()
        curses.raw()
        screen.keypad(True)
        screen.nodelay(True)
        try:
            curses.curs_set(0)
        except curses.error:
            logger.debug("Terminal does not support hiding the cursor.")
        if curses.has_colors():
            curses.start_color()
            background = curses.COLOR_BLACK
            try:
                curses.use_default_colors()
                background = -1
            except curses.error:
                logger.debug("Terminal does not support default colours.")
            curses.init_pair(_FOCUS_PAIR, curses.COLOR_YELLOW, background)
            curses.init_pair(_STALE_PAIR, curses.COLOR_RED, background)
            self._colors = True
        self._screen = screen
        return self

    def close(self) -> None:
        screen = self._screen
        if screen is None:
            return
        self._screen = None
        screen.keypad(False)
        curses.noraw()
        curses.echo()
        curses.endwin()

    def __enter__(self) -> "CursesDisplay":
        return self.open()

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def fileno(self) -> int:
        return sys.stdin.fileno()

    def chart_width(self) -> int:
        if self._screen is None:
            return 0
        _, width = self._screen.getmaxyx()
        return max(width - 2, 0)

    def read_keys(self) -> list[str]:
        screen = self._screen
        if screen is None:
            return []
        keys: list[str] = []
        while True:
            code = screen.getch()
            if code == -1:
                break
            name = _key_name(code)
            if name is not None:
                keys.append(name)
        return keys

    def draw(self, frame: Frame) -> None:
        screen = self._screen
        if screen is None:
            return
        height, width = screen.getmaxyx()
        screen.erase()
        self._box(0, 0, HEADER_ROWS, width, "Status", False, [frame.header])

        body_top = HEADER_ROWS
        body_rows = max(height - body_top, 0)
        if frame.fullscreen is not None:
            self._pane(frame.pane(frame.fullscreen), body_top, 0, body_rows, width)
        else:
            panel_rows = min(PANEL_ROWS, body_rows)
            columns = _split(width, (33, 34, 33))
            left = 0
            for panel, column_width in zip(frame.panels, columns):
                self._pane(panel, body_top, left, panel_rows, column_width)
                left += column_width
            chart_top = body_top + panel_rows
            chart_rows = max(height - chart_top, 0)
            first = chart_rows // 2
            heights = (first, chart_rows - first)
            for chart, rows in zip(frame.charts, heights):
                self._pane(chart, chart_top, 0, rows, width)
                chart_top += rows
        screen.noutrefresh()
        curses.doupdate()

    def _pane(self, item: Panel | Chart, top: int, left: int, rows: int, cols: int) -> None:
        if isinstance(item, Chart):
            self._chart(item, top, left, rows, cols)
        else:
            self._box(top, left, rows, cols, item.title, item.focused, item.lines)

    def _chart(self, chart: Chart, top: int, left: int, rows: int, cols: int) -> None:
        if rows < 3 or cols < 3:
            return
        lines = [""] * (rows - 3) + [chart.sparkline]
        self._box(top, left, rows, cols, chart.title, chart.focused, lines)

    def _box(
        self,
        top: int,
        left: int,
        rows: int,
        cols: int,
        title: str,
        focused: bool,
        lines: Sequence[str],
    ) -> None:
        screen = self._screen
        if screen is None or rows < 2 or cols < 2:
            return
        attr = curses.A_NORMAL
        if focused:
            attr = curses.color_pair(_FOCUS_PAIR) if self._colors else curses.A_BOLD
        horizontal = "-" * (cols - 2)
        _safe_addstr(screen, top, left, "+" + horizontal + "+", attr)
        _safe_addstr(screen, top + rows - 1, left, "+" + horizontal + "+", attr)
        for row in range(top + 1, top + rows - 1):
            _safe_addstr(screen, row, left, "|", attr)
            _safe_addstr(screen, row, left + cols - 1, "|", attr)
        title_attr = attr
        if title.endswith("[STALE]") and self._colors:
            title_attr = curses.color_pair(_STALE_PAIR)
        _safe_addstr(screen, top, left + 1, title[: max(cols - 2, 0)], title_attr)
        for offset, line in enumerate(lines[: rows - 2]):
            _safe_addstr(screen, top + 1 + offset, left + 1, line[: cols - 2])


def _split(total: int, percentages: Sequence[int]) -> list[int]:
    widths = [total * share // 100 for share in percentages]
    widths[-1] += total - sum(widths)
    return widths
