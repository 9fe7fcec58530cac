"""Curses backend helpers that do not need a terminal."""

from __future__ import annotations

import curses

import pytest

from dcs_dash.dashboard import screen
from dcs_dash.dashboard.screen import CursesDisplay


@pytest.mark.parametrize(
    "code, name",
    [
        (27, "esc"),
        (3, "ctrl+c"),
        (10, "enter"),
        (32, "space"),
        (ord("q"), "q"),
        (ord("Q"), "Q"),
        (curses.KEY_LEFT, "left"),
        (curses.KEY_RESIZE, "resize"),
        (0, None),
    ],
)
def test_key_names(code: int, name: str | None) -> None:
    assert screen._key_name(code) == name


def test_split_assigns_remainder_to_last_column() -> None:
    assert screen._split(100, (33, 34, 33)) == [33, 34, 33]
    assert screen._split(80, (33, 34, 33)) == [26, 27, 27]


class _Window:
    def __init__(self, rows: int, cols: int, *, fail: bool = False) -> None:
        self.size = (rows, cols)
        self.fail = fail
        self.writes: list[tuple[int, int, str]] = []

    def getmaxyx(self) -> tuple[int, int]:
        return self.size

    def addstr(self, y: int, x: int, text: str, _attr: int = 0) -> None:
        self.writes.append((y, x, text))
        if self.fail:
            raise curses.error("cursor moved off screen")


def test_safe_addstr_clips_to_window() -> None:
    window = _Window(2, 5)

    screen._safe_addstr(window, 0, 2, "abcdef")
    screen._safe_addstr(window, 5, 0, "outside")

    assert window.writes == [(0, 2, "abc")]


def test_safe_addstr_tolerates_bottom_right_cell() -> None:
    window = _Window(2, 5, fail=True)

    screen._safe_addstr(window, 1, 4, "x")

    assert window.writes == [(1, 4, "x")]


def test_closed_display_is_inert() -> None:
    display = CursesDisplay(ascii_only=True)

    assert display.chart_width() == 0
    assert display.read_keys() == []
    display.close()
