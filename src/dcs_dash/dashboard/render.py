"""Render loop running on its own cadence, independent of packet arrival."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from ..telemetry.history import HistoryBuffer
from ..telemetry.snapshot import SnapshotStore
from .layout import Direction, Frame, ViewState, compose_frame
from .screen import Display

__all__ = [
    "DEFAULT_STALE_AFTER",
    "DEFAULT_TICK",
    "QUIT_KEYS",
    "RenderLoop",
]


logger = logging.getLogger(__name__)


DEFAULT_TICK = 0.1
DEFAULT_STALE_AFTER = 1.0

QUIT_KEYS = frozenset({"q", "Q", "esc", "ctrl+c"})
_FULLSCREEN_KEYS = frozenset({"enter", "space", "f"})
_DIRECTION_KEYS = {
    "up": Direction.UP,
    "k": Direction.UP,
    "down": Direction.DOWN,
    "j": Direction.DOWN,
    "left": Direction.LEFT,
    "h": Direction.LEFT,
    "right": Direction.RIGHT,
    "l": Direction.RIGHT,
}


class RenderLoop:
    """Compose and draw a frame every ``tick`` seconds until shutdown."""

    def __init__(
        self,
        store: SnapshotStore,
        ias_history: HistoryBuffer,
        alt_history: HistoryBuffer,
        display: Display,
        *,
        tick: float = DEFAULT_TICK,
        stale_after: float = DEFAULT_STALE_AFTER,
        shutdown: Optional[asyncio.Event] = None,
        ascii_only: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if tick <= 0:
            raise ValueError("render tick must be positive")
        self.store = store
        self.ias_history = ias_history
        self.alt_history = alt_history
        self.display = display
        self.tick = float(tick)
        self.stale_after = float(stale_after)
        self.shutdown = shutdown if shutdown is not None else asyncio.Event()
        self.ascii_only = ascii_only
        self.view = ViewState()
        self.frames = 0
        self.last_frame: Optional[Frame] = None
        self._clock = clock
        self._wake = asyncio.Event()

    def handle_key(self, key: str) -> None:
        if key in QUIT_KEYS:
            logger.info("Quit requested from keyboard.", extra={"event": "render.quit_key", "key": key})
            self.shutdown.set()
            return
        if key in _FULLSCREEN_KEYS:
            self.view = self.view.toggle_fullscreen()
        elif key in _DIRECTION_KEYS:
            self.view = self.view.move(_DIRECTION_KEYS[key])
        elif key != "resize":
            return
        self._wake.set()

    def on_input(self) -> None:
        """Consume pending key presses from the display."""

        for key in self.display.read_keys():
            self.handle_key(key)

    def render_once(self) -> Frame:
        snapshot = self.store.read()
        ias = self.ias_history.snapshot()
        alt = self.alt_history.snapshot()
        stale = self.store.stale_groups(self._clock(), self.stale_after)
        frame = compose_frame(
            snapshot,
            ias,
            alt,
            view=self.view,
            stale=stale,
            chart_width=self.display.chart_width(),
            ascii_only=self.ascii_only,
        )
        self.display.draw(frame)
        self.frames += 1
        self.last_frame = frame
        return frame

    async def run(self) -> None:
        while not self.shutdown.is_set():
            self.render_once()
            await self._wait_next()
        logger.info(
            "Render loop stopped.",
            extra={"event": "render.stopped", "frames": self.frames},
        )

    async def _wait_next(self) -> None:
        """Sleep until the next tick, a view change or shutdown, whichever is first."""

        self._wake.clear()
        waiters = {
            asyncio.ensure_future(self._wake.wait()),
            asyncio.ensure_future(self.shutdown.wait()),
        }
        try:
            await asyncio.wait(waiters, timeout=self.tick, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                waiter.cancel()
