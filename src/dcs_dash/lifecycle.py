"""Startup and shutdown orchestration for the live dashboard."""

from __future__ import annotations

import asyncio
import logging
import signal
from enum import Enum
from typing import Callable, Optional, Protocol

from .configuration import Settings
from .dashboard.render import RenderLoop
from .dashboard.screen import CursesDisplay, Display
from .telemetry.history import HistoryBuffer
from .telemetry.normalizer import Normalizer
from .telemetry.snapshot import SnapshotStore
from .telemetry.udp import IngestionTask, TelemetryUDPReceiver

__all__ = ["DashboardController", "LifecycleState", "ManagedDisplay"]


logger = logging.getLogger(__name__)


_SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class LifecycleState(str, Enum):
    STARTING = "starting"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


class ManagedDisplay(Display, Protocol):
    """Display that owns terminal state and exposes a readable key source."""

    def open(self) -> object: ...

    def close(self) -> None: ...

    def fileno(self) -> Optional[int]: ...


class DashboardController:
    """Own the receiver, the ingestion and render tasks and the terminal.

    ``run`` binds the telemetry socket first so a bind failure surfaces before
    the terminal is taken over.  Shutdown is requested by a quit key, a
    SIGINT/SIGTERM or :meth:`request_shutdown`.
    """

    def __init__(
        self,
        settings: Settings = Settings(),
        display_factory: Optional[Callable[[], ManagedDisplay]] = None,
    ) -> None:
        self.settings = settings
        self._display_factory = display_factory or (
            lambda: CursesDisplay(ascii_only=settings.ascii_only)
        )
        self.state = LifecycleState.STARTING
        self.store = SnapshotStore()
        self.ias_history = HistoryBuffer(settings.history)
        self.alt_history = HistoryBuffer(settings.history)
        self.receiver: Optional[TelemetryUDPReceiver] = None
        self.render: Optional[RenderLoop] = None
        self._shutdown = asyncio.Event()
        self._ready = asyncio.Event()

    def request_shutdown(self) -> None:
        if self._shutdown.is_set():
            return
        logger.info("Shutdown requested.", extra={"event": "lifecycle.shutdown_requested"})
        self._shutdown.set()

    async def wait_running(self) -> None:
        """Block until the controller has entered :attr:`LifecycleState.RUNNING`."""

        await self._ready.wait()

    async def run(self) -> int:
        loop = asyncio.get_running_loop()
        settings = self.settings

        try:
            receiver = await TelemetryUDPReceiver.create(
                settings.host, settings.port, queue_size=settings.queue_size
            )
        except OSError:
            self._set_state(LifecycleState.STOPPED)
            raise
        self.receiver = receiver

        display = self._display_factory()
        try:
            display.open()
        except BaseException:
            receiver.close()
            self._set_state(LifecycleState.STOPPED)
            raise
        render = RenderLoop(
            self.store,
            self.ias_history,
            self.alt_history,
            display,
            tick=settings.tick,
            stale_after=settings.stale_after,
            shutdown=self._shutdown,
            ascii_only=settings.ascii_only,
        )
        self.render = render
        ingestion = IngestionTask(
            receiver,
            Normalizer(self.store, self.ias_history, self.alt_history),
        )

        reader_fd = display.fileno()
        if reader_fd is not None:
            loop.add_reader(reader_fd, render.on_input)
        installed = self._install_signal_handlers(loop)

        tasks = [
            asyncio.create_task(ingestion.run(), name="dcs_dash.ingestion"),
            asyncio.create_task(render.run(), name="dcs_dash.render"),
        ]
        # Either task ending on its own means the dashboard cannot continue.
        for task in tasks:
            task.add_done_callback(lambda _task: self.request_shutdown())
        self._set_state(LifecycleState.RUNNING)
        self._ready.set()
        logger.info(
            "Dashboard running.",
            extra={
                "event": "lifecycle.running",
                "host": receiver.address[0],
                "port": receiver.address[1],
            },
        )
        failure: Optional[BaseException] = None
        try:
            await self._shutdown.wait()
        finally:
            self._set_state(LifecycleState.SHUTTING_DOWN)
            for task in tasks:
                task.cancel()
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for task, result in zip(tasks, results):
                if isinstance(result, BaseException) and not isinstance(
                    result, asyncio.CancelledError
                ):
                    logger.error(
                        "Dashboard task failed.",
                        extra={"event": "lifecycle.task_failed", "task": task.get_name()},
                        exc_info=result,
                    )
                    if failure is None:
                        failure = result
            receiver.close()
            if reader_fd is not None:
                loop.remove_reader(reader_fd)
            for signum in installed:
                loop.remove_signal_handler(signum)
            display.close()
            self._set_state(LifecycleState.STOPPED)
        if failure is not None:
            raise failure
        return 0

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> list[int]:
        installed: list[int] = []
        for signum in _SHUTDOWN_SIGNALS:
            try:
                loop.add_signal_handler(signum, self.request_shutdown)
            except (NotImplementedError, RuntimeError, ValueError):
                logger.debug(
                    "Signal handler unavailable.",
                    extra={"event": "lifecycle.signal_unavailable", "signal": int(signum)},
                )
                continue
            installed.append(signum)
        return installed

    def _set_state(self, state: LifecycleState) -> None:
        logger.info(
            "Lifecycle state changed.",
            extra={"event": "lifecycle.state", "from": self.state.value, "to": state.value},
        )
        self.state = state
