"""DCS Dash: a live terminal dashboard for DCS World flight telemetry."""

from __future__ import annotations

from ._version import __version__
from .configuration import Settings
from .lifecycle import DashboardController, LifecycleState

__all__ = ["DashboardController", "LifecycleState", "Settings", "__version__"]
