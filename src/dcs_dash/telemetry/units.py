"""Unit conversions used by the normaliser and the dashboard."""

from __future__ import annotations

import math

__all__ = [
    "KNOTS_PER_MS",
    "KMH_PER_MS",
    "clamp_ratio",
    "ms_to_kmh",
    "ms_to_knots",
    "rad_to_deg",
    "ratio_to_percent",
]

KNOTS_PER_MS = 1.943844
KMH_PER_MS = 3.6


def clamp_ratio(value: float) -> float:
    """Clamp ``value`` into ``[0, 1]``.

    Clamping is idempotent: ``clamp_ratio(clamp_ratio(x)) == clamp_ratio(x)``.
    """

    return min(1.0, max(0.0, float(value)))


def ms_to_knots(value: float) -> float:
    return value * KNOTS_PER_MS


def ms_to_kmh(value: float) -> float:
    return value * KMH_PER_MS


def rad_to_deg(value: float) -> float:
    return math.degrees(value)


def ratio_to_percent(value: float) -> float:
    return value * 100.0
