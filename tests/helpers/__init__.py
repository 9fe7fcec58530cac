"""Convenience re-exports for test helpers."""

from __future__ import annotations

from .clock import ManualClock
from .display import PipeKeyDisplay, RecordingDisplay
from .packets import (
    DEEPLY_NESTED,
    OVERFLOWING_ALTITUDE,
    build_datagram,
    build_frame,
    decode_one,
)
from .udp import bound_udp_socket, send_datagram

__all__ = [
    "DEEPLY_NESTED",
    "OVERFLOWING_ALTITUDE",
    "ManualClock",
    "PipeKeyDisplay",
    "RecordingDisplay",
    "bound_udp_socket",
    "build_datagram",
    "build_frame",
    "decode_one",
    "send_datagram",
]
