"""Telemetry ingestion: decoding, normalisation and shared live state."""

from __future__ import annotations

from .decoder import (
    Channel,
    MalformedPacket,
    Paired,
    RawSample,
    Scalar,
    decode_datagram,
    decode_frame,
    split_frames,
)
from .history import DEFAULT_HISTORY_CAPACITY, HistoryBuffer
from .normalizer import Normalizer, resolve_channel
from .snapshot import (
    EngineState,
    FlightState,
    MechState,
    Provenance,
    Reading,
    SidePair,
    SnapshotStore,
    TelemetrySnapshot,
)
from .udp import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_QUEUE_SIZE,
    IngestionTask,
    SocketBindFailure,
    TelemetryUDPReceiver,
)
from .units import clamp_ratio

__all__ = [
    "Channel",
    "DEFAULT_HISTORY_CAPACITY",
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_QUEUE_SIZE",
    "EngineState",
    "FlightState",
    "HistoryBuffer",
    "IngestionTask",
    "MalformedPacket",
    "MechState",
    "Normalizer",
    "Paired",
    "Provenance",
    "RawSample",
    "Reading",
    "Scalar",
    "SidePair",
    "SnapshotStore",
    "SocketBindFailure",
    "TelemetrySnapshot",
    "TelemetryUDPReceiver",
    "clamp_ratio",
    "decode_datagram",
    "decode_frame",
    "resolve_channel",
    "split_frames",
]
