"""Argument parsing helpers for the DCS Dash CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Mapping, Optional

from .._version import __version__
from ..configuration import ConfigurationError, parse_port

__all__ = ["build_parser"]


def _port(value: str) -> int:
    try:
        return parse_port(value, "--port")
    except ConfigurationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number, got {value!r}") from None
    if not number > 0:
        raise argparse.ArgumentTypeError(f"expected a positive number, got {value!r}")
    return number


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return number


def build_parser(config: Optional[Mapping[str, Any]] = None) -> argparse.ArgumentParser:
    config = dict(config or {})
    logging_cfg_raw = config.get("logging", {})
    logging_cfg = dict(logging_cfg_raw) if isinstance(logging_cfg_raw, Mapping) else {}

    parser = argparse.ArgumentParser(
        prog="dcs-dash",
        description="DCS Dash - live terminal dashboard for DCS World telemetry",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to the TOML configuration file to load.",
    )
    parser.add_argument(
        "--port",
        type=_port,
        default=None,
        help="UDP port to listen on (default: $DCS_DASH_PORT, $PORT or 5010).",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Address to bind the telemetry listener to (default: 127.0.0.1).",
    )
    parser.add_argument(
        "--tick-ms",
        dest="tick_ms",
        type=_positive_float,
        default=None,
        help="Render cadence in milliseconds (default: 100).",
    )
    parser.add_argument(
        "--history",
        type=_positive_int,
        default=None,
        help="Number of samples kept for the IAS and altitude charts (default: 300).",
    )
    parser.add_argument(
        "--ascii",
        dest="ascii_only",
        action="store_true",
        default=None,
        help="Draw sparklines with ASCII characters only.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=logging_cfg.get("level", "warning"),
        help="Logging level (e.g. debug, info, warning).",
    )
    parser.add_argument(
        "--log-output",
        dest="log_output",
        default=logging_cfg.get("output", "stderr"),
        help="Logging destination (stdout, stderr or a file path).",
    )
    parser.add_argument(
        "--log-format",
        dest="log_format",
        choices=("json", "text"),
        default=logging_cfg.get("format", "text"),
        help="Logging formatter (json or text).",
    )
    return parser
