"""Helpers to load project-level configuration files and resolve settings."""

from __future__ import annotations

import os
from collections.abc import Mapping as ABCMapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore

from .dashboard.render import DEFAULT_STALE_AFTER, DEFAULT_TICK
from .telemetry.history import DEFAULT_HISTORY_CAPACITY
from .telemetry.udp import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_QUEUE_SIZE

__all__ = [
    "ConfigurationError",
    "PORT_ENV_VARS",
    "Settings",
    "load_project_config",
    "parse_port",
]


_PROJECT_FILENAME = "pyproject.toml"
_TOOL_SECTION = "dcs_dash"

PORT_ENV_VARS = ("DCS_DASH_PORT", "PORT")


class ConfigurationError(ValueError):
    """Raised when a configuration value cannot be interpreted."""


def _as_dict(payload: ABCMapping[str, Any]) -> dict[str, Any]:
    """Recursively coerce TOML mappings into regular dictionaries."""

    result: dict[str, Any] = {}
    for key, value in payload.items():
        key_str = str(key)
        if isinstance(value, ABCMapping):
            result[key_str] = _as_dict(value)
        else:
            result[key_str] = value
    return result


def _resolve_pyproject_path(candidate: Path) -> Path | None:
    """Return the concrete ``pyproject.toml`` path for ``candidate`` if possible."""

    candidate = candidate.expanduser()
    if candidate.suffix == ".toml":
        return candidate
    if candidate.suffix:
        return None
    return candidate / _PROJECT_FILENAME


def load_project_config(path: Path) -> tuple[dict[str, Any], Path] | None:
    """Load the ``[tool.dcs_dash]`` section from a TOML file.

    ``path`` may name a directory (its ``pyproject.toml`` is read) or a TOML
    file directly.  Returns ``None`` when the file or section is missing.
    """

    pyproject_path = _resolve_pyproject_path(path)
    if pyproject_path is None:
        return None
    pyproject_path = pyproject_path.resolve(strict=False)
    if not pyproject_path.is_file():
        return None
    with pyproject_path.open("rb") as handle:
        try:
            payload = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(f"Invalid TOML in {pyproject_path}: {exc}") from exc

    tool_section = payload.get("tool")
    if not isinstance(tool_section, ABCMapping):
        return None
    section = tool_section.get(_TOOL_SECTION)
    if not isinstance(section, ABCMapping):
        return None
    return _as_dict(section), pyproject_path


def _section(config: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = config.get(name, {})
    if isinstance(value, ABCMapping):
        return value
    raise ConfigurationError(f"[{name}] must be a table, got {type(value).__name__}")


def _int(value: Any, name: str, *, minimum: int) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None
    if number < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {number}")
    return number


def _float(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None
    if not number > 0:
        raise ConfigurationError(f"{name} must be positive, got {number}")
    return number


def parse_port(value: Any, name: str = "port") -> int:
    port = _int(value, name, minimum=0)
    if port > 65535:
        raise ConfigurationError(f"{name} must be <= 65535, got {port}")
    return port


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings for the dashboard."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    queue_size: int = DEFAULT_QUEUE_SIZE
    tick: float = DEFAULT_TICK
    history: int = DEFAULT_HISTORY_CAPACITY
    stale_after: float = DEFAULT_STALE_AFTER
    ascii_only: bool = False

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Settings":
        """Build settings from a ``[tool.dcs_dash]`` mapping and the environment.

        The listen port is taken from the first of ``DCS_DASH_PORT`` and
        ``PORT`` that is set, falling back to ``telemetry.port``.
        """

        environ = os.environ if environ is None else environ
        telemetry = _section(config, "telemetry")
        dashboard = _section(config, "dashboard")

        port = parse_port(telemetry.get("port", DEFAULT_PORT), "telemetry.port")
        for variable in PORT_ENV_VARS:
            raw = environ.get(variable)
            if raw:
                port = parse_port(raw.strip(), variable)
                break

        tick_ms = dashboard.get("tick_ms")
        return cls(
            host=str(telemetry.get("host", DEFAULT_HOST)),
            port=port,
            queue_size=_int(
                telemetry.get("queue_size", DEFAULT_QUEUE_SIZE), "telemetry.queue_size", minimum=1
            ),
            tick=DEFAULT_TICK
            if tick_ms is None
            else _float(tick_ms, "dashboard.tick_ms") / 1000.0,
            history=_int(
                dashboard.get("history", DEFAULT_HISTORY_CAPACITY), "dashboard.history", minimum=1
            ),
            stale_after=_float(
                dashboard.get("stale_after", DEFAULT_STALE_AFTER), "dashboard.stale_after"
            ),
            ascii_only=bool(dashboard.get("ascii", False)),
        )
