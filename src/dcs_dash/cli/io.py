"""Configuration discovery for the DCS Dash CLI."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..configuration import ConfigurationError, load_project_config
from .errors import CliError

__all__ = ["CONFIG_ENV_VAR", "PROJECT_CONFIG_FILENAME", "load_cli_config"]


CONFIG_ENV_VAR = "DCS_DASH_CONFIG"
PROJECT_CONFIG_FILENAME = "pyproject.toml"


def _normalise_cli_config(payload: Mapping[str, Any], source: Path) -> dict[str, Any]:
    data = {str(key): value for key, value in payload.items()}
    data["_config_path"] = str(source.expanduser().resolve())
    return data


def _iter_unique_paths(candidates: List[Path]) -> List[Path]:
    seen: Dict[Path, None] = {}
    ordered: List[Path] = []
    for candidate in candidates:
        resolved = candidate.expanduser().resolve(strict=False)
        if resolved in seen:
            continue
        seen[resolved] = None
        ordered.append(resolved)
    return ordered


def _pyproject_candidates(base: Path) -> List[Path]:
    base = base.expanduser()
    if base.suffix == ".toml":
        return [base]
    if base.suffix:
        return []
    return [base / PROJECT_CONFIG_FILENAME]


def _load_first(candidates: List[Path]) -> Optional[dict[str, Any]]:
    for candidate in _iter_unique_paths(candidates):
        try:
            loaded = load_project_config(candidate)
        except ConfigurationError as exc:
            raise CliError(
                str(exc), category="usage", context={"path": str(candidate)}
            ) from exc
        except OSError as exc:
            raise CliError(
                f"Unable to read configuration file {candidate}: {exc}",
                category="io",
                context={"path": str(candidate)},
            ) from exc
        if loaded:
            payload, resolved = loaded
            return _normalise_cli_config(payload, resolved)
    return None


def load_cli_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load ``[tool.dcs_dash]`` defaults.

    The explicit ``path`` is tried first, then ``$DCS_DASH_CONFIG``, then the
    ``pyproject.toml`` of the current directory.  The returned mapping carries
    the file it came from under ``_config_path``.
    """

    env_config = os.environ.get(CONFIG_ENV_VAR)
    bases: List[Path] = []
    if path is not None:
        bases.append(path)
    if env_config:
        bases.append(Path(env_config))

    for base in bases:
        loaded = _load_first(_pyproject_candidates(base))
        if loaded is not None:
            return loaded

    loaded = _load_first(_pyproject_candidates(Path.cwd()))
    if loaded is not None:
        return loaded
    return {"_config_path": None}
