"""Utilities for retrieving and validating the package version."""

from __future__ import annotations

import re
from importlib import metadata
from pathlib import Path

from packaging.version import InvalidVersion, Version

_DISTRIBUTION = "dcs-dash"


def _version_from_sources() -> str:
    """Return the version declared in the repository ``pyproject.toml``.

    Used when running from a checkout whose distribution metadata has not been
    generated yet.
    """

    resolved = Path(__file__).resolve()
    for parent in resolved.parents[:3]:
        pyproject = parent / "pyproject.toml"
        if not pyproject.is_file():
            continue
        for line in pyproject.read_text(encoding="utf-8").splitlines():
            match = re.match(r'^version\s*=\s*"(?P<version>[^"]+)"', line)
            if match:
                return match.group("version")

    raise RuntimeError(
        "Unable to determine the 'dcs-dash' version from package metadata or "
        "repository sources."
    )


def _load_version() -> str:
    """Return the validated package version.

    The version must conform to the ``MAJOR.MINOR.PATCH`` scheme.
    """

    try:
        raw_version = metadata.version(_DISTRIBUTION)
    except metadata.PackageNotFoundError:
        raw_version = _version_from_sources()

    try:
        parsed = Version(raw_version)
    except InvalidVersion as exc:
        raise RuntimeError(
            f"Invalid version string for 'dcs-dash': {raw_version!r}. "
            "Expected a semantic version."
        ) from exc

    if len(parsed.release) != 3:
        raise RuntimeError(
            "The 'dcs-dash' version must follow the MAJOR.MINOR.PATCH format. "
            f"Found: {raw_version!r}."
        )

    return raw_version


__version__ = _load_version()

__all__ = ["__version__"]
