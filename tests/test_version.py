"""Tests for the package version metadata."""

from __future__ import annotations

from importlib import metadata

import pytest
from packaging.version import Version

import dcs_dash
from dcs_dash import _version as version_module


def test_version_is_semver_patch() -> None:
    version = Version(dcs_dash.__version__)

    assert len(version.release) == 3, (
        "dcs_dash.__version__ must contain exactly three release components"
    )


@pytest.mark.parametrize("raw", ["1.2", "not-a-version"])
def test_invalid_metadata_version_is_rejected(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setattr(version_module.metadata, "version", lambda _name: raw)

    with pytest.raises(RuntimeError):
        version_module._load_version()


def test_source_version_used_without_metadata(monkeypatch: pytest.MonkeyPatch) -> None:
    def missing(_name: str) -> str:
        raise metadata.PackageNotFoundError(_name)

    monkeypatch.setattr(version_module.metadata, "version", missing)

    assert version_module._load_version() == "0.1.0"
