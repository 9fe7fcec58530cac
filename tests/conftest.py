from __future__ import annotations

import logging
import sys
from pathlib import Path
from textwrap import dedent
from typing import Iterator

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from dcs_dash.telemetry import HistoryBuffer, Normalizer, SnapshotStore
from tests.helpers import ManualClock


def write_pyproject(directory: Path, contents: str) -> Path:
    """Persist a ``pyproject.toml`` under ``directory`` and return its path."""

    payload = dedent(contents).lstrip()
    target = directory / "pyproject.toml"
    target.write_text(payload, encoding="utf8")
    return target


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def store() -> SnapshotStore:
    return SnapshotStore()


@pytest.fixture
def ias_history() -> HistoryBuffer:
    return HistoryBuffer(16)


@pytest.fixture
def alt_history() -> HistoryBuffer:
    return HistoryBuffer(16)


@pytest.fixture
def normalizer(
    store: SnapshotStore,
    ias_history: HistoryBuffer,
    alt_history: HistoryBuffer,
    clock: ManualClock,
) -> Normalizer:
    return Normalizer(store, ias_history, alt_history, clock=clock)


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run from an empty directory with no configuration or port overrides."""

    monkeypatch.chdir(tmp_path)
    for variable in ("DCS_DASH_CONFIG", "DCS_DASH_PORT", "PORT"):
        monkeypatch.delenv(variable, raising=False)
    return tmp_path


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Drop handlers installed by ``setup_logging`` during a test."""

    logger = logging.getLogger("dcs_dash")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
