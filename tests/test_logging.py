"""Logging configuration."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from dcs_dash.logging import JsonFormatter, setup_logging


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord(
        "dcs_dash.telemetry.udp", logging.INFO, __file__, 1, "bound", None, None
    )
    record.event = "ingest.bound"
    record.port = 5010

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "bound"
    assert payload["level"] == "info"
    assert payload["logger"] == "dcs_dash.telemetry.udp"
    assert payload["event"] == "ingest.bound"
    assert payload["port"] == 5010
    assert "msg" not in payload


def test_setup_logging_writes_json_to_file(tmp_path: Path) -> None:
    target = tmp_path / "logs" / "dash.log"

    logger = setup_logging(
        {"logging": {"level": "info", "output": str(target), "format": "json"}}
    )
    logging.getLogger("dcs_dash.lifecycle").info(
        "Lifecycle state changed.", extra={"event": "lifecycle.state", "to": "running"}
    )
    for handler in logger.handlers:
        handler.flush()

    lines = target.read_text(encoding="utf8").splitlines()
    assert len(lines) == 1
    entry = json.loads(lines[0])
    assert entry["event"] == "lifecycle.state"
    assert entry["to"] == "running"


def test_setup_logging_defaults_to_quiet_text() -> None:
    logger = setup_logging({})

    assert logger.level == logging.WARNING
    installed = [h for h in logger.handlers if isinstance(h, logging.StreamHandler)]
    assert installed
    assert not isinstance(installed[-1].formatter, JsonFormatter)


def test_setup_logging_replaces_previous_handler(tmp_path: Path) -> None:
    setup_logging({"logging": {"output": str(tmp_path / "a.log")}})
    logger = setup_logging({"logging": {"output": str(tmp_path / "b.log")}})

    files = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    assert [Path(h.baseFilename).name for h in files] == ["b.log"]


@pytest.mark.parametrize(
    "config",
    [{"logging": {"level": "loud"}}, {"logging": {"format": "xml"}}],
)
def test_setup_logging_rejects_unknown_values(config: dict) -> None:
    with pytest.raises(ValueError):
        setup_logging(config)
