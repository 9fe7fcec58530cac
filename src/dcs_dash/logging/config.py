"""Logging configuration shared by the command line entry points."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

__all__ = ["JsonFormatter", "setup_logging"]


_PACKAGE_LOGGER = "dcs_dash"
_HANDLER_MARKER = "_dcs_dash_handler"
_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Attributes present on every LogRecord; anything else came from ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON object including ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, sort_keys=False)


def _resolve_level(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    name = str(value or "warning").strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown logging level: {value!r}")
    return level


def _build_handler(output: str) -> logging.Handler:
    destination = output.strip() or "stderr"
    if destination.lower() == "stderr":
        return logging.StreamHandler(sys.stderr)
    if destination.lower() == "stdout":
        return logging.StreamHandler(sys.stdout)
    path = Path(destination).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, encoding="utf-8")


def setup_logging(config: Optional[Mapping[str, Any]] = None) -> logging.Logger:
    """Configure the ``dcs_dash`` logger from the ``[logging]`` table of ``config``.

    Recognised keys are ``level`` (default ``warning``), ``output``
    (``stderr``, ``stdout`` or a file path; default ``stderr``) and ``format``
    (``json`` or ``text``; default ``text``).  Calling this again replaces the
    handler installed by a previous call.
    """

    logging_cfg: Mapping[str, Any] = {}
    if config is not None:
        raw = config.get("logging", {})
        if isinstance(raw, Mapping):
            logging_cfg = raw

    level = _resolve_level(logging_cfg.get("level", "warning"))
    fmt = str(logging_cfg.get("format", "text")).strip().lower()
    if fmt not in {"json", "text"}:
        raise ValueError(f"Unknown logging format: {fmt!r}")

    handler = _build_handler(str(logging_cfg.get("output", "stderr")))
    handler.setFormatter(JsonFormatter() if fmt == "json" else logging.Formatter(_TEXT_FORMAT))
    setattr(handler, _HANDLER_MARKER, True)

    logger = logging.getLogger(_PACKAGE_LOGGER)
    for existing in list(logger.handlers):
        if getattr(existing, _HANDLER_MARKER, False):
            logger.removeHandler(existing)
            existing.close()
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
