"""Command line application entry point for DCS Dash."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

from ..configuration import ConfigurationError, Settings
from ..lifecycle import DashboardController, ManagedDisplay
from ..logging.config import setup_logging
from .errors import CliError, log_cli_error
from .io import load_cli_config
from .parser import build_parser

__all__ = ["main", "resolve_settings", "run_cli"]


logger = logging.getLogger(__name__)

DisplayFactory = Callable[[], ManagedDisplay]


def resolve_settings(namespace: argparse.Namespace, config: dict) -> Settings:
    """Combine config file, environment and command line into :class:`Settings`."""

    try:
        settings = Settings.from_config(config)
    except ConfigurationError as exc:
        raise CliError.from_exception(exc) from exc

    overrides: dict[str, object] = {}
    if namespace.port is not None:
        overrides["port"] = namespace.port
    if namespace.host is not None:
        overrides["host"] = namespace.host
    if namespace.tick_ms is not None:
        overrides["tick"] = namespace.tick_ms / 1000.0
    if namespace.history is not None:
        overrides["history"] = namespace.history
    if namespace.ascii_only:
        overrides["ascii_only"] = True
    return dataclasses.replace(settings, **overrides)


def _run_dashboard(settings: Settings, display_factory: Optional[DisplayFactory]) -> int:
    controller = DashboardController(settings, display_factory)
    try:
        return asyncio.run(controller.run())
    except CliError:
        raise
    except Exception as exc:
        # Bind failures map to io; a crashed ingestion or render task to runtime.
        raise CliError.from_exception(exc) from exc


def run_cli(
    args: Optional[Sequence[str]] = None,
    *,
    display_factory: Optional[DisplayFactory] = None,
) -> int:
    """Execute the DCS Dash command line interface and return its exit status."""

    config_parser = argparse.ArgumentParser(add_help=False)
    config_parser.add_argument("--config", dest="config_path", type=Path, default=None)
    config_parser.add_argument("--log-level", dest="log_level", default=None)
    config_parser.add_argument("--log-output", dest="log_output", default=None)
    config_parser.add_argument(
        "--log-format", dest="log_format", choices=("json", "text"), default=None
    )
    preliminary, _ = config_parser.parse_known_args(args)

    try:
        config = load_cli_config(preliminary.config_path)
        logging_config = dict(config.get("logging", {}))
        if preliminary.log_level is not None:
            logging_config["level"] = preliminary.log_level
        if preliminary.log_output is not None:
            logging_config["output"] = preliminary.log_output
        if preliminary.log_format is not None:
            logging_config["format"] = preliminary.log_format
        logging_config.setdefault("level", "warning")
        logging_config.setdefault("output", "stderr")
        logging_config.setdefault("format", "text")
        config["logging"] = logging_config
        try:
            setup_logging(config)
        except ValueError as exc:
            raise CliError(str(exc), category="usage") from exc

        parser = build_parser(config)
        namespace = parser.parse_args(args)
        settings = resolve_settings(namespace, config)
        logger.info(
            "Starting dashboard.",
            extra={
                "event": "cli.start",
                "host": settings.host,
                "port": settings.port,
                "config_path": config.get("_config_path"),
            },
        )
        return _run_dashboard(settings, display_factory)
    except CliError as exc:
        log_cli_error(exc)
        message = exc.message
        if message:
            sys.stderr.write(message)
            if not message.endswith("\n"):
                sys.stderr.write("\n")
        raise SystemExit(exc.status_code) from exc


def main() -> None:  # pragma: no cover - thin wrapper
    raise SystemExit(run_cli())


if __name__ == "__main__":  # pragma: no cover - CLI invocation guard
    main()
