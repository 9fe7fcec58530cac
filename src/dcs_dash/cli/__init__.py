"""Command line utilities for DCS Dash."""

from dcs_dash.cli.app import main, run_cli

__all__ = ["main", "run_cli"]
