"""Logging utilities for DCS Dash."""

from dcs_dash.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
