"""Error helpers for the DCS Dash command line tool."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..configuration import ConfigurationError
from ..telemetry.udp import SocketBindFailure

__all__ = ["CliError", "log_cli_error", "status_for_category"]


_CATEGORY_STATUS_CODES: Mapping[str, int] = {
    "runtime": 1,
    "usage": 2,
    "io": 3,
}

logger = logging.getLogger(__name__)


def status_for_category(category: str) -> int:
    """Exit status for ``category``; unknown categories are runtime failures."""

    return _CATEGORY_STATUS_CODES.get(category, _CATEGORY_STATUS_CODES["runtime"])


class CliError(RuntimeError):
    """Failure that maps onto a process exit status."""

    def __init__(
        self,
        message: str,
        *,
        category: str = "runtime",
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category or "runtime"
        self.status_code = status_for_category(self.category)
        # Log records may be rendered as JSON; keep context values scalar.
        self.context = {
            key: value if isinstance(value, (str, int, float, bool, type(None))) else str(value)
            for key, value in (context or {}).items()
        }
        self.logged = False

    @classmethod
    def from_exception(cls, exc: BaseException) -> "CliError":
        """Wrap a startup failure, choosing the category from its type.

        Configuration problems are usage errors; socket and file failures are
        I/O errors; anything else is a runtime error.
        """

        if isinstance(exc, CliError):
            return exc
        if isinstance(exc, SocketBindFailure):
            return cls(str(exc), category="io", context={"host": exc.host, "port": exc.port})
        if isinstance(exc, ConfigurationError):
            return cls(str(exc), category="usage")
        if isinstance(exc, OSError):
            return cls(str(exc), category="io", context={"errno": exc.errno})
        return cls(str(exc) or type(exc).__name__, context={"type": type(exc).__name__})


def log_cli_error(error: CliError) -> None:
    if error.logged:
        return
    logger.error(
        error.message,
        extra={
            "event": "cli.error",
            "category": error.category,
            "status_code": error.status_code,
            "context": dict(error.context),
        },
        exc_info=error,
    )
    error.logged = True
