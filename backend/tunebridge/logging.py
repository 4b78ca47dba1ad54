"""structlog setup shared by the API process and its tests."""

from __future__ import annotations

import logging
import sys
from typing import IO

import structlog

from tunebridge.config import settings


class _LogFileTee:
    """File-like sink that mirrors stdout into LOG_FILE as JSON lines.

    If the file cannot be opened, or a later write fails, the tee drops the
    file and keeps writing to stdout.
    """

    def __init__(self, file_path: str) -> None:
        self._file: IO[str] | None = None
        try:
            self._file = open(file_path, "a")  # noqa: SIM115
        except OSError as exc:
            # structlog is not configured yet at this point
            print(f"WARNING: cannot open log file {file_path!r}: {exc}", file=sys.stderr)

    def _drop_file(self, action: str) -> None:
        self._file = None
        print(f"WARNING: log file {action} failed; file logging disabled.", file=sys.stderr)

    def write(self, data: str) -> None:
        sys.stdout.write(data)
        if self._file is None:
            return
        try:
            self._file.write(data)
            self._file.flush()
        except (OSError, ValueError):
            self._drop_file("write")

    def flush(self) -> None:
        sys.stdout.flush()
        if self._file is None:
            return
        try:
            self._file.flush()
        except (OSError, ValueError):
            self._drop_file("flush")


def resolve_level(name: str) -> int:
    """Map a level name like ``"debug"`` to its logging constant (INFO if unknown)."""
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging() -> None:
    """Configure structlog: console output in development, JSON elsewhere."""
    if settings.environment == "development":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    if settings.log_file:
        # PrintLoggerFactory only needs write() and flush()
        factory = structlog.PrintLoggerFactory(file=_LogFileTee(settings.log_file))  # type: ignore[arg-type]
    else:
        factory = structlog.PrintLoggerFactory()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(resolve_level(settings.log_level)),
        context_class=dict,
        logger_factory=factory,
        cache_logger_on_first_use=True,
    )
