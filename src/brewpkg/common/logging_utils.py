"""Logging helpers shared by the runner, the public operations and the CLI.

The library itself only ever creates module loggers; ``configure_logging`` is
called by the CLI entry point and is safe to call more than once.
"""
from __future__ import annotations

import logging
import os
import shlex
import time
from typing import Any, Dict, Iterable, Optional

from brewpkg.constants import Constants

_CONFIGURED_MARK = "_brewpkg_handler"


def _level_from_env(default: str = "INFO") -> int:
    name = os.environ.get(Constants.ENV_LOG_LEVEL, default).strip().upper()
    return getattr(logging, name, logging.INFO)


def configure_logging(level: Optional[str] = None) -> None:
    """Install a stderr handler on the root logger.

    The level comes from ``level`` when given, else ``BREWPKG_LOG_LEVEL``,
    else INFO. Repeated calls only adjust the level.
    """
    root = logging.getLogger()
    value = getattr(logging, level.upper(), logging.INFO) if level else _level_from_env()
    root.setLevel(value)

    for handler in root.handlers:
        if getattr(handler, _CONFIGURED_MARK, False):
            return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    setattr(handler, _CONFIGURED_MARK, True)
    root.addHandler(handler)


def add_file_handler(path: str) -> logging.Handler:
    """Attach a file handler with timestamps to the root logger."""
    file_handler = logging.FileHandler(path)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    )
    logging.getLogger().addHandler(file_handler)
    return file_handler


def is_debug_enabled(logger: logging.Logger) -> bool:
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for structured log records.

    ``None`` values are dropped so records only carry the fields that apply.
    """
    return {k: v for k, v in fields.items() if v is not None}


def format_command(args: Iterable[str]) -> str:
    """Render an argument vector as a copy-pasteable shell string."""
    return " ".join(shlex.quote(str(a)) for a in args)


class Timer:
    """Context manager measuring wall-clock time in milliseconds."""

    def __init__(self) -> None:
        self._start: Optional[float] = None
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        if self._start is None:
            return 0
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
