"""Centralized logging helpers.

Keeps handler/format setup in one place so the CLI entrypoint and tests
configure logging the same way. Library modules only ever call
``logging.getLogger(__name__)``; structured DEBUG events go through
``extra_context`` and are guarded by ``is_debug_enabled`` so the payload
is never built when DEBUG is off.
"""

from __future__ import annotations

import logging
import os
import sys
import time
from typing import Any, Dict, Optional

from constants import Constants

_HANDLER_MARKER = "_yarn_dedupe_handler"


def _level_from_env(default: str = "INFO") -> int:
    name = os.environ.get(Constants.ENV_LOG_LEVEL, default).upper()
    return getattr(logging, name, logging.INFO)


def configure_logging(level: Optional[str] = None, quiet: bool = False) -> None:
    """Install the stderr handler on the root logger.

    Safe to call more than once; the handler is replaced rather than stacked.

    Args:
        level: Level name overriding the environment default.
        quiet: Only report errors when True.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    setattr(handler, _HANDLER_MARKER, True)
    root.addHandler(handler)

    if quiet:
        root.setLevel(logging.ERROR)
    elif level:
        root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    else:
        root.setLevel(_level_from_env())


def add_file_handler(path: str) -> logging.Handler:
    """Mirror log output into ``path``."""
    file_handler = logging.FileHandler(path, encoding="utf-8")
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    )
    logging.getLogger().addHandler(file_handler)
    return file_handler


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when ``logger`` would emit DEBUG records."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build the ``extra=`` payload for a structured log event.

    None values are dropped so records stay compact.
    """
    return {"context": {k: v for k, v in fields.items() if v is not None}}


class Timer:
    """Context manager measuring elapsed wall time in milliseconds."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *exc: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
