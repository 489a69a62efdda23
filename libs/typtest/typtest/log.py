"""Structured logging for typtest.

Library modules call :func:`get_logger` at import time and log key/value
events (``test=``, ``run_id=``). Front-ends call :func:`configure_logging`
once; until then structlog's defaults apply.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.types import Processor


class _StderrProxy:
    """Writes to whatever ``sys.stderr`` is at call time.

    Cached loggers would otherwise keep a stream that pytest's capture has
    already closed.
    """

    def write(self, s: str) -> int:
        return sys.stderr.write(s)

    def flush(self) -> None:
        sys.stderr.flush()

    def isatty(self) -> bool:
        return sys.stderr.isatty()


_stderr: TextIO = _StderrProxy()  # type: ignore[assignment]


def configure_logging(verbose: bool = False, json_logs: bool = False) -> None:
    """Route typtest events to stderr.

    Args:
        verbose: Emit debug events (skipped directories, compiler commands).
        json_logs: One JSON object per event instead of the console renderer.
    """
    level = logging.DEBUG if verbose else logging.INFO

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_logs:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=_stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=_stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)
