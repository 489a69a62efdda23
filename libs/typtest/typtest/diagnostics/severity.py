"""Diagnostic severity levels for discovery and annotation problems."""

from __future__ import annotations

from enum import Enum


class DiagnosticSeverity(Enum):
    """Severity level of a diagnostic message.

    Only ``ERROR`` excludes a test from the discovered universe; warnings and
    infos are reported alongside it.
    """

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def is_error(self) -> bool:
        return self is DiagnosticSeverity.ERROR

    def __str__(self) -> str:
        return self.value
