"""Diagnostic message representation."""

from __future__ import annotations

from dataclasses import dataclass

from typtest.diagnostics.location import SourceLocation
from typtest.diagnostics.severity import DiagnosticSeverity


@dataclass(frozen=True)
class Diagnostic:
    """A single diagnostic message, optionally attributed to a test."""

    severity: DiagnosticSeverity
    message: str
    location: SourceLocation | None = None
    test: str | None = None
    notes: tuple[str, ...] = ()

    def __str__(self) -> str:
        loc = f"{self.location}: " if self.location else ""
        subject = f"[{self.test}] " if self.test else ""
        return f"{loc}{self.severity}: {subject}{self.message}"
