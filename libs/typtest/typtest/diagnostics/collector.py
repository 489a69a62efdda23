"""Diagnostic collector for problems found while discovering tests."""

from __future__ import annotations

from typtest.diagnostics.diagnostic import Diagnostic
from typtest.diagnostics.location import SourceLocation
from typtest.diagnostics.severity import DiagnosticSeverity


class DiagnosticCollector:
    """Accumulates diagnostics so that one bad test does not hide the others."""

    def __init__(self) -> None:
        self._diagnostics: list[Diagnostic] = []

    def _record(
        self,
        severity: DiagnosticSeverity,
        message: str,
        location: SourceLocation | None,
        test: str | None,
        notes: tuple[str, ...],
    ) -> None:
        self._diagnostics.append(Diagnostic(severity, message, location, test, notes))

    def error(
        self,
        message: str,
        location: SourceLocation | None = None,
        *,
        test: str | None = None,
        notes: tuple[str, ...] = (),
    ) -> None:
        """Record an error diagnostic."""
        self._record(DiagnosticSeverity.ERROR, message, location, test, notes)

    def warning(
        self,
        message: str,
        location: SourceLocation | None = None,
        *,
        test: str | None = None,
        notes: tuple[str, ...] = (),
    ) -> None:
        """Record a warning diagnostic."""
        self._record(DiagnosticSeverity.WARNING, message, location, test, notes)

    def info(
        self,
        message: str,
        location: SourceLocation | None = None,
        *,
        test: str | None = None,
        notes: tuple[str, ...] = (),
    ) -> None:
        """Record an informational diagnostic."""
        self._record(DiagnosticSeverity.INFO, message, location, test, notes)

    def has_errors(self) -> bool:
        """Return True if any error diagnostics have been recorded."""
        return any(d.severity.is_error for d in self._diagnostics)

    def errors(self) -> list[Diagnostic]:
        return [d for d in self._diagnostics if d.severity.is_error]

    def for_test(self, identifier: str) -> list[Diagnostic]:
        """Return the diagnostics attributed to the test *identifier*."""
        return [d for d in self._diagnostics if d.test == identifier]

    def get_all(self) -> list[Diagnostic]:
        """Return a copy of all collected diagnostics."""
        return list(self._diagnostics)

    def format_all(self) -> str:
        """Format all diagnostics as a newline-separated string."""
        return "\n".join(str(d) for d in self._diagnostics)
