"""typtest diagnostics subpackage (no internal dependencies)."""

from typtest.diagnostics.collector import DiagnosticCollector
from typtest.diagnostics.diagnostic import Diagnostic
from typtest.diagnostics.location import SourceLocation
from typtest.diagnostics.severity import DiagnosticSeverity

__all__ = ["SourceLocation", "DiagnosticSeverity", "Diagnostic", "DiagnosticCollector"]
