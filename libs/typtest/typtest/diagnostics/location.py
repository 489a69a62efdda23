"""Source location tracking for typtest diagnostics."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SourceLocation:
    """A location in a test script or a test-set expression.

    ``file`` is a path for test scripts and ``"<expr>"`` for query
    expressions, where ``line`` is always 1.
    """

    file: str
    line: int  # 1-indexed
    column: int  # 1-indexed
    end_column: int | None = None

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"

    @classmethod
    def in_expression(cls, offset: int, length: int = 1) -> SourceLocation:
        """Location of a 0-based *offset* inside a single-line expression."""
        return cls(file="<expr>", line=1, column=offset + 1, end_column=offset + 1 + length)
