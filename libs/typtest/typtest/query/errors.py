"""Errors raised while parsing or evaluating test-set expressions."""

from __future__ import annotations

from collections.abc import Iterable

from typtest.diagnostics.location import SourceLocation
from typtest.errors import TyptestError


class EvalError(TyptestError):
    """Base class for every error a test-set expression can produce."""

    def __init__(self, message: str, location: SourceLocation | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.location = location

    def __str__(self) -> str:
        if self.location is None:
            return self.message
        return f"{self.message} at column {self.location.column}"


class ParseError(EvalError):
    """The expression is not syntactically valid."""

    def __init__(
        self,
        message: str,
        location: SourceLocation | None = None,
        *,
        expected: Iterable[str] = (),
        found: str | None = None,
    ) -> None:
        super().__init__(message, location)
        self.expected = tuple(expected)
        self.found = found


class TypeMismatchError(EvalError):
    """A value of the wrong type was used, e.g. a number as a set operand."""

    def __init__(self, expected: str, found: str, location: SourceLocation | None = None) -> None:
        super().__init__(f"expected {expected}, found {found}", location)
        self.expected = expected
        self.found = found


class UnknownFunctionError(EvalError):
    def __init__(self, name: str, location: SourceLocation | None = None) -> None:
        super().__init__(f"unknown function {name!r}", location)
        self.name = name


class ArgumentCountError(EvalError):
    def __init__(
        self, function: str, expected: int, found: int, location: SourceLocation | None = None
    ) -> None:
        super().__init__(
            f"function {function!r} expects {expected} argument(s), found {found}", location
        )
        self.function = function
        self.expected = expected
        self.found = found


class UnknownPatternTypeError(EvalError):
    def __init__(self, kind: str, location: SourceLocation | None = None) -> None:
        super().__init__(
            f"unknown pattern type {kind!r}, expected one of exact, e, regex, r, glob or g",
            location,
        )
        self.kind = kind


class PatternCompileError(EvalError):
    """A regex or glob pattern could not be compiled."""

    def __init__(self, pattern: str, reason: str, location: SourceLocation | None = None) -> None:
        super().__init__(f"invalid pattern {pattern!r}: {reason}", location)
        self.pattern = pattern
        self.reason = reason


class MissingTestsError(EvalError):
    """An explicit list of identifiers named tests that do not exist."""

    def __init__(self, identifiers: Iterable[str]) -> None:
        self.identifiers = tuple(sorted(identifiers))
        super().__init__(f"unknown test(s): {', '.join(self.identifiers)}")
