"""Error types shared across typtest."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


class TyptestError(Exception):
    """Base class for all errors raised by typtest."""


class ManifestError(TyptestError):
    """The project manifest exists but could not be read or is invalid."""

    def __init__(self, path: Path, problems: Iterable[str]) -> None:
        self.path = path
        self.problems = tuple(problems)
        details = "; ".join(self.problems)
        super().__init__(f"invalid manifest {path}: {details}")


class StructuralError(TyptestError):
    """The test tree is malformed, e.g. nested test scripts or a missing root."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class InvalidIdentifierError(TyptestError, ValueError):
    """A string is not a valid test identifier."""

    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(f"invalid test identifier {identifier!r}: {reason}")
        self.identifier = identifier
        self.reason = reason


class AnnotationError(TyptestError):
    """An annotation in a test's leading doc comment block is malformed."""

    def __init__(self, message: str, line: int, text: str, test: str | None = None) -> None:
        self.message = message
        self.line = line
        self.text = text
        self.test = test
        subject = f"test {test}, " if test else ""
        super().__init__(f"{subject}line {line}: {message} ({text.strip()!r})")

    def for_test(self, test: str) -> AnnotationError:
        return AnnotationError(self.message, self.line, self.text, test)


class ImmutableTestError(TyptestError):
    """A mutation was attempted on the synthesized template test."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"test {identifier} is synthesized and cannot be modified")
        self.identifier = identifier


class TestExistsError(TyptestError):
    """A test with the same identifier, or an enclosing/enclosed one, exists."""

    __test__ = False

    def __init__(self, identifier: str, conflict: str) -> None:
        if identifier == conflict:
            message = f"test {identifier} already exists"
        else:
            message = f"test {identifier} would nest with existing test {conflict}"
        super().__init__(message)
        self.identifier = identifier
        self.conflict = conflict


class TestNotFoundError(TyptestError):
    """No test with the given identifier exists."""

    __test__ = False

    def __init__(self, identifier: str) -> None:
        super().__init__(f"test {identifier} does not exist")
        self.identifier = identifier


class ReferenceLoadError(TyptestError):
    """The persisted reference pages of a test could not be loaded."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path


class CompileError(TyptestError):
    """The external compiler rejected a document."""

    def __init__(
        self,
        message: str,
        diagnostics: Iterable[str] = (),
        warnings: Iterable[str] = (),
    ) -> None:
        super().__init__(message)
        self.message = message
        self.diagnostics = tuple(diagnostics)
        self.warnings = tuple(warnings)
