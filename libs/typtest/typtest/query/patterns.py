"""Identifier patterns: ``exact:``, ``regex:`` and ``glob:``."""

from __future__ import annotations

import fnmatch
import re
from dataclasses import dataclass, field
from enum import Enum

from typtest.diagnostics.location import SourceLocation
from typtest.query.errors import PatternCompileError, UnknownPatternTypeError


class PatternKind(Enum):
    EXACT = "exact"
    REGEX = "regex"
    GLOB = "glob"

    @classmethod
    def from_name(cls, name: str) -> PatternKind | None:
        """Look up a pattern kind by its long or single-letter name."""
        return _KIND_NAMES.get(name)


_KIND_NAMES: dict[str, PatternKind] = {
    "exact": PatternKind.EXACT,
    "e": PatternKind.EXACT,
    "regex": PatternKind.REGEX,
    "r": PatternKind.REGEX,
    "glob": PatternKind.GLOB,
    "g": PatternKind.GLOB,
}


@dataclass(frozen=True)
class Pattern:
    """A compiled identifier pattern."""

    kind: PatternKind
    term: str
    _regex: re.Pattern[str] | None = field(default=None, compare=False, repr=False)

    @classmethod
    def compile(cls, kind_name: str, term: str, location: SourceLocation | None = None) -> Pattern:
        """Compile a pattern literal.

        Raises:
            UnknownPatternTypeError: If *kind_name* is not a known pattern type.
            PatternCompileError: If the regex or glob is malformed.
        """
        kind = PatternKind.from_name(kind_name)
        if kind is None:
            raise UnknownPatternTypeError(kind_name, location)

        if kind == PatternKind.EXACT:
            return cls(kind, term)

        if kind == PatternKind.REGEX:
            try:
                return cls(kind, term, re.compile(term))
            except re.error as exc:
                raise PatternCompileError(f"{kind_name}:{term}", str(exc), location) from exc

        _validate_glob(term, f"{kind_name}:{term}", location)
        return cls(kind, term, re.compile(fnmatch.translate(term)))

    def matches(self, identifier: str) -> bool:
        if self.kind == PatternKind.EXACT:
            return identifier == self.term
        assert self._regex is not None
        if self.kind == PatternKind.REGEX:
            return self._regex.search(identifier) is not None
        return self._regex.match(identifier) is not None

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.term}"


def _validate_glob(term: str, display: str, location: SourceLocation | None) -> None:
    """Reject globs the translation would silently accept.

    A ``[`` must be closed, and ``**`` must form a whole path component.
    """
    i = 0
    while i < len(term):
        ch = term[i]
        if ch == "[":
            j = i + 1
            if j < len(term) and term[j] in "!^":
                j += 1
            if j < len(term) and term[j] == "]":
                j += 1
            while j < len(term) and term[j] != "]":
                j += 1
            if j >= len(term):
                raise PatternCompileError(display, f"unclosed character class at {i}", location)
            i = j + 1
            continue
        if term.startswith("**", i):
            before_ok = i == 0 or term[i - 1] == "/"
            after = i + 2
            after_ok = after == len(term) or term[after] == "/"
            if not (before_ok and after_ok):
                raise PatternCompileError(
                    display, "recursive wildcards must form a single path component", location
                )
            i = after
            continue
        i += 1
