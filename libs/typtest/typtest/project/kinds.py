"""Enumerations describing tests and their settings."""

from __future__ import annotations

from enum import Enum


class TestKind(Enum):
    """How a test's output is checked.

    The three unit kinds are derived from the files next to ``test.typ``;
    ``TEMPLATE`` is only ever synthesized from the manifest.
    """

    __test__ = False

    PERSISTENT = "persistent"
    EPHEMERAL = "ephemeral"
    COMPILE_ONLY = "compile-only"
    TEMPLATE = "template"

    @property
    def is_unit(self) -> bool:
        return self is not TestKind.TEMPLATE

    @property
    def renders(self) -> bool:
        """Whether the test compares rendered pages against a reference."""
        return self in (TestKind.PERSISTENT, TestKind.EPHEMERAL)


class Direction(Enum):
    """Text direction; picks the corner pages are aligned to in diffs."""

    LTR = "ltr"
    RTL = "rtl"


class DuplicatePolicy(Enum):
    """What to do when an annotation appears more than once."""

    ERROR = "error"
    LAST_WINS = "last-wins"
