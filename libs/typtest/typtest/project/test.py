"""The test model."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from typtest.project.annotations import Annotation
from typtest.project.config import BUILTIN_DEFAULTS, Settings
from typtest.project.ident import TEMPLATE_ID
from typtest.project.kinds import TestKind

SCRIPT_NAME = "test.typ"
REF_SCRIPT_NAME = "ref.typ"
REF_DIR_NAME = "ref"
OUT_DIR_NAME = "out"
DIFF_DIR_NAME = "diff"

# Directories a test owns below its own directory.
OWNED_DIR_NAMES = frozenset({REF_DIR_NAME, OUT_DIR_NAME, DIFF_DIR_NAME})


@dataclass(frozen=True)
class TestPaths:
    """Where a test's files live; ``directory`` holds them all."""

    __test__ = False

    directory: Path
    script: Path

    @classmethod
    def in_directory(cls, directory: Path) -> TestPaths:
        return cls(directory, directory / SCRIPT_NAME)

    @property
    def ref_script(self) -> Path:
        return self.directory / REF_SCRIPT_NAME

    @property
    def ref_dir(self) -> Path:
        return self.directory / REF_DIR_NAME

    @property
    def out_dir(self) -> Path:
        return self.directory / OUT_DIR_NAME

    @property
    def diff_dir(self) -> Path:
        return self.directory / DIFF_DIR_NAME


def classify(directory: Path) -> TestKind:
    """Derive the kind of the unit test in *directory* from its files."""
    if (directory / REF_SCRIPT_NAME).is_file():
        return TestKind.EPHEMERAL
    if (directory / REF_DIR_NAME).is_dir():
        return TestKind.PERSISTENT
    return TestKind.COMPILE_ONLY


@dataclass(frozen=True)
class Test:
    """A discovered test.

    Tests are identified by their identifier alone; two instances with the
    same identifier compare and hash equal.
    """

    __test__ = False

    identifier: str
    kind: TestKind = field(compare=False)
    paths: TestPaths = field(compare=False)
    settings: Settings = field(default=BUILTIN_DEFAULTS, compare=False)
    annotations: tuple[Annotation, ...] = field(default=(), compare=False)
    skip: bool = field(default=False, compare=False)
    # Compilation root for the template test; unit tests use the project root.
    root: Path | None = field(default=None, compare=False)

    @property
    def is_skip(self) -> bool:
        return self.skip

    @property
    def is_template(self) -> bool:
        return self.kind is TestKind.TEMPLATE

    @property
    def is_unit(self) -> bool:
        return self.kind.is_unit

    @property
    def is_compile_only(self) -> bool:
        return self.kind is TestKind.COMPILE_ONLY

    @property
    def is_ephemeral(self) -> bool:
        return self.kind is TestKind.EPHEMERAL

    @property
    def is_persistent(self) -> bool:
        return self.kind is TestKind.PERSISTENT

    @property
    def is_immutable(self) -> bool:
        return self.identifier == TEMPLATE_ID

    def __str__(self) -> str:
        return self.identifier
