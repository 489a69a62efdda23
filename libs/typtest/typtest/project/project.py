"""A typst project and the operations that change its tests."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

from PIL import Image

from typtest.diagnostics import DiagnosticCollector
from typtest.errors import (
    ImmutableTestError,
    TestExistsError,
    TestNotFoundError,
)
from typtest.log import get_logger
from typtest.project import store
from typtest.project.config import TestConfig
from typtest.project.discovery import collect_tests, template_test
from typtest.project.ident import TEMPLATE_ID, path_from_identifier, validate_identifier
from typtest.project.kinds import DuplicatePolicy, TestKind
from typtest.project.manifest import Manifest, load_manifest
from typtest.project.test import Test, TestPaths

logger = get_logger(__name__)

DEFAULT_SOURCE = "Hello World\n"


class Project:
    """A project rooted at the directory holding ``typst.toml``."""

    def __init__(self, root: Path, manifest: Manifest | None = None) -> None:
        self.root = root
        self.manifest = manifest or Manifest()

    @classmethod
    def load(cls, root: Path) -> Project:
        """Open the project at *root*, reading its manifest if it has one.

        Raises:
            ManifestError: If ``typst.toml`` is present but invalid.
        """
        return cls(root, load_manifest(root))

    @property
    def test_root(self) -> Path:
        return self.root / self.manifest.tests

    @property
    def font_paths(self) -> tuple[Path, ...]:
        return tuple(self.root / f for f in self.manifest.fonts)

    def discover(
        self,
        *,
        overrides: TestConfig | None = None,
        diagnostics: DiagnosticCollector | None = None,
        policy: DuplicatePolicy = DuplicatePolicy.ERROR,
    ) -> frozenset[Test]:
        """Discover all tests of the project, the template test included.

        Raises:
            StructuralError: If the test root is missing or tests nest.
        """
        if diagnostics is None:
            diagnostics = DiagnosticCollector()
        tests = set(
            collect_tests(
                self.test_root,
                defaults=self.manifest.defaults,
                overrides=overrides,
                diagnostics=diagnostics,
                policy=policy,
            )
        )
        template = template_test(self.root, self.manifest, overrides, diagnostics)
        if template is not None:
            tests.add(template)
        if diagnostics.has_errors():
            logger.warning("some tests were excluded", details=diagnostics.format_all())
        return frozenset(tests)

    def unit_tests(self) -> dict[str, Test]:
        return {t.identifier: t for t in self.discover() if t.is_unit}

    def get(self, identifier: str) -> Test:
        """Return the unit test *identifier*.

        Raises:
            ImmutableTestError: For the template test.
            InvalidIdentifierError: If *identifier* is malformed.
            TestNotFoundError: If no such test exists.
        """
        if identifier == TEMPLATE_ID:
            raise ImmutableTestError(identifier)
        validate_identifier(identifier)
        test = self.unit_tests().get(identifier)
        if test is None:
            raise TestNotFoundError(identifier)
        return test

    def transient_paths(self) -> list[Path]:
        """The ``out/`` and ``diff/`` directories of every unit test."""
        paths = []
        for test in sorted(self.unit_tests().values(), key=lambda t: t.identifier):
            paths.extend([test.paths.out_dir, test.paths.diff_dir])
        return paths

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_test(
        self,
        identifier: str,
        source: str = DEFAULT_SOURCE,
        kind: TestKind = TestKind.PERSISTENT,
        reference_source: str | None = None,
        reference_pages: Sequence[Image.Image] | None = None,
    ) -> Test:
        """Create a new unit test.

        Persistent tests get a ``ref/`` directory holding *reference_pages*
        (empty if none are given); ephemeral tests get a ``ref.typ`` holding
        *reference_source*, defaulting to *source*.

        Raises:
            ImmutableTestError: For the template identifier.
            InvalidIdentifierError: If *identifier* is malformed.
            TestExistsError: If the test exists or would nest with another.
        """
        if identifier == TEMPLATE_ID:
            raise ImmutableTestError(identifier)
        validate_identifier(identifier)
        if kind is TestKind.TEMPLATE:
            raise ValueError("the template test cannot be created")

        if self.test_root.exists():
            for existing in self.unit_tests():
                if (
                    existing == identifier
                    or existing.startswith(identifier + "/")
                    or identifier.startswith(existing + "/")
                ):
                    raise TestExistsError(identifier, existing)
        else:
            self.test_root.mkdir(parents=True)

        directory = path_from_identifier(self.test_root, identifier)
        directory.mkdir(parents=True, exist_ok=True)
        paths = TestPaths.in_directory(directory)
        paths.script.write_text(source, encoding="utf-8")

        if kind is TestKind.PERSISTENT:
            store.replace_pages(paths.ref_dir, reference_pages or ())
        elif kind is TestKind.EPHEMERAL:
            paths.ref_script.write_text(
                source if reference_source is None else reference_source, encoding="utf-8"
            )

        logger.info("created test", test=identifier, kind=kind.value)
        return self.get(identifier)

    def remove_test(self, identifier: str) -> None:
        test = self.get(identifier)
        store.remove_dir(test.paths.directory)
        logger.info("removed test", test=identifier)

    def make_persistent(self, identifier: str, pages: Sequence[Image.Image]) -> Test:
        """Store *pages* as the reference of *identifier*, dropping any ``ref.typ``."""
        test = self.get(identifier)
        store.replace_pages(test.paths.ref_dir, pages)
        test.paths.ref_script.unlink(missing_ok=True)
        return self.get(identifier)

    def make_ephemeral(self, identifier: str, reference_source: str) -> Test:
        test = self.get(identifier)
        test.paths.ref_script.write_text(reference_source, encoding="utf-8")
        store.remove_dir(test.paths.ref_dir)
        return self.get(identifier)

    def make_compile_only(self, identifier: str) -> Test:
        test = self.get(identifier)
        test.paths.ref_script.unlink(missing_ok=True)
        store.remove_dir(test.paths.ref_dir)
        return self.get(identifier)

    def clean(self, identifiers: Iterable[str] | None = None) -> None:
        """Delete the ``out/`` and ``diff/`` directories of the given tests, or all."""
        if identifiers is None:
            tests = list(self.unit_tests().values())
        else:
            tests = [self.get(i) for i in identifiers]
        for test in tests:
            store.remove_dir(test.paths.out_dir)
            store.remove_dir(test.paths.diff_dir)


def discover(
    root: Path,
    *,
    overrides: TestConfig | None = None,
    diagnostics: DiagnosticCollector | None = None,
    policy: DuplicatePolicy = DuplicatePolicy.ERROR,
) -> frozenset[Test]:
    """Discover every test of the project at *root*.

    Raises:
        ManifestError: If ``typst.toml`` is present but invalid.
        StructuralError: If the test root is missing or tests nest.
    """
    return Project.load(root).discover(overrides=overrides, diagnostics=diagnostics, policy=policy)

