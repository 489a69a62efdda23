"""Test discovery.

The test root is walked one directory level at a time. A directory holding
``test.typ`` is a test and is not descended into, but its subtree is checked
for stray test scripts, since tests must not nest.
"""

from __future__ import annotations

import os
from collections import deque
from pathlib import Path

from typtest.diagnostics import DiagnosticCollector, SourceLocation
from typtest.errors import AnnotationError, InvalidIdentifierError, StructuralError
from typtest.log import get_logger
from typtest.project.annotations import parse_annotations
from typtest.project.config import TestConfig, resolve
from typtest.project.ident import TEMPLATE_ID, identifier_from_path, is_valid_component
from typtest.project.kinds import DuplicatePolicy, TestKind
from typtest.project.manifest import Manifest
from typtest.project.test import OWNED_DIR_NAMES, SCRIPT_NAME, Test, TestPaths, classify

logger = get_logger(__name__)


def find_nested_script(directory: Path) -> Path | None:
    """Return a ``test.typ`` below *directory*, ignoring its owned dirs."""
    for current, dirnames, filenames in os.walk(directory):
        if Path(current) == directory:
            dirnames[:] = [d for d in dirnames if d not in OWNED_DIR_NAMES]
            continue
        if SCRIPT_NAME in filenames:
            return Path(current) / SCRIPT_NAME
    return None


def collect_tests(
    test_root: Path,
    *,
    defaults: TestConfig | None = None,
    overrides: TestConfig | None = None,
    diagnostics: DiagnosticCollector | None = None,
    policy: DuplicatePolicy = DuplicatePolicy.ERROR,
) -> frozenset[Test]:
    """Collect the unit tests below *test_root*.

    Tests with unreadable scripts or invalid annotations are reported to
    *diagnostics* and left out; the remaining tests are still collected.
    Skipped directories are recorded as info diagnostics.

    Raises:
        StructuralError: If *test_root* does not exist or a test nests
            inside another.
    """
    if not test_root.is_dir():
        raise StructuralError(f"test root {test_root} does not exist", test_root)

    defaults = defaults or TestConfig()
    overrides = overrides or TestConfig()
    if diagnostics is None:
        diagnostics = DiagnosticCollector()

    tests: list[Test] = []
    pending: deque[Path] = deque([test_root])

    while pending:
        directory = pending.popleft()
        if directory != test_root and (directory / SCRIPT_NAME).is_file():
            test = _load_test(test_root, directory, defaults, overrides, diagnostics, policy)
            if test is not None:
                tests.append(test)
            continue

        for child in sorted(p for p in directory.iterdir() if p.is_dir()):
            if not is_valid_component(child.name):
                diagnostics.info(f"skipping directory {child}: not a valid test name")
                logger.debug("skipping directory", path=str(child), reason="invalid name")
                continue
            pending.append(child)

    logger.debug("discovered tests", root=str(test_root), count=len(tests))
    return frozenset(tests)


def _load_test(
    test_root: Path,
    directory: Path,
    defaults: TestConfig,
    overrides: TestConfig,
    diagnostics: DiagnosticCollector,
    policy: DuplicatePolicy,
) -> Test | None:
    nested = find_nested_script(directory)
    if nested is not None:
        raise StructuralError(
            f"test script {nested} is nested inside test {directory}", nested
        )

    try:
        identifier = identifier_from_path(test_root, directory)
    except InvalidIdentifierError as e:
        diagnostics.info(f"skipping directory {directory}: {e.reason}")
        logger.debug("skipping directory", path=str(directory), reason=e.reason)
        return None

    paths = TestPaths.in_directory(directory)
    try:
        source = paths.script.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        diagnostics.error(
            f"cannot read test script: {e}", SourceLocation(str(paths.script), 1, 1), test=identifier
        )
        logger.warning("excluding test", test=identifier, error=str(e))
        return None

    try:
        parsed = parse_annotations(source, policy)
    except AnnotationError as e:
        error = e.for_test(identifier)
        diagnostics.error(
            error.message,
            SourceLocation(str(paths.script), error.line, 1),
            test=identifier,
            notes=(error.text.strip(),),
        )
        logger.warning("excluding test", test=identifier, error=str(error))
        return None

    return Test(
        identifier=identifier,
        kind=classify(directory),
        paths=paths,
        settings=resolve(overrides, parsed.config, defaults),
        annotations=parsed.entries,
        skip=parsed.skip,
    )


def template_test(
    project_root: Path,
    manifest: Manifest,
    overrides: TestConfig | None = None,
    diagnostics: DiagnosticCollector | None = None,
) -> Test | None:
    """Synthesize the ``@template`` test, if the manifest declares a template."""
    if manifest.template is None:
        return None
    template_dir = project_root / manifest.template.path
    script = template_dir / manifest.template.entrypoint
    if not script.is_file():
        if diagnostics is not None:
            diagnostics.warning(f"template entrypoint {script} does not exist")
        logger.debug("template entrypoint missing", path=str(script))
        return None
    return Test(
        identifier=TEMPLATE_ID,
        kind=TestKind.TEMPLATE,
        paths=TestPaths(template_dir, script),
        settings=resolve(overrides or TestConfig(), manifest.defaults),
        root=template_dir,
    )

