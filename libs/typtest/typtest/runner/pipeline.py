"""The work done for a single test: compile, compare and optionally update."""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image

from typtest.compare import Origin, Verdict, compare, render_diff
from typtest.errors import CompileError, ReferenceLoadError
from typtest.log import get_logger
from typtest.project import store
from typtest.project.config import Settings, TestConfig, resolve
from typtest.project.kinds import TestKind
from typtest.project.test import Test
from typtest.runner.compiler import CompileRequest, Compiler, Document
from typtest.runner.report import (
    CompileFailure,
    DimensionMismatch,
    Fail,
    FailureReason,
    Outcome,
    PageCountMismatch,
    Pass,
    PixelDeviation,
    ReferenceFailure,
    TestResult,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class RunOptions:
    """How a run treats the selected tests.

    ``jobs`` defaults to the number of CPUs. ``overrides`` take precedence
    over every other configuration layer.
    """

    fail_fast: bool = False
    update: bool = False
    force: bool = False
    overrides: TestConfig | None = None
    jobs: int | None = None
    export: bool = True
    diff: bool = True


@dataclass(frozen=True)
class PipelineContext:
    """What every pipeline of one run shares."""

    compiler: Compiler
    root: Path
    options: RunOptions = field(default_factory=RunOptions)
    font_paths: tuple[Path, ...] = ()
    package_overrides: Mapping[str, Path] = field(default_factory=dict)


class _Failed(Exception):
    """Ends a pipeline early with a failure reason."""

    def __init__(self, reason: FailureReason) -> None:
        super().__init__(reason)
        self.reason = reason


def failure_reasons(verdict: Verdict) -> tuple[FailureReason, ...]:
    if verdict.page_count_mismatch:
        return (PageCountMismatch(verdict.candidate_pages, verdict.reference_pages),)
    reasons: list[FailureReason] = []
    for page in verdict.different_pages:
        if page.dimension_mismatch:
            reasons.append(DimensionMismatch(page.page, page.candidate_size, page.reference_size))
        else:
            reasons.append(PixelDeviation(page.page, page.deviations))
    return tuple(reasons)


class Pipeline:
    """Runs one test to completion and produces its :class:`TestResult`."""

    def __init__(self, test: Test, ctx: PipelineContext) -> None:
        self.test = test
        self.ctx = ctx
        self.settings: Settings = (
            resolve(ctx.options.overrides, base=test.settings)
            if ctx.options.overrides is not None
            else test.settings
        )
        self.warnings: list[str] = []

    def run(self) -> TestResult:
        started = time.perf_counter()
        try:
            outcome = self._run()
        except _Failed as failed:
            outcome = Fail((failed.reason,))
        duration = time.perf_counter() - started
        logger.debug("test finished", test=self.test.identifier, outcome=type(outcome).__name__)
        return TestResult(self.test.identifier, self.test.kind, outcome, duration, tuple(self.warnings))

    def _run(self) -> Outcome:
        test = self.test
        if test.is_unit:
            store.reset_dir(test.paths.out_dir)
            store.reset_dir(test.paths.diff_dir)

        document = self._compile(test.paths.script, is_reference=False)
        if test.kind in (TestKind.COMPILE_ONLY, TestKind.TEMPLATE):
            return Pass()

        candidate = [page.render(self.settings.ppi) for page in document.pages]
        if self.ctx.options.export:
            store.write_pages(test.paths.out_dir, candidate)

        updating = self.ctx.options.update and test.kind is TestKind.PERSISTENT
        try:
            reference = self._reference()
        except _Failed:
            if updating:
                return self._update(candidate)
            raise

        verdict = compare(candidate, reference, self.settings.max_delta, self.settings.max_deviations)
        if verdict.is_same:
            if updating and self.ctx.options.force:
                return self._update(candidate)
            return Pass()

        if self.ctx.options.diff:
            self._write_diffs(verdict, candidate, reference)
        if updating:
            return self._update(candidate)
        return Fail(failure_reasons(verdict))

    def _compile(self, source: Path, *, is_reference: bool) -> Document:
        request = CompileRequest(
            source=source,
            root=self.test.root or self.ctx.root,
            settings=self.settings,
            font_paths=self.ctx.font_paths,
            package_overrides=self.ctx.package_overrides if self.test.is_template else {},
        )
        try:
            document = self.ctx.compiler.compile(request)
        except CompileError as e:
            self.warnings.extend(e.warnings)
            raise _Failed(CompileFailure(e.message, e.diagnostics, is_reference)) from e
        self.warnings.extend(document.warnings)
        return document

    def _reference(self) -> list[Image.Image]:
        test = self.test
        if test.kind is TestKind.EPHEMERAL:
            document = self._compile(test.paths.ref_script, is_reference=True)
            return [page.render(self.settings.ppi) for page in document.pages]
        try:
            return store.load_pages(test.paths.ref_dir)
        except ReferenceLoadError as e:
            raise _Failed(ReferenceFailure(str(e))) from e

    def _update(self, candidate: list[Image.Image]) -> Outcome:
        store.replace_pages(self.test.paths.ref_dir, candidate)
        logger.info("updated reference", test=self.test.identifier, pages=len(candidate))
        return Pass(updated=True)

    def _write_diffs(
        self, verdict: Verdict, candidate: list[Image.Image], reference: list[Image.Image]
    ) -> None:
        origin = Origin.for_direction(self.settings.dir)
        for page in verdict.different_pages:
            index = page.page - 1
            try:
                image = render_diff(candidate[index], reference[index], origin)
                image.save(self.test.paths.diff_dir / f"{page.page}.png", format="PNG")
            except (OSError, ValueError) as e:
                logger.error("cannot write diff", test=self.test.identifier, page=page.page, error=str(e))
