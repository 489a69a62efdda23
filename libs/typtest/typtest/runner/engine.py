"""Scheduling of test pipelines on a bounded worker pool.

Dispatch is gated by a semaphore with one slot per worker. Before each
dispatch the scheduler checks a shared cancellation event, which a failing
worker sets under fail-fast before it gives its slot back. Results travel
back through a queue; tests that were never dispatched are reported as
skipped.
"""

from __future__ import annotations

import os
import queue
import threading
import time
import uuid
from collections.abc import Iterable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

from typtest.log import get_logger
from typtest.project.project import Project
from typtest.project.test import Test
from typtest.runner.compiler import Compiler
from typtest.runner.pipeline import Pipeline, PipelineContext, RunOptions
from typtest.runner.report import Fail, Pass, RunReport, Skip, TestResult, UpdateReport

logger = get_logger(__name__)

CANCELLED = "cancelled"


class Runner:
    """Runs tests of one project with a given compiler."""

    def __init__(
        self,
        compiler: Compiler,
        root: Path,
        *,
        font_paths: Iterable[Path] = (),
        package_overrides: Mapping[str, Path] | None = None,
    ) -> None:
        self.compiler = compiler
        self.root = root
        self.font_paths = tuple(font_paths)
        self.package_overrides = dict(package_overrides or {})

    @classmethod
    def for_project(cls, project: Project, compiler: Compiler) -> Runner:
        """A runner whose template test imports the project itself locally."""
        overrides = {}
        if project.manifest.package is not None:
            overrides[project.manifest.package.spec] = project.root
        return cls(compiler, project.root, font_paths=project.font_paths, package_overrides=overrides)

    def run(self, tests: Iterable[Test], options: RunOptions | None = None) -> RunReport:
        """Run *tests* and report every outcome, ordered by identifier.

        Raises:
            Exception: Whatever unexpected error a pipeline raised, after
                the in-flight pipelines have finished.
        """
        options = options or RunOptions()
        ordered = sorted(tests, key=lambda t: t.identifier)
        jobs = max(1, options.jobs or os.cpu_count() or 1)
        ctx = PipelineContext(
            self.compiler, self.root, options, self.font_paths, self.package_overrides
        )

        run_id = uuid.uuid4().hex
        started_at = datetime.now(timezone.utc)
        started = time.perf_counter()
        log = logger.bind(run_id=run_id)
        log.info("run started", tests=len(ordered), jobs=jobs, fail_fast=options.fail_fast)

        slots = threading.Semaphore(jobs)
        cancel = threading.Event()
        results: queue.Queue[TestResult] = queue.Queue()
        futures: list[Future[None]] = []
        dispatched: set[str] = set()

        with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="typtest") as pool:
            for test in ordered:
                slots.acquire()
                if cancel.is_set():
                    slots.release()
                    break
                dispatched.add(test.identifier)
                futures.append(
                    pool.submit(_work, Pipeline(test, ctx), options.fail_fast, slots, cancel, results)
                )

        for future in futures:
            future.result()

        collected = [results.get_nowait() for _ in range(results.qsize())]
        collected.extend(
            TestResult(t.identifier, t.kind, Skip(CANCELLED))
            for t in ordered
            if t.identifier not in dispatched
        )
        collected.sort(key=lambda r: r.identifier)

        report = RunReport(run_id, started_at, tuple(collected), time.perf_counter() - started)
        log.info("run finished", **report.counts, duration=round(report.duration, 3))
        return report

    def update(
        self, tests: Iterable[Test], force: bool = False, options: RunOptions | None = None
    ) -> UpdateReport:
        """Replace the references of failing persistent tests, or all with *force*.

        Tests of other kinds are left alone and listed as ineligible.
        """
        tests = list(tests)
        eligible = [t for t in tests if t.is_persistent]
        ineligible = sorted(t.identifier for t in tests if not t.is_persistent)

        options = replace(options or RunOptions(), update=True, force=force)
        report = self.run(eligible, options)

        updated, unchanged, failed = [], [], []
        for result in report.results:
            if isinstance(result.outcome, Pass):
                (updated if result.outcome.updated else unchanged).append(result.identifier)
            elif isinstance(result.outcome, Fail):
                failed.append(result.identifier)
            elif isinstance(result.outcome, Skip):
                unchanged.append(result.identifier)
        return UpdateReport(tuple(updated), tuple(unchanged), tuple(failed), tuple(ineligible), report)


def _work(
    pipeline: Pipeline,
    fail_fast: bool,
    slots: threading.Semaphore,
    cancel: threading.Event,
    results: queue.Queue[TestResult],
) -> None:
    try:
        result = pipeline.run()
        if fail_fast and isinstance(result.outcome, Fail):
            cancel.set()
        results.put(result)
    except Exception:
        cancel.set()
        raise
    finally:
        slots.release()
