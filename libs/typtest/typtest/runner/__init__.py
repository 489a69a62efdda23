"""Execution engine: compile, compare and update tests on a worker pool."""

from typtest.runner.compiler import (
    CompileRequest,
    Compiler,
    Document,
    Page,
    RasterPage,
    TypstCliCompiler,
)
from typtest.runner.engine import Runner
from typtest.runner.pipeline import RunOptions
from typtest.runner.report import (
    CompileFailure,
    DimensionMismatch,
    Fail,
    PageCountMismatch,
    Pass,
    PixelDeviation,
    ReferenceFailure,
    RunReport,
    Skip,
    TestResult,
    UpdateReport,
    dump_report,
)

__all__ = [
    "CompileFailure",
    "CompileRequest",
    "Compiler",
    "DimensionMismatch",
    "Document",
    "Fail",
    "Page",
    "PageCountMismatch",
    "Pass",
    "PixelDeviation",
    "RasterPage",
    "ReferenceFailure",
    "RunOptions",
    "RunReport",
    "Runner",
    "Skip",
    "TestResult",
    "TypstCliCompiler",
    "UpdateReport",
    "dump_report",
]
