"""typtest: a regression-test runner for Typst projects."""

from typtest.errors import TyptestError
from typtest.project import Project, Test, TestConfig, discover
from typtest.query import ExactFilter, evaluate, select
from typtest.runner import RunOptions, Runner, TypstCliCompiler

__version__ = "0.1.0"

__all__ = [
    "ExactFilter",
    "Project",
    "RunOptions",
    "Runner",
    "Test",
    "TestConfig",
    "TyptestError",
    "TypstCliCompiler",
    "discover",
    "evaluate",
    "select",
]
