"""Test outcomes and run reports."""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Union

import yaml

from typtest.project.kinds import TestKind

# ---------------------------------------------------------------------------
# Failure reasons
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CompileFailure:
    message: str
    diagnostics: tuple[str, ...] = ()
    is_reference: bool = False


@dataclass(frozen=True)
class PageCountMismatch:
    candidate: int
    reference: int


@dataclass(frozen=True)
class DimensionMismatch:
    page: int
    candidate: tuple[int, int]
    reference: tuple[int, int]


@dataclass(frozen=True)
class PixelDeviation:
    page: int
    count: int


@dataclass(frozen=True)
class ReferenceFailure:
    """The stored reference pages could not be loaded."""

    message: str


FailureReason = Union[CompileFailure, PageCountMismatch, DimensionMismatch, PixelDeviation, ReferenceFailure]


def describe_reason(reason: FailureReason) -> str:
    if isinstance(reason, CompileFailure):
        subject = "reference" if reason.is_reference else "test"
        return f"{subject} failed to compile: {reason.message}"
    elif isinstance(reason, PageCountMismatch):
        return f"expected {reason.reference} page(s), got {reason.candidate}"
    elif isinstance(reason, DimensionMismatch):
        return (
            f"page {reason.page}: size {reason.candidate[0]}x{reason.candidate[1]} "
            f"differs from reference {reason.reference[0]}x{reason.reference[1]}"
        )
    elif isinstance(reason, PixelDeviation):
        return f"page {reason.page}: {reason.count} deviating pixel(s)"
    elif isinstance(reason, ReferenceFailure):
        return f"reference unavailable: {reason.message}"
    raise TypeError(f"unknown failure reason: {reason!r}")


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Pass:
    updated: bool = False


@dataclass(frozen=True)
class Fail:
    reasons: tuple[FailureReason, ...]


@dataclass(frozen=True)
class Skip:
    reason: str


Outcome = Union[Pass, Fail, Skip]


def outcome_name(outcome: Outcome) -> str:
    if isinstance(outcome, Pass):
        return "pass"
    elif isinstance(outcome, Fail):
        return "fail"
    elif isinstance(outcome, Skip):
        return "skip"
    raise TypeError(f"unknown outcome: {outcome!r}")


@dataclass(frozen=True)
class TestResult:
    __test__ = False

    identifier: str
    kind: TestKind
    outcome: Outcome
    duration: float = 0.0
    warnings: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.identifier,
            "kind": self.kind.value,
            "outcome": outcome_name(self.outcome),
            "duration": round(self.duration, 6),
        }
        if isinstance(self.outcome, Fail):
            data["reasons"] = [describe_reason(r) for r in self.outcome.reasons]
        elif isinstance(self.outcome, Skip):
            data["reason"] = self.outcome.reason
        elif isinstance(self.outcome, Pass) and self.outcome.updated:
            data["updated"] = True
        if self.warnings:
            data["warnings"] = list(self.warnings)
        return data


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RunReport:
    run_id: str
    started_at: datetime
    results: tuple[TestResult, ...]
    duration: float = 0.0

    @property
    def counts(self) -> dict[str, int]:
        counter = Counter(outcome_name(r.outcome) for r in self.results)
        return {name: counter.get(name, 0) for name in ("pass", "fail", "skip")}

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def ok(self) -> bool:
        return not any(isinstance(r.outcome, Fail) for r in self.results)

    def get(self, identifier: str) -> TestResult:
        for result in self.results:
            if result.identifier == identifier:
                return result
        raise KeyError(identifier)

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat(),
            "duration": round(self.duration, 6),
            "counts": self.counts,
            "results": [r.to_dict() for r in self.results],
        }


@dataclass(frozen=True)
class UpdateReport:
    """Which persistent references an update touched.

    ``ineligible`` lists tests that have no stored reference to update.
    """

    updated: tuple[str, ...] = ()
    unchanged: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()
    ineligible: tuple[str, ...] = ()
    run: RunReport | None = field(default=None, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "updated": list(self.updated),
            "unchanged": list(self.unchanged),
            "failed": list(self.failed),
            "ineligible": list(self.ineligible),
        }


def dump_report(report: RunReport | UpdateReport, path: Path) -> None:
    """Write *report* as JSON or YAML, chosen by the suffix of *path*."""
    suffix = path.suffix.lower()
    if suffix not in (".json", ".yaml", ".yml"):
        raise ValueError(f"unsupported report format: {path.suffix or path.name}")

    data = report.to_dict()
    with open(path, "w", encoding="utf-8") as f:
        if suffix == ".json":
            json.dump(data, f, indent=2)
            f.write("\n")
        else:
            yaml.safe_dump(data, f, sort_keys=False)
