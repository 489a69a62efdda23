"""Tests for outcomes and report serialization."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest
import yaml

from typtest.project import TestKind
from typtest.runner import (
    CompileFailure,
    Fail,
    PageCountMismatch,
    Pass,
    PixelDeviation,
    RunReport,
    Skip,
    TestResult,
    UpdateReport,
    dump_report,
)
from typtest.runner.report import describe_reason


@pytest.fixture
def report() -> RunReport:
    results = (
        TestResult("a", TestKind.PERSISTENT, Pass(), 0.5),
        TestResult("b", TestKind.EPHEMERAL, Fail((PixelDeviation(2, 7),)), 0.25, ("warning: x",)),
        TestResult("c", TestKind.COMPILE_ONLY, Skip("cancelled")),
        TestResult("d", TestKind.PERSISTENT, Pass(updated=True)),
    )
    return RunReport("abc123", datetime(2024, 1, 1, tzinfo=timezone.utc), results, 1.0)


class TestReasons:
    CASES = [
        (CompileFailure("boom"), "test failed to compile: boom"),
        (CompileFailure("boom", is_reference=True), "reference failed to compile: boom"),
        (PageCountMismatch(3, 2), "expected 2 page(s), got 3"),
        (PixelDeviation(1, 4), "page 1: 4 deviating pixel(s)"),
    ]

    @pytest.mark.parametrize("reason, text", CASES, ids=["compile", "reference", "count", "pixels"])
    def test_describe(self, reason, text: str) -> None:
        assert describe_reason(reason) == text


class TestRunReport:
    def test_counts(self, report: RunReport) -> None:
        assert report.counts == {"pass": 2, "fail": 1, "skip": 1}
        assert report.total == 4
        assert not report.ok

    def test_get(self, report: RunReport) -> None:
        assert report.get("c").outcome == Skip("cancelled")
        with pytest.raises(KeyError):
            report.get("zzz")

    def test_to_dict(self, report: RunReport) -> None:
        data = report.to_dict()
        assert data["run_id"] == "abc123"
        assert data["started_at"] == "2024-01-01T00:00:00+00:00"
        a, b, c, d = data["results"]
        assert a == {"id": "a", "kind": "persistent", "outcome": "pass", "duration": 0.5}
        assert b["reasons"] == ["page 2: 7 deviating pixel(s)"]
        assert b["warnings"] == ["warning: x"]
        assert c["reason"] == "cancelled"
        assert d["updated"] is True


class TestDump:
    def test_json(self, report: RunReport, tmp_path: Path) -> None:
        path = tmp_path / "report.json"
        dump_report(report, path)
        assert json.loads(path.read_text())["counts"]["fail"] == 1

    @pytest.mark.parametrize("name", ["report.yaml", "report.YML"])
    def test_yaml(self, report: RunReport, tmp_path: Path, name: str) -> None:
        path = tmp_path / name
        dump_report(report, path)
        data = yaml.safe_load(path.read_text())
        assert [r["id"] for r in data["results"]] == ["a", "b", "c", "d"]

    def test_update_report(self, tmp_path: Path) -> None:
        path = tmp_path / "update.json"
        dump_report(UpdateReport(updated=("x",), ineligible=("y",)), path)
        assert json.loads(path.read_text()) == {
            "updated": ["x"],
            "unchanged": [],
            "failed": [],
            "ineligible": ["y"],
        }

    def test_unknown_format(self, report: RunReport, tmp_path: Path) -> None:
        path = tmp_path / "report.txt"
        with pytest.raises(ValueError, match="unsupported"):
            dump_report(report, path)
        assert not path.exists()
