"""Tests for the typst CLI compiler adapter."""

from __future__ import annotations

import subprocess
from datetime import datetime, timezone
from pathlib import Path
from unittest import mock

import pytest
from PIL import Image

from typtest.errors import CompileError
from typtest.project.config import TestConfig, resolve
from typtest.runner.compiler import (
    CompileRequest,
    RasterPage,
    TypstCliCompiler,
    _link_overrides,
    disallowed_packages,
)


def request_for(source: Path, **config) -> CompileRequest:
    return CompileRequest(source=source, root=source.parent, settings=resolve(TestConfig(**config)))


def fake_run(stderr: str = "", returncode: int = 0, pages: int = 1):
    """A ``subprocess.run`` stand-in that writes *pages* PNG files."""

    def run(cmd, **kwargs):
        template = cmd[-1]
        if returncode == 0:
            for number in range(1, pages + 1):
                Image.new("RGB", (2, 3), "white").save(template.replace("{p}", str(number)))
        return subprocess.CompletedProcess(cmd, returncode, stdout="", stderr=stderr)

    return run


# ---------------------------------------------------------------------------
# Command line
# ---------------------------------------------------------------------------


class TestCommand:
    def test_defaults(self, tmp_path: Path) -> None:
        request = request_for(tmp_path / "test.typ")
        cmd = TypstCliCompiler().command(request, tmp_path / "page-{p}.png", None)
        assert cmd[:6] == ["typst", "compile", "--format", "png", "--ppi", "144"]
        assert "--ignore-system-fonts" in cmd
        assert cmd[cmd.index("--creation-timestamp") + 1] == "0"
        assert "--package-path" not in cmd
        assert cmd[-2:] == [str(tmp_path / "test.typ"), str(tmp_path / "page-{p}.png")]

    def test_configured(self, tmp_path: Path) -> None:
        request = CompileRequest(
            source=tmp_path / "test.typ",
            root=tmp_path,
            settings=resolve(
                TestConfig(
                    ppi=72.5,
                    use_system_fonts=True,
                    use_system_datetime=True,
                    inputs={"lang": "de", "mode": "draft"},
                )
            ),
            font_paths=(tmp_path / "fonts",),
        )
        cmd = TypstCliCompiler("/opt/typst").command(request, tmp_path / "out.png", tmp_path / "pkgs")
        assert cmd[0] == "/opt/typst"
        assert cmd[cmd.index("--ppi") + 1] == "72.5"
        assert cmd[cmd.index("--root") + 1] == str(tmp_path)
        assert cmd[cmd.index("--font-path") + 1] == str(tmp_path / "fonts")
        assert "--ignore-system-fonts" not in cmd
        assert "--creation-timestamp" not in cmd
        assert [cmd[i + 1] for i, arg in enumerate(cmd) if arg == "--input"] == ["lang=de", "mode=draft"]
        assert cmd[cmd.index("--package-path") + 1] == str(tmp_path / "pkgs")

    def test_timestamp(self, tmp_path: Path) -> None:
        stamp = datetime(2024, 5, 1, tzinfo=timezone.utc)
        request = request_for(tmp_path / "test.typ", timestamp=stamp)
        cmd = TypstCliCompiler().command(request, tmp_path / "out.png", None)
        assert cmd[cmd.index("--creation-timestamp") + 1] == str(int(stamp.timestamp()))


# ---------------------------------------------------------------------------
# Packages
# ---------------------------------------------------------------------------


class TestPackages:
    SOURCE = '#import "@preview/cetz:0.2.2": canvas\n#import "@local/mine:1.0.0"\n#import "util.typ"\n'

    def test_disallowed(self) -> None:
        assert disallowed_packages(self.SOURCE, {}) == ["@local/mine:1.0.0", "@preview/cetz:0.2.2"]

    def test_overrides_are_allowed(self, tmp_path: Path) -> None:
        overrides = {"@preview/cetz:0.2.2": tmp_path}
        assert disallowed_packages(self.SOURCE, overrides) == ["@local/mine:1.0.0"]

    def test_blocked_without_running(self, tmp_path: Path, write_file) -> None:
        source = write_file(tmp_path / "test.typ", self.SOURCE)
        with mock.patch("subprocess.run") as run:
            with pytest.raises(CompileError, match="not allowed") as exc_info:
                TypstCliCompiler().compile(request_for(source, allow_packages=False))
        run.assert_not_called()
        assert len(exc_info.value.diagnostics) == 2

    def test_link_overrides(self, tmp_path: Path) -> None:
        target = tmp_path / "pkg"
        target.mkdir()
        base = _link_overrides(tmp_path / "packages", {"@preview/demo:0.1.0": target})
        link = tmp_path / "packages" / "preview" / "demo" / "0.1.0"
        assert base == tmp_path / "packages"
        assert link.is_symlink()
        assert link.resolve() == target.resolve()

    def test_no_overrides(self, tmp_path: Path) -> None:
        assert _link_overrides(tmp_path / "packages", {}) is None
        assert not (tmp_path / "packages").exists()

    def test_invalid_spec(self, tmp_path: Path) -> None:
        with pytest.raises(CompileError, match="invalid package spec"):
            _link_overrides(tmp_path / "packages", {"demo": tmp_path})


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------


class TestCompile:
    def test_pages_and_warnings(self, tmp_path: Path, write_file) -> None:
        source = write_file(tmp_path / "test.typ", "= Hello\n")
        with mock.patch("subprocess.run", side_effect=fake_run("warning: unused\n", pages=12)):
            document = TypstCliCompiler().compile(request_for(source))
        assert len(document.pages) == 12
        assert document.warnings == ("warning: unused",)
        assert document.pages[0].render(144).size == (2, 3)

    def test_failure(self, tmp_path: Path, write_file) -> None:
        source = write_file(tmp_path / "test.typ", "#foo\n")
        stderr = "warning: w\nerror: unknown variable: foo\n  ┌─ test.typ:1:2\n"
        with mock.patch("subprocess.run", side_effect=fake_run(stderr, returncode=1)):
            with pytest.raises(CompileError) as exc_info:
                TypstCliCompiler().compile(request_for(source))
        assert exc_info.value.warnings == ("warning: w",)
        assert exc_info.value.diagnostics[0] == "error: unknown variable: foo"

    def test_missing_executable(self, tmp_path: Path, write_file) -> None:
        source = write_file(tmp_path / "test.typ", "")
        with mock.patch("subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(CompileError, match="not found"):
                TypstCliCompiler("no-such-typst").compile(request_for(source))


class TestRasterPage:
    def test_same_ppi(self) -> None:
        image = Image.new("RGB", (10, 20))
        assert RasterPage(image, 144).render(144) is image

    def test_rescaled(self) -> None:
        page = RasterPage(Image.new("RGB", (10, 20)), 144)
        assert page.render(72).size == (5, 10)
        assert page.render(1).size == (1, 1)
