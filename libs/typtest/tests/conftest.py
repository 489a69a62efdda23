"""Shared fixtures for the typtest unit tests."""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image

from typtest.errors import CompileError
from typtest.runner.compiler import CompileRequest, Document, RasterPage


class FakeCompiler:
    """Compiles a tiny line-based stand-in for Typst.

    Each non-comment line of a script is one directive:

    - ``page WxH #rrggbb`` appends a solid page,
    - ``pixel X,Y #rrggbb`` recolors one pixel of the last page,
    - ``warn TEXT`` adds a compiler warning,
    - ``error TEXT`` makes compilation fail.

    Page sizes are given at 144 ppi and scaled to the requested ppi.
    """

    def __init__(self) -> None:
        self.requests: list[CompileRequest] = []
        self._lock = threading.Lock()

    def compile(self, request: CompileRequest) -> Document:
        with self._lock:
            self.requests.append(request)

        pages: list[Image.Image] = []
        warnings: list[str] = []
        for line in request.source.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line or line.startswith("//"):
                continue
            directive, _, rest = line.partition(" ")
            if directive == "page":
                size, color = rest.split()
                width, height = (int(n) for n in size.split("x"))
                pages.append(Image.new("RGB", (width, height), color))
            elif directive == "pixel":
                at, color = rest.split()
                x, y = (int(n) for n in at.split(","))
                pages[-1].putpixel((x, y), Image.new("RGB", (1, 1), color).getpixel((0, 0)))
            elif directive == "warn":
                warnings.append(f"warning: {rest}")
            elif directive == "error":
                raise CompileError(rest, diagnostics=[f"{request.source}: error: {rest}"])
            else:
                raise CompileError(f"unknown directive {directive!r}")

        rendered = tuple(RasterPage(p, 144.0) for p in pages)
        return Document(rendered, tuple(warnings))

    def compiled(self) -> list[Path]:
        return [r.source for r in self.requests]


@pytest.fixture
def compiler() -> FakeCompiler:
    return FakeCompiler()


@pytest.fixture
def write_file() -> Callable[[Path, str], Path]:
    """Write text to a path, creating parent directories."""

    def write(path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return write


@pytest.fixture
def save_pages() -> Callable[[Path, list[Image.Image]], Path]:
    """Store images as numbered reference pages in a directory."""

    def save(directory: Path, pages: list[Image.Image]) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        for number, page in enumerate(pages, start=1):
            page.save(directory / f"{number}.png")
        return directory

    return save


@pytest.fixture
def project_dir(tmp_path: Path, write_file) -> Path:
    """A project with one test of each unit kind."""
    root = tmp_path / "project"
    write_file(
        root / "typst.toml",
        '[package]\nname = "demo"\nversion = "0.1.0"\nentrypoint = "lib.typ"\n',
    )
    write_file(root / "tests" / "compile" / "test.typ", "page 4x4 #ffffff\n")
    write_file(root / "tests" / "ephemeral" / "test.typ", "page 4x4 #ff0000\n")
    write_file(root / "tests" / "ephemeral" / "ref.typ", "page 4x4 #ff0000\n")
    write_file(root / "tests" / "persistent" / "test.typ", "page 4x4 #00ff00\n")
    ref = root / "tests" / "persistent" / "ref"
    ref.mkdir()
    Image.new("RGB", (4, 4), "#00ff00").save(ref / "1.png")
    return root
