"""The document compiler collaborator.

The runner only depends on the :class:`Compiler` protocol. The bundled
:class:`TypstCliCompiler` drives the ``typst`` executable.
"""

from __future__ import annotations

import os
import re
import subprocess
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from PIL import Image

from typtest.errors import CompileError
from typtest.log import get_logger
from typtest.project.config import BUILTIN_DEFAULTS, Settings

logger = get_logger(__name__)

_PACKAGE_IMPORT = re.compile(r"""["'](@[A-Za-z0-9_-]+/[A-Za-z0-9_-]+:[0-9]+\.[0-9]+\.[0-9]+)["']""")
_PAGE_FILE = re.compile(r"page-(\d+)\.png")
_SPEC = re.compile(r"@(?P<namespace>[A-Za-z0-9_-]+)/(?P<name>[A-Za-z0-9_-]+):(?P<version>[0-9.]+)")


@dataclass(frozen=True)
class CompileRequest:
    """Everything needed to compile one document.

    ``package_overrides`` maps package specs such as ``@preview/pkg:0.1.0``
    to local directories that replace the published package.
    """

    source: Path
    root: Path
    settings: Settings = BUILTIN_DEFAULTS
    font_paths: tuple[Path, ...] = ()
    package_overrides: Mapping[str, Path] = field(default_factory=dict)


class Page(Protocol):
    def render(self, ppi: float) -> Image.Image: ...


@dataclass(frozen=True)
class RasterPage:
    """A page that was already rasterized at ``ppi``."""

    image: Image.Image
    ppi: float

    def render(self, ppi: float) -> Image.Image:
        if ppi == self.ppi:
            return self.image
        scale = ppi / self.ppi
        size = (max(1, round(self.image.width * scale)), max(1, round(self.image.height * scale)))
        return self.image.resize(size, Image.Resampling.LANCZOS)


@dataclass(frozen=True)
class Document:
    pages: tuple[Page, ...]
    warnings: tuple[str, ...] = ()


class Compiler(Protocol):
    def compile(self, request: CompileRequest) -> Document:
        """Compile ``request.source``.

        Raises:
            CompileError: If the document does not compile.
        """
        ...


def disallowed_packages(source: str, overrides: Mapping[str, Path]) -> list[str]:
    """Package specs imported by *source* that no override covers."""
    found = {m.group(1) for m in _PACKAGE_IMPORT.finditer(source)}
    return sorted(found - set(overrides))


class TypstCliCompiler:
    """Compile documents with the ``typst`` command line tool."""

    def __init__(self, executable: str = "typst") -> None:
        self.executable = executable

    def command(self, request: CompileRequest, output: Path, package_path: Path | None) -> list[str]:
        settings = request.settings
        cmd = [
            self.executable,
            "compile",
            "--format",
            "png",
            "--ppi",
            f"{settings.ppi:g}",
            "--root",
            str(request.root),
        ]
        for font_path in request.font_paths:
            cmd += ["--font-path", str(font_path)]
        if not settings.use_system_fonts:
            cmd.append("--ignore-system-fonts")
        if not settings.use_system_datetime:
            cmd += ["--creation-timestamp", str(int(settings.timestamp.timestamp()))]
        for key, value in settings.inputs.items():
            cmd += ["--input", f"{key}={value}"]
        if package_path is not None:
            cmd += ["--package-path", str(package_path)]
        cmd += [str(request.source), str(output)]
        return cmd

    def compile(self, request: CompileRequest) -> Document:
        settings = request.settings
        if not settings.allow_packages:
            source = request.source.read_text(encoding="utf-8")
            blocked = disallowed_packages(source, request.package_overrides)
            if blocked:
                raise CompileError(
                    "package imports are not allowed",
                    diagnostics=[f"{request.source}: imports {spec}" for spec in blocked],
                )
        if settings.use_augmented_library:
            logger.warning(
                "augmented test library is not available with the typst CLI",
                source=str(request.source),
            )

        with tempfile.TemporaryDirectory(prefix="typtest-") as tmp:
            workdir = Path(tmp)
            package_path = _link_overrides(workdir / "packages", request.package_overrides)
            output = workdir / "page-{p}.png"
            cmd = self.command(request, output, package_path)
            logger.debug("compiling", command=cmd)

            try:
                proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
            except FileNotFoundError as e:
                raise CompileError(f"typst executable not found: {self.executable}") from e

            lines = [line for line in proc.stderr.splitlines() if line.strip()]
            warnings = tuple(line for line in lines if line.startswith("warning:"))
            if proc.returncode != 0:
                errors = [line for line in lines if not line.startswith("warning:")]
                raise CompileError(
                    f"compilation of {request.source} failed", diagnostics=errors, warnings=warnings
                )

            return Document(_read_pages(workdir, settings.ppi), warnings)


def _link_overrides(package_path: Path, overrides: Mapping[str, Path]) -> Path | None:
    """Lay out ``namespace/name/version`` symlinks to the override directories."""
    if not overrides:
        return None
    for spec, target in overrides.items():
        match = _SPEC.fullmatch(spec)
        if match is None:
            raise CompileError(f"invalid package spec {spec!r}")
        link = package_path / match["namespace"] / match["name"] / match["version"]
        link.parent.mkdir(parents=True, exist_ok=True)
        os.symlink(target.resolve(), link, target_is_directory=True)
    return package_path


def _read_pages(directory: Path, ppi: float) -> tuple[Page, ...]:
    numbered = []
    for entry in directory.iterdir():
        match = _PAGE_FILE.fullmatch(entry.name)
        if match:
            numbered.append((int(match.group(1)), entry))
    pages: list[Page] = []
    for _, path in sorted(numbered):
        with Image.open(path) as image:
            pages.append(RasterPage(image.convert("RGB"), ppi))
    return tuple(pages)
