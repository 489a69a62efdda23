"""Reading ``typst.toml``.

Only the tables typtest understands are looked at: ``[package]``,
``[template]`` and ``[tool.typtest]``. They are checked against the
packaged JSON schema and every violation is reported at once.
"""

from __future__ import annotations

import datetime as dt
import json
import math
import tomllib
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import jsonschema

from typtest.errors import ManifestError
from typtest.log import get_logger
from typtest.project.config import TestConfig
from typtest.project.kinds import Direction

logger = get_logger(__name__)

MANIFEST_NAME = "typst.toml"
DEFAULT_TESTS_DIR = "tests"


@dataclass(frozen=True)
class PackageInfo:
    name: str
    version: str
    entrypoint: str

    @property
    def spec(self) -> str:
        """The import spec other documents use, ``@preview/name:version``."""
        return f"@preview/{self.name}:{self.version}"


@dataclass(frozen=True)
class TemplateInfo:
    path: str
    entrypoint: str


@dataclass(frozen=True)
class Manifest:
    package: PackageInfo | None = None
    template: TemplateInfo | None = None
    tests: str = DEFAULT_TESTS_DIR
    fonts: tuple[str, ...] = ()
    defaults: TestConfig = field(default_factory=TestConfig)


@lru_cache(maxsize=1)
def manifest_schema() -> dict[str, Any]:
    source = resources.files("typtest").joinpath("schema", "manifest.schema.json")
    return json.loads(source.read_text(encoding="utf-8"))


def _jsonable(value: Any) -> Any:
    """Replace TOML date and time values by their ISO strings."""
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        return value.isoformat()
    return value


def validate_manifest(data: dict[str, Any]) -> list[str]:
    """Return one message per schema violation, in document order."""
    validator = jsonschema.Draft202012Validator(manifest_schema())
    problems = []
    for error in sorted(validator.iter_errors(_jsonable(data)), key=lambda e: list(map(str, e.path))):
        where = ".".join(str(p) for p in error.absolute_path)
        problems.append(f"{where}: {error.message}" if where else error.message)
    return problems


def parse_manifest(data: dict[str, Any], path: Path) -> Manifest:
    """Build a :class:`Manifest` from already parsed TOML.

    Raises:
        ManifestError: Listing every violation if any table is invalid.
    """
    problems = validate_manifest(data)
    if problems:
        raise ManifestError(path, problems)

    package = data.get("package")
    template = data.get("template")
    tool = data.get("tool", {}).get("typtest", {})

    return Manifest(
        package=PackageInfo(package["name"], package["version"], package["entrypoint"])
        if package
        else None,
        template=TemplateInfo(template["path"], template["entrypoint"]) if template else None,
        tests=tool.get("tests", DEFAULT_TESTS_DIR),
        fonts=tuple(tool.get("fonts", ())),
        defaults=_defaults(tool.get("default", {}), path),
    )


def _defaults(table: dict[str, Any], path: Path) -> TestConfig:
    """Convert the validated default table.

    The schema only checks the shape of values, so impossible dates and
    non-finite numbers are rejected here.
    """
    problems = []
    timestamp = table.get("timestamp")
    if isinstance(timestamp, str):
        try:
            timestamp = dt.datetime.fromisoformat(timestamp.upper())
        except ValueError as e:
            problems.append(f"tool.typtest.default.timestamp: {e}")
    ppi = table.get("ppi")
    if ppi is not None and not math.isfinite(ppi):
        problems.append(f"tool.typtest.default.ppi: {ppi} is not a finite number")
    if problems:
        raise ManifestError(path, problems)

    direction = table.get("dir")
    return TestConfig(
        use_system_fonts=table.get("use-system-fonts"),
        use_system_datetime=table.get("use-system-datetime"),
        use_augmented_library=table.get("use-augmented-library"),
        timestamp=timestamp,
        allow_packages=table.get("allow-packages"),
        dir=Direction(direction) if direction is not None else None,
        ppi=float(ppi) if ppi is not None else None,
        max_delta=table.get("max-delta"),
        max_deviations=table.get("max-deviations"),
        inputs=dict(table.get("inputs", {})),
    )


def load_manifest(root: Path) -> Manifest | None:
    """Load ``typst.toml`` from the project *root*.

    Returns:
        The manifest, or ``None`` when the project has none.

    Raises:
        ManifestError: If the file cannot be read, is not TOML or is invalid.
    """
    path = root / MANIFEST_NAME
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        logger.debug("no manifest, using defaults", root=str(root))
        return None
    except tomllib.TOMLDecodeError as e:
        raise ManifestError(path, [f"invalid TOML: {e}"]) from e
    except OSError as e:
        raise ManifestError(path, [f"cannot read: {e}"]) from e

    return parse_manifest(data, path)
