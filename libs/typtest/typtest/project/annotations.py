"""In-source test annotations.

Annotations live in the leading doc-comment block of ``test.typ``::

    // optional ordinary comments
    /// [skip]
    /// [max-delta: 4]
    /// [input: lang=de]

The block may be preceded by blank lines and ``//`` comments. Blank doc
lines inside it are ignored, and the first doc line not starting with ``[``
ends it.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from typtest.errors import AnnotationError
from typtest.project.config import TestConfig
from typtest.project.kinds import Direction, DuplicatePolicy

_ANNOTATION = re.compile(r"\[\s*(?P<name>[A-Za-z][A-Za-z0-9_-]*)\s*(?::(?P<arg>.*))?\]")
_RFC3339 = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})"
)
_UINT = re.compile(r"\d+")

_BOOLEANS = {
    "use-system-fonts": "use_system_fonts",
    "use-system-datetime": "use_system_datetime",
    "use-augmented-library": "use_augmented_library",
    "allow-packages": "allow_packages",
}


@dataclass(frozen=True)
class Annotation:
    name: str
    argument: str | None
    line: int  # 1-indexed line in the test script
    text: str = field(default="", compare=False)


@dataclass(frozen=True)
class ParsedAnnotations:
    """Annotations of one test, interpreted into a config layer."""

    entries: tuple[Annotation, ...] = ()
    skip: bool = False
    config: TestConfig = field(default_factory=TestConfig)


def parse_block(source: str) -> list[Annotation]:
    """Extract the raw annotations from a test script.

    Raises:
        AnnotationError: If a line in the block is not ``[name]`` or
            ``[name: argument]``.
    """
    annotations: list[Annotation] = []
    in_block = False

    for number, line in enumerate(source.splitlines(), start=1):
        stripped = line.strip()
        if stripped.startswith("///"):
            in_block = True
            content = stripped[3:].strip()
            if not content:
                continue
            if not content.startswith("["):
                break
            match = _ANNOTATION.fullmatch(content)
            if match is None:
                raise AnnotationError("malformed annotation", number, line)
            arg = match.group("arg")
            annotations.append(
                Annotation(match.group("name"), arg.strip() if arg is not None else None, number, line)
            )
        elif in_block:
            break
        elif not stripped or stripped.startswith("//"):
            continue
        else:
            break

    return annotations


def interpret(
    annotations: Iterable[Annotation], policy: DuplicatePolicy = DuplicatePolicy.ERROR
) -> ParsedAnnotations:
    """Turn raw annotations into a skip flag and a partial :class:`TestConfig`.

    Raises:
        AnnotationError: For unknown names, missing or unexpected arguments,
            out-of-range values and, under :attr:`DuplicatePolicy.ERROR`,
            repeated annotations.
    """
    entries = tuple(annotations)
    values: dict[str, object] = {}
    inputs: dict[str, str] = {}
    seen: set[str] = set()
    skip = False

    for ann in entries:
        if ann.name == "input":
            key, value = _parse_input(ann)
            if key in inputs and policy is DuplicatePolicy.ERROR:
                raise AnnotationError(f"duplicate input {key!r}", ann.line, ann.text)
            inputs[key] = value
            continue

        if ann.name in seen and policy is DuplicatePolicy.ERROR:
            raise AnnotationError(f"duplicate annotation {ann.name!r}", ann.line, ann.text)
        seen.add(ann.name)

        if ann.name == "skip":
            _no_argument(ann)
            skip = True
        elif ann.name in _BOOLEANS:
            values[_BOOLEANS[ann.name]] = _parse_bool(ann)
        elif ann.name == "timestamp":
            values["timestamp"] = _parse_timestamp(ann)
        elif ann.name == "dir":
            values["dir"] = _parse_direction(ann)
        elif ann.name == "ppi":
            values["ppi"] = _parse_ppi(ann)
        elif ann.name == "max-delta":
            values["max_delta"] = _parse_uint(ann, maximum=255)
        elif ann.name == "max-deviations":
            values["max_deviations"] = _parse_uint(ann)
        else:
            raise AnnotationError(f"unknown annotation {ann.name!r}", ann.line, ann.text)

    return ParsedAnnotations(entries, skip, TestConfig(**values, inputs=inputs))  # type: ignore[arg-type]


def parse_annotations(source: str, policy: DuplicatePolicy = DuplicatePolicy.ERROR) -> ParsedAnnotations:
    return interpret(parse_block(source), policy)


def _no_argument(ann: Annotation) -> None:
    if ann.argument is not None:
        raise AnnotationError(f"annotation {ann.name!r} takes no argument", ann.line, ann.text)


def _argument(ann: Annotation) -> str:
    if not ann.argument:
        raise AnnotationError(f"annotation {ann.name!r} requires an argument", ann.line, ann.text)
    return ann.argument


def _parse_bool(ann: Annotation) -> bool:
    arg = _argument(ann)
    if arg == "true":
        return True
    if arg == "false":
        return False
    raise AnnotationError(f"expected 'true' or 'false', found {arg!r}", ann.line, ann.text)


def _parse_timestamp(ann: Annotation) -> datetime:
    arg = _argument(ann)
    if _RFC3339.fullmatch(arg) is None:
        raise AnnotationError(f"expected an RFC 3339 timestamp, found {arg!r}", ann.line, ann.text)
    try:
        return datetime.fromisoformat(arg.upper())
    except ValueError as exc:
        raise AnnotationError(f"invalid timestamp {arg!r}: {exc}", ann.line, ann.text) from exc


def _parse_direction(ann: Annotation) -> Direction:
    arg = _argument(ann)
    try:
        return Direction(arg)
    except ValueError:
        raise AnnotationError(f"expected 'ltr' or 'rtl', found {arg!r}", ann.line, ann.text) from None


def _parse_ppi(ann: Annotation) -> float:
    arg = _argument(ann)
    try:
        ppi = float(arg)
    except ValueError:
        raise AnnotationError(f"expected a number, found {arg!r}", ann.line, ann.text) from None
    if not math.isfinite(ppi) or ppi <= 0:
        raise AnnotationError(f"ppi must be positive, found {arg!r}", ann.line, ann.text)
    return ppi


def _parse_uint(ann: Annotation, maximum: int | None = None) -> int:
    arg = _argument(ann)
    if _UINT.fullmatch(arg) is None:
        raise AnnotationError(f"expected a non-negative integer, found {arg!r}", ann.line, ann.text)
    value = int(arg)
    if maximum is not None and value > maximum:
        raise AnnotationError(f"{ann.name} must be at most {maximum}, found {value}", ann.line, ann.text)
    return value


def _parse_input(ann: Annotation) -> tuple[str, str]:
    arg = _argument(ann)
    key, sep, value = arg.partition("=")
    if not sep or not key:
        raise AnnotationError(f"expected 'key=value', found {arg!r}", ann.line, ann.text)
    return key, value
