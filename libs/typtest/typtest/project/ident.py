"""Test identifiers."""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath

from typtest.errors import InvalidIdentifierError

TEMPLATE_ID = "@template"

_COMPONENT = re.compile(r"[A-Za-z][A-Za-z0-9_-]*")


def is_valid_component(name: str) -> bool:
    return _COMPONENT.fullmatch(name) is not None


def validate_identifier(identifier: str) -> str:
    """Return *identifier* unchanged if it names a unit test.

    Raises:
        InvalidIdentifierError: If it is empty, reserved or has a bad component.
    """
    if not identifier:
        raise InvalidIdentifierError(identifier, "empty identifier")
    if identifier == TEMPLATE_ID:
        raise InvalidIdentifierError(identifier, "reserved for the template test")
    for component in identifier.split("/"):
        if not component:
            raise InvalidIdentifierError(identifier, "empty path component")
        if not is_valid_component(component):
            raise InvalidIdentifierError(
                identifier,
                f"component {component!r} must start with an ASCII letter and contain "
                "only letters, digits, '_' and '-'",
            )
    return identifier


def identifier_from_path(test_root: Path, directory: Path) -> str:
    """Identifier of the test living in *directory* below *test_root*."""
    relative = directory.relative_to(test_root)
    return validate_identifier(PurePosixPath(*relative.parts).as_posix())


def path_from_identifier(test_root: Path, identifier: str) -> Path:
    return test_root.joinpath(*validate_identifier(identifier).split("/"))
