"""Projects, tests, annotations and configuration resolution."""

from typtest.project.annotations import Annotation, ParsedAnnotations, parse_annotations
from typtest.project.config import BUILTIN_DEFAULTS, Settings, TestConfig, resolve
from typtest.project.discovery import collect_tests
from typtest.project.ident import TEMPLATE_ID, validate_identifier
from typtest.project.kinds import Direction, DuplicatePolicy, TestKind
from typtest.project.manifest import Manifest, load_manifest
from typtest.project.project import Project, discover
from typtest.project.test import Test, TestPaths

__all__ = [
    "Annotation",
    "BUILTIN_DEFAULTS",
    "Direction",
    "DuplicatePolicy",
    "Manifest",
    "ParsedAnnotations",
    "Project",
    "Settings",
    "TEMPLATE_ID",
    "Test",
    "TestConfig",
    "TestKind",
    "TestPaths",
    "collect_tests",
    "discover",
    "load_manifest",
    "parse_annotations",
    "resolve",
    "validate_identifier",
]
