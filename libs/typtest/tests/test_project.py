"""Tests for creating, removing and converting tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from typtest.errors import (
    ImmutableTestError,
    InvalidIdentifierError,
    TestExistsError,
    TestNotFoundError,
)
from typtest.project import Project, TestKind
from typtest.project.ident import TEMPLATE_ID, validate_identifier


@pytest.fixture
def project(project_dir: Path) -> Project:
    return Project.load(project_dir)


class TestIdentifiers:
    @pytest.mark.parametrize("identifier", ["a", "a/b", "A-1/b_2", "x/y/z"])
    def test_valid(self, identifier: str) -> None:
        assert validate_identifier(identifier) == identifier

    @pytest.mark.parametrize("identifier", ["", "/a", "a/", "a//b", "1a", "a/_b", "a b", "a.b", "ä"])
    def test_invalid(self, identifier: str) -> None:
        with pytest.raises(InvalidIdentifierError):
            validate_identifier(identifier)

    def test_template_is_reserved(self) -> None:
        with pytest.raises(InvalidIdentifierError, match="reserved"):
            validate_identifier(TEMPLATE_ID)


class TestCreate:
    def test_create_persistent(self, project: Project) -> None:
        page = Image.new("RGB", (2, 2), "blue")
        test = project.create_test("new/one", "page 2x2 #0000ff\n", TestKind.PERSISTENT, reference_pages=[page])
        assert test.kind is TestKind.PERSISTENT
        assert (test.paths.ref_dir / "1.png").is_file()
        assert test.paths.script.read_text() == "page 2x2 #0000ff\n"

    def test_create_persistent_without_pages(self, project: Project) -> None:
        test = project.create_test("empty")
        assert test.kind is TestKind.PERSISTENT
        assert list(test.paths.ref_dir.iterdir()) == []

    def test_create_ephemeral(self, project: Project) -> None:
        test = project.create_test("eph", "a\n", TestKind.EPHEMERAL)
        assert test.kind is TestKind.EPHEMERAL
        assert test.paths.ref_script.read_text() == "a\n"

    def test_create_ephemeral_with_reference(self, project: Project) -> None:
        test = project.create_test("eph", "a\n", TestKind.EPHEMERAL, reference_source="b\n")
        assert test.paths.ref_script.read_text() == "b\n"

    def test_create_compile_only(self, project: Project) -> None:
        test = project.create_test("co", kind=TestKind.COMPILE_ONLY)
        assert test.kind is TestKind.COMPILE_ONLY

    def test_create_in_missing_test_root(self, tmp_path: Path) -> None:
        project = Project(tmp_path)
        test = project.create_test("first", kind=TestKind.COMPILE_ONLY)
        assert test.paths.script == tmp_path / "tests" / "first" / "test.typ"

    def test_existing(self, project: Project) -> None:
        with pytest.raises(TestExistsError):
            project.create_test("compile")

    def test_would_nest_inside(self, project: Project) -> None:
        with pytest.raises(TestExistsError) as exc_info:
            project.create_test("compile/child")
        assert exc_info.value.conflict == "compile"

    def test_would_enclose(self, project: Project) -> None:
        project.create_test("group/leaf")
        with pytest.raises(TestExistsError):
            project.create_test("group")

    def test_template(self, project: Project) -> None:
        with pytest.raises(ImmutableTestError):
            project.create_test(TEMPLATE_ID)

    def test_invalid(self, project: Project) -> None:
        with pytest.raises(InvalidIdentifierError):
            project.create_test("bad name")


class TestMutations:
    def test_remove(self, project: Project) -> None:
        project.remove_test("compile")
        assert "compile" not in project.unit_tests()
        assert not (project.test_root / "compile").exists()

    def test_remove_missing(self, project: Project) -> None:
        with pytest.raises(TestNotFoundError):
            project.remove_test("nope")

    def test_make_persistent(self, project: Project) -> None:
        test = project.make_persistent("ephemeral", [Image.new("RGB", (4, 4), "red")])
        assert test.kind is TestKind.PERSISTENT
        assert not test.paths.ref_script.exists()

    def test_make_ephemeral(self, project: Project) -> None:
        test = project.make_ephemeral("persistent", "page 4x4 #00ff00\n")
        assert test.kind is TestKind.EPHEMERAL
        assert not test.paths.ref_dir.exists()

    def test_make_compile_only(self, project: Project) -> None:
        for identifier in ("persistent", "ephemeral"):
            test = project.make_compile_only(identifier)
            assert test.kind is TestKind.COMPILE_ONLY

    @pytest.mark.parametrize("operation", ["remove_test", "make_compile_only"])
    def test_template_is_immutable(self, project: Project, operation: str) -> None:
        with pytest.raises(ImmutableTestError):
            getattr(project, operation)(TEMPLATE_ID)

    def test_clean(self, project: Project) -> None:
        test = project.get("compile")
        test.paths.out_dir.mkdir()
        test.paths.diff_dir.mkdir()
        project.clean()
        assert not test.paths.out_dir.exists()
        assert not test.paths.diff_dir.exists()
        assert test.paths.script.exists()

    def test_transient_paths(self, project: Project) -> None:
        paths = project.transient_paths()
        root = project.test_root
        assert paths[:2] == [root / "compile" / "out", root / "compile" / "diff"]
        assert len(paths) == 6
