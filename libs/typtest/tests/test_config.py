"""Tests for layered configuration resolution."""

from __future__ import annotations

from datetime import datetime, timezone

from typtest.project.config import BUILTIN_DEFAULTS, EPOCH, TestConfig, resolve
from typtest.project.kinds import Direction


class TestBuiltinDefaults:
    def test_values(self) -> None:
        assert BUILTIN_DEFAULTS.use_system_fonts is False
        assert BUILTIN_DEFAULTS.use_system_datetime is False
        assert BUILTIN_DEFAULTS.use_augmented_library is False
        assert BUILTIN_DEFAULTS.timestamp == EPOCH
        assert BUILTIN_DEFAULTS.allow_packages is True
        assert BUILTIN_DEFAULTS.dir is Direction.LTR
        assert BUILTIN_DEFAULTS.ppi == 144.0
        assert BUILTIN_DEFAULTS.max_delta == 1
        assert BUILTIN_DEFAULTS.max_deviations == 0
        assert dict(BUILTIN_DEFAULTS.inputs) == {}

    def test_no_layers(self) -> None:
        assert resolve() == BUILTIN_DEFAULTS


class TestPrecedence:
    def test_annotation_overrides_manifest(self) -> None:
        manifest = TestConfig(ppi=72.0, max_delta=3)
        annotation = TestConfig(ppi=300.0)
        settings = resolve(annotation, manifest)
        assert settings.ppi == 300.0
        assert settings.max_delta == 3

    def test_override_beats_annotation(self) -> None:
        settings = resolve(TestConfig(dir=Direction.LTR), TestConfig(dir=Direction.RTL))
        assert settings.dir is Direction.LTR

    def test_false_is_a_value(self) -> None:
        settings = resolve(TestConfig(allow_packages=False), TestConfig(allow_packages=True))
        assert settings.allow_packages is False

    def test_unset_falls_through(self) -> None:
        stamp = datetime(2020, 2, 2, tzinfo=timezone.utc)
        settings = resolve(TestConfig(), TestConfig(), TestConfig(timestamp=stamp))
        assert settings.timestamp == stamp
        assert settings.ppi == BUILTIN_DEFAULTS.ppi

    def test_inputs_merge_key_wise(self) -> None:
        override = TestConfig(inputs={"a": "override"})
        annotation = TestConfig(inputs={"a": "annotation", "b": "annotation"})
        manifest = TestConfig(inputs={"b": "manifest", "c": "manifest"})
        settings = resolve(override, annotation, manifest)
        assert dict(settings.inputs) == {"a": "override", "b": "annotation", "c": "manifest"}

    def test_resolve_over_settings(self) -> None:
        base = resolve(TestConfig(ppi=72.0, inputs={"x": "1"}))
        settings = resolve(TestConfig(max_deviations=5, inputs={"y": "2"}), base=base)
        assert settings.ppi == 72.0
        assert settings.max_deviations == 5
        assert dict(settings.inputs) == {"x": "1", "y": "2"}


class TestPartialConfig:
    def test_is_empty(self) -> None:
        assert TestConfig().is_empty()
        assert not TestConfig(max_delta=0).is_empty()
        assert not TestConfig(inputs={"k": "v"}).is_empty()
