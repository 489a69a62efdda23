"""Layered test configuration.

Each layer is a partial :class:`TestConfig`. :func:`resolve` merges them,
highest precedence first: command-level overrides, then per-test
annotations, then the manifest's ``[tool.typtest.default]`` table, then
:data:`BUILTIN_DEFAULTS`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from types import MappingProxyType

from typtest.project.kinds import Direction

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class TestConfig:
    """One configuration layer; ``None`` means the layer does not set it."""

    __test__ = False

    use_system_fonts: bool | None = None
    use_system_datetime: bool | None = None
    use_augmented_library: bool | None = None
    timestamp: datetime | None = None
    allow_packages: bool | None = None
    dir: Direction | None = None
    ppi: float | None = None
    max_delta: int | None = None
    max_deviations: int | None = None
    inputs: Mapping[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.inputs and all(
            getattr(self, f.name) is None for f in fields(self) if f.name != "inputs"
        )


@dataclass(frozen=True)
class Settings:
    """Fully resolved configuration of a single test."""

    use_system_fonts: bool
    use_system_datetime: bool
    use_augmented_library: bool
    timestamp: datetime
    allow_packages: bool
    dir: Direction
    ppi: float
    max_delta: int
    max_deviations: int
    inputs: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))


BUILTIN_DEFAULTS = Settings(
    use_system_fonts=False,
    use_system_datetime=False,
    use_augmented_library=False,
    timestamp=EPOCH,
    allow_packages=True,
    dir=Direction.LTR,
    ppi=144.0,
    max_delta=1,
    max_deviations=0,
)


def resolve(*layers: TestConfig, base: Settings = BUILTIN_DEFAULTS) -> Settings:
    """Merge partial *layers* over *base*.

    Layers are given highest precedence first. ``inputs`` merge key-wise in
    the same order, so a lower layer's key survives unless a higher layer
    sets the same key.
    """
    values = {}
    for f in fields(Settings):
        if f.name == "inputs":
            continue
        value = getattr(base, f.name)
        for layer in layers:
            candidate = getattr(layer, f.name)
            if candidate is not None:
                value = candidate
                break
        values[f.name] = value

    inputs = dict(base.inputs)
    for layer in reversed(layers):
        inputs.update(layer.inputs)

    return Settings(**values, inputs=MappingProxyType(inputs))
