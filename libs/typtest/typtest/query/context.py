"""Evaluation context: the universe of tests and the bound names."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typtest.query.values import FunctionValue, QueryTest


@dataclass(frozen=True)
class Context:
    universe: frozenset[QueryTest]
    bindings: dict[str, FunctionValue] = field(default_factory=dict, compare=False)

    def lookup(self, name: str) -> FunctionValue | None:
        return self.bindings.get(name)
