"""Runtime values of the test-set language.

Values form a closed sum type; every operator and function site handles each
variant explicitly and raises :class:`TypeMismatchError` for the ones it does
not accept.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol, Union

from typtest.diagnostics.location import SourceLocation
from typtest.query.errors import TypeMismatchError
from typtest.query.patterns import Pattern

if TYPE_CHECKING:
    from typtest.query.context import Context


class QueryTest(Protocol):
    """What the language needs to know about a test, nothing more."""

    @property
    def identifier(self) -> str: ...

    @property
    def is_skip(self) -> bool: ...

    @property
    def is_template(self) -> bool: ...

    @property
    def is_unit(self) -> bool: ...

    @property
    def is_compile_only(self) -> bool: ...

    @property
    def is_ephemeral(self) -> bool: ...

    @property
    def is_persistent(self) -> bool: ...


class ValueType(Enum):
    FUNCTION = "function"
    TEST_SET = "test set"
    NUMBER = "number"
    STRING = "string"
    PATTERN = "pattern"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class FunctionValue:
    """A callable binding, e.g. the constructor behind ``all()``."""

    name: str
    impl: Callable[[Context, tuple[Value, ...], SourceLocation | None], Value] = field(
        compare=False, repr=False
    )

    def call(self, ctx: Context, args: tuple[Value, ...], location: SourceLocation | None = None) -> Value:
        return self.impl(ctx, args, location)


@dataclass(frozen=True)
class TestSetValue:
    """A concrete subset of the universe."""

    __test__ = False

    tests: frozenset[QueryTest]

    @classmethod
    def of(cls, tests: Iterable[QueryTest]) -> TestSetValue:
        return cls(frozenset(tests))


@dataclass(frozen=True)
class NumberValue:
    value: int


@dataclass(frozen=True)
class StringValue:
    value: str


@dataclass(frozen=True)
class PatternValue:
    pattern: Pattern


Value = Union[FunctionValue, TestSetValue, NumberValue, StringValue, PatternValue]


def type_of(value: Value) -> ValueType:
    if isinstance(value, FunctionValue):
        return ValueType.FUNCTION
    elif isinstance(value, TestSetValue):
        return ValueType.TEST_SET
    elif isinstance(value, NumberValue):
        return ValueType.NUMBER
    elif isinstance(value, StringValue):
        return ValueType.STRING
    elif isinstance(value, PatternValue):
        return ValueType.PATTERN
    raise TypeError(f"not a test-set value: {value!r}")


def expect_test_set(
    value: Value, universe: frozenset[QueryTest], location: SourceLocation | None = None
) -> TestSetValue:
    """Coerce *value* to a test set.

    Patterns fold into the set of universe members whose identifier matches;
    every other non-set variant is a type error.
    """
    if isinstance(value, TestSetValue):
        return value
    elif isinstance(value, PatternValue):
        return TestSetValue.of(t for t in universe if value.pattern.matches(t.identifier))
    elif isinstance(value, (FunctionValue, NumberValue, StringValue)):
        raise TypeMismatchError(str(ValueType.TEST_SET), str(type_of(value)), location)
    raise TypeError(f"not a test-set value: {value!r}")
