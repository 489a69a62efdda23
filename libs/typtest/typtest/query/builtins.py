"""Built-in bindings of the test-set language.

Every built-in is a zero-argument constructor returning a test set derived
from the universe of the evaluation context.
"""

from __future__ import annotations

from collections.abc import Callable

from typtest.diagnostics.location import SourceLocation
from typtest.query.errors import ArgumentCountError
from typtest.query.context import Context
from typtest.query.values import FunctionValue, QueryTest, TestSetValue, Value


def _set_constructor(name: str, predicate: Callable[[QueryTest], bool]) -> FunctionValue:
    def impl(ctx: Context, args: tuple[Value, ...], location: SourceLocation | None) -> Value:
        if args:
            raise ArgumentCountError(name, 0, len(args), location)
        return TestSetValue.of(t for t in ctx.universe if predicate(t))

    return FunctionValue(name, impl)


BUILTINS: dict[str, FunctionValue] = {
    func.name: func
    for func in (
        _set_constructor("all", lambda t: True),
        _set_constructor("none", lambda t: False),
        _set_constructor("skip", lambda t: t.is_skip),
        _set_constructor("unit", lambda t: t.is_unit),
        _set_constructor("template", lambda t: t.is_template),
        _set_constructor("compile-only", lambda t: t.is_compile_only),
        _set_constructor("ephemeral", lambda t: t.is_ephemeral),
        _set_constructor("persistent", lambda t: t.is_persistent),
    )
}


