"""Evaluator for test-set expressions.

The tree is walked post-order with an explicit work stack so that long
operator chains, which the parser builds as deep left-leaning trees, never
exhaust the interpreter's recursion limit.
"""

from __future__ import annotations

from collections.abc import Iterable

from typtest.query.ast_nodes import (
    ExprNode,
    FuncCall,
    Identifier,
    InfixOp,
    InfixOperator,
    NumberLiteral,
    PatternLiteral,
    PrefixOp,
    PrefixOperator,
    StringLiteral,
)
from typtest.query.builtins import BUILTINS
from typtest.query.context import Context
from typtest.query.errors import UnknownFunctionError
from typtest.query.parser import parse
from typtest.query.patterns import Pattern
from typtest.query.values import (
    NumberValue,
    PatternValue,
    QueryTest,
    StringValue,
    TestSetValue,
    Value,
    expect_test_set,
)


def default_context(universe: Iterable[QueryTest]) -> Context:
    """Create an evaluation context with every built-in bound."""
    return Context(frozenset(universe), dict(BUILTINS))


def evaluate_node(root: ExprNode, ctx: Context) -> Value:
    """Evaluate an expression tree to a :data:`Value`.

    Raises:
        EvalError: Any subclass, for type, name, arity or pattern errors.
    """
    # Each entry is (node, expanded). A node is first pushed unexpanded; on
    # expansion its children are pushed above it, and once they have been
    # reduced their values sit on top of ``values`` in order.
    work: list[tuple[ExprNode, bool]] = [(root, False)]
    values: list[Value] = []

    while work:
        node, expanded = work.pop()

        if isinstance(node, NumberLiteral):
            values.append(NumberValue(node.value))
        elif isinstance(node, StringLiteral):
            values.append(StringValue(node.value))
        elif isinstance(node, PatternLiteral):
            values.append(PatternValue(Pattern.compile(node.kind, node.term, node.location)))
        elif isinstance(node, Identifier):
            func = ctx.lookup(node.name)
            if func is None:
                raise UnknownFunctionError(node.name, node.location)
            values.append(func)
        elif isinstance(node, FuncCall):
            if not expanded:
                func = ctx.lookup(node.name)
                if func is None:
                    raise UnknownFunctionError(node.name, node.location)
                work.append((node, True))
                work.extend((arg, False) for arg in reversed(node.args))
                continue
            args = _pop(values, len(node.args))
            values.append(ctx.bindings[node.name].call(ctx, args, node.location))
        elif isinstance(node, PrefixOp):
            if not expanded:
                work.append((node, True))
                work.append((node.operand, False))
                continue
            values.append(_apply_prefix(node, values.pop(), ctx))
        elif isinstance(node, InfixOp):
            if not expanded:
                work.append((node, True))
                work.append((node.right, False))
                work.append((node.left, False))
                continue
            right = values.pop()
            left = values.pop()
            values.append(_apply_infix(node, left, right, ctx))
        else:
            raise TypeError(f"unknown expression node: {type(node).__name__}")

    assert len(values) == 1
    return values[0]


def _pop(values: list[Value], count: int) -> tuple[Value, ...]:
    if count == 0:
        return ()
    args = tuple(values[-count:])
    del values[-count:]
    return args


def _apply_prefix(node: PrefixOp, operand: Value, ctx: Context) -> Value:
    tests = expect_test_set(operand, ctx.universe, node.operand.location).tests
    if node.op == PrefixOperator.COMPLEMENT:
        return TestSetValue(ctx.universe - tests)
    raise TypeError(f"unknown prefix operator: {node.op}")


def _apply_infix(node: InfixOp, left: Value, right: Value, ctx: Context) -> Value:
    lhs = expect_test_set(left, ctx.universe, node.left.location).tests
    rhs = expect_test_set(right, ctx.universe, node.right.location).tests
    if node.op == InfixOperator.UNION:
        return TestSetValue(lhs | rhs)
    elif node.op == InfixOperator.DIFFERENCE:
        return TestSetValue(lhs - rhs)
    elif node.op == InfixOperator.INTERSECTION:
        return TestSetValue(lhs & rhs)
    elif node.op == InfixOperator.SYMMETRIC_DIFFERENCE:
        return TestSetValue(lhs ^ rhs)
    raise TypeError(f"unknown infix operator: {node.op}")


def evaluate(expression: str | ExprNode, universe: Iterable[QueryTest]) -> frozenset[QueryTest]:
    """Evaluate a test-set expression against *universe*.

    Args:
        expression: Expression text or an already parsed tree.
        universe: Every test the expression may select from.

    Returns:
        The selected subset of *universe*.

    Raises:
        EvalError: If the expression fails to parse or evaluate, or does
            not produce a test set.
    """
    root = parse(expression) if isinstance(expression, str) else expression
    ctx = default_context(universe)
    return expect_test_set(evaluate_node(root, ctx), ctx.universe, root.location).tests


def select(
    expression: str | ExprNode, universe: Iterable[QueryTest], *, implicit_skip: bool = True
) -> frozenset[QueryTest]:
    """Like :func:`evaluate`, but drops tests marked skip unless told otherwise."""
    universe = frozenset(universe)
    selected = evaluate(expression, universe)
    if implicit_skip:
        selected = frozenset(t for t in selected if not t.is_skip)
    return selected
