"""Test-set expression language: lexer, parser and evaluator."""

from typtest.query.ast_nodes import ExprNode
from typtest.query.context import Context
from typtest.query.errors import (
    ArgumentCountError,
    EvalError,
    MissingTestsError,
    ParseError,
    PatternCompileError,
    TypeMismatchError,
    UnknownFunctionError,
    UnknownPatternTypeError,
)
from typtest.query.evaluator import default_context, evaluate, evaluate_node, select
from typtest.query.exact import ExactFilter
from typtest.query.parser import parse
from typtest.query.patterns import Pattern, PatternKind
from typtest.query.values import QueryTest

__all__ = [
    "ArgumentCountError",
    "Context",
    "EvalError",
    "ExactFilter",
    "ExprNode",
    "MissingTestsError",
    "ParseError",
    "Pattern",
    "PatternCompileError",
    "PatternKind",
    "QueryTest",
    "TypeMismatchError",
    "UnknownFunctionError",
    "UnknownPatternTypeError",
    "default_context",
    "evaluate",
    "evaluate_node",
    "parse",
    "select",
]
