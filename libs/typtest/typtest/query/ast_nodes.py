"""AST node types for test-set expressions.

Locations never take part in equality, so two expressions that differ only
in spacing or redundant parentheses compare equal.
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field
from enum import Enum

from typtest.diagnostics.location import SourceLocation

__all__ = [
    "ExprNode",
    "NumberLiteral",
    "StringLiteral",
    "PatternLiteral",
    "Identifier",
    "FuncCall",
    "PrefixOp",
    "InfixOp",
    "PrefixOperator",
    "InfixOperator",
]


class PrefixOperator(Enum):
    COMPLEMENT = "not"


class InfixOperator(Enum):
    UNION = "or"
    DIFFERENCE = "diff"
    INTERSECTION = "and"
    SYMMETRIC_DIFFERENCE = "xor"


class ExprNode(ABC):
    """Base type for expression nodes. All concrete subclasses are frozen dataclasses."""

    location: SourceLocation | None


# ---------------------------------------------------------------------------
# Atoms
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NumberLiteral(ExprNode):
    """Number literal: ``42``, ``1_000``."""

    value: int
    location: SourceLocation | None = field(default=None, compare=False)


@dataclass(frozen=True)
class StringLiteral(ExprNode):
    """Quoted string literal, already unescaped."""

    value: str
    location: SourceLocation | None = field(default=None, compare=False)


@dataclass(frozen=True)
class PatternLiteral(ExprNode):
    """``kind:term``; the kind is validated during evaluation, not parsing."""

    kind: str
    term: str
    location: SourceLocation | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Identifier(ExprNode):
    """Bare identifier referring to a binding, e.g. ``all`` without a call."""

    name: str
    location: SourceLocation | None = field(default=None, compare=False)


@dataclass(frozen=True)
class FuncCall(ExprNode):
    """Function call: ``name(arg, ...)``."""

    name: str
    args: tuple[ExprNode, ...] = ()
    location: SourceLocation | None = field(default=None, compare=False)


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PrefixOp(ExprNode):
    op: PrefixOperator
    operand: ExprNode
    location: SourceLocation | None = field(default=None, compare=False)


@dataclass(frozen=True)
class InfixOp(ExprNode):
    op: InfixOperator
    left: ExprNode
    right: ExprNode
    location: SourceLocation | None = field(default=None, compare=False)
