"""Recursive-descent parser for test-set expressions.

Grammar, by increasing precedence::

    expr      := union
    union     := inter (('|' | 'or' | '~' | 'diff') inter)*
    inter     := symdiff (('&' | 'and') symdiff)*
    symdiff   := prefix (('^' | 'xor') prefix)*
    prefix    := ('!' | 'not')* atom
    atom      := '(' expr ')'
               | IDENT '(' (expr (',' expr)*)? ')'
               | IDENT | NUMBER | STRING | PATTERN

All binary operators are left-associative.
"""

from __future__ import annotations

from typtest.diagnostics.location import SourceLocation
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
from typtest.query.errors import ParseError
from typtest.query.lexer import Lexer
from typtest.query.tokens import Token, TokenKind

# Nesting limit for parentheses and call arguments, keeps the parser well
# below the interpreter's recursion limit.
MAX_NESTING = 100

# Binary operator tables, one per precedence level (lowest first).
_INFIX_LEVELS: tuple[dict[TokenKind, InfixOperator], ...] = (
    {
        TokenKind.PIPE: InfixOperator.UNION,
        TokenKind.OR: InfixOperator.UNION,
        TokenKind.TILDE: InfixOperator.DIFFERENCE,
        TokenKind.DIFF: InfixOperator.DIFFERENCE,
    },
    {
        TokenKind.AMPER: InfixOperator.INTERSECTION,
        TokenKind.AND: InfixOperator.INTERSECTION,
    },
    {
        TokenKind.CARET: InfixOperator.SYMMETRIC_DIFFERENCE,
        TokenKind.XOR: InfixOperator.SYMMETRIC_DIFFERENCE,
    },
)

_PREFIX_TOKENS: set[TokenKind] = {TokenKind.EXCL, TokenKind.NOT}

_ATOM_START: tuple[str, ...] = ("'('", "'!'", "'not'", "identifier", "pattern", "number", "string")


class Parser:
    """Recursive-descent parser for a tokenized test-set expression."""

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0
        self._depth = 0

    # ------------------------------------------------------------------
    # Token stream helpers
    # ------------------------------------------------------------------

    def _peek(self) -> Token:
        """Return the current token without consuming it."""
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        """Consume and return the current token."""
        tok = self._tokens[self._pos]
        if tok.kind != TokenKind.EOF:
            self._pos += 1
        return tok

    def _check(self, kind: TokenKind) -> bool:
        return self._peek().kind == kind

    def _expect(self, kind: TokenKind, message: str) -> Token:
        """Consume a token of *kind* or raise a :class:`ParseError`."""
        tok = self._peek()
        if tok.kind == kind:
            return self._advance()
        raise self._unexpected(message, (kind.describe(),))

    def _unexpected(self, message: str, expected: tuple[str, ...]) -> ParseError:
        tok = self._peek()
        found = tok.kind.describe() if tok.kind == TokenKind.EOF else repr(tok.lexeme)
        return ParseError(
            f"{message}, expected {_join(expected)}, found {found}",
            tok.location,
            expected=expected,
            found=found,
        )

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def parse_expression_root(self) -> ExprNode:
        """Parse a complete expression and ensure all input was consumed."""
        expr = self.parse_expression()
        if not self._check(TokenKind.EOF):
            expected = tuple(kind.describe() for level in _INFIX_LEVELS for kind in level)
            raise self._unexpected("unexpected token", expected + ("end of input",))
        return expr

    def parse_expression(self) -> ExprNode:
        """Parse ``expr`` (the lowest precedence level)."""
        self._depth += 1
        if self._depth > MAX_NESTING:
            raise ParseError(
                f"expression nested deeper than {MAX_NESTING} levels", self._peek().location
            )
        try:
            return self._parse_infix(0)
        finally:
            self._depth -= 1

    # ------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------

    def _parse_infix(self, level: int) -> ExprNode:
        if level == len(_INFIX_LEVELS):
            return self._parse_prefix()

        operators = _INFIX_LEVELS[level]
        left = self._parse_infix(level + 1)
        while self._peek().kind in operators:
            op_tok = self._advance()
            right = self._parse_infix(level + 1)
            left = InfixOp(operators[op_tok.kind], left, right, location=op_tok.location)
        return left

    def _parse_prefix(self) -> ExprNode:
        """Parse ``('!' | 'not')* atom`` without recursing per operator."""
        ops: list[Token] = []
        while self._peek().kind in _PREFIX_TOKENS:
            ops.append(self._advance())

        expr = self._parse_atom()
        for op_tok in reversed(ops):
            expr = PrefixOp(PrefixOperator.COMPLEMENT, expr, location=op_tok.location)
        return expr

    # ------------------------------------------------------------------
    # Atoms
    # ------------------------------------------------------------------

    def _parse_atom(self) -> ExprNode:
        tok = self._peek()

        if tok.kind == TokenKind.LPAREN:
            self._advance()
            expr = self.parse_expression()
            self._expect(TokenKind.RPAREN, "unclosed parenthesis")
            return expr

        if tok.kind == TokenKind.IDENT:
            self._advance()
            if self._check(TokenKind.LPAREN):
                return self._parse_call(tok)
            return Identifier(str(tok.value), location=tok.location)

        if tok.kind == TokenKind.NUMBER:
            self._advance()
            return NumberLiteral(int(tok.value), location=tok.location)  # type: ignore[arg-type]

        if tok.kind == TokenKind.STRING:
            self._advance()
            return StringLiteral(str(tok.value), location=tok.location)

        if tok.kind == TokenKind.PATTERN:
            self._advance()
            kind, term = tok.value  # type: ignore[misc]
            return PatternLiteral(kind, term, location=tok.location)

        raise self._unexpected("expected an expression", _ATOM_START)

    def _parse_call(self, name_tok: Token) -> FuncCall:
        """Parse ``'(' (expr (',' expr)*)? ')'`` after a function name."""
        self._expect(TokenKind.LPAREN, "expected '(' after function name")
        args: list[ExprNode] = []
        if not self._check(TokenKind.RPAREN):
            args.append(self.parse_expression())
            while self._check(TokenKind.COMMA):
                self._advance()
                args.append(self.parse_expression())
        self._expect(TokenKind.RPAREN, "unclosed argument list")
        return FuncCall(str(name_tok.value), tuple(args), location=name_tok.location)


def _join(items: tuple[str, ...]) -> str:
    if len(items) == 1:
        return items[0]
    return ", ".join(items[:-1]) + " or " + items[-1]


def parse(source: str) -> ExprNode:
    """Parse a test-set expression.

    Args:
        source: The expression text, e.g. ``"unit() & !r:^legacy/"``.

    Returns:
        The root expression node.

    Raises:
        ParseError: If the expression is empty or malformed.
    """
    tokens = Lexer(source).tokenize()
    if tokens[0].kind == TokenKind.EOF:
        raise ParseError(
            "empty expression",
            SourceLocation.in_expression(0),
            expected=("expression",),
            found="end of input",
        )
    return Parser(tokens).parse_expression_root()
