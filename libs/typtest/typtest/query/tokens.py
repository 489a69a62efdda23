"""Token definitions for the test-set expression lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from typtest.diagnostics.location import SourceLocation


class TokenKind(Enum):
    """All token types recognized by the test-set lexer."""

    # === Literal operators ===
    OR = auto()
    DIFF = auto()
    AND = auto()
    XOR = auto()
    NOT = auto()

    # === Symbol operators ===
    PIPE = auto()  # |
    TILDE = auto()  # ~
    AMPER = auto()  # &
    CARET = auto()  # ^
    EXCL = auto()  # !

    # Delimiters
    LPAREN = auto()  # (
    RPAREN = auto()  # )
    COMMA = auto()  # ,

    # Atoms
    IDENT = auto()
    NUMBER = auto()
    STRING = auto()
    PATTERN = auto()  # kind:term

    # Special
    EOF = auto()

    def describe(self) -> str:
        """Human readable token name used in parse errors."""
        return _DESCRIPTIONS.get(self, self.name.lower())


# Keyword string -> TokenKind mapping.
# Identifiers are checked against this table during lexing.
KEYWORDS: dict[str, TokenKind] = {
    "or": TokenKind.OR,
    "diff": TokenKind.DIFF,
    "and": TokenKind.AND,
    "xor": TokenKind.XOR,
    "not": TokenKind.NOT,
}

_DESCRIPTIONS: dict[TokenKind, str] = {
    TokenKind.OR: "'or'",
    TokenKind.DIFF: "'diff'",
    TokenKind.AND: "'and'",
    TokenKind.XOR: "'xor'",
    TokenKind.NOT: "'not'",
    TokenKind.PIPE: "'|'",
    TokenKind.TILDE: "'~'",
    TokenKind.AMPER: "'&'",
    TokenKind.CARET: "'^'",
    TokenKind.EXCL: "'!'",
    TokenKind.LPAREN: "'('",
    TokenKind.RPAREN: "')'",
    TokenKind.COMMA: "','",
    TokenKind.IDENT: "identifier",
    TokenKind.NUMBER: "number",
    TokenKind.STRING: "string",
    TokenKind.PATTERN: "pattern",
    TokenKind.EOF: "end of input",
}


@dataclass(frozen=True)
class Token:
    """A single token produced by the test-set lexer.

    ``value`` holds the decoded payload: the integer of a number, the
    unescaped text of a string, and a ``(kind, term)`` pair for patterns.
    """

    kind: TokenKind
    lexeme: str
    location: SourceLocation
    value: object = None
