"""Lexer (tokenizer) for test-set expressions."""

from __future__ import annotations

from typtest.diagnostics.location import SourceLocation
from typtest.query.errors import ParseError
from typtest.query.tokens import KEYWORDS, Token, TokenKind


class Lexer:
    """Tokenize a test-set expression into a flat token stream.

    Expressions are single-line; locations therefore only track the column.
    Unlike a source-file lexer, any lexical error is fatal to the whole
    expression and raised as :class:`ParseError`.
    """

    # Single-character tokens that need no lookahead.
    _SINGLE_CHAR: dict[str, TokenKind] = {
        "|": TokenKind.PIPE,
        "~": TokenKind.TILDE,
        "&": TokenKind.AMPER,
        "^": TokenKind.CARET,
        "!": TokenKind.EXCL,
        "(": TokenKind.LPAREN,
        ")": TokenKind.RPAREN,
        ",": TokenKind.COMMA,
    }

    # Characters terminating a raw (unquoted) pattern term.
    _RAW_TERMINATORS = frozenset(" \t\r\n,()")

    _ESCAPES: dict[str, str] = {
        "\\": "\\",
        '"': '"',
        "n": "\n",
        "t": "\t",
        "r": "\r",
    }

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0

    # ------------------------------------------------------------------
    # Helper methods
    # ------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> str:
        """Return character at current position + offset, or '' at EOF."""
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _advance(self) -> str:
        ch = self._source[self._pos]
        self._pos += 1
        return ch

    def _at_end(self) -> bool:
        return self._pos >= len(self._source)

    @staticmethod
    def _is_ident_char(ch: str) -> bool:
        return ch != "" and ch.isascii() and (ch.isalnum() or ch in "_-")

    def _loc(self, start: int) -> SourceLocation:
        return SourceLocation.in_expression(start, max(self._pos - start, 1))

    def _error(self, message: str, start: int, *, expected: tuple[str, ...] = ()) -> ParseError:
        found = self._peek() or "end of input"
        return ParseError(message, SourceLocation.in_expression(start), expected=expected, found=found)

    # ------------------------------------------------------------------
    # Scanning helpers
    # ------------------------------------------------------------------

    def _scan_single_string(self, start: int) -> str:
        """Scan a single-quoted string. No escapes are recognized inside."""
        chars: list[str] = []
        while not self._at_end():
            ch = self._advance()
            if ch == "'":
                return "".join(chars)
            chars.append(ch)
        raise self._error("unterminated string literal", start, expected=("'",))

    def _scan_double_string(self, start: int) -> str:
        """Scan a double-quoted string. Opening '"' already consumed."""
        chars: list[str] = []
        while not self._at_end():
            ch = self._advance()
            if ch == '"':
                return "".join(chars)
            if ch != "\\":
                chars.append(ch)
                continue
            esc_start = self._pos - 1
            if self._at_end():
                break
            esc = self._advance()
            if esc in self._ESCAPES:
                chars.append(self._ESCAPES[esc])
            elif esc == "u":
                chars.append(self._scan_unicode_escape(esc_start))
            else:
                raise self._error(f"unknown escape sequence '\\{esc}'", esc_start)
        raise self._error("unterminated string literal", start, expected=('"',))

    def _scan_unicode_escape(self, start: int) -> str:
        """Scan the ``{HEX}`` part of a ``\\u{HEX}`` escape."""
        if self._peek() != "{":
            raise self._error("expected '{' after '\\u'", self._pos, expected=("{",))
        self._advance()
        digits: list[str] = []
        while not self._at_end() and self._peek() != "}":
            digits.append(self._advance())
        if self._at_end():
            raise self._error("unterminated unicode escape", start, expected=("}",))
        self._advance()  # consume '}'
        text = "".join(digits)
        try:
            return chr(int(text, 16))
        except (ValueError, OverflowError):
            raise ParseError(
                f"invalid unicode escape '\\u{{{text}}}'",
                SourceLocation.in_expression(start, self._pos - start),
            ) from None

    def _scan_number(self, start: int) -> Token:
        """Scan ``digit+ ('_' digit+)*``. First digit already consumed."""
        while not self._at_end():
            ch = self._peek()
            if ch.isascii() and ch.isdigit():
                self._advance()
            elif ch == "_" and self._peek(1).isascii() and self._peek(1).isdigit():
                self._advance()
            else:
                break
        lexeme = self._source[start : self._pos]
        return Token(TokenKind.NUMBER, lexeme, self._loc(start), int(lexeme.replace("_", "")))

    def _scan_identifier(self, start: int) -> Token:
        """Scan an identifier, keyword or pattern. First char already consumed."""
        while not self._at_end() and self._is_ident_char(self._peek()):
            self._advance()
        name = self._source[start : self._pos]

        if self._peek() == ":":
            self._advance()
            term = self._scan_pattern_term(start)
            return Token(TokenKind.PATTERN, self._source[start : self._pos], self._loc(start), (name, term))

        kind = KEYWORDS.get(name, TokenKind.IDENT)
        return Token(kind, name, self._loc(start), name)

    def _scan_pattern_term(self, start: int) -> str:
        """Scan the term after ``kind:``, either quoted or raw."""
        ch = self._peek()
        if ch == "'":
            self._advance()
            return self._scan_single_string(start)
        if ch == '"':
            self._advance()
            return self._scan_double_string(start)

        begin = self._pos
        while not self._at_end() and self._peek() not in self._RAW_TERMINATORS:
            self._advance()
        if self._pos == begin:
            raise self._error("expected pattern after ':'", self._pos, expected=("pattern",))
        return self._source[begin : self._pos]

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def tokenize(self) -> list[Token]:
        """Tokenize the entire expression. Returns list ending with an EOF token."""
        tokens: list[Token] = []

        while not self._at_end():
            ch = self._peek()
            start = self._pos

            if ch.isspace():
                self._advance()
                continue

            if ch == "'":
                self._advance()
                text = self._scan_single_string(start)
                tokens.append(Token(TokenKind.STRING, self._source[start : self._pos], self._loc(start), text))
                continue

            if ch == '"':
                self._advance()
                text = self._scan_double_string(start)
                tokens.append(Token(TokenKind.STRING, self._source[start : self._pos], self._loc(start), text))
                continue

            if ch.isascii() and ch.isdigit():
                self._advance()
                tokens.append(self._scan_number(start))
                continue

            if ch.isascii() and (ch.isalpha() or ch == "_"):
                self._advance()
                tokens.append(self._scan_identifier(start))
                continue

            if ch in self._SINGLE_CHAR:
                self._advance()
                tokens.append(Token(self._SINGLE_CHAR[ch], ch, self._loc(start)))
                continue

            raise ParseError(
                f"unexpected character {ch!r}",
                SourceLocation.in_expression(start),
                expected=("expression",),
                found=ch,
            )

        tokens.append(Token(TokenKind.EOF, "", SourceLocation.in_expression(self._pos)))
        return tokens
