"""
rcc Token Cursor
================

A peekable view over the token list produced by the lexer.

The parser never indexes the token list directly. It looks ahead one or
two tokens with peek()/peek2() and consumes with advance() or one of the
expect_* methods. An expect_* method consumes and returns the next token
only when it has the requested kind; otherwise it raises ConsumeError and
leaves the cursor where it was.

Example:
    >>> from rcc.lexer import tokenize
    >>> cursor = TokenCursor(tokenize("f(1)"))
    >>> cursor.expect_identifier().value
    'f'
    >>> cursor.expect_parenthesis("(").column
    2
    >>> cursor.expect_number().value
    1
"""

from typing import Optional, Sequence

from rcc.errors import ConsumeError
from rcc.lexer import PositionedToken, TokenKind


class TokenCursor:
    """
    Lookahead-2 cursor with typed consume operations.

    Attributes:
        tokens: The underlying token sequence (not modified)
    """

    def __init__(self, tokens: Sequence[PositionedToken]):
        self.tokens = list(tokens)
        self._pos = 0

    def __len__(self) -> int:
        return self.remaining_len()

    def __repr__(self) -> str:
        return f"TokenCursor(pos={self._pos}, remaining={self.remaining_len()})"

    # =========================================================================
    # Lookahead
    # =========================================================================

    def peek(self) -> Optional[PositionedToken]:
        """Next token without consuming it, or None at end."""
        return self._at(0)

    def peek2(self) -> Optional[PositionedToken]:
        """Token after the next one, or None."""
        return self._at(1)

    def _at(self, offset: int) -> Optional[PositionedToken]:
        pos = self._pos + offset
        if pos < len(self.tokens):
            return self.tokens[pos]
        return None

    def advance(self) -> Optional[PositionedToken]:
        """Consume and return the next token, or None at end."""
        token = self.peek()
        if token is not None:
            self._pos += 1
        return token

    def remaining_len(self) -> int:
        """Number of tokens not yet consumed."""
        return len(self.tokens) - self._pos

    def at_end(self) -> bool:
        return self._pos >= len(self.tokens)

    # =========================================================================
    # Checks
    # =========================================================================

    def check(self, kind: TokenKind, value=None) -> bool:
        """
        Return True if the next token has the given kind.

        When value is given, the token's payload must also equal it.
        """
        token = self.peek()
        if token is None or token.kind != kind:
            return False
        return value is None or token.value == value

    def check_next_operator(self, symbol: str) -> bool:
        """True if the next token is the operator symbol."""
        return self.check(TokenKind.OPERATOR, symbol)

    def is_expression_start(self) -> bool:
        """True if the next token can begin an expression."""
        return self.check(TokenKind.NUMBER) or self.check(TokenKind.IDENTIFIER)

    # =========================================================================
    # Consume Operations
    # =========================================================================

    def _expect(self, kind: TokenKind, value=None, expected: Optional[str] = None):
        """
        Consume the next token if it matches, else raise ConsumeError.

        Returns:
            The consumed PositionedToken
        """
        if not self.check(kind, value):
            if expected is None:
                expected = f"'{value}'" if value is not None else kind.value
            raise ConsumeError(expected, self.peek())
        return self.advance()

    def expect_number(self) -> PositionedToken:
        """Consume a number literal."""
        return self._expect(TokenKind.NUMBER, expected="number")

    def expect_identifier(self) -> PositionedToken:
        """Consume an identifier."""
        return self._expect(TokenKind.IDENTIFIER, expected="identifier")

    def expect_type(self) -> PositionedToken:
        """Consume a type keyword."""
        return self._expect(TokenKind.TYPE, expected="type")

    def expect_operator(self, symbol: Optional[str] = None) -> PositionedToken:
        """Consume an operator, optionally a specific one."""
        return self._expect(TokenKind.OPERATOR, symbol)

    def expect_bracket(self, char: Optional[str] = None) -> PositionedToken:
        """Consume a '{' or '}' (or exactly char)."""
        return self._expect(TokenKind.BRACKET, char)

    def expect_parenthesis(self, char: Optional[str] = None) -> PositionedToken:
        """Consume a '(' or ')' (or exactly char)."""
        return self._expect(TokenKind.PARENTHESIS, char)

    def expect_comma(self) -> PositionedToken:
        return self._expect(TokenKind.COMMA, expected="','")

    def expect_semicolon(self) -> PositionedToken:
        return self._expect(TokenKind.SEMICOLON, expected="';'")

    def expect_return(self) -> PositionedToken:
        return self._expect(TokenKind.RETURN, expected="'return'")
