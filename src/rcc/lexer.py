"""
rcc Lexer (Tokenizer)
=====================

This module converts C-subset source text into a flat list of positioned
tokens for the parser.

Token Categories
----------------
| Kind        | Source            | Payload         |
|-------------|-------------------|-----------------|
| NUMBER      | 42                | int (unsigned)  |
| IDENTIFIER  | main, a1          | name            |
| TYPE        | int               | "int"           |
| OPERATOR    | + * =             | symbol          |
| BRACKET     | { }               | character       |
| PARENTHESIS | ( )               | character       |
| COMMA       | ,                 | (none)          |
| SEMICOLON   | ;                 | (none)          |
| RETURN      | return            | (none)          |

Words are maximal runs of ASCII letters and digits starting with a
letter; underscores are not part of the language. Spaces, tabs,
carriage returns and newlines separate tokens and are otherwise ignored.
There are no comments and no end-of-file token: the list simply ends.

Number literals are unsigned 64-bit values. A longer digit run is a
NumericOverflowError rather than a silent truncation.

Example Usage
-------------
>>> from rcc.lexer import tokenize
>>> for token in tokenize("int main(){return 42;}"):
...     print(token)
type: int
identifier: main
parenthesis: (
parenthesis: )
bracket: {
return
number: 42
semicolon
bracket: }
"""

import logging
from dataclasses import dataclass
from enum import Enum
import string

from rcc.errors import (
    SourceLocation,
    NumericOverflowError,
    UnexpectedCharacterError,
)

logger = logging.getLogger(__name__)


# Largest value a number literal may hold
MAX_LITERAL = 2**64 - 1


# =============================================================================
# Token Kind Enumeration
# =============================================================================

class TokenKind(Enum):
    """
    Token kinds of the C subset.

    The value of each member is the label used in token dumps.
    """
    NUMBER = "number"             # Unsigned integer literal
    IDENTIFIER = "identifier"     # Variable or function name
    TYPE = "type"                 # Type keyword (only 'int')
    OPERATOR = "operator"         # + * =
    BRACKET = "bracket"           # { }
    PARENTHESIS = "parenthesis"   # ( )
    COMMA = "comma"               # ,
    SEMICOLON = "semicolon"       # ;
    RETURN = "return"             # return keyword


# Keyword table; every other word is an identifier
KEYWORDS = {
    "int": TokenKind.TYPE,
    "return": TokenKind.RETURN,
}

# Single-character tokens
PUNCTUATION = {
    "+": TokenKind.OPERATOR,
    "*": TokenKind.OPERATOR,
    "=": TokenKind.OPERATOR,
    "{": TokenKind.BRACKET,
    "}": TokenKind.BRACKET,
    "(": TokenKind.PARENTHESIS,
    ")": TokenKind.PARENTHESIS,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMICOLON,
}

# Kinds that carry no payload
BARE_KINDS = (TokenKind.COMMA, TokenKind.SEMICOLON, TokenKind.RETURN)


# =============================================================================
# Token Data Classes
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single lexical element without position.

    Attributes:
        kind: The TokenKind classification
        value: int for numbers, str for words and symbols, None for
               comma, semicolon and return
    """
    kind: TokenKind
    value: int | str | None = None

    def __str__(self) -> str:
        """Format as '<kind>: <payload>', or the bare kind."""
        if self.value is None:
            return self.kind.value
        return f"{self.kind.value}: {self.value}"

    def describe(self) -> str:
        """Short description used in error messages."""
        if self.value is None:
            return f"'{self.kind.value}'"
        if self.kind == TokenKind.NUMBER:
            return f"number {self.value}"
        if self.kind == TokenKind.IDENTIFIER:
            return f"identifier '{self.value}'"
        return f"'{self.value}'"


@dataclass(frozen=True)
class PositionedToken:
    """
    A token together with where it starts in the source.

    Attributes:
        token: The Token itself
        line: Line number of the first character (1-indexed)
        column: Column number of the first character (1-indexed)
        filename: Name of the source file
    """
    token: Token
    line: int
    column: int
    filename: str = "<input>"

    def __str__(self) -> str:
        return str(self.token)

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.token.value is not None:
            return (
                f"Token({self.token.kind.name}, {self.token.value!r}, "
                f"{self.line}:{self.column})"
            )
        return f"Token({self.token.kind.name}, {self.line}:{self.column})"

    @property
    def kind(self) -> TokenKind:
        return self.token.kind

    @property
    def value(self) -> int | str | None:
        return self.token.value

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def describe(self) -> str:
        return self.token.describe()


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes C-subset source code.

    Each instance keeps its own line and column counters, so positions
    are always relative to the source it was created with.

    Usage:
        lexer = Lexer(source_text, filename)
        tokens = lexer.tokenize()

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    # Characters that can start a word
    WORD_START = string.ascii_letters

    # Characters that can continue a word
    WORD_CHARS = string.ascii_letters + string.digits

    # Characters skipped between tokens
    WHITESPACE = " \t\r\n"

    def __init__(self, source: str, filename: str = "<input>"):
        """
        Initialize the lexer with source code.

        Args:
            source: The source code to tokenize
            filename: Name of the source file (for error messages)
        """
        self.source = source
        self.filename = filename

        # Current position in source
        self._pos = 0
        self._line = 1
        self._column = 1

        # Track line start position for error reporting
        self._line_start_pos = 0

    def tokenize(self) -> list[PositionedToken]:
        """
        Scan the whole source.

        Returns:
            List of PositionedToken in source order

        Raises:
            TokenizeError: On the first character that cannot be tokenized
        """
        tokens = []
        while not self._at_end():
            char = self._peek()

            if char in self.WHITESPACE:
                self._advance()
                continue

            tokens.append(self._scan_token())

        logger.debug(f"{self.filename}: {len(tokens)} tokens")
        return tokens

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        """Check if we've reached the end of source."""
        return self._pos >= len(self.source)

    def _peek(self) -> str:
        """Current character, or empty string past the end."""
        if self._at_end():
            return ""
        return self.source[self._pos]

    def _advance(self) -> str:
        """
        Consume and return the current character, advancing position.

        A newline moves to the next line and resets the column.
        """
        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> PositionedToken:
        start_line = self._line
        start_column = self._column
        char = self._peek()

        if char in string.digits:
            return self._scan_number(start_line, start_column)

        if char in PUNCTUATION:
            self._advance()
            kind = PUNCTUATION[char]
            value = None if kind in BARE_KINDS else char
            return self._make_token(kind, value, start_line, start_column)

        if char in self.WORD_START:
            return self._scan_word(start_line, start_column)

        raise UnexpectedCharacterError(
            char,
            SourceLocation(self.filename, start_line, start_column),
            self._get_current_line(),
        )

    def _scan_number(self, start_line: int, start_column: int) -> PositionedToken:
        """
        Scan a maximal run of decimal digits.

        Raises:
            NumericOverflowError: If the value exceeds 64 bits
        """
        digits = []
        while self._peek() and self._peek() in string.digits:
            digits.append(self._advance())

        literal = "".join(digits)
        value = int(literal)
        if value > MAX_LITERAL:
            raise NumericOverflowError(
                literal,
                SourceLocation(self.filename, start_line, start_column),
                self._get_current_line(),
            )

        return self._make_token(TokenKind.NUMBER, value, start_line, start_column)

    def _scan_word(self, start_line: int, start_column: int) -> PositionedToken:
        """Scan a keyword or identifier."""
        chars = []
        while self._peek() and self._peek() in self.WORD_CHARS:
            chars.append(self._advance())

        word = "".join(chars)
        kind = KEYWORDS.get(word, TokenKind.IDENTIFIER)
        value = None if kind == TokenKind.RETURN else word
        return self._make_token(kind, value, start_line, start_column)

    def _make_token(
        self,
        kind: TokenKind,
        value: int | str | None,
        line: int,
        column: int,
    ) -> PositionedToken:
        return PositionedToken(Token(kind, value), line, column, self.filename)

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def _get_current_line(self) -> str:
        """Get the current line of source text for error reporting."""
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end]


# =============================================================================
# Convenience Functions
# =============================================================================

def tokenize(source: str, filename: str = "<input>") -> list[PositionedToken]:
    """
    Tokenize source text in one call.

    Args:
        source: The source code
        filename: Name used in token locations and error messages

    Returns:
        List of PositionedToken
    """
    return Lexer(source, filename).tokenize()


def dump_tokens(tokens: list[PositionedToken], positions: bool = False) -> str:
    """
    Render tokens one per line as '<kind>: <payload>'.

    Args:
        tokens: Tokens to render
        positions: Prefix each line with 'line:column'

    Returns:
        The dump text, newline-terminated when non-empty
    """
    lines = []
    for token in tokens:
        if positions:
            lines.append(f"{token.line}:{token.column}\t{token}")
        else:
            lines.append(str(token))
    if not lines:
        return ""
    return "\n".join(lines) + "\n"

