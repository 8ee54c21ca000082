"""
rcc Error Hierarchy
===================

This module defines the exception hierarchy for the whole compiler.
All exceptions inherit from RccError, allowing callers to catch every
compiler failure with a single except clause if desired.

Exception Hierarchy
-------------------
RccError (base)
├── TokenizeError (lexer)
│   ├── UnexpectedCharacterError - character outside the language
│   └── NumericOverflowError - literal does not fit in 64 bits
├── ConsumeError - token cursor could not consume the requested kind
├── ParseError (parser)
│   ├── UnexpectedTokenError - grammar mismatch
│   ├── UnexpectedEndOfInputError - token stream ended too early
│   └── ConsumeFailureError - wraps a ConsumeError
└── CompileError (code generator and backend)
    ├── UndeclaredIdentifierError - variable used before declaration
    ├── UnknownFunctionError - call to a function that does not exist
    ├── ArityMismatchError - wrong number of call arguments
    ├── InvalidAssignmentTargetError - left side is not a variable
    ├── DuplicateFunctionError - function defined twice
    └── BackendFailureError - LLVM rejected or could not run the module

Every stage fails fast: the first error aborts the compilation and is
raised to the caller unchanged.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Base Exception Class
# =============================================================================

class RccError(Exception):
    """
    Base exception for all compiler errors.

    Provides the common message layout: location prefix, source context
    with a caret pointer, and an optional hint.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            main.c:1:19: error: undeclared identifier 'x'
                int main(){return x;}
                                  ^
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Tokenizer Errors
# =============================================================================

class TokenizeError(RccError):
    """
    Base class for lexical errors.

    Tokenization aborts on the first one; no partial token stream is
    returned.
    """
    pass


class UnexpectedCharacterError(TokenizeError):
    """Character that cannot start any token."""

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.char = char
        hint = None
        if char in "[]":
            hint = "arrays are not supported"
        elif char in "-/":
            hint = "only '+', '*' and '=' operators are supported"
        super().__init__(
            f"unexpected character '{char}' (0x{ord(char):02X})",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class NumericOverflowError(TokenizeError):
    """Integer literal larger than an unsigned 64-bit value."""

    def __init__(
        self,
        literal: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.literal = literal
        super().__init__(
            f"integer literal '{literal}' does not fit in 64 bits",
            location=location,
            hint="the largest literal is 18446744073709551615",
            source_line=source_line,
        )


# =============================================================================
# Token Cursor Errors
# =============================================================================

class ConsumeError(RccError):
    """
    The token cursor could not consume the requested token kind.

    Raised by the cursor's expect_* operations. The cursor position is
    left unchanged.

    Attributes:
        expected: Description of the token that was required
        found: The token actually present, or None at end of input
    """

    def __init__(self, expected: str, found=None):
        self.expected = expected
        self.found = found
        if found is None:
            message = f"expected {expected}, found end of input"
            location = None
        else:
            message = f"expected {expected}, found {found.describe()}"
            location = found.location
        super().__init__(message, location=location)


# =============================================================================
# Parser Errors
# =============================================================================

class ParseError(RccError):
    """
    Base class for syntax errors.

    Parsing is fail-fast: the first violation aborts the whole parse and
    no partial AST is returned.
    """
    pass


class UnexpectedTokenError(ParseError):
    """Token that does not fit the grammar at this point."""

    def __init__(
        self,
        found,
        expected: Optional[str] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected
        if hint is None and expected:
            hint = f"expected {expected}"
        super().__init__(
            f"unexpected token {found.describe()}",
            location=found.location,
            hint=hint,
            source_line=source_line,
        )


class UnexpectedEndOfInputError(ParseError):
    """Token stream ended where the grammar requires more input."""

    def __init__(
        self,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
    ):
        self.expected = expected
        super().__init__(
            "unexpected end of input",
            location=location,
            hint=f"expected {expected}" if expected else None,
        )


class ConsumeFailureError(ParseError):
    """
    Wraps a ConsumeError raised by the token cursor.

    Attributes:
        consume_error: The original cursor error
    """

    def __init__(
        self,
        consume_error: ConsumeError,
        source_line: Optional[str] = None,
    ):
        self.consume_error = consume_error
        self.found = consume_error.found
        self.expected = consume_error.expected
        super().__init__(
            consume_error.message,
            location=consume_error.location,
            source_line=source_line,
        )


# =============================================================================
# Code Generation Errors
# =============================================================================

class CompileError(RccError):
    """
    Base class for errors raised while lowering the AST to IR.

    The syntax is valid but the program cannot be turned into a module,
    or the backend rejected the module.
    """
    pass


class UndeclaredIdentifierError(CompileError):
    """Variable referenced without a declaration in the current function."""

    def __init__(
        self,
        identifier: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.identifier = identifier
        super().__init__(
            f"undeclared identifier '{identifier}'",
            location=location,
            hint=f"declare it first with 'int {identifier};'",
            source_line=source_line,
        )


class UnknownFunctionError(CompileError):
    """Call to a function that is not defined anywhere in the program."""

    def __init__(
        self,
        function_name: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.function_name = function_name
        super().__init__(
            f"unknown function '{function_name}'",
            location=location,
            source_line=source_line,
        )


class ArityMismatchError(CompileError):
    """Call with a different number of arguments than parameters."""

    def __init__(
        self,
        function_name: str,
        expected: int,
        actual: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.function_name = function_name
        self.expected = expected
        self.actual = actual

        word = "argument" if expected == 1 else "arguments"
        super().__init__(
            f"'{function_name}' expects {expected} {word}, got {actual}",
            location=location,
            source_line=source_line,
        )


class InvalidAssignmentTargetError(CompileError):
    """Left side of '=' is not a plain variable."""

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "expression is not assignable",
            location=location,
            hint="left side of assignment must be a declared variable",
            source_line=source_line,
        )


class DuplicateFunctionError(CompileError):
    """Function defined more than once."""

    def __init__(
        self,
        function_name: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
    ):
        self.function_name = function_name
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{function_name}' was first defined at {original_location}"

        super().__init__(
            f"redefinition of function '{function_name}'",
            location=location,
            hint=hint,
        )


class BackendFailureError(CompileError):
    """LLVM rejected the module, or the module could not be executed."""
    pass
