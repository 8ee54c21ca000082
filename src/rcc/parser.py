"""
rcc Recursive Descent Parser
============================

This module implements a recursive descent parser for the C subset. It
takes the token list from the lexer and builds an Abstract Syntax Tree
(AST).

Grammar (EBNF)
--------------
program         ::= function+
function        ::= 'int' IDENTIFIER '(' (param (',' param)*)? ')'
                    '{' statement* 'return' expr ';' '}'
param           ::= 'int' IDENTIFIER
statement       ::= declare | expr_stmt
declare         ::= 'int' IDENTIFIER ';'
expr_stmt       ::= expr ';'

expr            ::= assign
assign          ::= additive ('=' additive)*
additive        ::= multiplicative ('+' multiplicative)*
multiplicative  ::= primary ('*' primary)*
primary         ::= NUMBER | IDENTIFIER | IDENTIFIER '(' (expr (',' expr)*)? ')'

Expression Precedence (lowest to highest)
-----------------------------------------
1. assignment     =
2. additive       +
3. multiplicative *
4. primary        NUMBER, IDENTIFIER, call

Each operator tier collects all its operands into one flat node. A tier
that sees a single operand returns that operand unchanged.

A statement list ends at the first token that cannot begin a statement;
the function body must then continue with 'return'.

The parser stops at the first error. There is no recovery and no
partial tree.

Example Usage
-------------
>>> from rcc.parser import parse_source
>>> program = parse_source("int main(){return 1+2;}")
>>> program.functions[0].return_statement.expression
AdditiveExpression(operands=[NumberLiteral(value=1), NumberLiteral(value=2)])
"""

import logging
from typing import Callable, Optional, Sequence

from rcc.ast import (
    AdditiveExpression,
    AssignmentExpression,
    DeclareStatement,
    Expression,
    ExpressionStatement,
    FunctionCall,
    FunctionNode,
    Identifier,
    MultiplicativeExpression,
    NumberLiteral,
    ParameterNode,
    ProgramNode,
    ReturnStatement,
    Statement,
)
from rcc.cursor import TokenCursor
from rcc.errors import (
    ConsumeError,
    ConsumeFailureError,
    SourceLocation,
    UnexpectedEndOfInputError,
    UnexpectedTokenError,
)
from rcc.lexer import PositionedToken, TokenKind, tokenize

logger = logging.getLogger(__name__)


class Parser:
    """
    Parses a token list into an Abstract Syntax Tree (AST).

    One method per grammar rule. All token access goes through a
    TokenCursor, so a failed expectation never consumes input.

    Attributes:
        cursor: Cursor over the tokens being parsed
        filename: Source filename for error reporting
    """

    def __init__(
        self,
        tokens: Sequence[PositionedToken],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
    ):
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from the lexer
            filename: Source filename for error messages
            source_lines: Source lines for error context
        """
        self.cursor = TokenCursor(tokens)
        self.filename = filename
        self.source_lines = source_lines or []

    def parse(self) -> ProgramNode:
        """
        Parse the token list into an AST.

        Returns:
            ProgramNode containing every function in source order

        Raises:
            ParseError: On the first syntax error
        """
        location = self._location()
        functions = []

        # At least one function is required
        functions.append(self._parse_function())
        while not self.cursor.at_end():
            functions.append(self._parse_function())

        logger.debug(f"{self.filename}: parsed {len(functions)} function(s)")
        return ProgramNode(location=location, functions=functions)

    # =========================================================================
    # Token Access Helpers
    # =========================================================================

    def _location(self) -> Optional[SourceLocation]:
        """Location of the next token, if any."""
        token = self.cursor.peek()
        return token.location if token is not None else None

    def _end_location(self) -> Optional[SourceLocation]:
        """Location of the last token, used when input runs out."""
        if not self.cursor.tokens:
            return None
        return self.cursor.tokens[-1].location

    def _expect(self, consume: Callable, *args):
        """
        Run a cursor expect_* operation, translating its ConsumeError.

        A failure at end of input becomes UnexpectedEndOfInputError;
        a failure on a present token becomes ConsumeFailureError.
        """
        try:
            return consume(*args)
        except ConsumeError as e:
            if e.found is None:
                raise UnexpectedEndOfInputError(e.expected, self._end_location()) from e
            raise ConsumeFailureError(e, self._get_source_line(e.found.line)) from e

    def _unexpected(self, expected: str, hint: Optional[str] = None):
        """Build the error for a token that does not fit here."""
        token = self.cursor.peek()
        if token is None:
            return UnexpectedEndOfInputError(expected, self._end_location())
        return UnexpectedTokenError(
            token,
            expected=expected,
            hint=hint,
            source_line=self._get_source_line(token.line),
        )

    def _get_source_line(self, line: int) -> Optional[str]:
        """Get source line for error reporting."""
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    # =========================================================================
    # Functions
    # =========================================================================

    def _parse_function(self) -> FunctionNode:
        """Parse a function definition."""
        location = self._location()

        return_type = self._expect(self.cursor.expect_type).value
        name = self._expect(self.cursor.expect_identifier).value

        self._expect(self.cursor.expect_parenthesis, "(")
        parameters = self._parse_parameter_list()
        self._expect(self.cursor.expect_parenthesis, ")")

        self._expect(self.cursor.expect_bracket, "{")
        statements = self._parse_statement_list()
        return_statement = self._parse_return_statement()
        self._expect(self.cursor.expect_bracket, "}")

        return FunctionNode(
            location=location,
            name=name,
            return_type=return_type,
            parameters=parameters,
            statements=statements,
            return_statement=return_statement,
        )

    def _parse_parameter_list(self) -> list[ParameterNode]:
        """Parse the parameters between the parentheses."""
        parameters = []

        if self.cursor.check(TokenKind.PARENTHESIS, ")"):
            return parameters

        while True:
            parameters.append(self._parse_parameter())

            if not self.cursor.check(TokenKind.COMMA):
                break
            self.cursor.advance()

        return parameters

    def _parse_parameter(self) -> ParameterNode:
        """Parse a single function parameter."""
        location = self._location()

        type_name = self._expect(self.cursor.expect_type).value
        self._reject_pointer()
        name = self._expect(self.cursor.expect_identifier).value

        return ParameterNode(location=location, name=name, type_name=type_name)

    def _reject_pointer(self) -> None:
        if self.cursor.check_next_operator("*"):
            raise self._unexpected("identifier", hint="pointers are not supported")

    # =========================================================================
    # Statements
    # =========================================================================

    def _parse_statement_list(self) -> list[Statement]:
        """Parse statements until a token that cannot start one."""
        statements = []

        while True:
            statement = self._parse_statement()
            if statement is None:
                break
            statements.append(statement)

        return statements

    def _parse_statement(self) -> Optional[Statement]:
        """
        Parse one statement.

        Returns:
            The statement, or None if the next token does not start one
        """
        if self.cursor.check(TokenKind.TYPE):
            return self._parse_declare_statement()

        if self.cursor.is_expression_start():
            return self._parse_expression_statement()

        return None

    def _parse_declare_statement(self) -> DeclareStatement:
        location = self._location()

        type_name = self._expect(self.cursor.expect_type).value
        self._reject_pointer()
        identifier = self._expect(self.cursor.expect_identifier).value
        self._expect(self.cursor.expect_semicolon)

        return DeclareStatement(
            location=location,
            type_name=type_name,
            identifier=identifier,
        )

    def _parse_expression_statement(self) -> ExpressionStatement:
        location = self._location()

        expression = self._parse_expression()
        self._expect(self.cursor.expect_semicolon)

        return ExpressionStatement(location=location, expression=expression)

    def _parse_return_statement(self) -> ReturnStatement:
        location = self._location()

        self._expect(self.cursor.expect_return)
        expression = self._parse_expression()
        self._expect(self.cursor.expect_semicolon)

        return ReturnStatement(location=location, expression=expression)

    # =========================================================================
    # Expressions
    # =========================================================================

    def _parse_expression(self) -> Expression:
        """Parse an expression (entry point)."""
        return self._parse_assignment()

    def _parse_assignment(self) -> Expression:
        """Parse assignment expression (=)."""
        return self._parse_tier(self._parse_additive, "=", AssignmentExpression)

    def _parse_additive(self) -> Expression:
        """Parse additive expression (+)."""
        return self._parse_tier(self._parse_multiplicative, "+", AdditiveExpression)

    def _parse_multiplicative(self) -> Expression:
        """Parse multiplicative expression (*)."""
        return self._parse_tier(self._parse_primary, "*", MultiplicativeExpression)

    def _parse_tier(
        self,
        operand_parser: Callable[[], Expression],
        symbol: str,
        node_class: type,
    ) -> Expression:
        """
        Generic n-ary tier parser.

        Args:
            operand_parser: Function to parse operands
            symbol: Operator joining the operands
            node_class: Node built when there are two or more operands

        Returns:
            The single operand, or a node_class holding all operands
        """
        location = self._location()
        operands = [operand_parser()]

        while self.cursor.check_next_operator(symbol):
            self.cursor.advance()
            operands.append(operand_parser())

        if len(operands) == 1:
            return operands[0]
        return node_class(location=location, operands=operands)

    def _parse_primary(self) -> Expression:
        """
        Parse a primary expression.

        An identifier followed by '(' is a call; otherwise it is a
        variable reference.
        """
        token = self.cursor.peek()

        if token is None:
            raise UnexpectedEndOfInputError("expression", self._end_location())

        if token.kind == TokenKind.NUMBER:
            self.cursor.advance()
            return NumberLiteral(location=token.location, value=token.value)

        if token.kind == TokenKind.IDENTIFIER:
            following = self.cursor.peek2()
            if (
                following is not None
                and following.kind == TokenKind.PARENTHESIS
                and following.value == "("
            ):
                return self._parse_call()
            self.cursor.advance()
            return Identifier(location=token.location, name=token.value)

        raise self._unexpected("expression")

    def _parse_call(self) -> FunctionCall:
        """Parse 'name(arg, ...)'."""
        location = self._location()

        name = self._expect(self.cursor.expect_identifier).value
        self._expect(self.cursor.expect_parenthesis, "(")

        arguments = []
        if self.cursor.is_expression_start():
            while True:
                arguments.append(self._parse_expression())

                if not self.cursor.check(TokenKind.COMMA):
                    break
                self.cursor.advance()

        self._expect(self.cursor.expect_parenthesis, ")")

        return FunctionCall(location=location, name=name, arguments=arguments)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse(
    tokens: Sequence[PositionedToken],
    filename: str = "<input>",
    source_lines: Optional[list[str]] = None,
) -> ProgramNode:
    """Parse a token list into a ProgramNode."""
    return Parser(tokens, filename, source_lines).parse()


def parse_source(source: str, filename: str = "<input>") -> ProgramNode:
    """
    Tokenize and parse source text in one call.

    Raises:
        TokenizeError: If the source cannot be tokenized
        ParseError: If the tokens do not form a program
    """
    tokens = tokenize(source, filename)
    return parse(tokens, filename, source.split("\n"))
