"""
rcc Abstract Syntax Tree (AST) Definitions
==========================================

This module defines the AST node types built by the parser and consumed
by the code generator.

Node Hierarchy
--------------
ASTNode (base)
├── ProgramNode - root node, ordered list of functions
├── FunctionNode - function definition
├── ParameterNode - function parameter
├── Statements
│   ├── DeclareStatement - 'int x;'
│   ├── ExpressionStatement - expression evaluated for its effect
│   └── ReturnStatement - terminal 'return expr;' of a function
└── Expressions
    ├── AssignmentExpression - a = b = ... (two or more operands)
    ├── AdditiveExpression - a + b + ... (two or more operands)
    ├── MultiplicativeExpression - a * b * ... (two or more operands)
    ├── NumberLiteral - integer constant
    ├── Identifier - variable reference
    └── FunctionCall - call with argument expressions

Design Notes
------------
- Operator tiers are flat n-ary nodes rather than nested binary trees.
  A tier with a single operand is never built; the parser passes the
  operand through, so 'return 1;' holds a bare NumberLiteral.
- Each node stores its source location for error reporting. The
  location does not take part in equality, so trees parsed from
  differently spaced sources compare equal.
- A function body is a statement list followed by exactly one
  ReturnStatement, held in its own field.
"""

from dataclasses import dataclass, field
from typing import Optional

from rcc.errors import SourceLocation


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location where this node starts (optional)
    """
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)


@dataclass
class Expression(ASTNode):
    """Base class for all expression nodes. Every expression yields an int."""
    pass


@dataclass
class Statement(ASTNode):
    """Base class for statements inside a function body."""
    pass


# =============================================================================
# Program Structure
# =============================================================================

@dataclass
class ParameterNode(ASTNode):
    """
    Function parameter.

    Attributes:
        name: Parameter name
        type_name: Declared type (always 'int')
    """
    name: str = ""
    type_name: str = "int"


@dataclass
class FunctionNode(ASTNode):
    """
    Function definition.

    Attributes:
        name: Function name
        return_type: Declared return type (always 'int')
        parameters: Ordered parameter list
        statements: Body statements before the return
        return_statement: The terminal return
    """
    name: str = ""
    return_type: str = "int"
    parameters: list[ParameterNode] = field(default_factory=list)
    statements: list[Statement] = field(default_factory=list)
    return_statement: Optional["ReturnStatement"] = None

    @property
    def arity(self) -> int:
        return len(self.parameters)


@dataclass
class ProgramNode(ASTNode):
    """
    Root node of the AST.

    Attributes:
        functions: Function definitions in source order
    """
    functions: list[FunctionNode] = field(default_factory=list)

    def function_names(self) -> list[str]:
        return [function.name for function in self.functions]


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class DeclareStatement(Statement):
    """
    Local variable declaration without initializer.

    Attributes:
        type_name: Declared type (always 'int')
        identifier: Variable name
    """
    type_name: str = "int"
    identifier: str = ""


@dataclass
class ExpressionStatement(Statement):
    """
    Expression evaluated for its side effects; the value is discarded.

    Attributes:
        expression: The expression
    """
    expression: Expression = None


@dataclass
class ReturnStatement(Statement):
    """
    Return statement ending a function body.

    Attributes:
        expression: Value to return
    """
    expression: Expression = None


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass
class AssignmentExpression(Expression):
    """
    Chained assignment 'a = b = expr'.

    All operands but the last are assignment targets; the last operand
    supplies the value.

    Attributes:
        operands: Two or more operand expressions, left to right
    """
    operands: list[Expression] = field(default_factory=list)

    @property
    def targets(self) -> list[Expression]:
        return self.operands[:-1]

    @property
    def value(self) -> Expression:
        return self.operands[-1]


@dataclass
class AdditiveExpression(Expression):
    """
    Sum 'a + b + ...'.

    Attributes:
        operands: Two or more operand expressions, left to right
    """
    operands: list[Expression] = field(default_factory=list)


@dataclass
class MultiplicativeExpression(Expression):
    """
    Product 'a * b * ...'.

    Attributes:
        operands: Two or more operand expressions, left to right
    """
    operands: list[Expression] = field(default_factory=list)


@dataclass
class NumberLiteral(Expression):
    """
    Integer literal expression.

    Attributes:
        value: The unsigned literal value
    """
    value: int = 0


@dataclass
class Identifier(Expression):
    """
    Variable reference expression.

    Attributes:
        name: The variable name
    """
    name: str = ""


@dataclass
class FunctionCall(Expression):
    """
    Function call expression.

    Attributes:
        name: Name of the function to call
        arguments: Argument expressions, evaluated left to right
    """
    name: str = ""
    arguments: list[Expression] = field(default_factory=list)


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_* methods for the node types they care
    about; everything else walks the children.

    Usage:
        class CallCounter(ASTVisitor):
            def __init__(self):
                self.calls = 0

            def visit_FunctionCall(self, node):
                self.calls += 1
                self.generic_visit(node)
    """

    def visit(self, node: ASTNode):
        """
        Visit a node by dispatching to the appropriate method.

        Args:
            node: The AST node to visit

        Returns:
            The result of the visit method (varies by node type)
        """
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit all child nodes."""
        for field_value in node.__dict__.values():
            if isinstance(field_value, ASTNode):
                self.visit(field_value)
            elif isinstance(field_value, list):
                for item in field_value:
                    if isinstance(item, ASTNode):
                        self.visit(item)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Each nesting level is marked with a '| ' prefix:

        program
        | function: main
        | | return_type: int
        | | return:
        | | | operator: +
        | | | | number: 1
        | | | | number: 2

    The output is diagnostic only and is not meant to be parsed back.

    Usage:
        printer = ASTPrinter()
        output = printer.print(ast)
    """

    INDENT = "| "

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Print the AST and return as string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        """Emit a line with current indentation."""
        self.output.append(f"{self.INDENT * self.indent_level}{text}")

    def _indent(self) -> None:
        self.indent_level += 1

    def _dedent(self) -> None:
        self.indent_level = max(0, self.indent_level - 1)

    def _nested(self, nodes) -> None:
        self._indent()
        for node in nodes:
            self.visit(node)
        self._dedent()

    def visit_ProgramNode(self, node: ProgramNode):
        self._emit("program")
        self._nested(node.functions)

    def visit_FunctionNode(self, node: FunctionNode):
        self._emit(f"function: {node.name}")
        self._indent()
        self._emit(f"return_type: {node.return_type}")
        self._emit("parameters:")
        self._nested(node.parameters)
        self._emit("statements:")
        self._nested(node.statements)
        if node.return_statement is not None:
            self.visit(node.return_statement)
        self._dedent()

    def visit_ParameterNode(self, node: ParameterNode):
        self._emit(f"{node.type_name} {node.name}")

    def visit_DeclareStatement(self, node: DeclareStatement):
        self._emit(f"declare: {node.type_name} {node.identifier}")

    def visit_ExpressionStatement(self, node: ExpressionStatement):
        self._emit("expression_statement:")
        self._nested([node.expression])

    def visit_ReturnStatement(self, node: ReturnStatement):
        self._emit("return:")
        self._nested([node.expression])

    def visit_AssignmentExpression(self, node: AssignmentExpression):
        self._emit("operator: =")
        self._nested(node.operands)

    def visit_AdditiveExpression(self, node: AdditiveExpression):
        self._emit("operator: +")
        self._nested(node.operands)

    def visit_MultiplicativeExpression(self, node: MultiplicativeExpression):
        self._emit("operator: *")
        self._nested(node.operands)

    def visit_NumberLiteral(self, node: NumberLiteral):
        self._emit(f"number: {node.value}")

    def visit_Identifier(self, node: Identifier):
        self._emit(f"identifier: {node.name}")

    def visit_FunctionCall(self, node: FunctionCall):
        self._emit(f"function_call: {node.name}")
        self._nested(node.arguments)


def dump_ast(node: ASTNode) -> str:
    """Render an AST with ASTPrinter."""
    return ASTPrinter().print(node)
