"""
rcc Code Generator
==================

This module lowers the AST to LLVM IR using llvmlite's IR builder.

Every value in the language is a 64-bit integer, so every function has
the signature ``i64 @name(i64, ...)``.

Code Generation Strategy
------------------------
1. Declaration pass: every function of the program is added to the
   module before any body is emitted. A call may therefore name a
   function defined later in the source.
2. Body pass, in program order:
   - open an ``entry`` block,
   - give each parameter a stack slot (``alloca``) and store the
     incoming argument into it,
   - walk the statements, then emit ``ret`` for the return expression.

Variables live in stack slots recorded in a per-function Environment.
Reads ``load`` from the slot, assignments ``store`` into it. No
optimization is done; LLVM's mem2reg would lift the slots to registers.

Expression Lowering
-------------------
| Node                      | IR                                        |
|---------------------------|-------------------------------------------|
| NumberLiteral             | i64 constant                              |
| Identifier                | load from the variable's slot             |
| AdditiveExpression        | add chain starting from 0                 |
| MultiplicativeExpression  | mul chain starting from 1                 |
| AssignmentExpression      | store rightmost value into each target    |
| FunctionCall              | call                                      |

Example:
    >>> from rcc.parser import parse_source
    >>> from rcc.codegen import emit
    >>> module = emit(parse_source("int main(){return 1;}"))
    >>> module.function_names
    ['main']
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import llvmlite.binding as llvm
from llvmlite import ir

from rcc.ast import (
    AdditiveExpression,
    AssignmentExpression,
    ASTVisitor,
    DeclareStatement,
    ExpressionStatement,
    FunctionCall,
    FunctionNode,
    Identifier,
    MultiplicativeExpression,
    NumberLiteral,
    ProgramNode,
    ReturnStatement,
)
from rcc.errors import (
    ArityMismatchError,
    BackendFailureError,
    DuplicateFunctionError,
    InvalidAssignmentTargetError,
    SourceLocation,
    UndeclaredIdentifierError,
    UnknownFunctionError,
)

logger = logging.getLogger(__name__)


# The only value type
I64 = ir.IntType(64)

# Literals above this are stored with the same bit pattern as a negative i64
I64_MAX = 2**63 - 1


# =============================================================================
# Environment
# =============================================================================

class Environment:
    """
    Variable bindings of one function: name -> stack slot.

    Created empty for each function and discarded once the function has
    been emitted. A later binding of the same name replaces the earlier
    one.
    """

    def __init__(self):
        self._slots: dict[str, ir.AllocaInstr] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._slots

    def __len__(self) -> int:
        return len(self._slots)

    def bind(self, name: str, slot: ir.AllocaInstr) -> None:
        self._slots[name] = slot

    def lookup(self, name: str) -> Optional[ir.AllocaInstr]:
        return self._slots.get(name)


# =============================================================================
# Emitted Module
# =============================================================================

@dataclass
class EmittedModule:
    """
    Result of code generation.

    Attributes:
        module: The llvmlite IR module
    """
    module: ir.Module

    def __str__(self) -> str:
        return self.ir_text

    @property
    def ir_text(self) -> str:
        """Textual LLVM IR, accepted by llvm-as and lli."""
        return str(self.module)

    @property
    def function_names(self) -> list[str]:
        return [function.name for function in self.module.functions]

    def write(self, path) -> Path:
        """Write the IR text to path and return it as a Path."""
        path = Path(path)
        path.write_text(self.ir_text, encoding="utf-8")
        return path

    def verify(self) -> None:
        """
        Parse and verify the IR with LLVM.

        Raises:
            BackendFailureError: If LLVM rejects the module
        """
        try:
            parsed = llvm.parse_assembly(self.ir_text)
            parsed.verify()
        except RuntimeError as e:
            raise BackendFailureError(f"LLVM rejected module: {e}") from e


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator(ASTVisitor):
    """
    Generates LLVM IR from a ProgramNode.

    Expression visitors return the ir.Value holding the result;
    statement visitors return None.

    Usage:
        generator = CodeGenerator()
        module = generator.emit(program)
        print(module.ir_text)

    Attributes:
        module_name: Name given to the generated IR module
    """

    def __init__(
        self,
        module_name: str = "rcc",
        source_lines: Optional[list[str]] = None,
    ):
        self.module_name = module_name
        self.source_lines = source_lines or []

        self.module: Optional[ir.Module] = None
        self.builder: Optional[ir.IRBuilder] = None
        self.env: Optional[Environment] = None

        # Function name -> where it was defined
        self._definitions: dict[str, Optional[SourceLocation]] = {}

    def emit(self, program: ProgramNode) -> EmittedModule:
        """
        Generate a module for the whole program.

        Raises:
            CompileError: On the first semantic error
        """
        self.module = ir.Module(name=self.module_name)
        self._definitions = {}

        for function in program.functions:
            self._declare_function(function)

        for function in program.functions:
            self.visit(function)

        logger.debug(
            f"emitted module '{self.module_name}' with "
            f"{len(program.functions)} function(s)"
        )
        return EmittedModule(self.module)

    def _declare_function(self, node: FunctionNode) -> ir.Function:
        """Add the function's signature to the module."""
        if node.name in self._definitions:
            raise DuplicateFunctionError(
                node.name,
                node.location,
                self._definitions[node.name],
            )
        self._definitions[node.name] = node.location

        function_type = ir.FunctionType(I64, [I64] * node.arity)
        return ir.Function(self.module, function_type, name=node.name)

    def _source_line(self, location: Optional[SourceLocation]) -> Optional[str]:
        """Get source line for error reporting."""
        if location is None:
            return None
        if 0 < location.line <= len(self.source_lines):
            return self.source_lines[location.line - 1]
        return None

    # =========================================================================
    # Functions and Statements
    # =========================================================================

    def visit_FunctionNode(self, node: FunctionNode):
        function = self.module.get_global(node.name)
        block = function.append_basic_block(name="entry")
        self.builder = ir.IRBuilder(block)
        self.env = Environment()

        for parameter, argument in zip(node.parameters, function.args):
            slot = self.builder.alloca(I64, name=parameter.name)
            self.builder.store(argument, slot)
            self.env.bind(parameter.name, slot)

        for statement in node.statements:
            self.visit(statement)

        self.visit(node.return_statement)

        logger.debug(f"emitted function '{node.name}' ({len(self.env)} slot(s))")
        self.builder = None
        self.env = None

    def visit_DeclareStatement(self, node: DeclareStatement):
        slot = self.builder.alloca(I64, name=node.identifier)
        self.env.bind(node.identifier, slot)

    def visit_ExpressionStatement(self, node: ExpressionStatement):
        self.visit(node.expression)

    def visit_ReturnStatement(self, node: ReturnStatement):
        value = self.visit(node.expression)
        self.builder.ret(value)

    # =========================================================================
    # Expressions
    # =========================================================================

    def visit_NumberLiteral(self, node: NumberLiteral) -> ir.Value:
        value = node.value
        if value > I64_MAX:
            value -= 2**64
        return ir.Constant(I64, value)

    def visit_Identifier(self, node: Identifier) -> ir.Value:
        slot = self._lookup(node)
        return self.builder.load(slot, name=node.name, typ=I64)

    def visit_AdditiveExpression(self, node: AdditiveExpression) -> ir.Value:
        result = ir.Constant(I64, 0)
        for operand in node.operands:
            result = self.builder.add(result, self.visit(operand), name="sum")
        return result

    def visit_MultiplicativeExpression(self, node: MultiplicativeExpression) -> ir.Value:
        result = ir.Constant(I64, 1)
        for operand in node.operands:
            result = self.builder.mul(result, self.visit(operand), name="mul")
        return result

    def visit_AssignmentExpression(self, node: AssignmentExpression) -> ir.Value:
        """
        Store the rightmost operand into every target, right to left.

        'a = b = 5' stores 5 into b, then into a, and yields 5.
        """
        slots = []
        for target in node.targets:
            if not isinstance(target, Identifier):
                raise InvalidAssignmentTargetError(
                    target.location,
                    self._source_line(target.location),
                )
            slots.append(self._lookup(target))

        value = self.visit(node.value)
        for slot in reversed(slots):
            self.builder.store(value, slot)
        return value

    def visit_FunctionCall(self, node: FunctionCall) -> ir.Value:
        function = self.module.globals.get(node.name)
        if not isinstance(function, ir.Function):
            raise UnknownFunctionError(
                node.name,
                node.location,
                self._source_line(node.location),
            )

        expected = len(function.args)
        if len(node.arguments) != expected:
            raise ArityMismatchError(
                node.name,
                expected,
                len(node.arguments),
                node.location,
                self._source_line(node.location),
            )

        arguments = [self.visit(argument) for argument in node.arguments]
        return self.builder.call(function, arguments, name="call")

    def _lookup(self, node: Identifier) -> ir.AllocaInstr:
        slot = self.env.lookup(node.name)
        if slot is None:
            raise UndeclaredIdentifierError(
                node.name,
                node.location,
                self._source_line(node.location),
            )
        return slot


# =============================================================================
# Convenience Functions
# =============================================================================

def emit(
    program: ProgramNode,
    module_name: str = "rcc",
    source_lines: Optional[list[str]] = None,
) -> EmittedModule:
    """Generate an EmittedModule for a parsed program."""
    return CodeGenerator(module_name, source_lines).emit(program)
