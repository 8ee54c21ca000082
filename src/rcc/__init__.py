"""
rcc - A Tiny C-Subset Compiler Targeting LLVM IR
================================================

This package compiles a small subset of C to LLVM IR:

- 64-bit integer arithmetic with '+' and '*'
- local variable declaration and (chained) assignment
- functions with integer parameters, calls and 'return'

Pipeline
--------
    Source → Lexer → Token Cursor → Parser → AST → Code Generator → LLVM IR

The IR is built with llvmlite and can be run in-process with the MCJIT
runner or handed to LLVM's 'lli'.

Quick Start
-----------
Compile to IR text:
    >>> from rcc import compile_c
    >>> ir_text = compile_c('int main(){return 10+20*3;}')

Compile and run:
    >>> from rcc import run_c
    >>> run_c('int add(int a,int b){return a+b;} int main(){return add(3,4);}')
    7

Or use the command-line tool:
    $ rcc add.c -o add.ll
    $ rcc add.c --run

Language Subset
---------------
Supported:
- the single type 'int' (64-bit)
- operators '+', '*' and '=' (assignment is right associative)
- calls to any function in the program, before or after its definition

Not supported:
- pointers, arrays, structs and other types
- control flow other than 'return'
- subtraction, division and comparison operators
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from rcc.errors import (
    RccError,
    SourceLocation,
    TokenizeError,
    UnexpectedCharacterError,
    NumericOverflowError,
    ConsumeError,
    ParseError,
    UnexpectedTokenError,
    UnexpectedEndOfInputError,
    ConsumeFailureError,
    CompileError,
    UndeclaredIdentifierError,
    UnknownFunctionError,
    ArityMismatchError,
    InvalidAssignmentTargetError,
    DuplicateFunctionError,
    BackendFailureError,
)
from rcc.lexer import Lexer, Token, TokenKind, PositionedToken, tokenize, dump_tokens
from rcc.cursor import TokenCursor
from rcc.ast import ASTPrinter, ProgramNode, dump_ast
from rcc.parser import Parser, parse, parse_source
from rcc.codegen import CodeGenerator, EmittedModule, Environment, emit
from rcc.runner import ModuleRunner, JitRunner, LliRunner, get_runner
from rcc.compiler import (
    CompilerOptions,
    CompilerResult,
    RccCompiler,
    compile_c,
    compile_file,
    run_c,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "RccError",
    "SourceLocation",
    "TokenizeError",
    "UnexpectedCharacterError",
    "NumericOverflowError",
    "ConsumeError",
    "ParseError",
    "UnexpectedTokenError",
    "UnexpectedEndOfInputError",
    "ConsumeFailureError",
    "CompileError",
    "UndeclaredIdentifierError",
    "UnknownFunctionError",
    "ArityMismatchError",
    "InvalidAssignmentTargetError",
    "DuplicateFunctionError",
    "BackendFailureError",
    # Lexer
    "Lexer",
    "Token",
    "TokenKind",
    "PositionedToken",
    "tokenize",
    "dump_tokens",
    "TokenCursor",
    # Parser
    "ASTPrinter",
    "ProgramNode",
    "dump_ast",
    "Parser",
    "parse",
    "parse_source",
    # Code generation
    "CodeGenerator",
    "EmittedModule",
    "Environment",
    "emit",
    # Runners
    "ModuleRunner",
    "JitRunner",
    "LliRunner",
    "get_runner",
    # Compiler
    "CompilerOptions",
    "CompilerResult",
    "RccCompiler",
    "compile_c",
    "compile_file",
    "run_c",
]
