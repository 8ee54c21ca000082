"""
rcc Compiler Main Module
========================

This module provides the main compiler interface. It orchestrates the
complete compilation process:

    Source → Tokenize → Parse → Generate → LLVM IR

Usage
-----
Command line:
    $ rcc add.c -o add.ll

Programmatic:
    >>> from rcc import compile_c, run_c
    >>> ir_text = compile_c('int main(){return 1+2;}')
    >>> run_c('int main(){return 1+2;}')
    3

Compilation Pipeline
--------------------
1. **Tokenizing**: Convert source to positioned tokens
2. **Parsing**: Build the Abstract Syntax Tree (AST)
3. **Code Generation**: Lower the AST to an LLVM IR module
4. **Verification** (optional): Have LLVM parse and verify the module

Error Handling
--------------
Every stage stops at its first error and raises it unchanged; the
caller receives one typed RccError subclass and no partial result.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from rcc.ast import ProgramNode, dump_ast
from rcc.codegen import CodeGenerator, EmittedModule
from rcc.lexer import Lexer, PositionedToken, dump_tokens
from rcc.parser import Parser
from rcc.runner import JitRunner, ModuleRunner

logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        module_name: Name of the generated LLVM module
        verify: Run LLVM's verifier on the generated module
        trace: Log the token dump and the AST dump at DEBUG level
    """
    module_name: str = "rcc"
    verify: bool = True
    trace: bool = False

    def __post_init__(self):
        if not self.module_name:
            self.module_name = "rcc"


class RccCompiler:
    """
    Compiler for the C subset.

    Example:
        compiler = RccCompiler()
        result = compiler.compile_file("add.c")
        print(result.ir)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        """
        Initialize the compiler.

        Args:
            options: Compiler configuration (uses defaults if None)
        """
        self.options = options or CompilerOptions()

    def compile_source(self, source: str, filename: str = "<input>") -> "CompilerResult":
        """
        Compile source code to LLVM IR.

        Args:
            source: Source code string
            filename: Source filename for error messages

        Returns:
            CompilerResult with the tokens, AST and module

        Raises:
            RccError: On the first error in any stage
        """
        result = CompilerResult(filename=filename)
        source_lines = source.split("\n")

        # Stage 1: Tokenizing
        tokens = self._tokenize(source, filename)
        result.tokens = tokens
        if self.options.trace:
            logger.debug(f"tokens:\n{dump_tokens(tokens)}")

        # Stage 2: Parsing
        ast = self._parse(tokens, filename, source_lines)
        result.ast = ast
        if self.options.trace:
            logger.debug(f"ast:\n{dump_ast(ast)}")

        # Stage 3: Code generation
        module = self._generate(ast, source_lines)
        result.module = module

        # Stage 4: Verification
        if self.options.verify:
            module.verify()
            logger.debug(f"{filename}: module verified")

        return result

    def compile_file(self, filepath) -> "CompilerResult":
        """
        Compile a source file to LLVM IR.

        Args:
            filepath: Path to the source file

        Returns:
            CompilerResult for the file

        Raises:
            RccError: If compilation fails
            FileNotFoundError: If source file not found
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding='utf-8')
        return self.compile_source(source, str(filepath))

    def _tokenize(self, source: str, filename: str) -> list[PositionedToken]:
        """Tokenize source."""
        return Lexer(source, filename).tokenize()

    def _parse(
        self,
        tokens: list[PositionedToken],
        filename: str,
        source_lines: list[str],
    ) -> ProgramNode:
        """Parse tokens into AST."""
        return Parser(tokens, filename, source_lines).parse()

    def _generate(self, ast: ProgramNode, source_lines: list[str]) -> EmittedModule:
        """Generate the IR module from the AST."""
        generator = CodeGenerator(self.options.module_name, source_lines)
        return generator.emit(ast)


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        tokens: Tokens produced by the lexer
        ast: Abstract syntax tree
        module: Generated module
    """
    filename: str = ""
    tokens: list[PositionedToken] = field(default_factory=list)
    ast: Optional[ProgramNode] = None
    module: Optional[EmittedModule] = None

    @property
    def ir(self) -> str:
        """Generated LLVM IR text (empty if generation did not run)."""
        return self.module.ir_text if self.module is not None else ""

    @property
    def token_dump(self) -> str:
        return dump_tokens(self.tokens)

    @property
    def ast_dump(self) -> str:
        return dump_ast(self.ast) if self.ast is not None else ""


# =============================================================================
# Utility Functions
# =============================================================================

def compile_c(source: str, filename: str = "<input>") -> str:
    """
    Compile source code to LLVM IR text.

    This is the primary high-level interface for compiling.

    Args:
        source: Source code
        filename: Source filename for error messages

    Returns:
        Generated LLVM IR

    Raises:
        RccError: If compilation fails

    Example:
        >>> ir_text = compile_c('int main(){return 10+20*3;}')
        >>> 'define i64 @"main"()' in ir_text
        True
    """
    compiler = RccCompiler()
    result = compiler.compile_source(source, filename)
    return result.ir


def compile_file(filepath, output_path=None) -> str:
    """
    Compile a source file to LLVM IR.

    Args:
        filepath: Path to the source file
        output_path: Optional path to write the IR to

    Returns:
        Generated LLVM IR

    Raises:
        RccError: If compilation fails
        FileNotFoundError: If source file not found
    """
    compiler = RccCompiler()
    result = compiler.compile_file(filepath)

    if output_path:
        result.module.write(output_path)

    return result.ir


def run_c(
    source: str,
    runner: Optional[ModuleRunner] = None,
    filename: str = "<input>",
) -> int:
    """
    Compile source code and run its main function.

    Args:
        source: Source code
        runner: Runner to execute with (JitRunner if None)
        filename: Source filename for error messages

    Returns:
        The value reported by the runner

    Raises:
        RccError: If compilation or execution fails
    """
    result = RccCompiler().compile_source(source, filename)
    runner = runner or JitRunner()
    logger.debug(f"running {filename} with {runner.name} runner")
    return runner.run(result.module)
