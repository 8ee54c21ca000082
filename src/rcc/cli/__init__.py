"""
rcc Command-Line Interface
==========================

This package provides the command-line tool for the compiler:

- **rcc**: compile a source file to LLVM IR, dump its tokens or AST,
  or run it

The tool is a Click-based CLI application with shared exit-code
handling in rcc.cli.errors.
"""

__all__ = ["rcc"]
