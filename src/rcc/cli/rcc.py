"""
rcc - Compiler Command-Line Interface
=====================================

This module implements the command-line interface for the compiler.

Usage Examples
--------------
Basic compilation:
    $ rcc add.c

With output file:
    $ rcc add.c -o add.ll

Inspect the front end:
    $ rcc add.c --tokens
    $ rcc add.c --ast

Compile and run main (exit status is main's value modulo 256):
    $ rcc add.c --run
    $ rcc add.c --run --runner lli

Verbose mode:
    $ rcc -v add.c
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from rcc import __version__
from rcc.ast import dump_ast
from rcc.cli.errors import handle_cli_exception
from rcc.compiler import CompilerOptions, RccCompiler
from rcc.lexer import dump_tokens, tokenize
from rcc.parser import parse_source
from rcc.runner import get_runner


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(name)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output LLVM IR file (default: input.ll)",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print tokens and exit (for debugging)",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print AST and exit (for debugging)",
)
@click.option(
    "--run",
    is_flag=True,
    help="Run main and exit with its value",
)
@click.option(
    "--runner",
    type=click.Choice(["jit", "lli"], case_sensitive=False),
    default="jit",
    show_default=True,
    help="How --run executes the module",
)
@click.option(
    "--no-verify",
    is_flag=True,
    help="Skip LLVM verification of the generated module",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="rcc")
def main(
    input_file: Path,
    output: Optional[Path],
    tokens: bool,
    ast: bool,
    run: bool,
    runner: str,
    no_verify: bool,
    verbose: bool,
) -> None:
    """
    Compile a C-subset source file to LLVM IR.

    INPUT_FILE is the source file (.c) to compile.

    \b
    Examples:
        rcc add.c                    # Outputs add.ll
        rcc add.c -o out.ll          # Specify output file
        rcc add.c --ast              # Print the syntax tree
        rcc add.c --run              # Run main in-process

    \b
    Supported language:
        - int only (64-bit)
        - + * and = operators
        - functions, parameters, calls and return

    With --run nothing is written unless -o is given.
    """
    setup_logging(verbose)

    options = CompilerOptions(
        module_name=input_file.stem,
        verify=not no_verify,
        trace=verbose,
    )

    try:
        if verbose:
            click.echo(f"Compiling {input_file}...")

        source = input_file.read_text(encoding="utf-8")

        # Dump modes stop after the stage they show
        if tokens:
            click.echo(dump_tokens(tokenize(source, str(input_file))), nl=False)
            return

        if ast:
            click.echo(dump_ast(parse_source(source, str(input_file))))
            return

        compiler = RccCompiler(options)
        result = compiler.compile_source(source, str(input_file))

        if output is None and not run:
            output = input_file.with_suffix(".ll")

        if output is not None:
            result.module.write(output)
            if verbose:
                click.echo(f"Wrote {len(result.ir)} bytes to {output}")
                click.echo(f"Tokenized: {len(result.tokens)} tokens")
                click.echo(f"Parsed: {len(result.ast.functions)} functions")
            click.echo(f"Compiled {input_file} -> {output}")

        if run:
            value = get_runner(runner.lower()).run(result.module)
            click.echo(value)
            sys.exit(value & 0xFF)

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
