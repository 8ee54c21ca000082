"""
rcc Module Runners
==================

Runners execute an emitted module's entry function and report its
result. The compiler core never runs anything itself; callers pick a
runner and hand it the module.

Runners
-------
| Name | Class     | Mechanism                               | Result        |
|------|-----------|-----------------------------------------|---------------|
| jit  | JitRunner | in-process MCJIT via llvmlite.binding   | full i64      |
| lli  | LliRunner | external 'lli' interpreter/JIT process  | exit status   |

The lli runner can only report what the process exit status carries,
which is the low 8 bits of main's return value.
"""

import ctypes
import logging
import subprocess
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

import llvmlite.binding as llvm

from rcc.codegen import EmittedModule
from rcc.errors import BackendFailureError

logger = logging.getLogger(__name__)


class ModuleRunner(ABC):
    """Executes the entry function of an EmittedModule."""

    name = "runner"

    @abstractmethod
    def run(self, module: EmittedModule, entry: str = "main") -> int:
        """
        Run the entry function, which must take no arguments.

        Returns:
            The function's result as seen by this runner

        Raises:
            BackendFailureError: If the module cannot be executed
        """


class JitRunner(ModuleRunner):
    """
    Runs modules in-process with LLVM's MCJIT.

    The entry function is called through ctypes and its full 64-bit
    signed result is returned.
    """

    name = "jit"

    _initialized = False

    @classmethod
    def _initialize_llvm(cls) -> None:
        if not cls._initialized:
            llvm.initialize_native_target()
            llvm.initialize_native_asmprinter()
            cls._initialized = True

    def run(self, module: EmittedModule, entry: str = "main") -> int:
        if entry not in module.function_names:
            raise BackendFailureError(f"entry function '{entry}' not found")

        # The entry is called with no arguments
        arity = len(module.module.get_global(entry).args)
        if arity != 0:
            raise BackendFailureError(
                f"entry function '{entry}' takes {arity} parameters, expected 0"
            )

        self._initialize_llvm()

        try:
            target = llvm.Target.from_default_triple()
            target_machine = target.create_target_machine()

            parsed = llvm.parse_assembly(module.ir_text)
            parsed.triple = target_machine.triple
            parsed.verify()

            engine = llvm.create_mcjit_compiler(parsed, target_machine)
            engine.finalize_object()
            engine.run_static_constructors()
        except RuntimeError as e:
            raise BackendFailureError(f"JIT compilation failed: {e}") from e

        address = engine.get_function_address(entry)
        if not address:
            raise BackendFailureError(f"entry function '{entry}' has no address")

        function = ctypes.CFUNCTYPE(ctypes.c_int64)(address)
        logger.debug(f"JIT calling '{entry}' at 0x{address:X}")
        result = function()
        logger.debug(f"'{entry}' returned {result}")
        return result


class LliRunner(ModuleRunner):
    """
    Runs modules with the external 'lli' tool.

    The IR is written to a temporary .ll file and lli is started on it.
    The process exit status is returned.

    Attributes:
        lli: Name or path of the lli executable
    """

    name = "lli"

    def __init__(self, lli: str = "lli"):
        self.lli = lli

    def run(self, module: EmittedModule, entry: str = "main") -> int:
        if entry not in module.function_names:
            raise BackendFailureError(f"entry function '{entry}' not found")

        with tempfile.TemporaryDirectory(prefix="rcc-") as tmpdir:
            ir_path = module.write(Path(tmpdir) / "module.ll")
            command = [self.lli, f"--entry-function={entry}", str(ir_path)]
            logger.debug(f"running: {' '.join(command)}")

            try:
                completed = subprocess.run(
                    command,
                    capture_output=True,
                    text=True,
                )
            except FileNotFoundError as e:
                raise BackendFailureError(
                    f"'{self.lli}' not found; install LLVM or use the JIT runner"
                ) from e

        if completed.returncode < 0:
            raise BackendFailureError(
                f"lli terminated by signal {-completed.returncode}: "
                f"{completed.stderr.strip()}"
            )

        logger.debug(f"lli exited with status {completed.returncode}")
        return completed.returncode


RUNNERS = {
    JitRunner.name: JitRunner,
    LliRunner.name: LliRunner,
}


def get_runner(name: str = "jit") -> ModuleRunner:
    """
    Create a runner by name ('jit' or 'lli').

    Raises:
        ValueError: If the name is unknown
    """
    try:
        return RUNNERS[name]()
    except KeyError:
        raise ValueError(
            f"unknown runner '{name}'; choose from {', '.join(RUNNERS)}"
        ) from None
