# =============================================================================
# test_codegen.py - Code Generator Unit Tests
# =============================================================================
# Tests for lowering the AST to LLVM IR with llvmlite.
#
# Test coverage includes:
#   - Function signatures and forward references
#   - Stack slots for parameters and declarations
#   - add/mul chains, loads, stores, calls and returns
#   - Semantic errors (undeclared names, unknown functions, arity,
#     invalid assignment targets, duplicate functions)
#   - EmittedModule helpers (text, names, write, verify)
# =============================================================================

import pytest
from llvmlite import ir

from rcc.ast import (
    AssignmentExpression,
    ExpressionStatement,
    FunctionNode,
    NumberLiteral,
    ProgramNode,
    ReturnStatement,
)
from rcc.codegen import CodeGenerator, EmittedModule, Environment, emit
from rcc.errors import (
    ArityMismatchError,
    BackendFailureError,
    CompileError,
    DuplicateFunctionError,
    InvalidAssignmentTargetError,
    UndeclaredIdentifierError,
    UnknownFunctionError,
)
from rcc.parser import parse_source


# =============================================================================
# Helper Functions
# =============================================================================

def generate(source: str) -> EmittedModule:
    """Helper to parse and emit source, returning the module."""
    return emit(parse_source(source))


def function_ir(module: EmittedModule, name: str) -> str:
    """Helper returning the IR text of one function."""
    return str(module.module.get_global(name))


# =============================================================================
# Module Structure Tests
# =============================================================================

class TestModuleStructure:
    """Test functions and signatures in the emitted module."""

    def test_function_names(self):
        module = generate("int f(int a){return a;} int main(){return f(1);}")
        assert module.function_names == ["f", "main"]

    def test_signature(self):
        module = generate("int add(int a, int b){return a;}")
        function = module.module.get_global("add")
        assert function.ftype.return_type == ir.IntType(64)
        assert function.ftype.args == (ir.IntType(64), ir.IntType(64))

    def test_forward_reference(self):
        """A call may name a function defined later."""
        module = generate("int main(){return later(2);} int later(int x){return x;}")
        assert 'call i64 @"later"' in function_ir(module, "main")

    def test_module_name(self):
        module = CodeGenerator(module_name="demo").emit(
            parse_source("int main(){return 0;}")
        )
        assert module.module.name == "demo"

    def test_ir_text_and_str(self):
        module = generate("int main(){return 0;}")
        assert module.ir_text == str(module)
        assert 'define i64 @"main"()' in module.ir_text

    def test_generator_is_reusable(self):
        generator = CodeGenerator()
        first = generator.emit(parse_source("int a(){return 1;}"))
        second = generator.emit(parse_source("int b(){return 2;}"))
        assert first.function_names == ["a"]
        assert second.function_names == ["b"]


# =============================================================================
# Instruction Tests
# =============================================================================

class TestInstructions:
    """Test the instructions emitted for statements and expressions."""

    def test_parameters_get_slots(self):
        text = function_ir(generate("int f(int a, int b){return b;}"), "f")
        assert text.count("alloca i64") == 2
        assert text.count("store i64") == 2
        assert "load i64" in text

    def test_declaration_gets_slot(self):
        text = function_ir(generate("int main(){int x; x=3; return x;}"), "main")
        assert text.count("alloca i64") == 1
        assert "store i64 3" in text

    def test_add_chain(self):
        text = function_ir(generate("int f(int a, int b){return a+b;}"), "f")
        assert text.count("add i64") == 2
        assert "add i64 0," in text

    def test_mul_chain(self):
        text = function_ir(generate("int f(int a, int b){return a*b*a;}"), "f")
        assert text.count("mul i64") == 3
        assert "mul i64 1," in text

    def test_call_arguments(self):
        module = generate("int g(int a, int b){return a;} int main(){return g(4, 5);}")
        assert 'call i64 @"g"(i64 4, i64 5)' in function_ir(module, "main")

    def test_return(self):
        text = function_ir(generate("int main(){return 7;}"), "main")
        assert "ret i64 7" in text

    def test_chained_assignment_stores_each_target(self):
        text = function_ir(
            generate("int main(){int a; int b; a=b=5; return a;}"), "main"
        )
        assert text.count("store i64 5") == 2

    def test_expression_statement_is_evaluated(self):
        module = generate("int f(){return 1;} int main(){f(); return 0;}")
        assert 'call i64 @"f"()' in function_ir(module, "main")

    def test_large_literal_wraps(self):
        """Literals above the signed range keep their bit pattern."""
        text = function_ir(generate("int main(){return 18446744073709551615;}"), "main")
        assert "ret i64 -1" in text

    def test_redeclaration_shadows(self):
        module = generate("int main(){int a; a=1; int a; a=2; return a;}")
        assert function_ir(module, "main").count("alloca i64") == 2


# =============================================================================
# Environment Tests
# =============================================================================

class TestEnvironment:
    """Test the per-function variable table."""

    def test_bind_and_lookup(self):
        env = Environment()
        slot = object()
        env.bind("a", slot)
        assert env.lookup("a") is slot
        assert "a" in env
        assert len(env) == 1

    def test_missing(self):
        assert Environment().lookup("nope") is None

    def test_later_binding_wins(self):
        env = Environment()
        first, second = object(), object()
        env.bind("a", first)
        env.bind("a", second)
        assert env.lookup("a") is second


# =============================================================================
# Error Tests
# =============================================================================

class TestErrors:
    """Test semantic errors raised during generation."""

    def test_undeclared_identifier(self):
        with pytest.raises(UndeclaredIdentifierError) as exc_info:
            generate("int main(){return x;}")
        assert exc_info.value.identifier == "x"

    def test_undeclared_assignment_target(self):
        with pytest.raises(UndeclaredIdentifierError):
            generate("int main(){y=1; return 0;}")

    def test_variables_are_per_function(self):
        with pytest.raises(UndeclaredIdentifierError):
            generate("int f(int a){return a;} int main(){return a;}")

    def test_unknown_function(self):
        with pytest.raises(UnknownFunctionError) as exc_info:
            generate("int main(){return foo();}")
        assert exc_info.value.function_name == "foo"

    def test_arity_mismatch(self):
        with pytest.raises(ArityMismatchError) as exc_info:
            generate("int f(int a, int b){return a;} int main(){return f(1);}")
        error = exc_info.value
        assert (error.function_name, error.expected, error.actual) == ("f", 2, 1)
        assert "'f' expects 2 arguments, got 1" in str(error)

    def test_invalid_assignment_target(self):
        with pytest.raises(InvalidAssignmentTargetError):
            generate("int main(){int a; 1=a; return 0;}")

    def test_call_is_not_assignable(self):
        with pytest.raises(InvalidAssignmentTargetError):
            generate("int f(){return 1;} int main(){f()=2; return 0;}")

    def test_handbuilt_invalid_target(self):
        program = ProgramNode(functions=[
            FunctionNode(
                name="main",
                statements=[ExpressionStatement(expression=AssignmentExpression(
                    operands=[NumberLiteral(value=1), NumberLiteral(value=2)],
                ))],
                return_statement=ReturnStatement(expression=NumberLiteral(value=0)),
            )
        ])
        with pytest.raises(InvalidAssignmentTargetError):
            emit(program)

    def test_duplicate_function(self):
        with pytest.raises(DuplicateFunctionError) as exc_info:
            generate("int f(){return 1;}\nint f(){return 2;}")
        assert exc_info.value.function_name == "f"
        assert "first defined at <input>:1:1" in str(exc_info.value)

    def test_error_has_source_line(self):
        source = "int main(){\n  return zz;\n}"
        program = parse_source(source)
        with pytest.raises(CompileError) as exc_info:
            emit(program, source_lines=source.split("\n"))
        message = str(exc_info.value)
        assert message.startswith("<input>:2:10: error: undeclared identifier 'zz'")
        assert "      return zz;" in message


# =============================================================================
# Emitted Module Tests
# =============================================================================

class TestEmittedModule:
    """Test writing and verifying modules."""

    def test_write(self, tmp_path):
        module = generate("int main(){return 0;}")
        path = module.write(tmp_path / "out.ll")
        assert path.read_text(encoding="utf-8") == module.ir_text

    def test_verify_accepts_generated_module(self):
        generate(
            "int f(int a, int b){int c; c=a*b; return c+a;} "
            "int main(){int x; x=f(2,3); return x;}"
        ).verify()

    def test_verify_rejects_broken_module(self):
        module = ir.Module(name="broken")
        function = ir.Function(module, ir.FunctionType(ir.IntType(64), []), name="main")
        function.append_basic_block(name="entry")
        with pytest.raises(BackendFailureError):
            EmittedModule(module).verify()
