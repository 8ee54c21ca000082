# =============================================================================
# test_compiler.py - End-to-End Compiler Tests
# =============================================================================
# Tests for the compiler driver and for running compiled programs.
#
# Test coverage includes:
#   - RccCompiler stages and CompilerResult contents
#   - compile_c / compile_file / run_c helpers
#   - Programs executed in-process with the JIT runner
#   - First-error propagation from every stage
#   - Runner selection and the lli runner's failure modes
# =============================================================================

import logging

import pytest
from rcc import (
    CompilerOptions,
    JitRunner,
    LliRunner,
    RccCompiler,
    compile_c,
    compile_file,
    get_runner,
    run_c,
)
from rcc.codegen import emit
from rcc.errors import (
    ArityMismatchError,
    BackendFailureError,
    NumericOverflowError,
    UndeclaredIdentifierError,
    UnexpectedCharacterError,
    UnexpectedEndOfInputError,
    UnknownFunctionError,
)
from rcc.parser import parse_source


# =============================================================================
# Driver Tests
# =============================================================================

class TestCompiler:
    """Test the RccCompiler driver."""

    def test_compile_source_result(self):
        result = RccCompiler().compile_source("int main(){return 10;}", "ten.c")
        assert result.filename == "ten.c"
        assert len(result.tokens) == 9
        assert result.ast.function_names() == ["main"]
        assert result.module.function_names == ["main"]
        assert 'define i64 @"main"()' in result.ir

    def test_result_dumps(self):
        result = RccCompiler().compile_source("int main(){return 1;}")
        assert result.token_dump.splitlines()[0] == "type: int"
        assert result.ast_dump.splitlines()[:2] == ["program", "| function: main"]

    def test_options_module_name(self):
        options = CompilerOptions(module_name="prog")
        result = RccCompiler(options).compile_source("int main(){return 0;}")
        assert result.module.module.name == "prog"

    def test_options_empty_module_name(self):
        assert CompilerOptions(module_name="").module_name == "rcc"

    def test_verify_can_be_disabled(self):
        options = CompilerOptions(verify=False)
        result = RccCompiler(options).compile_source("int main(){return 0;}")
        assert result.module is not None

    def test_trace_logs_dumps(self, caplog):
        options = CompilerOptions(trace=True)
        with caplog.at_level(logging.DEBUG, logger="rcc"):
            RccCompiler(options).compile_source("int main(){return 5;}")
        assert "number: 5" in caplog.text
        assert "| function: main" in caplog.text

    def test_compile_c(self):
        ir_text = compile_c("int main(){return 10+20*3;}")
        assert 'define i64 @"main"()' in ir_text

    def test_compile_file(self, tmp_path):
        source = tmp_path / "prog.c"
        source.write_text("int main(){return 3;}", encoding="utf-8")
        output = tmp_path / "prog.ll"
        ir_text = compile_file(source, output)
        assert output.read_text(encoding="utf-8") == ir_text

    def test_compile_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RccCompiler().compile_file(tmp_path / "missing.c")


# =============================================================================
# Execution Tests
# =============================================================================

class TestRun:
    """Test compiled programs running with the JIT."""

    def test_return_constant(self):
        assert run_c("int main(){return 10;}") == 10

    def test_precedence(self):
        assert run_c("int main(){return 10+20*3;}") == 70

    def test_variables(self):
        assert run_c("int main(){int a; a=7; int b; b=5; return a+b;}") == 12

    def test_call_with_arguments(self):
        assert run_c(
            "int func(int a,int b){return a+b;} int main(){return func(3,4);}"
        ) == 7

    def test_forward_call(self):
        assert run_c(
            "int main(){return twice(21);} int twice(int x){return x*2;}"
        ) == 42

    def test_chained_assignment(self):
        assert run_c("int main(){int a; int b; a=b=6; return a*b;}") == 36

    def test_assignment_value(self):
        """An assignment yields the stored value."""
        assert run_c("int main(){int a; int b; b=a=4; return b+a;}") == 8

    def test_parameter_is_local_copy(self):
        assert run_c(
            "int f(int a){a=a+1; return a;} "
            "int main(){int x; x=1; return f(x)+x;}"
        ) == 3

    def test_nested_calls(self):
        assert run_c(
            "int sq(int a){return a*a;} "
            "int add(int a,int b){return a+b;} "
            "int main(){return add(sq(3),sq(4));}"
        ) == 25

    def test_large_result(self):
        """The JIT reports the full 64-bit value."""
        assert run_c("int main(){return 1000000*1000000;}") == 10**12

    def test_wrapping_literal(self):
        assert run_c("int main(){return 18446744073709551615;}") == -1

    def test_multiply_by_zero(self):
        assert run_c("int f(int a){return a*0+1;} int main(){return f(99);}") == 1

    def test_explicit_runner(self):
        assert run_c("int main(){return 2;}", runner=JitRunner()) == 2

    def test_missing_entry(self):
        module = emit(parse_source("int start(){return 1;}"))
        with pytest.raises(BackendFailureError):
            JitRunner().run(module)

    def test_other_entry(self):
        module = emit(parse_source("int start(){return 9;}"))
        assert JitRunner().run(module, entry="start") == 9

    def test_entry_with_parameters(self):
        """The entry function must take no parameters."""
        module = emit(parse_source("int main(int a){return a;}"))
        with pytest.raises(BackendFailureError) as exc_info:
            JitRunner().run(module)
        assert "takes 1 parameters" in str(exc_info.value)


# =============================================================================
# Error Propagation Tests
# =============================================================================

class TestErrors:
    """Test that the first error of any stage reaches the caller."""

    def test_undeclared(self):
        with pytest.raises(UndeclaredIdentifierError) as exc_info:
            run_c("int main(){return x;}")
        assert exc_info.value.identifier == "x"

    def test_unknown_function(self):
        with pytest.raises(UnknownFunctionError) as exc_info:
            run_c("int main(){return foo();}")
        assert exc_info.value.function_name == "foo"

    def test_arity(self):
        with pytest.raises(ArityMismatchError):
            compile_c("int f(int a){return a;} int main(){return f();}")

    def test_tokenize_error(self):
        with pytest.raises(UnexpectedCharacterError):
            compile_c("int main(){return 1-2;}")

    def test_overflow(self):
        with pytest.raises(NumericOverflowError):
            compile_c("int main(){return 99999999999999999999;}")

    def test_parse_error(self):
        with pytest.raises(UnexpectedEndOfInputError):
            compile_c("")

    def test_error_location_uses_filename(self):
        with pytest.raises(UndeclaredIdentifierError) as exc_info:
            RccCompiler().compile_source("int main(){\nreturn y;}", "prog.c")
        assert str(exc_info.value).startswith("prog.c:2:8: error:")


# =============================================================================
# Runner Selection Tests
# =============================================================================

class TestRunners:
    """Test runner lookup and the lli runner."""

    def test_get_runner(self):
        assert isinstance(get_runner("jit"), JitRunner)
        assert isinstance(get_runner("lli"), LliRunner)

    def test_get_unknown_runner(self):
        with pytest.raises(ValueError):
            get_runner("interpreter")

    def test_lli_missing_tool(self):
        module = emit(parse_source("int main(){return 1;}"))
        runner = LliRunner(lli="rcc-no-such-lli-binary")
        with pytest.raises(BackendFailureError) as exc_info:
            runner.run(module)
        assert "not found" in str(exc_info.value)

    def test_lli_missing_entry(self):
        module = emit(parse_source("int start(){return 1;}"))
        with pytest.raises(BackendFailureError):
            LliRunner().run(module)
