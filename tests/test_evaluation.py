import io
from fractions import Fraction

import pytest
from hypothesis import given, strategies as st

from kestrel.errors import (
    KestrelArithmeticOverflow, KestrelDivisionByZero, KestrelOverflowError, KestrelSyntaxError,
)
from kestrel.interpreter import Interpreter, evaluate, new_session_state
from kestrel.types import Function, Null


# -----------------------------------------------------
# Programs from the language reference
# -----------------------------------------------------

def test_parameter_shadows_global(value_of):
    src = "let x = 10; let f = fn (x) { let x = 2*x+1; x }; let y = f(x); y + x;"
    assert value_of(src) == 31


def test_early_return(value_of):
    src = "let abs = fn (x) { if (x > 0) { return x; } return -x; }; abs(1) + abs(-1);"
    assert value_of(src) == 2


def test_recursive_fibonacci(value_of):
    src = "let fib = fn (x) { if (x < 2) { return x; } else { fib(x-1) + fib(x-2); } }; fib(10);"
    assert value_of(src) == 55


def test_string_concatenation_uses_printed_form(value_of):
    assert value_of('" hello " + "world " + 1') == " hello world 1"


def test_map_from_standard_library(value_of):
    assert value_of("map([1,2,3,4], fn(x) x*2+1)") == [3, 5, 7, 9]


def test_hash_keys_compare_by_printed_form(value_of):
    src = 'let h = {"a":1, true:2}; [h[true], h["true"], h[true] == h["true"], h["a"]]'
    assert value_of(src) == [2, 2, True, 1]


def test_same_program_same_result_in_fresh_sessions(run):
    src = 'let xs = map([1, 2, 3], fn(x) x * x); println("squares: ", xs); len(xs)'
    assert run(src) == run(src) == (3, "squares: \n[1, 4, 9]\n")


def test_division_by_zero_is_fatal_while_type_errors_are_null(value_of):
    with pytest.raises(KestrelDivisionByZero):
        value_of("5 / 0")
    with pytest.raises(ZeroDivisionError):
        value_of("let f = fn(d) { 10 / d }; f(0)")
    assert value_of("5 + true") is Null


# -----------------------------------------------------
# Literals, operators and null propagation
# -----------------------------------------------------

@pytest.mark.parametrize(
    "source,expected",
    [
        ("1", 1),
        ("true", True),
        ("false", False),
        ('"text"', "text"),
        ("1 + 2 * 3 / 4 - 5 == 0", False),
        ("((1 + ((2 * 3) / 4)) - 5)", -3),
        ("-1-2-3", -6),
        ("-7 / 2", -3),
        ("7 / -2", -3),
        ("-7 / -2", 3),
        ("10 - 2 * 3", 4),
        ("1 < 2", True),
        ("1 > 2", False),
        ("3 == 3", True),
        ("3 != 3", False),
        ("!true", False),
        ("!!false", False),
        ("--5", 5),
        ("1 + \"a\"", "1a"),
        ('"x" + true', "xtrue"),
        ('"n=" + [1, 2]', "n=[1, 2]"),
        ('"v: " + nothing', "v: null"),
    ]
)
def test_expression_values(value_of, source, expected):
    assert value_of(source) == expected


@pytest.mark.parametrize(
    "source",
    [
        "5 + true",
        "true + true",
        '"a" - "b"',
        '"a" * 2',
        "[1] + [2]",
        "true == true",
        '"a" == "a"',
        "1 < true",
        "-true",
        '-"a"',
        "!1",
        "!nothing",
        "undefined_name",
        "undefined_name + 1",
        "5(1)",
        '"f"(1)',
        "if (1) { 10 } else { 20 }",
        "if (nothing) { 10 }",
        "if (false) { 10 }",
        "if (true) { let z = 1; }",
        "[1, 2][5]",
        "[1, 2][-1]",
        '[1, 2]["0"]',
        '{"a": 1}["b"]',
        "5[0]",
        '"abc"[0]',
    ]
)
def test_semantic_errors_degrade_to_null(value_of, source):
    assert value_of(source) is Null


def test_arithmetic_wraps_to_32_bits(value_of):
    assert value_of("2147483647 + 1") == -2147483648
    assert value_of("-2147483647 - 2") == 2147483647
    assert value_of("65536 * 65536") == 0


def test_division_overflow_is_fatal(value_of):
    with pytest.raises(KestrelArithmeticOverflow):
        value_of("(-2147483647 - 1) / -1")
    with pytest.raises(OverflowError):
        value_of("let min = -2147483647 - 1; let f = fn(d) { min / d }; f(-1)")
    assert value_of("(-2147483647 - 1) / 1") == -2147483648
    assert value_of("(-2147483647 - 1) / -2") == 1073741824


def test_runaway_recursion_is_fatal_and_leaves_the_session_usable(shallow_recursion):
    state = new_session_state()
    evaluate(state, "let n = 1;")
    with pytest.raises(RecursionError):
        evaluate(state, "let f = fn() { f() }; f()")
    assert evaluate(state, "n + 1") == 2
    assert isinstance(evaluate(state, "f"), Function)


def test_integer_literal_overflow_is_fatal(value_of):
    with pytest.raises(KestrelOverflowError):
        value_of("let big = 2147483648;")


def test_syntax_error_aborts_whole_program():
    out = io.StringIO()
    with pytest.raises(KestrelSyntaxError):
        evaluate(new_session_state(), 'println("never printed"); let = 1', out)
    assert out.getvalue() == ""


def test_array_elements_evaluate_in_place(value_of):
    assert value_of("[1, 2 * 2, 3 + 3]") == [4 - 3, 4, 6]
    assert value_of("[1, missing, 3]") == [1, Null, 3]


def test_hash_literal_keys_collapse_by_printed_form(value_of):
    assert value_of('{1: "a", "1": "b"}') == {"1": "b"}
    assert value_of('let k = [1, 2]; let h = {k: "list"}; h["[1, 2]"]') == "list"


def test_indexing(value_of):
    assert value_of("[1, 2, 3][0]") == 1
    assert value_of("[1, 2, 3][1 + 1]") == 3
    assert value_of("let i = 0; [[5, 6]][i][1]") == 6
    assert value_of('{"k": {"inner": 9}}["k"]["inner"]') == 9


# -----------------------------------------------------
# Statements, blocks and early return
# -----------------------------------------------------

def test_let_produces_no_value(session):
    assert evaluate(session, "let a = 1") is None
    assert evaluate(session, "") is None
    assert evaluate(session, "a") == 1


def test_let_replaces_previous_binding(value_of):
    assert value_of("let a = 1; let a = a + 1; a") == 2


def test_block_value_is_its_last_statement(value_of):
    assert value_of("{ 1; 2; 3 }") == 3
    assert value_of("{ let q = 4; }") is None


def test_top_level_return_stops_the_program(value_of):
    assert value_of("return 5; 10") == 5


def test_return_escapes_nested_blocks(value_of):
    assert value_of("let f = fn() { { { return 1; } 2 } 3 }; f()") == 1


def test_let_never_propagates_a_pending_return(value_of):
    src = "let f = fn() { let v = if (true) { return 3; }; v + 1 }; f()"
    assert value_of(src) == 4


def test_call_always_yields_plain_value(value_of):
    assert value_of("let f = fn() { return 7; }; [f(), f() + 1]") == [7, 8]


def test_function_without_value_yields_null(value_of):
    assert value_of("let f = fn() { let a = 1; }; f()") is Null


def test_conditional_branches_run_in_current_state(value_of):
    assert value_of("if (true) { let z = 3 }; z") == 3


# -----------------------------------------------------
# Call model: frames copy the caller's state
# -----------------------------------------------------

def test_function_value(value_of):
    fn = value_of("fn(a, b) { a + b }")
    assert isinstance(fn, Function)
    assert fn.parameters == ("a", "b")
    assert str(fn) == "fn(a, b)"


def test_functions_see_the_callers_bindings(value_of):
    src = "let f = fn() { secret }; let h = fn() { let secret = 42; f() }; h()"
    assert value_of(src) == 42


def test_functions_capture_nothing_at_definition(value_of):
    src = "let make = fn(n) { fn() { n } }; let g = make(5); g()"
    assert value_of(src) is Null
    assert value_of(src.replace("g()", "let n = 7; g()")) == 7


def test_calls_do_not_modify_the_callers_state(value_of):
    assert value_of("let x = 1; let f = fn() { let x = 2; x }; f(); x") == 1


def test_missing_arguments_fall_back_to_callers_value(value_of):
    assert value_of("let x = 99; let f = fn(x, y) { x }; f()") == 99
    assert value_of("let f = fn(a, b) { b }; f(1)") is Null


def test_extra_arguments_are_ignored_unevaluated(value_of):
    assert value_of("let f = fn(a) { a }; f(1, 5 / 0)") == 1


def test_calling_a_non_function_skips_the_arguments(value_of):
    assert value_of("let x = 5; x(5 / 0)") is Null


def test_recursion_through_the_callers_binding(value_of):
    src = """
    let count = fn(n, acc) {
        if (n == 0) { return acc; }
        count(n - 1, acc + n)
    };
    count(100, 0)
    """
    assert value_of(src) == 5050


def test_higher_order_functions(value_of):
    src = """
    let twice = fn(f, x) { f(f(x)) };
    let inc = fn(x) { x + 1 };
    twice(inc, 5)
    """
    assert value_of(src) == 7


# -----------------------------------------------------
# Sessions
# -----------------------------------------------------

def test_interpreter_keeps_bindings_between_calls(capsys):
    itp = Interpreter()
    assert itp.eval("let greeting = \"hi\"") is None
    assert itp.eval("greeting + \"!\"") == "hi!"
    itp.eval("println(greeting)")
    assert capsys.readouterr().out == "hi\n"


def test_interpreter_with_custom_prelude():
    itp = Interpreter(prelude="let double = fn(x) { x * 2 };")
    assert itp.eval("double(21)") == 42
    # A custom prelude replaces the standard library
    assert itp.eval("first") is Null
    assert itp.eval("len([1])") == 1


def test_session_pre_seeding(run):
    state = new_session_state(bindings={"get": {"name": "Ada"}, "limit": 3})
    assert run('get["name"] + " " + limit', state)[0] == "Ada 3"


# -----------------------------------------------------
# Properties
# -----------------------------------------------------

def _wrap(n):
    return (n + 2**31) % 2**32 - 2**31


i32 = st.integers(min_value=-(2**31) + 1, max_value=2**31 - 1)
ARITH_STATE = new_session_state(prelude=False)


@given(i32, i32, st.sampled_from(["+", "-", "*"]))
def test_integer_arithmetic_matches_i32(a, b, op):
    expected = {"+": a + b, "-": a - b, "*": a * b}[op]
    assert evaluate(ARITH_STATE, f"({a}) {op} ({b})") == _wrap(expected)


@given(i32, i32.filter(lambda n: n != 0))
def test_division_truncates_toward_zero(a, b):
    assert evaluate(ARITH_STATE, f"({a}) / ({b})") == int(Fraction(a, b))


@given(i32, i32)
def test_comparisons_match_python(a, b):
    assert evaluate(ARITH_STATE, f"[{a} < {b}, {a} > {b}, {a} == {b}, {a} != {b}]") == [
        a < b, a > b, a == b, a != b,
    ]
