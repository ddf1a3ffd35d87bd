import io

import pytest

from nea.ast import Program, ExprStmt, Block, Literal
from nea.errors import NeaRuntimeError, ParseError
from nea.interpreter import parse_program, Interpreter, run_program
from nea.std.io import BasicIO
from nea.types import NIL, ArrayVal


def run(source):
    interp = Interpreter()
    interp.run(parse_program(source))
    return interp


def output(capsys, source):
    run(source)
    return capsys.readouterr().out.splitlines()


def runtime_error(source):
    with pytest.raises(NeaRuntimeError) as exc:
        run(source)
    return exc.value


def test_arithmetic_precedence(capsys):
    assert output(capsys, "print 2 + 3 * 4\nprint (2 + 3) * 4\nprint 10 - 4 - 3") == ['14', '20', '3']


def test_numbers_print_without_trailing_zero(capsys):
    assert output(capsys, "print 7 / 2\nprint 6 / 2\nprint -0.5 * 2") == ['3.5', '3', '-1']


def test_modulo_truncates_toward_zero(capsys):
    assert output(capsys, "print 7 % 3\nprint -7 % 3\nprint 5.5 % 2") == ['1', '-1', '1.5']


def test_string_concatenation_converts_other_side(capsys):
    lines = output(capsys, 'print "n=" + 3\nprint 1.5 + "x"\nprint "a" + true + nil\nprint "ab" + "cd"')
    assert lines == ['n=3', '1.5x', 'atruenil', 'abcd']


def test_comparisons(capsys):
    lines = output(capsys, 'print 1 < 2\nprint 2 <= 2\nprint "b" > "a"\nprint 3 >= 4')
    assert lines == ['true', 'true', 'true', 'false']


def test_equality_across_kinds(capsys):
    lines = output(capsys, 'print 1 == 1\nprint 1 == "1"\nprint nil == null\nprint true != 1\n'
                           'print [1, [2]] == [1, [2]]\nprint {"a": 1} == {"a": 2}')
    assert lines == ['true', 'false', 'true', 'true', 'true', 'false']


def test_truthiness_only_nil_and_false_are_falsy(capsys):
    source = '''
    if (0) print "zero"
    if ("") print "empty"
    if ([]) print "array"
    if (nil) print "nil" else print "not nil"
    if (false) print "false" else print "not false"
    print !nil
    print !0
    '''
    assert output(capsys, source) == ['zero', 'empty', 'array', 'not nil', 'not false', 'true', 'false']


def test_logical_operators_short_circuit(capsys):
    source = '''
    var calls = 0
    func touch() { calls = calls + 1; return true }
    print false && touch()
    print true || touch()
    print nil or touch()
    print 1 and "x"
    print calls
    '''
    assert output(capsys, source) == ['false', 'true', 'true', 'true', '1']


def test_block_scoping_and_shadowing(capsys):
    source = '''
    var a = "global"
    {
        var a = "inner"
        print a
        a = "changed"
    }
    print a
    {
        a = "assigned"
    }
    print a
    '''
    assert output(capsys, source) == ['inner', 'global', 'assigned']


def test_block_variables_do_not_leak():
    err = runtime_error("{ var hidden = 1 }\nprint hidden")
    assert err.message == "undefined variable 'hidden'"
    assert err.line == 2


def test_assignment_to_undeclared_variable():
    err = runtime_error("x = 1")
    assert err.message == "undefined variable 'x'"


def test_assignment_is_an_expression(capsys):
    assert output(capsys, "var a\nvar b\na = b = 3\nprint a + b\nprint (a = 5)") == ['6', '5']


def test_uninitialized_variable_is_nil(capsys):
    assert output(capsys, "var a\nprint a") == ['nil']


def test_recursion(capsys):
    source = '''
    func fib(n) {
        if (n < 2) return n
        return fib(n - 1) + fib(n - 2)
    }
    print fib(15)
    '''
    assert output(capsys, source) == ['610']


def test_closures_capture_their_defining_scope(capsys):
    source = '''
    var x = "global"
    func outer() {
        var x = "outer"
        func show() { print x }
        return show
    }
    var f = outer()
    f()
    func show_global() { print x }
    func caller() { var x = "caller"; show_global() }
    caller()
    '''
    assert output(capsys, source) == ['outer', 'global']


def test_function_without_return_gives_nil(capsys):
    assert output(capsys, "func f() { var a = 1 }\nprint f()\nfunc g() { return }\nprint g()") == ['nil', 'nil']


def test_return_exits_nested_loops(capsys):
    source = '''
    func find(xs, target) {
        var i = 0
        while (true) {
            while (true) {
                if (xs[i] == target) return i
                break
            }
            i = i + 1
        }
    }
    print find([5, 6, 7], 7)
    '''
    assert output(capsys, source) == ['2']


def test_functions_are_values(capsys):
    source = '''
    func twice(f, x) { return f(f(x)) }
    func inc(n) { return n + 1 }
    print twice(inc, 1)
    print inc
    print len
    print type(inc) + " " + type(len)
    '''
    assert output(capsys, source) == ['3', '<func inc>', '<builtin len>', 'Function NativeFunction']


def test_arrays_are_shared_by_reference(capsys):
    source = '''
    var a = [1, 2]
    var b = a
    b[0] = 10
    func push(xs) { append(xs, 3) }
    push(a)
    print a
    print b
    print a == b
    '''
    assert output(capsys, source) == ['[10, 2, 3]', '[10, 2, 3]', 'true']


def test_dictionaries(capsys):
    source = '''
    var d = {"a": 1, 2: "two", true: "yes"}
    d["b"] = [1]
    d.c = d.a + 1
    print d["a"] + d.c
    print d[2] + " " + d[true]
    print len(d)
    print "b" in d
    print 1 in d
    print d
    '''
    assert output(capsys, source) == [
        '3', 'two yes', '5', 'true', 'false', '{a: 1, 2: two, true: yes, b: [1], c: 2}']


def test_in_operator_on_arrays_and_strings(capsys):
    assert output(capsys, 'print 2 in [1, 2]\nprint "3" in [3]\nprint "ell" in "hello"') == [
        'true', 'false', 'true']


def test_string_indexing(capsys):
    assert output(capsys, 'var s = "abc"\nprint s[1]\nprint len(s)') == ['b', '3']


def test_missing_key_is_an_error():
    err = runtime_error('var d = {"a": 1}\nprint d["b"]')
    assert err.message == 'key not found: b'
    assert err.line == 2


def test_array_index_errors():
    assert runtime_error("var a = [1]\nprint a[1]").message == 'index out of range (1 for length 1)'
    assert runtime_error("var a = [1]\nprint a[-1]").message == 'index out of range (-1 for length 1)'
    assert runtime_error("var a = [1]\nprint a[0.5]").message == 'array index must be an integer, got 0.5'
    assert runtime_error('var a = [1]\nprint a["0"]').message == 'array index must be a Number, got String'


def test_unhashable_dictionary_key():
    err = runtime_error("var d = {}\nd[[1]] = 2")
    assert err.message == 'unhashable key of type Array'


def test_division_and_modulo_by_zero():
    err = runtime_error("var x = 1\nprint x / 0")
    assert err.message == 'division by zero'
    assert err.line == 2
    assert runtime_error("print 1 % 0").message == 'modulo by zero'


def test_type_errors_in_operators():
    assert runtime_error('print 1 - "a"').message == "operands of '-' must be numbers, got Number and String"
    assert runtime_error('print true + 1').message.startswith("operands of '+'")
    assert runtime_error('print -"a"').message == "operand of '-' must be a Number, got String"
    assert runtime_error('print 1 < "a"').message == "cannot compare Number and String with '<'"


def test_call_errors():
    assert runtime_error("var x = 1\nx()").message == 'can only call functions, got Number'
    err = runtime_error("func f(a, b) { }\nf(1)")
    assert err.message == 'f expects 2 arguments, got 1'
    assert err.line == 2
    assert runtime_error("len()").message == 'len expects 1 arguments, got 0'


def test_builtin_errors_report_the_call_line():
    err = runtime_error("var a = []\n\npop(a)")
    assert err.message == 'pop from empty array'
    assert err.line == 3


def test_runtime_error_inside_function_reports_its_own_line():
    err = runtime_error("func f() {\n  return nope\n}\nf()")
    assert err.line == 2


def test_deep_recursion_is_a_stack_overflow():
    err = runtime_error("func down(n) { return down(n + 1) }\ndown(0)")
    assert err.message == 'stack overflow'
    assert str(err).endswith('RuntimeError: stack overflow')


def test_output_before_an_error_is_kept(capsys):
    with pytest.raises(NeaRuntimeError):
        run('print "before"\nprint missing\nprint "after"')
    assert capsys.readouterr().out == 'before\n'


def test_print_goes_to_the_configured_stream():
    out = io.StringIO()
    interp = Interpreter(io=BasicIO(stdout=out))
    interp.run(parse_program('print "hi"'))
    assert out.getvalue() == 'hi\n'


def test_run_source_keeps_globals_between_units():
    interp = Interpreter()
    assert interp.run_source("var a = 1").ok
    assert interp.run_source("a = a + 1").ok
    outcome = interp.run_source("a * 10", echo=True)
    assert outcome.ok
    assert outcome.value == 20.0


def test_run_source_reports_errors_instead_of_raising():
    interp = Interpreter()
    outcome = interp.run_source("var a = (")
    assert not outcome.ok
    assert isinstance(outcome.error, ParseError)
    outcome = interp.run_source("print b")
    assert isinstance(outcome.error, NeaRuntimeError)
    assert str(outcome.error) == "[line 1] RuntimeError: undefined variable 'b'"


def test_run_source_echo_skips_assignments_and_statements():
    interp = Interpreter()
    interp.run_source("var a = 1")
    assert interp.run_source("a = 2", echo=True).value is None
    assert interp.run_source("[a]", echo=True).value.items == [2.0]
    assert interp.run_source("nil", echo=True).value is NIL


def test_run_program_returns_the_interpreter(capsys):
    interp = run_program("var xs = [1, 2]\nprint len(xs)")
    assert capsys.readouterr().out == '2\n'
    xs = interp.global_env.get('xs')
    assert isinstance(xs, ArrayVal)
    assert xs.items == [1.0, 2.0]


def test_globals_can_shadow_builtins(capsys):
    assert output(capsys, 'func len(x) { return "mine" }\nprint len([])') == ['mine']


def test_debug_output_goes_to_debug_file(tmp_path):
    debug_file = tmp_path / 'debug.txt'
    interp = Interpreter(debug_level=2, debug_file=str(debug_file))
    try:
        interp.run_source("var a = 1\nfunc f() { }\nf()")
    finally:
        interp.close()
    text = debug_file.read_text(encoding='utf-8')
    assert 'declare a: Number = 1' in text
    assert 'define function f()' in text
    assert 'call f()' in text


def test_short_circuit_never_raises_from_skipped_operand(capsys):
    source = '''
    func boom() { return 1 / 0 }
    print false && boom()
    print true || boom()
    '''
    assert output(capsys, source) == ['false', 'true']


def test_failed_assignment_binds_nothing():
    interp = Interpreter()
    outcome = interp.run_source("y = 5")
    assert outcome.error.message == "undefined variable 'y'"
    assert 'y' not in interp.global_env.values
    assert interp.run_source("print y").error.message == "undefined variable 'y'"


def test_out_of_range_access_leaves_array_intact(capsys):
    interp = Interpreter()
    interp.run_source("var a = [1, 2]")
    assert not interp.run_source("a[5]").ok
    assert not interp.run_source("a[5] = 3").ok
    interp.run_source("print a")
    assert capsys.readouterr().out == '[1, 2]\n'


def test_remainder_of_infinity_is_nan(capsys):
    source = '''
    var x = 1
    var i = 0
    while (i < 400) { x = x * 10; i = i + 1 }
    print x
    print x % 3
    print -x % 3
    print 7 % x
    '''
    assert output(capsys, source) == ['inf', 'nan', 'nan', '7']


def test_remainder_of_infinity_through_run_source(capsys):
    interp = Interpreter()
    outcome = interp.run_source('var big = 1\nwhile (big < big * 10) big = big * 10\nprint big % 2')
    assert outcome.ok
    assert capsys.readouterr().out == 'nan\n'


def test_deeply_nested_source_is_a_parse_error():
    interp = Interpreter()
    outcome = interp.run_source('print ' + '(' * 3000 + '1' + ')' * 3000)
    assert isinstance(outcome.error, ParseError)
    assert outcome.error.message == 'expression nested too deeply'
    # the session keeps working afterwards
    assert interp.run_source('1 + 1', echo=True).value == 2.0


def test_unknown_statement_node_is_a_runtime_error():
    with pytest.raises(NeaRuntimeError) as exc:
        Interpreter().run(Program([Literal(1.0, line=3)]))
    assert exc.value.message == 'unexpected node Literal'
    assert exc.value.line == 3


def test_unknown_expression_node_is_a_runtime_error():
    with pytest.raises(NeaRuntimeError) as exc:
        Interpreter().run(Program([ExprStmt(Block([], line=2), line=2)]))
    assert exc.value.message == 'unexpected node Block'
    assert exc.value.line == 2
