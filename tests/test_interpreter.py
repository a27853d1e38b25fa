import math

import pytest

from lox.environment import Environment
from lox.errors import LoxRuntimeError
from lox.interpreter import Interpreter, divide, run_program
from lox.parser import parse_program
from lox.tokens import Token, TokenType
from lox.types import is_equal, is_truthy, to_string


def run(source, capsys):
    result = run_program(source)
    return result, capsys.readouterr().out.splitlines()


def runtime_message(source):
    result = run_program(source)
    assert result.errors == []
    assert result.runtime_error is not None
    return str(result.runtime_error)


def test_arithmetic_and_formatting(capsys):
    _, out = run('print 1 + 2; print 10 / 4; print -3 * (2 + 1); print 7 - 10;', capsys)
    assert out == ['3', '2.5', '-9', '-3']


def test_string_concatenation(capsys):
    _, out = run('var s = "foo" + "bar"; print s;', capsys)
    assert out == ['foobar']


def test_comparison_and_equality(capsys):
    source = '''
    print 1 < 2; print 2 <= 2; print 3 > 4; print 3 >= 4;
    print 1 == 1; print "a" == "a"; print nil == nil;
    print nil == false; print 1 == "1"; print 0 == false; print 1 != 2;
    '''
    _, out = run(source, capsys)
    assert out == ['true', 'true', 'false', 'false',
                   'true', 'true', 'true',
                   'false', 'false', 'false', 'true']


def test_truthiness(capsys):
    source = '''
    if (0) print "zero"; else print "no";
    if ("") print "empty"; else print "no";
    if (nil) print "nil"; else print "falsy";
    if (false) print "false"; else print "falsy";
    print !nil; print !0;
    '''
    _, out = run(source, capsys)
    assert out == ['zero', 'empty', 'falsy', 'falsy', 'true', 'false']


def test_logical_operators_return_operands(capsys):
    _, out = run('print "hi" or 2; print nil or "yes"; print nil and 1; print 1 and 2;', capsys)
    assert out == ['hi', 'yes', 'nil', '2']


def test_logical_operators_short_circuit(capsys):
    source = '''
    fun loud(v) { print "called"; return v; }
    print true or loud(1);
    print false and loud(2);
    print false or loud(3);
    '''
    _, out = run(source, capsys)
    assert out == ['true', 'false', 'called', '3']


def test_division_by_zero_follows_ieee(capsys):
    _, out = run('print 1 / 0; print -1 / 0; print 0 / 0;', capsys)
    assert out == ['Infinity', '-Infinity', 'NaN']


def test_divide_helper():
    assert divide(6.0, 3.0) == 2.0
    assert divide(1.0, -0.0) == float('-inf')


def test_uninitialized_variable_is_nil(capsys):
    _, out = run('var a; print a;', capsys)
    assert out == ['nil']


def test_redeclaring_global_replaces_value(capsys):
    _, out = run('var a = 1; var a = "two"; print a;', capsys)
    assert out == ['two']


def test_block_scoping(capsys):
    source = 'var a = "outer"; { var a = "inner"; print a; } print a;'
    _, out = run(source, capsys)
    assert out == ['inner', 'outer']


def test_assignment_updates_enclosing_variable(capsys):
    _, out = run('var a = 1; { a = 2; } print a; print a = 3;', capsys)
    assert out == ['2', '3']


def test_while_and_for(capsys):
    source = '''
    var i = 0;
    while (i < 2) { print i; i = i + 1; }
    for (var j = 5; j < 7; j = j + 1) print j;
    '''
    _, out = run(source, capsys)
    assert out == ['0', '1', '5', '6']


def test_for_loop_variable_is_scoped_to_loop(capsys):
    result, out = run('for (var k = 0; k < 1; k = k + 1) {} print k;', capsys)
    assert out == []
    assert str(result.runtime_error) == "Undefined variable 'k'.\n[line 1]"


def test_functions_and_return(capsys):
    source = '''
    fun add(a, b) { return a + b; }
    fun nothing() {}
    fun bare() { return; }
    print add(1, 2);
    print nothing();
    print bare();
    '''
    _, out = run(source, capsys)
    assert out == ['3', 'nil', 'nil']


def test_return_unwinds_nested_loops(capsys):
    source = '''
    fun find() {
      while (true) {
        for (var i = 0; ; i = i + 1) {
          if (i == 3) return i;
        }
      }
    }
    print find();
    '''
    _, out = run(source, capsys)
    assert out == ['3']


def test_recursion(capsys):
    source = '''
    fun fact(n) { if (n <= 1) return 1; return n * fact(n - 1); }
    print fact(10);
    '''
    _, out = run(source, capsys)
    assert out == ['3628800']


def test_closures_have_independent_state(capsys):
    source = '''
    fun makeCounter() {
      var i = 0;
      fun count() { i = i + 1; return i; }
      return count;
    }
    var a = makeCounter();
    var b = makeCounter();
    print a(); print a(); print b();
    '''
    _, out = run(source, capsys)
    assert out == ['1', '2', '1']


def test_closure_binding_is_fixed_at_declaration(capsys):
    source = '''
    var a = "global";
    {
      fun showA() { print a; }
      showA();
      var a = "block";
      showA();
    }
    '''
    _, out = run(source, capsys)
    assert out == ['global', 'global']


def test_global_functions_may_refer_forward(capsys):
    source = '''
    fun isEven(n) { if (n == 0) return true; return isOdd(n - 1); }
    fun isOdd(n) { if (n == 0) return false; return isEven(n - 1); }
    print isEven(10);
    '''
    _, out = run(source, capsys)
    assert out == ['true']


def test_printing_callables(capsys):
    _, out = run('fun f() {} print f; print clock;', capsys)
    assert out == ['<fn f>', '<native fn>']


def test_clock_returns_number(capsys):
    _, out = run('var t = clock(); print t >= 0; print clock() - t >= 0;', capsys)
    assert out == ['true', 'true']


def test_operand_errors():
    assert runtime_message('-"a";') == 'Operand must be a number.\n[line 1]'
    assert runtime_message('"a" < 1;') == 'Operands must be numbers.\n[line 1]'
    assert runtime_message('1 + "a";') == 'Operands must be two numbers or two strings.\n[line 1]'
    assert runtime_message('nil * 2;') == 'Operands must be numbers.\n[line 1]'


def test_undefined_variable_errors():
    assert runtime_message('print x;') == "Undefined variable 'x'.\n[line 1]"
    assert runtime_message('\nx = 1;') == "Undefined variable 'x'.\n[line 2]"


def test_call_errors():
    assert runtime_message('"str"();') == 'Can only call functions and classes.\n[line 1]'
    assert runtime_message('fun f(a) {}\nf();') == 'Expected 1 arguments but got 0.\n[line 2]'
    assert runtime_message('clock(1);') == 'Expected 0 arguments but got 1.\n[line 1]'


def test_first_runtime_error_halts_program(capsys):
    result, out = run('print "before";\nprint 1 + nil;\nprint "after";', capsys)
    assert out == ['before']
    assert result.had_runtime_error
    assert result.runtime_error.token.line == 2


def test_unbounded_recursion_is_a_runtime_error(capsys):
    result, out = run('fun f() { f(); }\nf();', capsys)
    assert out == []
    assert result.runtime_error is not None
    assert result.runtime_error.message == 'Stack overflow.'


def test_compile_errors_prevent_execution(capsys):
    result, out = run('print "x";\nprint ;', capsys)
    assert out == []
    assert result.had_error
    assert not result.had_runtime_error

    result, out = run('print "x";\nreturn 1;', capsys)
    assert out == []
    assert [str(e) for e in result.errors] == ["[line 2] Error at 'return': Can't return from top-level code."]


def test_globals_persist_between_runs(capsys):
    interpreter = Interpreter()
    interpreter.run_source('var a = 1; fun inc() { a = a + 1; }')
    interpreter.run_source('inc(); inc();')
    failed = interpreter.run_source('print nope;')
    interpreter.run_source('print a;')
    assert failed.had_runtime_error
    assert capsys.readouterr().out.splitlines() == ['3']


def test_debug_trace_is_written(tmp_path, capsys):
    debug_file = tmp_path / 'debug.txt'
    interpreter = Interpreter(debug_level=3, debug_file=str(debug_file))
    try:
        interpreter.run_source('var x = 1; if (x) print x; fun f() {} f();')
    finally:
        interpreter.close()
    trace = debug_file.read_text(encoding='utf-8')
    assert 'interpret: 4 statement(s)' in trace
    assert 'declare x: number = 1' in trace
    assert 'if condition 1 -> True' in trace
    assert 'define function f/0' in trace
    assert 'call <fn f> with 0 argument(s)' in trace
    assert capsys.readouterr().out == '1\n'


def test_value_helpers():
    assert is_truthy(0.0) and is_truthy('') and not is_truthy(None) and not is_truthy(False)
    assert not is_equal(True, 1.0)
    assert is_equal(None, None)
    assert to_string(3.0) == '3'
    assert to_string(-0.5) == '-0.5'
    assert to_string(None) == 'nil'
    assert to_string(True) == 'true'


def name(lexeme):
    return Token(TokenType.IDENTIFIER, lexeme, None, 1)


def test_environment_chain():
    globals_ = Environment()
    globals_.define('a', 1.0)
    inner = Environment(parent=Environment(parent=globals_))
    assert inner.get(name('a')) == 1.0
    inner.assign(name('a'), 2.0)
    assert globals_.values['a'] == 2.0
    assert inner.ancestor(2) is globals_
    assert inner.get_at(2, name('a')) == 2.0
    inner.assign_at(2, name('a'), 3.0)
    assert globals_.get(name('a')) == 3.0


def test_environment_undefined_names():
    env = Environment()
    with pytest.raises(LoxRuntimeError) as excinfo:
        env.get(name('missing'))
    assert excinfo.value.message == "Undefined variable 'missing'."
    with pytest.raises(LoxRuntimeError):
        env.assign(name('missing'), 1.0)


def test_long_operator_chain_is_reported(capsys):
    source = 'print ' + ' + '.join(['1'] * 1500) + ';'
    result, out = run(source, capsys)
    assert out == []
    assert not result.had_runtime_error
    assert [e.message for e in result.errors] == ['Too much nesting.']
    assert result.errors[0].line == 1


def test_deep_parentheses_are_reported(capsys):
    source = 'print ' + '(' * 150 + '1' + ')' * 150 + ';\nprint "next";'
    result, out = run(source, capsys)
    assert out == []
    assert [e.message for e in result.errors] == ['Too much nesting.']


def test_moderate_nesting_still_runs(capsys):
    source = 'print ' + ' + '.join(['1'] * 200) + ';\nprint ' + '(' * 40 + '2' + ')' * 40 + ';'
    _, out = run(source, capsys)
    assert out == ['200', '2']


def test_evaluating_long_operator_chain_overflows_cleanly(capsys):
    parsed = parse_program('print ' + ' + '.join(['1'] * 1500) + ';')
    assert parsed.errors == []
    error = Interpreter().interpret(parsed.statements)
    assert isinstance(error, LoxRuntimeError)
    assert error.message == 'Stack overflow.'
    assert error.token.lexeme == '+'
    assert capsys.readouterr().out == ''


def test_shadowing_initializer_cannot_read_shadowed_name(capsys):
    result, out = run('var a = "1"; { var a = a + "!"; print a; }', capsys)
    assert out == []
    assert [str(e) for e in result.errors] == [
        "[line 1] Error at 'a': Can't read local variable in its own initializer."
    ]


def test_inner_scope_reads_outer_value_under_new_name(capsys):
    _, out = run('var a = "1"; { var b = a + "!"; print b; } print a;', capsys)
    assert out == ['1!', '1']


def test_nan_and_signed_zero_equality(capsys):
    _, out = run('var n = 0/0; print n == n; print n != n; print 0 == -0; print 1 == 1;', capsys)
    assert out == ['true', 'false', 'false', 'true']
    assert is_equal(math.nan, math.nan)
    assert not is_equal(0.0, -0.0)
    assert not is_equal(math.nan, 1.0)
