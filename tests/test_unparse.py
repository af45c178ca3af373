import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from moonlet import Interpreter, parse, unparse
from moonlet.ast import Add, Div, Lit, Mod, Mul, Neg, Pow, Sub
from moonlet.parser import Parser
from moonlet.scanner import Scanner
from moonlet.unparse import number_literal, string_literal


def parse_exp(source):
    parser = Parser(Scanner(source))
    e = parser.exp()
    assert parser.token.type == ''
    return e


def same_number(a, b):
    return (math.isnan(a) and math.isnan(b)) or a == b


numbers = st.floats(min_value=0.0, allow_nan=False, allow_infinity=False).map(Lit)

arithmetic = st.recursive(
    numbers,
    lambda children: st.one_of(
        st.builds(Add, children, children),
        st.builds(Sub, children, children),
        st.builds(Mul, children, children),
        st.builds(Div, children, children),
        st.builds(Mod, children, children),
        st.builds(Pow, children, children),
        st.builds(Neg, children),
    ),
    max_leaves=12,
)


@given(arithmetic)
def test_arithmetic_round_trip(tree):
    text = unparse(tree)
    assert parse_exp(text) == tree
    interp = Interpreter()
    env = interp.global_env
    assert same_number(interp.evaluate(parse_exp(text), env), interp.evaluate(tree, env))


@given(st.floats())
def test_any_number_literal_evaluates_back(value):
    interp = Interpreter()
    result = interp.evaluate(parse_exp(number_literal(value)), interp.global_env)
    assert same_number(result, value)


@given(st.floats(allow_nan=False))
def test_literal_evaluates_to_itself(value):
    interp = Interpreter()
    assert interp.evaluate(Lit(value), interp.global_env) == value


@given(st.text())
def test_string_literal_round_trip(value):
    assert parse_exp(string_literal(value)) == Lit(value)


@pytest.mark.parametrize('value, text', [
    (3.0, '3'),
    (0.1, '0.1'),
    (1e20, '100000000000000000000'),
    (1e-7, '0.0000001'),
    (-2.5, '(-2.5)'),
    (math.inf, '(1 / 0)'),
    (math.nan, '(0 / 0)'),
])
def test_number_literals(value, text):
    assert number_literal(value) == text


def test_operations_are_parenthesised():
    assert unparse(parse_exp('1 + 2 * -x ^ 2')) == '(1 + (2 * (-(x ^ 2))))'
    assert unparse(parse_exp("not a or #t .. 's'")) == '((not a) or ((#t) .. "s"))'


def test_statements():
    source = 'local a, b = 1; if a then do b = 2 end else while b do break end end; return'
    assert unparse(parse(source)) == (
        'local a, b = 1; if a then do b = 2 end else while b do break end end; return')
    assert unparse(parse('t.x, t["y z"] = f{}, o:m"s"')) == 't.x, t["y z"] = f({}), o:m("s")'
    assert unparse(parse('for i = 1, 3 do end')) == 'for i = 1, 3, 1 do  end'


@pytest.mark.parametrize('number', range(1, 13))
def test_example_programs_round_trip(example, number):
    tree = parse(example(f'program_{number}.lua'))
    assert parse(unparse(tree)) == tree
