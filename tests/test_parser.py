import pytest

from moonlet import LuaSyntaxError, parse
from moonlet.ast import (
    Add, Assign, Block, Break, CallStat, Concat, Eq, Field, Func, FuncCall, FuncDef,
    GenericFor, If, Index, Local, LocalFuncDef, Lit, Lt, MethCall, MethDef, Mul, Neg,
    Not, NumericFor, Or, And, Pow, Repeat, Return, Sub, TableConst, Var, While,
)
from moonlet.parser import Parser
from moonlet.scanner import Scanner


def exp(source):
    parser = Parser(Scanner(source))
    e = parser.exp()
    assert parser.token.type == ''
    return e


def test_assignment():
    assert parse('a = 1') == Block([Assign([Var('a')], [Lit(1.0)])])


def test_multiple_assignment_targets():
    assert parse('a, t.k, t[1] = 1, 2') == Block([
        Assign([Var('a'), Index(Var('t'), Lit('k')), Index(Var('t'), Lit(1.0))], [Lit(1.0), Lit(2.0)])])


def test_call_statement():
    assert parse('print("hi")') == Block([CallStat(FuncCall(Var('print'), [Lit('hi')]))])


def test_call_argument_forms():
    assert exp('f"s"') == FuncCall(Var('f'), [Lit('s')])
    assert exp('f{}') == FuncCall(Var('f'), [TableConst([])])
    assert exp('f()') == FuncCall(Var('f'), [])


def test_precedence():
    assert exp('1 + 2 * 3') == Add(Lit(1.0), Mul(Lit(2.0), Lit(3.0)))
    assert exp('1 - 2 - 3') == Sub(Sub(Lit(1.0), Lit(2.0)), Lit(3.0))
    assert exp('a or b and c') == Or(Var('a'), And(Var('b'), Var('c')))
    assert exp('not a == b') == Eq(Not(Var('a')), Var('b'))


def test_power_binds_tighter_than_unary_minus():
    assert exp('-2 ^ 2') == Neg(Pow(Lit(2.0), Lit(2.0)))
    assert exp('2 ^ -3') == Pow(Lit(2.0), Neg(Lit(3.0)))
    assert exp('2 ^ 3 ^ 2') == Pow(Lit(2.0), Pow(Lit(3.0), Lit(2.0)))


def test_concat_is_right_associative():
    assert exp('a .. b .. c') == Concat(Var('a'), Concat(Var('b'), Var('c')))


def test_comparisons_chain_left_to_right():
    assert exp('a < b < c') == Lt(Lt(Var('a'), Var('b')), Var('c'))


def test_postfix_chain():
    assert exp('a.b:c(1)[2]()') == FuncCall(
        Index(MethCall(Index(Var('a'), Lit('b')), 'c', [Lit(1.0)]), Lit(2.0)), [])


def test_table_constructor():
    assert exp('{1, [2]=2; n=5, f()}') == TableConst([
        Field(None, Lit(1.0)),
        Field(Lit(2.0), Lit(2.0)),
        Field(Lit('n'), Lit(5.0)),
        Field(None, FuncCall(Var('f'), [])),
    ])
    assert exp('{x, y,}') == TableConst([Field(None, Var('x')), Field(None, Var('y'))])


def test_function_definitions():
    assert parse('function a.b(x, ...) end') == Block([FuncDef(['a', 'b'], ['x', '...'], Block([]))])
    assert parse('function c:m() return self end') == Block([
        MethDef(['c'], 'm', [], Block([Return([Var('self')])]))])
    assert parse('local function f() end') == Block([LocalFuncDef('f', [], Block([]))])
    assert exp('function(a) end') == Func(['a'], Block([]))


def test_local():
    assert parse('local a, b') == Block([Local(['a', 'b'], [])])
    assert parse('local a = ...') == Block([Local(['a'], [Var('...')])])


def test_loops():
    assert parse('while x do break end') == Block([While(Var('x'), Block([Break()]))])
    assert parse('repeat x = 1 until x') == Block([Repeat(Block([Assign([Var('x')], [Lit(1.0)])]), Var('x'))])
    assert parse('for i = 1, 2 do end') == Block([NumericFor('i', Lit(1.0), Lit(2.0), Lit(1.0), Block([]))])
    assert parse('for k, v in f do end') == Block([GenericFor(['k', 'v'], [Var('f')], Block([]))])


def test_elseif_nests_in_else_block():
    assert parse('if a then elseif b then else x = 1 end') == Block([
        If(Var('a'), Block([]), Block([
            If(Var('b'), Block([]), Block([Assign([Var('x')], [Lit(1.0)])]))]))])


def test_separators():
    assert parse(';;a = 1;; b = 2;') == Block([Assign([Var('a')], [Lit(1.0)]), Assign([Var('b')], [Lit(2.0)])])
    assert parse('do local x = 1; end') == Block([Block([Local(['x'], [Lit(1.0)])])])
    assert parse('') == Block([])


def test_return_forms():
    assert parse('return') == Block([Return([])])
    assert parse('return 1, 2;') == Block([Return([Lit(1.0), Lit(2.0)])])


def test_missing_separator_is_an_error():
    with pytest.raises(LuaSyntaxError) as info:
        parse('print(1) print(2)')
    assert info.value.offset == 9
    assert (info.value.line, info.value.column) == (1, 10)


def test_error_position_on_later_line():
    with pytest.raises(LuaSyntaxError) as info:
        parse('x = 1;\nif x then')
    assert info.value.line == 2
    assert 'end of input' in str(info.value)


@pytest.mark.parametrize('source', [
    'x',
    '1 = 2',
    'f() = 1',
    '... = 1',
    'a, 1 = 2',
    'x = ',
    'a = $',
    'local function a.b() end',
    'for a, b = 1, 2 do end',
    't = {1 2}',
    'a:b',
    'return return',
])
def test_syntax_errors(source):
    with pytest.raises(LuaSyntaxError):
        parse(source)


def test_syntax_error_message():
    with pytest.raises(LuaSyntaxError) as info:
        parse('a = $')
    assert str(info.value).startswith('SyntaxError: ')
    assert "unexpected character '$'" in str(info.value)
