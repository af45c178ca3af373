"""Recursive-descent parser.

The parser pulls tokens from a :class:`~moonlet.scanner.Scanner` and
builds the AST in :mod:`moonlet.ast`. Statements are dispatched on their
leading keyword; expressions use one method per precedence level, from
lowest to highest::

    or
    and
    <  >  <=  >=  ~=  ==     (left-to-right chain)
    ..                       (right associative)
    +  -
    *  /  %
    not  #  -                (unary)
    ^                        (right associative)

Statements must be separated by ``;``. Any mismatch raises
:class:`~moonlet.errors.LuaSyntaxError` with the offending token's offset.
"""

from __future__ import annotations

from typing import List

from .ast import (
    Block, While, Repeat, If, NumericFor, GenericFor, FuncDef, MethDef,
    LocalFuncDef, Local, Return, Break, Assign, CallStat,
    Or, And, Lt, Gt, Le, Ge, Ne, Eq, Concat, Add, Sub, Mul, Div, Mod, Pow,
    Not, Neg, Len, Lit, Var, Index, FuncCall, MethCall, Func, Field, TableConst, CALL_NODES,
)
from .errors import LuaSyntaxError
from .scanner import END, Scanner, Token
from .types import VARARGS

BLOCK_END = (END, 'else', 'elseif', 'end', 'until')

COMPARISONS = {'<': Lt, '>': Gt, '<=': Le, '>=': Ge, '~=': Ne, '==': Eq}
ADDITIVE = {'+': Add, '-': Sub}
MULTIPLICATIVE = {'*': Mul, '/': Div, '%': Mod}
UNARY = {'not': Not, '#': Len, '-': Neg}


def is_target(e) -> bool:
    return isinstance(e, Index) or (isinstance(e, Var) and e.name != VARARGS)


def describe(token: Token) -> str:
    if token.type == END:
        return 'end of input'
    if token.type == 'Error':
        return token.value
    if token.type in ('Name', 'Number', 'String'):
        return f"{token.type} {token.value!r}"
    return repr(token.type)


class Parser:
    def __init__(self, scanner: Scanner):
        self.scanner = scanner

    # helpers

    @property
    def token(self) -> Token:
        return self.scanner.token

    def peek(self, token_type: str) -> bool:
        return self.token.type == token_type

    def at(self, token_type: str) -> bool:
        if self.peek(token_type):
            self.scanner.advance()
            return True
        return False

    def expect(self, token_type: str):
        if not self.at(token_type):
            raise self.error(f"expected {token_type!r}")

    def value(self):
        value = self.token.value
        self.scanner.advance()
        return value

    def is_block_end(self) -> bool:
        return self.token.type in BLOCK_END

    def error(self, message: str) -> LuaSyntaxError:
        return LuaSyntaxError(f"{message}, got {describe(self.token)}", self.token.offset, self.scanner.source)

    # grammar

    def chunk(self) -> Block:
        """Parse a complete program; all input must be consumed."""
        block = self.block()
        if not self.peek(END):
            raise self.error("expected ';' or end of input")
        return block

    def block(self) -> Block:
        """block := [stat {";" stat}] with stray separators ignored."""
        stats = []
        while self.at(';'):
            pass
        if not self.is_block_end():
            stats.append(self.stat())
            while self.at(';'):
                if self.is_block_end():
                    break
                if self.peek(';'):
                    continue
                stats.append(self.stat())
        return Block(stats)

    def stat(self):
        if self.at('do'):
            return self.stat_do()
        if self.at('while'):
            return self.stat_while()
        if self.at('repeat'):
            return self.stat_repeat()
        if self.at('if'):
            return self.stat_if()
        if self.at('for'):
            return self.stat_for()
        if self.at('function'):
            return self.stat_function()
        if self.at('local'):
            return self.stat_local()
        if self.at('return'):
            return self.stat_return()
        if self.at('break'):
            return Break()

        offset = self.token.offset
        e = self.exp()
        if is_target(e):
            targets = self.varlist(e)
            self.expect('=')
            return Assign(targets, self.explist())
        if isinstance(e, CALL_NODES):
            return CallStat(e)
        raise LuaSyntaxError(
            'syntax error: do, while, repeat, if, for, function, local, function call or assignment expected',
            offset, self.scanner.source)

    def stat_do(self) -> Block:
        b = self.block()
        self.expect('end')
        return b

    def stat_while(self) -> While:
        e = self.exp()
        self.expect('do')
        b = self.block()
        self.expect('end')
        return While(e, b)

    def stat_repeat(self) -> Repeat:
        b = self.block()
        self.expect('until')
        return Repeat(b, self.exp())

    def stat_if(self) -> If:
        e = self.exp()
        self.expect('then')
        then_block = self.block()
        if self.at('elseif'):
            # The nested If consumes the shared 'end'.
            return If(e, then_block, Block([self.stat_if()]))
        if self.at('else'):
            else_block = self.block()
        else:
            else_block = Block([])
        self.expect('end')
        return If(e, then_block, else_block)

    def stat_for(self):
        names = self.namelist()
        if self.at('='):
            if len(names) != 1:
                raise self.error('only one name allowed before =')
            start = self.exp()
            self.expect(',')
            stop = self.exp()
            step = self.exp() if self.at(',') else Lit(1.0)
            self.expect('do')
            b = self.block()
            self.expect('end')
            return NumericFor(names[0], start, stop, step, b)
        self.expect('in')
        exps = self.explist()
        self.expect('do')
        b = self.block()
        self.expect('end')
        return GenericFor(names, exps, b)

    def stat_function(self):
        names = self.funcname()
        method = self.name() if self.at(':') else None
        params, b = self.funcbody()
        if method is not None:
            return MethDef(names, method, params, b)
        return FuncDef(names, params, b)

    def stat_local(self):
        if self.at('function'):
            name = self.name()
            params, b = self.funcbody()
            return LocalFuncDef(name, params, b)
        names = self.namelist()
        exps = self.explist() if self.at('=') else []
        return Local(names, exps)

    def stat_return(self) -> Return:
        if self.is_block_end() or self.peek(';'):
            return Return([])
        return Return(self.explist())

    def funcname(self) -> List[str]:
        names = [self.name()]
        while self.at('.'):
            names.append(self.name())
        return names

    def namelist(self) -> List[str]:
        names = [self.name()]
        while self.at(','):
            names.append(self.name())
        return names

    def name(self) -> str:
        if not self.peek('Name'):
            raise self.error('Name expected')
        return self.value()

    def funcbody(self):
        """funcbody := "(" [parlist] ")" block "end" """
        params = self.parlist()
        b = self.block()
        self.expect('end')
        return params, b

    def parlist(self) -> List[str]:
        params = []
        self.expect('(')
        if not self.peek(')'):
            while True:
                if self.at('...'):
                    params.append(VARARGS)
                    break
                params.append(self.name())
                if not self.at(','):
                    break
        self.expect(')')
        return params

    # expressions

    def exp(self):
        e = self.exp_and()
        while self.at('or'):
            e = Or(e, self.exp_and())
        return e

    def exp_and(self):
        e = self.exp_cmp()
        while self.at('and'):
            e = And(e, self.exp_cmp())
        return e

    def exp_cmp(self):
        # a < b < c is (a < b) < c
        e = self.exp_concat()
        while self.token.type in COMPARISONS:
            node = COMPARISONS[self.value()]
            e = node(e, self.exp_concat())
        return e

    def exp_concat(self):
        e = self.exp_add()
        if self.at('..'):
            return Concat(e, self.exp_concat())
        return e

    def exp_add(self):
        e = self.exp_mul()
        while self.token.type in ADDITIVE:
            node = ADDITIVE[self.value()]
            e = node(e, self.exp_mul())
        return e

    def exp_mul(self):
        e = self.exp_unary()
        while self.token.type in MULTIPLICATIVE:
            node = MULTIPLICATIVE[self.value()]
            e = node(e, self.exp_unary())
        return e

    def exp_unary(self):
        if self.token.type in UNARY:
            node = UNARY[self.value()]
            return node(self.exp_unary())
        return self.exp_pow()

    def exp_pow(self):
        # -2^2 is -(2^2); 2^-3 and 2^3^2 nest to the right
        e = self.exp_primary()
        if self.at('^'):
            return Pow(e, self.exp_unary())
        return e

    def exp_primary(self):
        if self.at('nil'):
            return Lit(None)
        if self.at('true'):
            return Lit(True)
        if self.at('false'):
            return Lit(False)
        if self.peek('Number') or self.peek('String'):
            return Lit(self.value())
        if self.at('...'):
            return Var(VARARGS)
        if self.at('function'):
            params, b = self.funcbody()
            return Func(params, b)
        if self.at('{'):
            return self.table_constructor()
        if self.peek('Name'):
            return self.exp_postfix(Var(self.name()))
        if self.at('('):
            e = self.exp()
            self.expect(')')
            return self.exp_postfix(e)
        raise self.error('unexpected token')

    def is_args_start(self) -> bool:
        return self.peek('(') or self.peek('{') or self.peek('String')

    def exp_postfix(self, e):
        while True:
            if self.at('['):
                key = self.exp()
                self.expect(']')
                e = Index(e, key)
            elif self.at('.'):
                e = Index(e, Lit(self.name()))
            elif self.at(':'):
                method = self.name()
                if not self.is_args_start():
                    raise self.error('function arguments expected')
                e = MethCall(e, method, self.args())
            elif self.is_args_start():
                e = FuncCall(e, self.args())
            else:
                return e

    def args(self) -> list:
        """args := "(" [explist] ")" | tableconstructor | String"""
        if self.peek('String'):
            return [Lit(self.value())]
        if self.at('{'):
            return [self.table_constructor()]
        self.expect('(')
        exps = [] if self.peek(')') else self.explist()
        self.expect(')')
        return exps

    def explist(self) -> list:
        exps = [self.exp()]
        while self.at(','):
            exps.append(self.exp())
        return exps

    def table_constructor(self) -> TableConst:
        """Parse the fields after '{' up to and including '}'."""
        fields = []
        while not self.at('}'):
            fields.append(self.field())
            if not self.peek('}'):
                if not (self.at(',') or self.at(';')):
                    raise self.error("expected ',' or '}'")
        return TableConst(fields)

    def field(self) -> Field:
        """field := "[" exp "]" "=" exp | Name "=" exp | exp"""
        if self.at('['):
            key = self.exp()
            self.expect(']')
            self.expect('=')
            return Field(key, self.exp())
        e = self.exp()
        if isinstance(e, Var) and e.name != VARARGS and self.at('='):
            return Field(Lit(e.name), self.exp())
        return Field(None, e)

    def varlist(self, first) -> list:
        targets = [first]
        while self.at(','):
            targets.append(self.var())
        return targets

    def var(self):
        offset = self.token.offset
        e = self.exp()
        if is_target(e):
            return e
        raise LuaSyntaxError('expression must not occur on left hand side', offset, self.scanner.source)


def parse(source: str) -> Block:
    """Parse a complete program into its root Block."""
    return Parser(Scanner(source)).chunk()
