"""Canonical source form of an AST.

``unparse`` turns any statement or expression back into source text that
parses to an equivalent tree. Binary and unary operations are always
parenthesised, so precedence and associativity survive the round trip;
statements in a block are joined with ``;``.
"""

from __future__ import annotations

import math
from decimal import Decimal

from .ast import (
    Block, While, Repeat, If, NumericFor, GenericFor, FuncDef, MethDef,
    LocalFuncDef, Local, Return, Break, Assign, CallStat,
    Or, And, Lt, Gt, Le, Ge, Ne, Eq, Concat, Add, Sub, Mul, Div, Mod, Pow,
    Not, Neg, Len, Lit, Var, Index, FuncCall, MethCall, Func, TableConst,
)
from .scanner import KEYWORDS

OPERATORS = {
    Or: 'or', And: 'and', Lt: '<', Gt: '>', Le: '<=', Ge: '>=', Ne: '~=', Eq: '==',
    Concat: '..', Add: '+', Sub: '-', Mul: '*', Div: '/', Mod: '%', Pow: '^',
}

UNARY_OPERATORS = {Not: 'not ', Neg: '-', Len: '#'}

STRING_ESCAPES = {
    '\\': '\\\\', '"': '\\"', '\n': '\\n', '\r': '\\r', '\t': '\\t', '\b': '\\b', '\f': '\\f',
}


def number_literal(value: float) -> str:
    """Decimal text for a number; the grammar has no exponent form."""
    if math.isnan(value):
        return '(0 / 0)'
    if math.isinf(value):
        return '(1 / 0)' if value > 0 else '(-1 / 0)'
    if value == math.floor(value):
        text = str(int(abs(value)))
    else:
        text = format(Decimal(repr(abs(value))), 'f')
    if math.copysign(1.0, value) < 0:
        return f'(-{text})'
    return text


def string_literal(value: str) -> str:
    out = []
    for ch in value:
        if ch in STRING_ESCAPES:
            out.append(STRING_ESCAPES[ch])
        elif ord(ch) < 32 or 0x7f <= ord(ch) <= 0xffff and not ch.isprintable():
            out.append('\\u%04x' % ord(ch))
        else:
            out.append(ch)
    return '"' + ''.join(out) + '"'


def is_name(key) -> bool:
    return isinstance(key, Lit) and isinstance(key.value, str) and key.value.isidentifier() \
        and key.value not in KEYWORDS


def prefix(node) -> str:
    """Render an expression usable before '[', '.', ':' or '('."""
    if isinstance(node, (Var, Index, FuncCall, MethCall)):
        return unparse(node)
    return f'({unparse(node)})'


def exps(nodes) -> str:
    return ', '.join(unparse(n) for n in nodes)


def function_body(params, block) -> str:
    body = unparse(block)
    return f"({', '.join(params)}) {body} end" if body else f"({', '.join(params)}) end"


def unparse(node) -> str:
    if isinstance(node, Block):
        return '; '.join(f'do {unparse(s)} end' if isinstance(s, Block) else unparse(s) for s in node.stats)
    if isinstance(node, CallStat):
        return unparse(node.call)
    if isinstance(node, While):
        return f'while {unparse(node.exp)} do {unparse(node.block)} end'
    if isinstance(node, Repeat):
        return f'repeat {unparse(node.block)} until {unparse(node.exp)}'
    if isinstance(node, If):
        text = f'if {unparse(node.exp)} then {unparse(node.then_block)}'
        if node.else_block.stats:
            text += f' else {unparse(node.else_block)}'
        return text + ' end'
    if isinstance(node, NumericFor):
        return (f'for {node.name} = {unparse(node.start)}, {unparse(node.stop)}, {unparse(node.step)} '
                f'do {unparse(node.block)} end')
    if isinstance(node, GenericFor):
        return f"for {', '.join(node.names)} in {exps(node.exps)} do {unparse(node.block)} end"
    if isinstance(node, FuncDef):
        return f"function {'.'.join(node.names)}{function_body(node.params, node.block)}"
    if isinstance(node, MethDef):
        return f"function {'.'.join(node.names)}:{node.method}{function_body(node.params, node.block)}"
    if isinstance(node, LocalFuncDef):
        return f"local function {node.name}{function_body(node.params, node.block)}"
    if isinstance(node, Local):
        text = f"local {', '.join(node.names)}"
        return f'{text} = {exps(node.exps)}' if node.exps else text
    if isinstance(node, Return):
        return f'return {exps(node.exps)}' if node.exps else 'return'
    if isinstance(node, Break):
        return 'break'
    if isinstance(node, Assign):
        return f'{exps(node.targets)} = {exps(node.exps)}'

    if type(node) in OPERATORS:
        return f'({unparse(node.left)} {OPERATORS[type(node)]} {unparse(node.right)})'
    if type(node) in UNARY_OPERATORS:
        return f'({UNARY_OPERATORS[type(node)]}{unparse(node.exp)})'
    if isinstance(node, Lit):
        if node.value is None:
            return 'nil'
        if node.value is True:
            return 'true'
        if node.value is False:
            return 'false'
        if isinstance(node.value, str):
            return string_literal(node.value)
        return number_literal(node.value)
    if isinstance(node, Var):
        return node.name
    if isinstance(node, Index):
        if is_name(node.key):
            return f'{prefix(node.table)}.{node.key.value}'
        return f'{prefix(node.table)}[{unparse(node.key)}]'
    if isinstance(node, FuncCall):
        return f'{prefix(node.func)}({exps(node.args)})'
    if isinstance(node, MethCall):
        return f'{prefix(node.receiver)}:{node.method}({exps(node.args)})'
    if isinstance(node, Func):
        return f'function{function_body(node.params, node.block)}'
    if isinstance(node, TableConst):
        fields = []
        for field in node.fields:
            if field.key is None:
                fields.append(unparse(field.value))
            elif is_name(field.key):
                fields.append(f'{field.key.value} = {unparse(field.value)}')
            else:
                fields.append(f'[{unparse(field.key)}] = {unparse(field.value)}')
        return '{' + ', '.join(fields) + '}'
    raise NotImplementedError(f"unparse: unexpected node type {type(node)}")
