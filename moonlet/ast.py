"""Abstract Syntax Tree (AST) definitions.

Two disjoint families of plain dataclasses: statements (``Stat``), which
are executed for their effect, and expressions (``Exp``), which produce a
value. The parser builds them and the interpreter dispatches on their
class; the nodes themselves carry no behaviour. ``Var`` and ``Index`` are
the only expressions that may be assignment targets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Union


###############################################################################
# Statements
###############################################################################


@dataclass
class Block:
    stats: List['Stat'] = field(default_factory=list)


@dataclass
class While:
    exp: 'Exp'
    block: Block


@dataclass
class Repeat:
    block: Block
    exp: 'Exp'


@dataclass
class If:
    exp: 'Exp'
    then_block: Block
    else_block: Block


@dataclass
class NumericFor:
    name: str
    start: 'Exp'
    stop: 'Exp'
    step: 'Exp'
    block: Block


@dataclass
class GenericFor:
    names: List[str]
    exps: List['Exp']
    block: Block


@dataclass
class FuncDef:
    names: List[str]  # a.b.c
    params: List[str]
    block: Block


@dataclass
class MethDef:
    names: List[str]
    method: str
    params: List[str]
    block: Block


@dataclass
class LocalFuncDef:
    name: str
    params: List[str]
    block: Block


@dataclass
class Local:
    names: List[str]
    exps: List['Exp']


@dataclass
class Return:
    exps: List['Exp']


@dataclass
class Break:
    pass


@dataclass
class Assign:
    targets: List['Exp']  # Var or Index
    exps: List['Exp']


@dataclass
class CallStat:
    call: Union['FuncCall', 'MethCall']


###############################################################################
# Expressions
###############################################################################


@dataclass
class Or:
    left: 'Exp'
    right: 'Exp'


@dataclass
class And:
    left: 'Exp'
    right: 'Exp'


@dataclass
class Lt:
    left: 'Exp'
    right: 'Exp'


@dataclass
class Gt:
    left: 'Exp'
    right: 'Exp'


@dataclass
class Le:
    left: 'Exp'
    right: 'Exp'


@dataclass
class Ge:
    left: 'Exp'
    right: 'Exp'


@dataclass
class Ne:
    left: 'Exp'
    right: 'Exp'


@dataclass
class Eq:
    left: 'Exp'
    right: 'Exp'


@dataclass
class Concat:
    left: 'Exp'
    right: 'Exp'


@dataclass
class Add:
    left: 'Exp'
    right: 'Exp'


@dataclass
class Sub:
    left: 'Exp'
    right: 'Exp'


@dataclass
class Mul:
    left: 'Exp'
    right: 'Exp'


@dataclass
class Div:
    left: 'Exp'
    right: 'Exp'


@dataclass
class Mod:
    left: 'Exp'
    right: 'Exp'


@dataclass
class Pow:
    left: 'Exp'
    right: 'Exp'


@dataclass
class Not:
    exp: 'Exp'


@dataclass
class Neg:
    exp: 'Exp'


@dataclass
class Len:
    exp: 'Exp'


@dataclass
class Lit:
    value: Any  # None, bool, float or str


@dataclass
class Var:
    name: str


@dataclass
class Index:
    table: 'Exp'
    key: 'Exp'


@dataclass
class FuncCall:
    func: 'Exp'
    args: List['Exp']


@dataclass
class MethCall:
    receiver: 'Exp'
    method: str
    args: List['Exp']


@dataclass
class Func:
    params: List[str]
    block: Block


@dataclass
class Field:
    key: Optional['Exp']  # None for positional fields
    value: 'Exp'


@dataclass
class TableConst:
    fields: List[Field]


CALL_NODES = (FuncCall, MethCall)

Stat = Union[Block, While, Repeat, If, NumericFor, GenericFor, FuncDef, MethDef,
             LocalFuncDef, Local, Return, Break, Assign, CallStat]

Exp = Union[Or, And, Lt, Gt, Le, Ge, Ne, Eq, Concat, Add, Sub, Mul, Div, Mod, Pow,
            Not, Neg, Len, Lit, Var, Index, FuncCall, MethCall, Func, TableConst]
