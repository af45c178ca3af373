"""Operator, index and call semantics with metatable dispatch.

A :class:`Runtime` owns one metatable per non-table value kind (numbers,
booleans, strings and functions share one each); tables carry their own.
Every operation first tries the primitive behaviour and otherwise looks
up an event handler such as ``__add`` or ``__index``.
"""

from __future__ import annotations

import math
from typing import Any, Callable, List, Optional

from .builtin_function import BuiltinFunction
from .errors import LuaRuntimeError
from .types import (
    Closure, Table, is_function, is_number, is_string, is_table, is_truthy, raw_equal, to_string,
    type_name,
)


ARITHMETIC_NAMES = {
    '__add': 'add',
    '__sub': 'subtract',
    '__mul': 'multiply',
    '__div': 'divide',
    '__mod': 'compute modulo of',
    '__pow': 'exponentiate',
    '__concat': 'concatenate',
}


def _divide(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _modulo(a: float, b: float) -> float:
    if b == 0:
        return math.nan
    q = a / b
    if math.isinf(q) or math.isnan(q):
        return math.nan
    return a - math.floor(q) * b


def _power(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        if a < 0 and b == math.floor(b) and int(b) % 2 == 1:
            return -math.inf
        return math.inf
    except ValueError:
        if a == 0:
            if b == math.floor(b) and int(b) % 2 == 1:
                return math.copysign(math.inf, a)
            return math.inf
        return math.nan


class Runtime:
    """The interpreter session's value model.

    ``invoke`` runs a :class:`Closure` with an argument list and returns its
    result list; the evaluator supplies it. ``index_chain_limit`` bounds how
    many ``__index``/``__newindex`` tables are followed (``None`` means no
    limit, a cyclic chain then exhausts the Python stack).
    """

    def __init__(self, invoke: Optional[Callable[[Closure, List[Any]], List[Any]]] = None,
                 index_chain_limit: Optional[int] = None):
        self.invoke = invoke
        self.index_chain_limit = index_chain_limit
        self.number_metatable = Table()
        self.boolean_metatable = Table()
        self.string_metatable = Table()
        self.function_metatable = Table()

    # Metatables

    def get_metatable(self, value: Any) -> Optional[Table]:
        if isinstance(value, bool):
            return self.boolean_metatable
        if is_number(value):
            return self.number_metatable
        if is_string(value):
            return self.string_metatable
        if is_function(value):
            return self.function_metatable
        if isinstance(value, Table):
            return value.metatable
        return None

    def set_metatable(self, value: Any, metatable: Optional[Table]):
        """Attach ``metatable`` to a table, or replace a kind's shared one."""
        if isinstance(value, Table):
            value.metatable = metatable
            return
        replacement = metatable if metatable is not None else Table()
        if isinstance(value, bool):
            self.boolean_metatable = replacement
        elif is_number(value):
            self.number_metatable = replacement
        elif is_string(value):
            self.string_metatable = replacement
        elif is_function(value):
            self.function_metatable = replacement
        else:
            raise LuaRuntimeError('OperationUnsupported', f'cannot set metatable of {type_name(value)}')

    def handler(self, value: Any, event: str) -> Any:
        metatable = self.get_metatable(value)
        if metatable is None:
            return None
        return metatable[event]

    def binary_handler(self, a: Any, b: Any, event: str) -> Any:
        h = self.handler(a, event)
        if h is None:
            h = self.handler(b, event)
        return h

    def equality_handler(self, a: Any, b: Any) -> Any:
        if type_name(a) != type_name(b):
            return None
        h1 = self.handler(a, '__eq')
        if h1 is None:
            return None
        h2 = self.handler(b, '__eq')
        if raw_equal(h1, h2):
            return h1
        return None

    def _binary_event(self, a: Any, b: Any, event: str) -> Any:
        h = self.binary_handler(a, b, event)
        if h is None:
            raise LuaRuntimeError(
                'OperationUnsupported',
                f'cannot {ARITHMETIC_NAMES[event]} {type_name(a)} and {type_name(b)}')
        return self.call1(h, [a, b])

    # Arithmetic

    def add(self, a: Any, b: Any) -> Any:
        if is_number(a) and is_number(b):
            return a + b
        return self._binary_event(a, b, '__add')

    def sub(self, a: Any, b: Any) -> Any:
        if is_number(a) and is_number(b):
            return a - b
        return self._binary_event(a, b, '__sub')

    def mul(self, a: Any, b: Any) -> Any:
        if is_number(a) and is_number(b):
            return a * b
        return self._binary_event(a, b, '__mul')

    def div(self, a: Any, b: Any) -> Any:
        if is_number(a) and is_number(b):
            return _divide(float(a), float(b))
        return self._binary_event(a, b, '__div')

    def mod(self, a: Any, b: Any) -> Any:
        if is_number(a) and is_number(b):
            return _modulo(float(a), float(b))
        return self._binary_event(a, b, '__mod')

    def pow(self, a: Any, b: Any) -> Any:
        if is_number(a) and is_number(b):
            return _power(float(a), float(b))
        return self._binary_event(a, b, '__pow')

    def unm(self, a: Any) -> Any:
        if is_number(a):
            return -a
        h = self.handler(a, '__unm')
        if h is None:
            raise LuaRuntimeError('OperationUnsupported', f'cannot negate {type_name(a)}')
        return self.call1(h, [a])

    def concat(self, a: Any, b: Any) -> Any:
        if (is_number(a) or is_string(a)) and (is_number(b) or is_string(b)):
            return to_string(a) + to_string(b)
        return self._binary_event(a, b, '__concat')

    def len(self, a: Any) -> Any:
        if is_string(a):
            return float(len(a))
        h = self.handler(a, '__len')
        if h is not None:
            return self.call1(h, [a])
        if is_table(a):
            return float(a.length())
        raise LuaRuntimeError('CannotApplyLength', f'cannot get length of {type_name(a)}')

    # Comparison

    def eq(self, a: Any, b: Any) -> bool:
        if raw_equal(a, b):
            return True
        h = self.equality_handler(a, b)
        if h is None:
            return False
        return is_truthy(self.call1(h, [a, b]))

    def lt(self, a: Any, b: Any) -> bool:
        if is_number(a) and is_number(b):
            return a < b
        if is_string(a) and is_string(b):
            return a < b
        h = self.binary_handler(a, b, '__lt')
        if h is None:
            raise LuaRuntimeError('CannotCompare', f'cannot compare {type_name(a)} < {type_name(b)}')
        return is_truthy(self.call1(h, [a, b]))

    def le(self, a: Any, b: Any) -> bool:
        if is_number(a) and is_number(b):
            return a <= b
        if is_string(a) and is_string(b):
            return a <= b
        h = self.binary_handler(a, b, '__le')
        if h is not None:
            return is_truthy(self.call1(h, [a, b]))
        h = self.binary_handler(a, b, '__lt')
        if h is not None:
            return not is_truthy(self.call1(h, [b, a]))
        raise LuaRuntimeError('CannotCompare', f'cannot compare {type_name(a)} <= {type_name(b)}')

    def gt(self, a: Any, b: Any) -> bool:
        return not self.le(a, b)

    def ge(self, a: Any, b: Any) -> bool:
        return not self.lt(a, b)

    # Indexing

    def _check_depth(self, depth: int, a: Any, key: Any):
        if self.index_chain_limit is not None and depth > self.index_chain_limit:
            raise LuaRuntimeError(
                'IndexChainTooDeep',
                f'metatable chain deeper than {self.index_chain_limit} while indexing {type_name(a)} with {to_string(key)}')

    def index(self, a: Any, key: Any, depth: int = 0) -> Any:
        self._check_depth(depth, a, key)
        if is_table(a):
            value = a[key]
            if value is not None:
                return value
            h = self.handler(a, '__index')
            if h is None:
                return None
        else:
            h = self.handler(a, '__index')
            if h is None:
                raise LuaRuntimeError('CannotIndex', f'cannot index {type_name(a)} with {to_string(key)}')
        if is_function(h):
            return self.call1(h, [a, key])
        return self.index(h, key, depth + 1)

    def newindex(self, a: Any, key: Any, value: Any, depth: int = 0):
        self._check_depth(depth, a, key)
        if is_table(a):
            if a[key] is not None:
                a[key] = value
                return
            h = self.handler(a, '__newindex')
            if h is None:
                a[key] = value
                return
        else:
            h = self.handler(a, '__newindex')
            if h is None:
                raise LuaRuntimeError('CannotIndex', f'cannot set field {to_string(key)} of {type_name(a)}')
        if is_function(h):
            self.call(h, [a, key, value])
            return
        self.newindex(h, key, value, depth + 1)

    # Calling

    def call(self, func: Any, args: List[Any]) -> List[Any]:
        if isinstance(func, BuiltinFunction):
            if func.arity is not None and len(args) != func.arity:
                raise LuaRuntimeError('ArityError', f'{func.name} expects {func.arity} arguments, got {len(args)}')
            return func.results(func.fn(args))
        if isinstance(func, Closure) and self.invoke is not None:
            return self.invoke(func, args)
        h = self.handler(func, '__call')
        if h is not None:
            return self.call(h, [func] + list(args))
        raise LuaRuntimeError('NotCallable', f'cannot call {type_name(func)} value')

    def call1(self, func: Any, args: List[Any]) -> Any:
        results = self.call(func, args)
        return results[0] if results else None
