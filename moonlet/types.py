"""Runtime values for the interpreter.

Values are represented with native Python objects where one fits:

* nil      -> ``None``
* boolean  -> ``bool``
* number   -> ``float`` (an ``int`` handed in by the host is accepted too)
* string   -> ``str``
* table    -> :class:`Table`
* function -> :class:`Closure` or :class:`~moonlet.builtin_function.BuiltinFunction`

The helpers below tell the kinds apart for the runtime and evaluator.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .builtin_function import BuiltinFunction
from .errors import LuaRuntimeError

if TYPE_CHECKING:
    from .ast import Block
    from .environment import Environment


VARARGS = '...'


class _BoolKey:
    """Wraps a boolean table key so it cannot collide with 0 or 1."""
    __slots__ = ('value',)

    def __init__(self, value: bool):
        self.value = value

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, _BoolKey) and other.value is self.value

    def __hash__(self) -> int:
        return hash((_BoolKey, self.value))


def _wrap_key(key: Any) -> Any:
    if isinstance(key, bool):
        return _BoolKey(key)
    return key


def _unwrap_key(key: Any) -> Any:
    if isinstance(key, _BoolKey):
        return key.value
    return key


class Table:
    """An associative array with an optional metatable.

    Keys mapped to nil are absent: storing ``None`` removes the entry.
    Item access through ``[]`` is raw and never consults the metatable.
    """

    def __init__(self, fields: Optional[Dict[Any, Any]] = None, metatable: Optional['Table'] = None):
        self.fields: Dict[Any, Any] = {}
        self.metatable = metatable
        if fields:
            for key, value in fields.items():
                self[key] = value

    @classmethod
    def from_list(cls, items: Iterable[Any]) -> 'Table':
        table = cls()
        for index, item in enumerate(items, 1):
            table[float(index)] = item
        return table

    def __getitem__(self, key: Any) -> Any:
        return self.fields.get(_wrap_key(key))

    def __setitem__(self, key: Any, value: Any):
        if key is None:
            raise LuaRuntimeError('InvalidKey', 'table index is nil')
        if isinstance(key, float) and math.isnan(key):
            raise LuaRuntimeError('InvalidKey', 'table index is NaN')
        key = _wrap_key(key)
        if value is None:
            self.fields.pop(key, None)
        else:
            self.fields[key] = value

    def __contains__(self, key: Any) -> bool:
        return _wrap_key(key) in self.fields

    def length(self) -> int:
        """Border of the array part: count 1, 2, ... until a key is missing."""
        n = 0
        while (n + 1) in self.fields:
            n += 1
        return n

    def items(self) -> Iterator[Tuple[Any, Any]]:
        for key, value in self.fields.items():
            yield _unwrap_key(key), value

    def to_list(self) -> List[Any]:
        return [self.fields[float(i)] for i in range(1, self.length() + 1)]

    def __repr__(self) -> str:
        return f"table: 0x{id(self):08x}"


class Closure:
    """A user-defined function: parameter names, body and defining scope."""
    def __init__(self, params: List[str], body: 'Block', env: 'Environment', name: Optional[str] = None):
        self.params = params
        self.body = body
        self.env = env
        self.name = name

    def __repr__(self) -> str:
        return f"function: 0x{id(self):08x}"


###############################################################################
# Kind helpers
###############################################################################


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_table(value: Any) -> bool:
    return isinstance(value, Table)


def is_function(value: Any) -> bool:
    return isinstance(value, (Closure, BuiltinFunction))


def type_name(value: Any) -> str:
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'boolean'
    if is_number(value):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, Table):
        return 'table'
    if is_function(value):
        return 'function'
    return 'userdata'


def is_truthy(value: Any) -> bool:
    return value is not None and value is not False


def raw_equal(a: Any, b: Any) -> bool:
    """Primitive equality: same kind and same value, or same object."""
    if type_name(a) != type_name(b):
        return False
    if isinstance(a, (Table, Closure, BuiltinFunction)):
        return a is b
    return a == b


def number_to_string(value: float) -> str:
    # Whole numbers keep every digit.
    if math.isfinite(value) and value == math.floor(value):
        text = str(int(value))
        return '-0' if text == '0' and math.copysign(1.0, value) < 0 else text
    return '%.14g' % value


def to_string(value: Any) -> str:
    """Canonical string form, as used by concatenation and printing."""
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if is_number(value):
        return number_to_string(value)
    if isinstance(value, str):
        return value
    return repr(value)
