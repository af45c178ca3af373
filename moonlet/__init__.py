# Moonlet package
# An embeddable interpreter core for a Lua 5.1 subset.
from .builtin_function import BuiltinFunction
from .environment import Environment
from .errors import ControlFlowError, LuaError, LuaRuntimeError, LuaSyntaxError
from .interpreter import Interpreter, run_program
from .parser import Parser, parse
from .scanner import Scanner, Token
from .types import Closure, Table, to_string, type_name
from .unparse import unparse

__all__ = [
    'BuiltinFunction',
    'Closure',
    'ControlFlowError',
    'Environment',
    'Interpreter',
    'LuaError',
    'LuaRuntimeError',
    'LuaSyntaxError',
    'Parser',
    'Scanner',
    'Table',
    'Token',
    'parse',
    'run_program',
    'to_string',
    'type_name',
    'unparse',
]
