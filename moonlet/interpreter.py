"""Tree-walking evaluator.

The :class:`Interpreter` executes statements and evaluates expressions
against an :class:`~moonlet.environment.Environment`. All operator, index
and call semantics go through its :class:`~moonlet.runtime.Runtime`, which
also holds the per-kind metatables for this session.

Statement execution returns an outcome instead of raising: ``None`` for
normal completion, ``BREAK``, or a ``ReturnSignal``. Loops consume
``BREAK``, closure calls consume ``ReturnSignal``; any other statement
hands the outcome to its caller unchanged.
"""

from __future__ import annotations

import sys
from typing import Any, Callable, Dict, List, Optional, Union

from .ast import (
    Block, While, Repeat, If, NumericFor, GenericFor, FuncDef, MethDef,
    LocalFuncDef, Local, Return, Break, Assign, CallStat,
    Or, And, Lt, Gt, Le, Ge, Ne, Eq, Concat, Add, Sub, Mul, Div, Mod, Pow,
    Not, Neg, Len, Lit, Var, Index, FuncCall, MethCall, Func, TableConst, CALL_NODES,
)
from .builtin_function import BuiltinFunction
from .control import BREAK, BreakSignal, Outcome, ReturnSignal
from .environment import Environment
from .errors import ControlFlowError, LuaRuntimeError
from .parser import parse
from .runtime import Runtime
from .types import VARARGS, Closure, Table, is_number, is_truthy, to_string, type_name


class Interpreter:
    """Executes Lua ASTs.

    ``global_env`` is the root environment; the host binds its built-in
    functions there (the core provides none). ``debug_level`` > 0 writes a
    trace to ``debug_file``, or to stderr when ``debug_file`` is None:
    level 1 traces run boundaries, 2 adds function definitions, calls and
    local bindings, 3 adds branches and loop iterations.
    """
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt',
                 index_chain_limit: Optional[int] = None):
        self.global_env = Environment()
        self.runtime = Runtime(invoke=self.call_closure, index_chain_limit=index_chain_limit)
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 and debug_file else None

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg, file=sys.stderr)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    def __enter__(self) -> 'Interpreter':
        return self

    def __exit__(self, *exc_info):
        self.close()

    # Host API

    def register(self, name: str, fn: Callable[[List[Any]], Any], arity: Optional[int] = None) -> BuiltinFunction:
        """Bind a Python callable as a global built-in function."""
        builtin = BuiltinFunction(name, fn, arity)
        self.global_env.bind(name, builtin)
        return builtin

    def get_metatable(self, value: Any) -> Optional[Table]:
        return self.runtime.get_metatable(value)

    def set_metatable(self, value: Any, metatable: Optional[Table]):
        self.runtime.set_metatable(value, metatable)

    def run(self, program: Union[Block, str], env: Optional[Environment] = None):
        """Execute a program (source text or parsed Block) to completion.

        A break or return reaching this level has no construct to consume
        it and is reported as a ControlFlowError.
        """
        if isinstance(program, str):
            program = parse(program)
        if env is None:
            env = self.global_env
        self.debug(f"run: {len(program.stats)} statements")
        outcome = self.execute(program, env)
        if isinstance(outcome, BreakSignal):
            raise ControlFlowError('break outside a loop')
        if isinstance(outcome, ReturnSignal):
            raise ControlFlowError('return outside a function')
        self.debug("run: finished")

    def call(self, func: Any, *args: Any) -> List[Any]:
        """Call a script value (closure or builtin) from the host."""
        return self.runtime.call(func, list(args))

    # Statements

    def execute_block(self, stats: list, env: Environment) -> Outcome:
        for stat in stats:
            outcome = self.execute(stat, env)
            if outcome is not None:
                return outcome
        return None

    def execute(self, node, env: Environment) -> Outcome:
        if isinstance(node, Block):
            return self.execute_block(node.stats, env)
        if isinstance(node, CallStat):
            self.evaluate_multi(node.call, env)
            return None
        if isinstance(node, Assign):
            values = self.evaluate_list(node.exps, env)
            for i, target in enumerate(node.targets):
                self.assign(target, values[i] if i < len(values) else None, env)
            return None
        if isinstance(node, Local):
            values = self.evaluate_list(node.exps, env)
            for i, name in enumerate(node.names):
                env.bind(name, values[i] if i < len(values) else None)
            if self.debug_level >= 2:
                self.debug(f"local {', '.join(node.names)} = {', '.join(to_string(v) for v in values)}")
            return None
        if isinstance(node, If):
            cond = self.evaluate(node.exp, env)
            truthy = is_truthy(cond)
            if self.debug_level >= 3:
                self.debug(f"if condition {to_string(cond)} -> {truthy}")
            return self.execute(node.then_block if truthy else node.else_block, env)
        if isinstance(node, While):
            while is_truthy(self.evaluate(node.exp, env)):
                if self.debug_level >= 3:
                    self.debug("while: iteration")
                outcome = self.execute_block(node.block.stats, env)
                if isinstance(outcome, BreakSignal):
                    break
                if outcome is not None:
                    return outcome
            return None
        if isinstance(node, Repeat):
            while True:
                if self.debug_level >= 3:
                    self.debug("repeat: iteration")
                outcome = self.execute_block(node.block.stats, env)
                if isinstance(outcome, BreakSignal):
                    break
                if outcome is not None:
                    return outcome
                if is_truthy(self.evaluate(node.exp, env)):
                    break
            return None
        if isinstance(node, NumericFor):
            return self.execute_numeric_for(node, env)
        if isinstance(node, GenericFor):
            return self.execute_generic_for(node, env)
        if isinstance(node, FuncDef):
            self.define_function(node.names, node.params, node.block, env)
            return None
        if isinstance(node, MethDef):
            self.define_function(node.names + [node.method], ['self'] + node.params, node.block, env)
            return None
        if isinstance(node, LocalFuncDef):
            # Bound before the closure exists so the body can recurse.
            env.bind(node.name, None)
            env.update(node.name, Closure(node.params, node.block, env, node.name))
            if self.debug_level >= 2:
                self.debug(f"define local function {node.name}")
            return None
        if isinstance(node, Return):
            return ReturnSignal(self.evaluate_list(node.exps, env))
        if isinstance(node, Break):
            return BREAK
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def execute_numeric_for(self, node: NumericFor, env: Environment) -> Outcome:
        start = self.evaluate(node.start, env)
        stop = self.evaluate(node.stop, env)
        step = self.evaluate(node.step, env)
        for label, value in (('initial', start), ('limit', stop), ('step', step)):
            if not is_number(value):
                raise LuaRuntimeError('ForLoopError', f"'for' {label} value must be a number, got {type_name(value)}")
        i = start
        while (step > 0 and i <= stop) or (step <= 0 and i >= stop):
            # Each iteration gets its own binding so closures capture distinct values.
            iteration_env = env.child()
            iteration_env.bind(node.name, i)
            if self.debug_level >= 3:
                self.debug(f"for {node.name} = {to_string(i)}")
            outcome = self.execute_block(node.block.stats, iteration_env)
            if isinstance(outcome, BreakSignal):
                break
            if outcome is not None:
                return outcome
            i += step
        return None

    def execute_generic_for(self, node: GenericFor, env: Environment) -> Outcome:
        values = self.evaluate_list(node.exps, env)
        values += [None] * (3 - len(values))
        iterator, state, control = values[0], values[1], values[2]
        while True:
            results = self.runtime.call(iterator, [state, control])
            iteration_env = env.child()
            for i, name in enumerate(node.names):
                iteration_env.bind(name, results[i] if i < len(results) else None)
            first = iteration_env.values[node.names[0]]
            if first is None:
                break
            control = first
            if self.debug_level >= 3:
                self.debug(f"for {', '.join(node.names)} in: {to_string(first)}")
            outcome = self.execute_block(node.block.stats, iteration_env)
            if isinstance(outcome, BreakSignal):
                break
            if outcome is not None:
                return outcome
        return None

    def define_function(self, names: List[str], params: List[str], body: Block, env: Environment):
        closure = Closure(params, body, env, '.'.join(names))
        if self.debug_level >= 2:
            self.debug(f"define function {closure.name}")
        if len(names) == 1:
            # Plain names update an existing binding, else create one here.
            if env.resolve(names[0]) is not None:
                env.update(names[0], closure)
            else:
                env.bind(names[0], closure)
            return
        target = env.lookup(names[0])
        for name in names[1:-1]:
            target = self.runtime.index(target, name)
        self.runtime.newindex(target, names[-1], closure)

    def assign(self, target, value: Any, env: Environment):
        if isinstance(target, Var):
            env.update(target.name, value)
            return
        if isinstance(target, Index):
            table = self.evaluate(target.table, env)
            key = self.evaluate(target.key, env)
            self.runtime.newindex(table, key, value)
            return
        raise LuaRuntimeError('OperationUnsupported', f'cannot assign to {type(target).__name__}')

    # Expressions

    def evaluate_list(self, exps: list, env: Environment) -> List[Any]:
        """Evaluate an expression list; only a trailing call contributes all its results."""
        if not exps:
            return []
        values = [self.evaluate(e, env) for e in exps[:-1]]
        last = exps[-1]
        if isinstance(last, CALL_NODES):
            values.extend(self.evaluate_multi(last, env))
        else:
            values.append(self.evaluate(last, env))
        return values

    def evaluate_multi(self, node, env: Environment) -> List[Any]:
        """Evaluate a call expression to its full result list."""
        if isinstance(node, FuncCall):
            func = self.evaluate(node.func, env)
            args = self.evaluate_list(node.args, env)
            return self.runtime.call(func, args)
        if isinstance(node, MethCall):
            receiver = self.evaluate(node.receiver, env)
            func = self.runtime.index(receiver, node.method)
            args = self.evaluate_list(node.args, env)
            return self.runtime.call(func, [receiver] + args)
        return [self.evaluate(node, env)]

    def evaluate(self, node, env: Environment) -> Any:
        if isinstance(node, Lit):
            return node.value
        if isinstance(node, Var):
            return env.lookup(node.name)
        if isinstance(node, Index):
            return self.runtime.index(self.evaluate(node.table, env), self.evaluate(node.key, env))
        if isinstance(node, CALL_NODES):
            results = self.evaluate_multi(node, env)
            return results[0] if results else None
        if isinstance(node, Or):
            left = self.evaluate(node.left, env)
            return left if is_truthy(left) else self.evaluate(node.right, env)
        if isinstance(node, And):
            left = self.evaluate(node.left, env)
            return self.evaluate(node.right, env) if is_truthy(left) else left
        if isinstance(node, Ne):
            return not self.runtime.eq(self.evaluate(node.left, env), self.evaluate(node.right, env))
        if isinstance(node, Not):
            return not is_truthy(self.evaluate(node.exp, env))
        if isinstance(node, Neg):
            return self.runtime.unm(self.evaluate(node.exp, env))
        if isinstance(node, Len):
            return self.runtime.len(self.evaluate(node.exp, env))
        if isinstance(node, Func):
            return Closure(node.params, node.block, env)
        if isinstance(node, TableConst):
            return self.construct_table(node, env)
        operation = self.BINARY_OPERATIONS.get(type(node))
        if operation is not None:
            left = self.evaluate(node.left, env)
            right = self.evaluate(node.right, env)
            return getattr(self.runtime, operation)(left, right)
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    BINARY_OPERATIONS: Dict[type, str] = {
        Add: 'add', Sub: 'sub', Mul: 'mul', Div: 'div', Mod: 'mod', Pow: 'pow',
        Concat: 'concat', Eq: 'eq', Lt: 'lt', Le: 'le', Gt: 'gt', Ge: 'ge',
    }

    def construct_table(self, node: TableConst, env: Environment) -> Table:
        table = Table()
        position = 0
        last = len(node.fields) - 1
        for i, field in enumerate(node.fields):
            if field.key is not None:
                key = self.evaluate(field.key, env)
                table[key] = self.evaluate(field.value, env)
                continue
            if i == last and isinstance(field.value, CALL_NODES):
                values = self.evaluate_multi(field.value, env)
            else:
                values = [self.evaluate(field.value, env)]
            for value in values:
                position += 1
                table[float(position)] = value
        return table

    # Closures

    def call_closure(self, closure: Closure, args: List[Any]) -> List[Any]:
        call_env = closure.env.child()
        for i, name in enumerate(closure.params):
            if name == VARARGS:
                call_env.bind(name, Table.from_list(args[i:]))
            else:
                call_env.bind(name, args[i] if i < len(args) else None)
        if self.debug_level >= 2:
            self.debug(f"call {closure.name or 'function'}({', '.join(to_string(a) for a in args)})")
        outcome = self.execute_block(closure.body.stats, call_env)
        if isinstance(outcome, ReturnSignal):
            return outcome.values
        if isinstance(outcome, BreakSignal):
            raise ControlFlowError(f"break outside a loop in {closure.name or 'function'}")
        return []


def run_program(source: str, builtins: Optional[Dict[str, Callable[[List[Any]], Any]]] = None,
                debug_level: int = 0) -> Interpreter:
    """Convenience function to parse and run a program from source text."""
    interpreter = Interpreter(debug_level=debug_level)
    for name, fn in (builtins or {}).items():
        interpreter.register(name, fn)
    try:
        interpreter.run(parse(source))
    finally:
        interpreter.close()
    return interpreter
