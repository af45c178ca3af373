from pathlib import Path

import pytest

from moonlet import Interpreter, to_string


def install_print(interp):
    def lua_print(args):
        print('\t'.join(to_string(a) for a in args))
    interp.register('print', lua_print)


def install_setmetatable(interp):
    def setmetatable(args):
        interp.set_metatable(args[0], args[1])
        return args[0]
    interp.register('setmetatable', setmetatable, arity=2)


@pytest.fixture
def interp():
    """An interpreter with the host functions the test programs rely on."""
    interp = Interpreter()
    install_print(interp)
    install_setmetatable(interp)
    return interp


@pytest.fixture
def run(interp, capsys):
    """Run source text and return the printed lines."""
    def run(source):
        interp.run(source)
        return capsys.readouterr().out.splitlines()
    return run


@pytest.fixture
def example():
    """Read an example program shipped under examples/."""
    root = Path(__file__).resolve().parent.parent / 'examples'

    def read(name):
        return (root / name).read_text(encoding='utf-8')
    return read
