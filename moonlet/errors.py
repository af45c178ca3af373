from typing import Optional


class LuaError(Exception):
    """Base class for every error the interpreter core raises."""
    def __init__(self, name: str, message: str):
        super().__init__(f"{name}: {message}")
        self.name = name
        self.message = message


class LuaSyntaxError(LuaError):
    """Raised by the scanner or parser; fatal to the parse attempt."""
    def __init__(self, message: str, offset: int, source: Optional[str] = None):
        self.offset = offset
        self.line, self.column = position_of(source, offset) if source is not None else (0, 0)
        where = f"{self.line}:{self.column}" if source is not None else f"offset {offset}"
        super().__init__('SyntaxError', f"{message} at {where}")


class LuaRuntimeError(LuaError):
    """Raised while evaluating a tree; names the failing operation."""


class ControlFlowError(LuaError):
    """A break or return signal escaped the construct meant to consume it."""
    def __init__(self, message: str):
        super().__init__('ControlFlowError', message)


def position_of(source: str, offset: int):
    line = source.count('\n', 0, offset) + 1
    column = offset - (source.rfind('\n', 0, offset) + 1) + 1
    return line, column
