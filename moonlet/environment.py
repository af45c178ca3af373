from typing import Any, Dict, Optional
from moonlet.errors import LuaRuntimeError


class Environment:
    """A scope frame mapping names to values, chained to its parent.

    ``bind`` always writes the current frame; ``update`` and ``lookup``
    walk outwards to the nearest frame that has the name. An unknown name
    is a hard error, there are no implicit globals.
    """
    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.values: Dict[str, Any] = {}

    def bind(self, name: str, value: Any):
        self.values[name] = value

    def resolve(self, name: str) -> Optional['Environment']:
        """Return the nearest frame binding ``name``, or None."""
        env = self
        while env is not None:
            if name in env.values:
                return env
            env = env.parent
        return None

    def lookup(self, name: str) -> Any:
        env = self.resolve(name)
        if env is None:
            raise LuaRuntimeError('UnboundName', f'reference of unknown variable {name}')
        return env.values[name]

    def update(self, name: str, value: Any):
        env = self.resolve(name)
        if env is None:
            raise LuaRuntimeError('UnboundName', f'assignment to unknown variable {name}')
        env.values[name] = value

    def child(self) -> 'Environment':
        return Environment(parent=self)

