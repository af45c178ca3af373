from dataclasses import dataclass
from typing import Any, Callable, List, Optional


@dataclass(eq=False)
class BuiltinFunction:
    """A host-supplied function.

    ``fn`` receives the argument list and returns the result list. For
    convenience it may also return ``None`` (no results), a tuple, or a
    single value, which :meth:`results` normalises.
    """
    name: str
    fn: Callable[[List[Any]], Any]
    arity: Optional[int] = None

    def results(self, returned: Any) -> List[Any]:
        if returned is None:
            return []
        if isinstance(returned, (list, tuple)):
            return list(returned)
        return [returned]

    def __repr__(self) -> str:
        return f"builtin: {self.name}"
