"""Statement outcomes.

Executing a statement yields ``None`` on normal completion, the
``BREAK`` signal, or a ``ReturnSignal`` carrying the returned values.
Loops consume ``BREAK``; function activations consume ``ReturnSignal``.
Everything else hands the outcome to its caller unchanged.
"""

from typing import Any, List, Optional, Union


class BreakSignal:
    def __repr__(self) -> str:
        return 'Break'


class ReturnSignal:
    def __init__(self, values: List[Any]):
        self.values = values

    def __repr__(self) -> str:
        return f"Return({self.values!r})"


BREAK = BreakSignal()

Outcome = Optional[Union[BreakSignal, ReturnSignal]]
