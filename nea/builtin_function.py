from dataclasses import dataclass
from typing import Any, Callable, List, Optional


@dataclass(eq=False)
class BuiltinFunction:
    """A native function. `arity` of None means the function checks its own arguments."""
    name: str
    arity: Optional[int]
    fn: Callable[[List[Any]], Any]

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"
