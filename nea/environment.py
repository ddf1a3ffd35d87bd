from typing import Any, Dict, Optional
from nea.errors import NeaRuntimeError


class Environment:
    """One scope: a mapping from names to values linked to its enclosing scope."""
    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.values: Dict[str, Any] = {}

    def declare(self, name: str, value: Any) -> None:
        # Redeclaring in the same scope replaces the old binding.
        self.values[name] = value

    def get(self, name: str, line: int = 0) -> Any:
        env: Optional[Environment] = self
        while env is not None:
            if name in env.values:
                return env.values[name]
            env = env.parent
        raise NeaRuntimeError(f"undefined variable '{name}'", line)

    def assign(self, name: str, value: Any, line: int = 0) -> None:
        env: Optional[Environment] = self
        while env is not None:
            if name in env.values:
                env.values[name] = value
                return
            env = env.parent
        raise NeaRuntimeError(f"undefined variable '{name}'", line)

