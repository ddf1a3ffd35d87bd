from typing import Any


class NeaError(Exception):
    """Base type for diagnostics raised while lexing, parsing or running Nea code."""
    kind = 'Error'

    def __init__(self, message: str, line: int = 0):
        super().__init__(f"[line {line}] {self.kind}: {message}")
        self.message = message
        self.line = line


class LexError(NeaError):
    kind = 'LexError'


class ParseError(NeaError):
    kind = 'ParseError'


class NeaRuntimeError(NeaError):
    kind = 'RuntimeError'


class ReturnSignal:
    """Result of executing a `return` statement; consumed by the enclosing call."""
    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"<return {self.value!r}>"


class BreakSignal:
    """Result of executing a `break` statement; consumed by the enclosing loop."""
    def __repr__(self) -> str:
        return '<break>'


BREAK = BreakSignal()
