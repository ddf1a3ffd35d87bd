"""Runtime value model for Nea.

Every Nea value is one of a closed set of kinds. Numbers, strings and
booleans are represented by the Python `float`, `str` and `bool` types and
behave as plain values. `nil` is the single `NIL` object. Arrays and
dictionaries are wrapped in `ArrayVal` and `DictVal`; a Nea variable holding
one of them holds a reference to the same Python object, so mutation through
one alias is visible through every other alias. Functions are `FunctionVal`
(user defined, see `nea.interpreter`) or `BuiltinFunction`.

Helpers in this module raise Python `TypeError`/`ValueError` rather than Nea
errors; the interpreter turns those into runtime errors carrying a line.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Set, Tuple
import math
import re

from .builtin_function import BuiltinFunction

if TYPE_CHECKING:
    from .ast import Block
    from .environment import Environment


class NilVal:
    """Marker type for the Nea `nil` value. Use the `NIL` instance."""
    _instance: Optional['NilVal'] = None

    def __new__(cls) -> 'NilVal':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'nil'


NIL = NilVal()

# Dictionary keys are stored tagged with their kind so that `true` and `1`
# (equal in Python) stay distinct keys.
DictKey = Tuple[str, Any]

# Number literal text as the lexer reads it, with an optional sign
NUMBER_TEXT = re.compile(r'-?[0-9]+(\.[0-9]+)?')


@dataclass(eq=False)
class ArrayVal:
    """A shared, mutable, ordered sequence of values."""
    items: List[Any] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"Array({self.items!r})"


@dataclass(eq=False)
class DictVal:
    """A shared, mutable mapping from hashable values to values.

    Entries keep insertion order. Keys must be Number, String, Boolean or
    Nil; `dict_key` builds the tagged form used internally.
    """
    entries: Dict[DictKey, Any] = field(default_factory=dict)

    def get(self, key: Any) -> Any:
        tagged = dict_key(key)
        if tagged not in self.entries:
            raise KeyError(key)
        return self.entries[tagged]

    def set(self, key: Any, value: Any) -> None:
        self.entries[dict_key(key)] = value

    def contains(self, key: Any) -> bool:
        return dict_key(key) in self.entries

    def remove(self, key: Any) -> Any:
        tagged = dict_key(key)
        if tagged not in self.entries:
            raise KeyError(key)
        return self.entries.pop(tagged)

    def keys(self) -> List[Any]:
        return [tagged[1] for tagged in self.entries]

    def __repr__(self) -> str:
        return f"Dict({self.entries!r})"


@dataclass(eq=False)
class FunctionVal:
    """A user-defined function together with the environment it closes over."""
    name: str
    params: List[str]
    body: 'Block'
    closure: 'Environment'

    @property
    def arity(self) -> int:
        return len(self.params)

    def __repr__(self) -> str:
        return f"<func {self.name}>"


def dict_key(value: Any) -> DictKey:
    """Return the tagged key for `value` or raise TypeError if it cannot be a key."""
    if isinstance(value, (bool, float, str)) or value is NIL:
        return (type_name(value), value)
    raise TypeError(f"unhashable key of type {type_name(value)}")


def type_name(value: Any) -> str:
    """Return the Nea kind name of a runtime value."""
    if isinstance(value, bool):
        return 'Boolean'
    if isinstance(value, float):
        return 'Number'
    if isinstance(value, str):
        return 'String'
    if value is NIL:
        return 'Nil'
    if isinstance(value, ArrayVal):
        return 'Array'
    if isinstance(value, DictVal):
        return 'Dictionary'
    if isinstance(value, FunctionVal):
        return 'Function'
    if isinstance(value, BuiltinFunction):
        return 'NativeFunction'
    raise TypeError(f"not a Nea value: {value!r}")


def is_truthy(value: Any) -> bool:
    """`nil` and `false` are falsy; every other value is truthy."""
    return not (value is NIL or value is False)


def values_equal(a: Any, b: Any) -> bool:
    """Equality across all kinds. Values of different kinds are never equal.

    Arrays and dictionaries compare element by element; functions compare by
    identity.
    """
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, float) and isinstance(b, float):
        return a == b
    if a is b:
        return True
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    if isinstance(a, ArrayVal) and isinstance(b, ArrayVal):
        if len(a.items) != len(b.items):
            return False
        return all(values_equal(x, y) for x, y in zip(a.items, b.items))
    if isinstance(a, DictVal) and isinstance(b, DictVal):
        if a.entries.keys() != b.entries.keys():
            return False
        return all(values_equal(a.entries[k], b.entries[k]) for k in a.entries)
    return False


def format_number(x: float) -> str:
    """Integral numbers print without a fractional part (`14`, not `14.0`)."""
    if math.isnan(x):
        return 'nan'
    if math.isinf(x):
        return 'inf' if x > 0 else '-inf'
    if x.is_integer():
        return str(int(x))
    return repr(x)


def to_string(value: Any, _seen: Optional[Set[int]] = None) -> str:
    """Convert a Nea value to the text `print` writes."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, str):
        return value
    if value is NIL:
        return 'nil'
    if isinstance(value, (ArrayVal, DictVal)):
        seen = _seen if _seen is not None else set()
        if id(value) in seen:
            return '[...]' if isinstance(value, ArrayVal) else '{...}'
        seen.add(id(value))
        try:
            if isinstance(value, ArrayVal):
                return '[' + ', '.join(to_string(item, seen) for item in value.items) + ']'
            entries = ', '.join(
                f"{to_string(key, seen)}: {to_string(item, seen)}"
                for (_, key), item in value.entries.items()
            )
            return '{' + entries + '}'
        finally:
            seen.discard(id(value))
    if isinstance(value, FunctionVal):
        return f"<func {value.name}>"
    if isinstance(value, BuiltinFunction):
        return f"<builtin {value.name}>"
    return str(value)


def to_number(value: Any) -> float:
    """Convert a Number or numeric String to a Number.

    Text must look like a number literal, optionally negated.

    Raises ValueError for text that is not a number and TypeError for other
    kinds.
    """
    if isinstance(value, float):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not NUMBER_TEXT.fullmatch(text):
            raise ValueError(f"cannot convert {value!r} to Number")
        return float(text)
    raise TypeError(f"cannot convert {type_name(value)} to Number")
