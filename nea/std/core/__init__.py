"""Core built-in functions: sizes, container mutation and conversions.

Array transforms (`append`, `pop`, `remove`, `sort`, `reverse`) mutate the
array they are given and every alias sees the change; only `pop` and
`remove` return something other than nil. `keys` and `values` build new
arrays.
"""

from typing import Any, List
import time

from nea.builtin_function import BuiltinFunction
from nea.environment import Environment
from nea.errors import NeaRuntimeError
from nea.types import (
    NIL, ArrayVal, DictVal, format_number, to_number, to_string, type_name,
)


def _expect_array(fn_name: str, value: Any) -> ArrayVal:
    if not isinstance(value, ArrayVal):
        raise NeaRuntimeError(f"{fn_name} expects an Array, got {type_name(value)}")
    return value


def _expect_dict(fn_name: str, value: Any) -> DictVal:
    if not isinstance(value, DictVal):
        raise NeaRuntimeError(f"{fn_name} expects a Dictionary, got {type_name(value)}")
    return value


def populate_core_environment() -> Environment:
    core_env = Environment()

    def std_len(args: List[Any]) -> Any:
        value = args[0]
        if isinstance(value, ArrayVal):
            return float(len(value.items))
        if isinstance(value, DictVal):
            return float(len(value.entries))
        if isinstance(value, str):
            return float(len(value))
        raise NeaRuntimeError(f"len expects an Array, Dictionary or String, got {type_name(value)}")

    def std_append(args: List[Any]) -> Any:
        array = _expect_array('append', args[0])
        array.items.append(args[1])
        return NIL

    def std_pop(args: List[Any]) -> Any:
        array = _expect_array('pop', args[0])
        if not array.items:
            raise NeaRuntimeError('pop from empty array')
        return array.items.pop()

    def std_remove(args: List[Any]) -> Any:
        container, key = args
        if isinstance(container, ArrayVal):
            if not isinstance(key, float) or not key.is_integer():
                raise NeaRuntimeError(f"remove expects an integer index, got {to_string(key)}")
            i = int(key)
            if i < 0 or i >= len(container.items):
                raise NeaRuntimeError(
                    f"index out of range ({format_number(key)} for length {len(container.items)})")
            return container.items.pop(i)
        if isinstance(container, DictVal):
            try:
                return container.remove(key)
            except KeyError:
                raise NeaRuntimeError(f"key not found: {to_string(key)}")
            except TypeError as e:
                raise NeaRuntimeError(str(e))
        raise NeaRuntimeError(f"remove expects an Array or Dictionary, got {type_name(container)}")

    def std_keys(args: List[Any]) -> Any:
        return ArrayVal(_expect_dict('keys', args[0]).keys())

    def std_values(args: List[Any]) -> Any:
        return ArrayVal(list(_expect_dict('values', args[0]).entries.values()))

    def std_sort(args: List[Any]) -> Any:
        array = _expect_array('sort', args[0])
        items = array.items
        if not (all(isinstance(x, float) for x in items) or all(isinstance(x, str) for x in items)):
            raise NeaRuntimeError('sort expects an array of only Numbers or only Strings')
        items.sort()
        return NIL

    def std_reverse(args: List[Any]) -> Any:
        _expect_array('reverse', args[0]).items.reverse()
        return NIL

    def std_str(args: List[Any]) -> Any:
        return to_string(args[0])

    def std_num(args: List[Any]) -> Any:
        try:
            return to_number(args[0])
        except (TypeError, ValueError) as e:
            raise NeaRuntimeError(str(e))

    def std_type(args: List[Any]) -> Any:
        return type_name(args[0])

    def std_clock(args: List[Any]) -> Any:
        return float(time.time())

    core_env.values['len'] = BuiltinFunction('len', 1, std_len)
    core_env.values['append'] = BuiltinFunction('append', 2, std_append)
    core_env.values['pop'] = BuiltinFunction('pop', 1, std_pop)
    core_env.values['remove'] = BuiltinFunction('remove', 2, std_remove)
    core_env.values['keys'] = BuiltinFunction('keys', 1, std_keys)
    core_env.values['values'] = BuiltinFunction('values', 1, std_values)
    core_env.values['sort'] = BuiltinFunction('sort', 1, std_sort)
    core_env.values['reverse'] = BuiltinFunction('reverse', 1, std_reverse)
    core_env.values['str'] = BuiltinFunction('str', 1, std_str)
    core_env.values['num'] = BuiltinFunction('num', 1, std_num)
    core_env.values['type'] = BuiltinFunction('type', 1, std_type)
    core_env.values['clock'] = BuiltinFunction('clock', 0, std_clock)

    return core_env
