from .basic_io import BasicIO
from nea.builtin_function import BuiltinFunction
from nea.environment import Environment
from nea.errors import NeaRuntimeError
from nea.types import NIL, type_name
from typing import List, Any

def populate_io_environment(basic_io: BasicIO) -> Environment:
        io_env = Environment()

        def std_input(args: List[Any]) -> Any:
            if len(args) > 1:
                raise NeaRuntimeError(f"input expects 0 or 1 arguments, got {len(args)}")
            if args:
                prompt = args[0]
                if not isinstance(prompt, str):
                    raise NeaRuntimeError(f"input prompt must be a String, got {type_name(prompt)}")
                basic_io.write(prompt)
            line = basic_io.read_line()
            return NIL if line is None else line

        io_env.values['input'] = BuiltinFunction('input', None, std_input)

        return io_env
