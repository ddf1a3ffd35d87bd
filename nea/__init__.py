# Nea language package
# This package provides a lexer, parser and tree-walking interpreter for the Nea language.
from .errors import NeaError, LexError, ParseError, NeaRuntimeError
from .interpreter import run_program, parse_program, Interpreter, Outcome

__all__ = [
    'run_program',
    'parse_program',
    'Interpreter',
    'Outcome',
    'NeaError',
    'LexError',
    'ParseError',
    'NeaRuntimeError',
]
