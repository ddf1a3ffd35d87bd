"""CLI entry point for the Nea interpreter.

Usage:
    python -m nea [-v|-vv|-vvv|-vvvv]                   interactive shell
    python -m nea [-v...] <program_file>                run a program
    python -m nea [-v...] --emit-ast <program_file>
    python -m nea [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given .nea file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. Any lex, parse or runtime error ends a
program run with exit status 1; in the shell it only aborts the current
line.
"""

import argparse
import json
import sys
from pathlib import Path

from termcolor import colored

from .ast import Program
from .ast_json import ast_to_obj, ast_from_obj
from .errors import NeaError
from .interpreter import parse_program, Interpreter
from .shell import Shell

# Each Nea call nests several Python frames.
RECURSION_LIMIT = 10000


def report(error: NeaError) -> None:
    print(colored(str(error), 'red', attrs=['bold']), file=sys.stderr)


def read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog='nea', description="Nea language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='NEA_FILE', help='emit AST JSON for the given .nea file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='Nea program file to execute (omit for the interactive shell)')
    args = parser.parse_args(argv)

    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        source = read_source(program_file)
        try:
            ast_program = parse_program(source)
        except NeaError as e:
            report(e)
            sys.exit(1)
        obj = ast_to_obj(ast_program)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    interpreter = Interpreter(debug_level=args.v)
    try:
        # Execute from AST JSON
        if args.ast:
            ast_path = Path(args.ast)
            try:
                ast_program = ast_from_obj(json.loads(read_source(ast_path)))
            except (KeyError, TypeError, ValueError) as e:
                print(f"Error: invalid AST file {ast_path}: {e}", file=sys.stderr)
                sys.exit(1)
            if not isinstance(ast_program, Program):
                print(f"Error: invalid AST file {ast_path}: top-level node is not a Program", file=sys.stderr)
                sys.exit(1)
            try:
                interpreter.run(ast_program)
            except NeaError as e:
                report(e)
                sys.exit(1)
            return

        # Interactive shell
        if not args.program:
            try:
                Shell(interpreter).cmdloop()
            except KeyboardInterrupt:
                print()
            return

        # Default: execute source file
        source = read_source(Path(args.program))
        outcome = interpreter.run_source(source)
        if outcome.error is not None:
            report(outcome.error)
            sys.exit(1)
    finally:
        interpreter.close()


if __name__ == '__main__':
    main()
