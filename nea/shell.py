"""Interactive shell for the Nea interpreter. Uses cmd as backend.

Global state lives in one `Interpreter` for the whole session. A line that
leaves a bracket or string open is buffered and the shell switches to the
continuation prompt until the unit is complete. Errors abort only the
current unit.
"""

import cmd

from termcolor import colored

from .errors import LexError
from .interpreter import Interpreter
from .lexer import tokenize, PUNCT
from .types import NIL, to_string


def needs_continuation(source: str) -> bool:
    """True when `source` ends inside an open bracket or string literal."""
    try:
        tokens = tokenize(source)
    except LexError as e:
        return e.message == 'unterminated string'
    depth = 0
    for token in tokens:
        if token.kind == PUNCT:
            if token.lexeme in '([{':
                depth += 1
            elif token.lexeme in ')]}':
                depth -= 1
    return depth > 0


class Shell(cmd.Cmd):
    """Nea read-eval-print loop."""
    intro = "Nea interpreter\nType 'help' for more information, 'exit' or Ctrl-D to leave."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "

    def __init__(self, interpreter: Interpreter, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.interpreter = interpreter
        self._tmp_line = ""

    def onecmd(self, line):
        # Every line is Nea source except the shell's own commands.
        stripped = line.strip()
        if not self._tmp_line:
            if stripped in ('exit', 'help', 'EOF'):
                return getattr(self, 'do_' + stripped)('')
            if not stripped:
                return self.emptyline()
        elif stripped == 'EOF':
            self._tmp_line = ""
            self.prompt = self._tmp_prompt
            return self.do_EOF('')
        return self.default(line)

    def default(self, line):
        """Runs one unit of Nea source, buffering it while brackets are open."""
        source = self._tmp_line + line + "\n"
        if needs_continuation(source):
            self._tmp_line = source
            self.prompt = self.secondary_prompt
            return False

        self._tmp_line = ""
        self.prompt = self._tmp_prompt

        outcome = self.interpreter.run_source(source, echo=True)
        if outcome.error is not None:
            self.stdout.write(colored(str(outcome.error), "red", attrs=["bold"]) + "\n")
        elif outcome.value is not None and outcome.value is not NIL:
            self.stdout.write(to_string(outcome.value) + "\n")
        return False

    def do_help(self, arg):
        """Short intro to the language."""
        self.stdout.write(
            "Nea is a small dynamically typed scripting language.\n\n"
            "  var x = 1              declare a variable\n"
            "  func add(a, b) { return a + b }\n"
            "  print add(x, 2)        write a value\n"
            "  var a = [1, 2]; append(a, 3)\n"
            "  var d = {\"k\": 1}; d.k = 2\n\n"
            "Expression results are echoed. Type 'exit' or press Ctrl-D to leave.\n")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return False

    def do_EOF(self, arg):
        """Exits interpreter."""
        self.stdout.write("\n")
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
