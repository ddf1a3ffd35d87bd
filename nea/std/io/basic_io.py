import sys
from typing import Optional, TextIO


class BasicIO:
    """Line-oriented console primitives used by `print` and `input`.

    Streams default to `sys.stdin`/`sys.stdout`, looked up on every call so
    that redirected or captured streams are honoured.
    """
    def __init__(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None):
        self._stdin = stdin
        self._stdout = stdout

    @property
    def stdin(self) -> TextIO:
        return self._stdin if self._stdin is not None else sys.stdin

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    def write(self, text: str) -> None:
        self.stdout.write(text)
        self.stdout.flush()

    def write_line(self, text: str) -> None:
        self.stdout.write(text + '\n')

    def read_line(self) -> Optional[str]:
        """Return the next line without its terminator, or None at end of input."""
        line = self.stdin.readline()
        if line == '':
            return None
        return line.rstrip('\r\n')
