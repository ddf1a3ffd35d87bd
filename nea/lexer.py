"""Lexer for the Nea language.

Terminal definitions live in a small Lark grammar and scanning is done by
Lark's basic lexer. This module only classifies keywords, decodes literal
values and converts Lark's lexing failures into `LexError`s. The resulting
token list always ends with an `EOF` token.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from .errors import LexError


KEYWORDS = frozenset({
    'func', 'var', 'if', 'else', 'while', 'for', 'return', 'break', 'print',
    'true', 'false', 'nil', 'null', 'and', 'or', 'in',
})

# Token kinds
NUMBER = 'NUMBER'
STRING = 'STRING'
IDENTIFIER = 'IDENTIFIER'
KEYWORD = 'KEYWORD'
OPERATOR = 'OPERATOR'
PUNCT = 'PUNCT'
EOF = 'EOF'


NEA_TERMINALS = r"""
    start: (NUMBER | STRING | NAME | OPERATOR | PUNCT)*

    NUMBER: /[0-9]+(\.[0-9]+)?/
    STRING: /"[^"]*"/ | /'[^']*'/
    NAME: /[A-Za-z_][A-Za-z0-9_]*/
    OPERATOR: /==|!=|<=|>=|&&|\|\||[-+*\/%=<>!]/
    PUNCT: /[(){}\[\],;:.]/

    COMMENT: /#[^\n]*/
    %import common.WS
    %ignore WS
    %ignore COMMENT
"""


NEA_LEXER = Lark(
    NEA_TERMINALS,
    parser='lalr',
    lexer='basic',
)


@dataclass(frozen=True)
class Token:
    kind: str
    lexeme: str
    value: Any
    line: int

    def describe(self) -> str:
        """Human readable form used in diagnostics."""
        if self.kind == EOF:
            return 'end of input'
        return repr(self.lexeme)


def _convert(lark_token) -> Token:
    kind = lark_token.type
    text = str(lark_token)
    line = lark_token.line
    if kind == 'NUMBER':
        return Token(NUMBER, text, float(text), line)
    if kind == 'STRING':
        return Token(STRING, text, text[1:-1], line)
    if kind == 'NAME':
        return Token(KEYWORD if text in KEYWORDS else IDENTIFIER, text, None, line)
    return Token(kind, text, None, line)


def _last_line(source: str) -> int:
    return source.count('\n') + 1


def tokenize(source: str) -> List[Token]:
    """Convert source text into a list of tokens terminated by an EOF token.

    Raises LexError at the first unterminated string or unrecognized
    character; no partial token list is returned.
    """
    tokens: List[Token] = []
    try:
        for lark_token in NEA_LEXER.lex(source):
            tokens.append(_convert(lark_token))
    except UnexpectedCharacters as e:
        char = source[e.pos_in_stream] if e.pos_in_stream < len(source) else ''
        if char in ('"', "'"):
            raise LexError('unterminated string', e.line) from None
        raise LexError(f"unexpected character {char!r}", e.line) from None
    tokens.append(Token(EOF, '', None, _last_line(source)))
    return tokens
