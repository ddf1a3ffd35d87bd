import pytest

from nea.errors import LexError
from nea.lexer import tokenize, NUMBER, STRING, IDENTIFIER, KEYWORD, OPERATOR, PUNCT, EOF


def kinds(source):
    return [(t.kind, t.lexeme) for t in tokenize(source)]


def test_punctuation_and_operators():
    assert kinds("( ) { } [ ] , ; : .") == [
        (PUNCT, '('), (PUNCT, ')'), (PUNCT, '{'), (PUNCT, '}'), (PUNCT, '['),
        (PUNCT, ']'), (PUNCT, ','), (PUNCT, ';'), (PUNCT, ':'), (PUNCT, '.'),
        (EOF, ''),
    ]


def test_two_char_operators_win_over_one_char():
    ops = [lexeme for kind, lexeme in kinds("! != = == > >= < <= && || + - * / %") if kind == OPERATOR]
    assert ops == ['!', '!=', '=', '==', '>', '>=', '<', '<=', '&&', '||', '+', '-', '*', '/', '%']


def test_literals_are_decoded():
    tokens = tokenize("\"abc\" 123 'x y' 123.5 \"\" 5.5.5")
    assert [(t.kind, t.value) for t in tokens] == [
        (STRING, 'abc'),
        (NUMBER, 123.0),
        (STRING, 'x y'),
        (NUMBER, 123.5),
        (STRING, ''),
        (NUMBER, 5.5),
        (PUNCT, None),
        (NUMBER, 5.0),
        (EOF, None),
    ]


def test_number_followed_by_identifier():
    assert kinds("123abc") == [(NUMBER, '123'), (IDENTIFIER, 'abc'), (EOF, '')]


def test_keywords_and_identifiers():
    assert kinds("a a2 if and or ifandor nil null _x in") == [
        (IDENTIFIER, 'a'), (IDENTIFIER, 'a2'), (KEYWORD, 'if'), (KEYWORD, 'and'),
        (KEYWORD, 'or'), (IDENTIFIER, 'ifandor'), (KEYWORD, 'nil'), (KEYWORD, 'null'),
        (IDENTIFIER, '_x'), (KEYWORD, 'in'), (EOF, ''),
    ]


def test_line_numbers_and_comments():
    tokens = tokenize("1\n# a comment\n#another\n2 # trailing\n")
    assert [(t.kind, t.line) for t in tokens] == [(NUMBER, 1), (NUMBER, 4), (EOF, 5)]


def test_multiline_string_advances_line_count():
    tokens = tokenize("'a\nb' x")
    assert tokens[0].value == 'a\nb'
    assert tokens[1].lexeme == 'x'
    assert tokens[1].line == 2


def test_empty_source_is_only_eof():
    tokens = tokenize("")
    assert len(tokens) == 1
    assert tokens[0].kind == EOF


def test_unterminated_string():
    with pytest.raises(LexError) as exc:
        tokenize("var s = \"abc\nabc\nabc")
    assert exc.value.message == 'unterminated string'
    assert exc.value.line == 1


def test_unexpected_character_reports_line():
    with pytest.raises(LexError) as exc:
        tokenize("var a = 1\nvar b = a & 2")
    assert "unexpected character '&'" in exc.value.message
    assert exc.value.line == 2
    assert str(exc.value) == "[line 2] LexError: unexpected character '&'"
