import json

from nea.ast import Literal, Program
from nea.ast_json import ast_to_obj, ast_from_obj
from nea.interpreter import parse_program, Interpreter
from nea.types import NIL

SOURCE = '''
func count(xs, limit) {
    var n = 0
    for (var i = 0; i < len(xs); i = i + 1) {
        if (xs[i] == nil or i >= limit) break
        n = n + 1
    }
    return n
}
var d = {"k": [1, 2, nil]}
d.k[0] = -count(d.k, 5)
print d
print !(true and false)
'''


def test_ast_survives_json(capsys):
    program = parse_program(SOURCE)
    restored = ast_from_obj(json.loads(json.dumps(ast_to_obj(program))))
    assert restored == program
    Interpreter().run(restored)
    assert capsys.readouterr().out.splitlines() == ['{k: [-2, 2, nil]}', 'true']


def test_nil_literal_is_json_null():
    obj = ast_to_obj(parse_program("nil"))
    assert obj['body'][0]['expr'] == {'type': 'Literal', 'value': None, 'line': 1}
    assert ast_from_obj(obj).body[0].expr.value is NIL


def test_integer_literals_are_read_as_numbers():
    obj = {'type': 'Program', 'body': [
        {'type': 'PrintStmt', 'expr': {'type': 'Literal', 'value': 3}, 'line': 1}]}
    program = ast_from_obj(obj)
    assert program.body[0].expr == Literal(3.0, line=0)
    assert isinstance(program.body[0].expr.value, float)


def test_empty_program():
    assert ast_from_obj(ast_to_obj(Program([]))) == Program([])
