from pathlib import Path

from nea.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).parent.parent / 'examples'


def run_example(name):
    with open(EXAMPLES / name, 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    return interp


def test_program_factorial(capsys):
    run_example('factorial.nea')
    out = capsys.readouterr().out.strip()
    assert out.splitlines() == ['720', '1', '3628800']


def test_program_closures(capsys):
    run_example('closures.nea')
    out = capsys.readouterr().out.strip()
    # b() runs once without printing; each counter is independent
    assert out.splitlines() == ['1', '2', '3', '2']


def test_program_collections(capsys):
    run_example('collections.nea')
    out = capsys.readouterr().out.strip()
    assert out.splitlines() == [
        '[0, 1, 2, 3]',
        '4',
        '{ann: 31, bob: 28, cid: 40}',
        'true',
        '[ann, bob, cid]',
        'ab6',
    ]


def test_program_loops(capsys):
    interp = run_example('loops.nea')
    out = capsys.readouterr().out.strip()
    assert out.splitlines() == ['i=0 j=2', 'i=1 j=2', 'i=2 j=2', '2550']
    assert interp.global_env.get('total') == 2550.0
