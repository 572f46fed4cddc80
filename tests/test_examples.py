from pathlib import Path

from grubby.interpreter import run_file


EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_hello(capsys):
    run_file(EXAMPLES, 'hello')
    out = capsys.readouterr().out.strip()
    assert out == '5'


def test_program_sum_range(capsys):
    run_file(EXAMPLES, 'sum_range')
    out = capsys.readouterr().out.strip()
    assert out == '6'


def test_program_greeting(capsys):
    run_file(EXAMPLES, 'greeting')
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['hello world', 'world has 6 letters? no, 5']


def test_program_branches(capsys):
    run_file(EXAMPLES, 'branches')
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['b', 'seven']


def test_program_countdown(capsys):
    run_file(EXAMPLES, 'countdown')
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['3', '2', '1', 'liftoff']


def test_program_functions(capsys):
    run_file(EXAMPLES, 'functions')
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['hello grubby', '2 + 3 = 5']


def test_program_arrays(capsys):
    run_file(EXAMPLES, 'arrays')
    out_lines = capsys.readouterr().out.strip().split('\n')
    # commas inside quotes do not split array elements
    assert out_lines == ['10', '20', '30', '[1, 2, 3]', '[a,b, c]']


def test_program_deferred(capsys):
    run_file(EXAMPLES, 'deferred')
    out = capsys.readouterr().out.strip()
    assert out == 'answer = 42'


def test_program_numbers(capsys):
    run_file(EXAMPLES, 'numbers')
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['0.75', '3', '-3', '14', '20', 'true', 'false']


def test_program_main_imports(capsys):
    interp = run_file(EXAMPLES)
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == [
        'loading colors',
        'loading shapes',
        'square has 4 sides',
        'favourite colour: green',
    ]
    assert interp.state.imported == {'main', 'shapes', 'colors'}
