import json
from pathlib import Path

import pytest

from grubby.__main__ import main, resolve_module


EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_runs_named_module(capsys):
    main(['--root', str(EXAMPLES), 'hello'])
    assert capsys.readouterr().out.strip() == '5'


def test_runs_gr_path(capsys):
    main([str(EXAMPLES / 'sum_range.gr')])
    assert capsys.readouterr().out.strip() == '6'


def test_resolve_module():
    assert resolve_module('.', 'main') == ('.', 'main')
    assert resolve_module('.', 'scripts/demo.gr') == ('scripts', 'demo')


def test_tokens_mode(tmp_path, capsys):
    (tmp_path / 'main.gr').write_text('val x = 5', encoding='utf-8')
    main(['--root', str(tmp_path), '--tokens'])
    assert capsys.readouterr().out.splitlines() == [
        "VAL 'val'",
        "IDENTIFIER 'x'",
        "EQUALS '='",
        "INTEGER '5'",
    ]


def test_emit_ast_then_run_it(tmp_path, capsys):
    (tmp_path / 'main.gr').write_text("val x = 2\nprintln x * 21\n", encoding='utf-8')
    main(['--root', str(tmp_path), '--emit-ast'])
    out_path = tmp_path / 'main.gr.ast.json'
    assert capsys.readouterr().out.strip() == str(out_path)
    data = json.loads(out_path.read_text(encoding='utf-8'))
    assert data[0]['type'] == 'VarDecl'

    main(['--ast', str(out_path)])
    assert capsys.readouterr().out.strip() == '42'


def test_error_exits_with_status_one(tmp_path, capsys):
    (tmp_path / 'main.gr').write_text('println nobody', encoding='utf-8')
    with pytest.raises(SystemExit) as excinfo:
        main(['--root', str(tmp_path)])
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith('Error: NameError:')


def test_missing_ast_file(tmp_path, capsys):
    with pytest.raises(SystemExit):
        main(['--ast', str(tmp_path / 'absent.json')])
    assert 'not found' in capsys.readouterr().err


def test_verbose_writes_debug_file(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / 'main.gr').write_text("var n = 1\nn = n + 1\nprintln n\n", encoding='utf-8')
    main(['-vv'])
    assert capsys.readouterr().out.strip() == '2'
    debug = (tmp_path / 'debug.txt').read_text(encoding='utf-8')
    assert 'run module main' in debug
    assert 'assign n = 2' in debug
