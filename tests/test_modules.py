import pytest

from grubby.errors import GrubbyError
from grubby.interpreter import Interpreter, run_program
from grubby.loader import ScriptLoader


class DictLoader:
    """Serves module sources from a dict and records every load."""
    def __init__(self, sources):
        self.sources = sources
        self.loads = []

    def __call__(self, name):
        self.loads.append(name)
        return self.sources[name]


def test_import_runs_module_once():
    loader = DictLoader({'util': "println 'util loaded'\nvar shared = 1"})
    lines = []
    interp = run_program('import util\nimport util\nimport util\nprintln shared',
                         output=lines.append, loader=loader)
    assert lines == ['util loaded', '1']
    assert loader.loads == ['util']
    assert interp.state.imported == {'util'}


def test_imported_definitions_share_global_state():
    loader = DictLoader({
        'counter': 'var hits = 0\nfn hit() hits = hits + 1 end',
    })
    lines = []
    run_program('import counter\nhit()\nhit()\nprintln hits', output=lines.append, loader=loader)
    assert lines == ['2']


def test_import_cycle_terminates():
    loader = DictLoader({
        'main': "import a\nprintln 'main'",
        'a': "import b\nprintln 'a'",
        'b': "import a\nimport main\nprintln 'b'",
    })
    lines = []
    interp = Interpreter(loader=loader, output=lines.append)
    interp.run_module('main')
    assert lines == ['b', 'a', 'main']
    assert loader.loads == ['main', 'a', 'b']
    assert interp.state.imported == {'main', 'a', 'b'}


def test_script_loader_reads_from_root(tmp_path):
    (tmp_path / 'main.gr').write_text("import greet\nsay('there')\n", encoding='utf-8')
    (tmp_path / 'greet.gr').write_text("fn say(who: String)\n    println 'hi {who}'\nend\n", encoding='utf-8')
    lines = []
    interp = Interpreter(loader=ScriptLoader(tmp_path), output=lines.append)
    interp.run_module()
    assert lines == ['hi there']
    assert ScriptLoader(tmp_path).path_for('greet') == tmp_path / 'greet.gr'


def test_missing_module_is_an_import_error(tmp_path):
    with pytest.raises(GrubbyError) as excinfo:
        run_program('import nowhere', loader=ScriptLoader(tmp_path))
    assert excinfo.value.err.name == 'ImportError'
    assert 'nowhere' in str(excinfo.value)


def test_error_in_imported_module_propagates():
    loader = DictLoader({'broken': 'println missing'})
    with pytest.raises(GrubbyError) as excinfo:
        run_program('import broken', output=lambda line: None, loader=loader)
    assert excinfo.value.err.name == 'NameError'
