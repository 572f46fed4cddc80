import pathlib

from grubby.errors import GrubbyError
from grubby.types import ErrorVal


class ScriptLoader:
    """Maps a logical module name to ``<root>/<name><suffix>`` and reads it."""
    def __init__(self, root='.', suffix: str = '.gr'):
        self.root = pathlib.Path(root)
        self.suffix = suffix

    def path_for(self, name: str) -> pathlib.Path:
        return self.root / f"{name}{self.suffix}"

    def __call__(self, name: str) -> str:
        file_path = self.path_for(name)
        if not file_path.is_file():
            raise GrubbyError(ErrorVal('ImportError', f"module {name} not found at {file_path}"))
        with open(file_path, 'r', encoding='utf-8') as f:
            return f.read()

    def __repr__(self) -> str:
        return f"ScriptLoader({str(self.root)!r}, {self.suffix!r})"
