"""CLI entry point for the Grubby interpreter.

Usage:
    python -m grubby [-v|-vv|-vvv] [--root DIR] [module]
    python -m grubby [-v...] [--root DIR] --tokens [module]
    python -m grubby [-v...] [--root DIR] --emit-ast [module]
    python -m grubby [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --root        Directory holding the .gr scripts (default: current directory)
  --tokens      Print the module's tokens, one per line
  --emit-ast    Parse the module and write <root>/<module>.gr.ast.json
  --ast         Execute a previously emitted AST JSON file

`module` is a logical script name resolved as <root>/<module>.gr and
defaults to `main`. A path ending in `.gr` is also accepted. Debug
information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import json
import sys
from pathlib import Path

from .ast_json import ast_to_obj, ast_from_obj
from .errors import GrubbyError
from .interpreter import Interpreter
from .lexer import tokenize
from .loader import ScriptLoader
from .parser import parse_program_source


def resolve_module(root: str, module: str):
    """Split a `.gr` path into (root, logical name); plain names keep the given root."""
    if module.endswith('.gr'):
        path = Path(module)
        return str(path.parent), path.stem
    return root, module


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Grubby language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--root', default='.', help='directory holding the .gr scripts')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--tokens', action='store_true', help='print the tokens of the module')
    group.add_argument('--emit-ast', action='store_true', help='emit AST JSON for the module')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('module', nargs='?', default='main', help='logical name of the entry script (default: main)')
    args = parser.parse_args(argv)

    root, module = resolve_module(args.root, args.module)
    loader = ScriptLoader(root)

    try:
        # Print tokens mode
        if args.tokens:
            for token in tokenize(loader(module)):
                print(token)
            return

        # Emit AST mode
        if args.emit_ast:
            statements = parse_program_source(loader(module))
            out_path = loader.path_for(module).with_name(f"{module}.gr.ast.json")
            with open(out_path, 'w', encoding='utf-8') as out:
                json.dump(ast_to_obj(statements), out, ensure_ascii=False, indent=2)
            print(str(out_path))
            return

        with Interpreter(loader=loader, debug_level=args.v) as interpreter:
            # Execute from AST JSON
            if args.ast:
                ast_path = Path(args.ast)
                if not ast_path.exists():
                    print(f"Error: file {ast_path} not found", file=sys.stderr)
                    sys.exit(1)
                with open(ast_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                interpreter.run(ast_from_obj(data))
            else:
                interpreter.run_module(module)
    except GrubbyError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
