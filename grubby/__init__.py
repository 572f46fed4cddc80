# Grubby language package
# This package provides a tokenizer, parser and tree-walking interpreter for the Grubby language.
from .errors import GrubbyError, LexerError, ParseError
from .interpreter import Interpreter, run_file, run_program
from .lexer import Token, tokenize
from .loader import ScriptLoader
from .parser import Parser, parse_expression_source, parse_program_source

__all__ = [
    'run_program',
    'run_file',
    'Interpreter',
    'GrubbyError',
    'LexerError',
    'ParseError',
    'ScriptLoader',
    'Token',
    'tokenize',
    'Parser',
    'parse_program_source',
    'parse_expression_source',
]
