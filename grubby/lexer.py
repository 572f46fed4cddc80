"""Tokenizer for the Grubby language.

The token classes are declared as a lark terminal grammar and scanned with
lark's basic lexer. Keywords are plain string terminals; lark folds them
into the ``IDENTIFIER`` terminal and re-types a match only when the whole
word equals the keyword, so ``total`` stays an identifier while ``to`` is a
keyword. Comments and whitespace are declared ``%ignore`` and never reach
the token list.

Array brackets are captured as a single ``ARRAY`` token holding the raw
interior text; the parser re-tokenizes each element later. String literals
keep their interpolation markers untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from .errors import LexerError


@dataclass(frozen=True)
class Token:
    type: str
    value: str
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        return f"{self.type} {self.value!r}"


KEYWORDS = {
    'import': 'IMPORT',
    'println': 'PRINTLN',
    'var': 'VAR',
    'val': 'VAL',
    'later': 'LATER',
    'fn': 'FN',
    'end': 'END',
    'for': 'FOR',
    'foreach': 'FOREACH',
    'while': 'WHILE',
    'in': 'IN',
    'to': 'TO',
    'if': 'IF',
    'then': 'THEN',
    'elseif': 'ELSEIF',
    'else': 'ELSE',
}

OPERATORS = {
    'LE': '<=',
    'GE': '>=',
    'EQ': '==',
    'NE': '!=',
    'LT': '<',
    'GT': '>',
    'PLUS': '+',
    'MINUS': '-',
    'STAR': '*',
    'SLASH': '/',
    'COLON': ':',
    'LPAR': '(',
    'RPAR': ')',
    'COMMA': ',',
}


def _build_lexicon() -> str:
    keyword_terms = '\n'.join(f'    {kind}: "{word}"' for word, kind in KEYWORDS.items())
    operator_terms = '\n'.join(f'    {name}: "{op}"' for name, op in OPERATORS.items())
    names = list(KEYWORDS.values()) + list(OPERATORS) + [
        'EQUALS', 'ARRAY', 'STRING', 'FLOAT', 'INTEGER', 'IDENTIFIER',
    ]
    return rf"""
    start: lexeme*
    lexeme: {' | '.join(names)}

{keyword_terms}
{operator_terms}
    EQUALS: "="

    ARRAY: /\[[^\]]*\]/
    STRING: /'[^']*'/ | /"[^"]*"/
    FLOAT.2: /[0-9]+\.[0-9]+/
    INTEGER: /[0-9]+/
    IDENTIFIER: /[a-zA-Z_][a-zA-Z0-9_]*/

    LINE_COMMENT: /\/\/[^\n]*/
    BLOCK_COMMENT: /\/\*[\s\S]*?\*\//
    WHITESPACE: /[ \t\f\r\n]+/
    %ignore LINE_COMMENT
    %ignore BLOCK_COMMENT
    %ignore WHITESPACE
"""


GRUBBY_LEXICON = _build_lexicon()

GRUBBY_LEXER = Lark(
    GRUBBY_LEXICON,
    parser='lalr',
    lexer='basic',
)


def _offending_span(source: str, pos: int) -> str:
    end = pos
    while end < len(source) and not source[end].isspace():
        end += 1
    return source[pos:end] or source[pos:pos + 1]


def tokenize(source: str) -> List[Token]:
    """Convert source text into a list of tokens.

    Comments and whitespace are dropped. Operators are reported with type
    ``OPERATOR`` (``=`` alone is ``EQUALS``); strings and array spans are
    returned with their delimiters stripped.

    Raises:
        LexerError: if a span of the input matches no token class.
    """
    tokens: List[Token] = []
    try:
        for tok in GRUBBY_LEXER.lex(source):
            kind = tok.type
            value = str(tok)
            if kind in OPERATORS:
                kind = 'OPERATOR'
            elif kind in ('STRING', 'ARRAY'):
                value = value[1:-1]
            tokens.append(Token(kind, value, tok.line, tok.column))
    except UnexpectedCharacters as e:
        span = _offending_span(source, e.pos_in_stream)
        raise LexerError(f"unrecognized token {span!r} at {e.line}:{e.column}") from e
    return tokens
