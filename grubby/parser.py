"""Recursive-descent parser for the Grubby language.

The parser walks the token list with one token of lookahead (``peek``) and
explicit ``consume`` calls that fail when the head token does not have the
expected type or value. It returns the ordered list of top-level statement
nodes.

Block structure: every block-opening construct (``fn``, ``for``,
``foreach``, ``while``, ``if``) pushes its own name on ``open_blocks`` while
its body is parsed. Loops and functions must consume their own ``end``.
Conditional blocks stop at ``end``, ``else`` or ``elseif`` without consuming
them, and the first ``end`` after a conditional's last block closes the
conditional.

Array literals arrive from the lexer as raw text. The text is split on
top-level commas and each piece is tokenized and parsed again as a
standalone expression.
"""

from __future__ import annotations

from typing import List, Optional, Set, Union

from .ast import (
    Node, IntLiteral, FloatLiteral, StringLiteral, Ident, ArrayLit, BinaryOp,
    PrintStmt, ImportStmt, VarDecl, LaterDecl, FuncParam, FuncDecl, Block,
    Call, ForRange, ForEach, WhileStmt, Assign, IfStmt,
)
from .errors import ParseError
from .lexer import Token, tokenize
from .types import ARRAY, FLOAT, INT, STRING, canonical_type


ADDITIVE_OPS = ['+', '-', '>', '<', '>=', '<=', '==', '!=']
MULTIPLICATIVE_OPS = ['*', '/']

BLOCK_CLOSERS = ['END']
CONDITIONAL_CLOSERS = ['END', 'ELSE', 'ELSEIF']


def describe(token: Optional[Token]) -> str:
    if token is None:
        return 'end of input'
    return f"{token.type} {token.value!r} at {token.line}:{token.column}"


def split_array_elements(raw: str) -> List[str]:
    """Split the interior of an array literal on top-level commas.

    Commas inside quotes or parentheses do not split. A blank interior is
    the empty array.
    """
    if not raw.strip():
        return []
    pieces: List[str] = []
    current: List[str] = []
    depth = 0
    quote = None
    for c in raw:
        if quote is not None:
            if c == quote:
                quote = None
        elif c in ('"', "'"):
            quote = c
        elif c == '(':
            depth += 1
        elif c == ')' and depth > 0:
            depth -= 1
        elif c == ',' and depth == 0:
            pieces.append(''.join(current))
            current = []
            continue
        current.append(c)
    pieces.append(''.join(current))
    return pieces


class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0
        self.open_blocks: List[str] = []
        # names declared with `val` so far in this pass
        self.immutable: Set[str] = set()

    def peek(self) -> Optional[Token]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def consume(self, expected: Union[str, List[str]]) -> Token:
        token = self.peek()
        if token is None:
            raise ParseError(f"unexpected end of input, expected {expected}")
        if not self._matches(token, expected):
            raise ParseError(f"expected {expected}, got {describe(token)}")
        self.pos += 1
        return token

    def match(self, expected: Union[str, List[str]]) -> bool:
        token = self.peek()
        if token is None:
            return False
        return self._matches(token, expected)

    def _matches(self, token: Token, expected: Union[str, List[str]]) -> bool:
        # operators are matched by value, everything else by type
        if isinstance(expected, list):
            return any(self._matches(token, e) for e in expected)
        if token.type == 'OPERATOR':
            return token.value == expected
        return token.type == expected

    def parse_program(self) -> List[Node]:
        statements: List[Node] = []
        while self.peek() is not None:
            statements.append(self.parse_statement())
        return statements

    def parse_statement(self) -> Node:
        token = self.peek()
        if token is None:
            raise ParseError("unexpected end of input")
        kind = token.type
        if kind == 'IMPORT':
            return self.parse_import()
        if kind == 'PRINTLN':
            return self.parse_println()
        if kind in ('VAR', 'VAL'):
            return self.parse_var_decl()
        if kind == 'LATER':
            return self.parse_later_decl()
        if kind == 'FN':
            return self.parse_func_decl()
        if kind == 'FOR':
            return self.parse_for()
        if kind == 'FOREACH':
            return self.parse_foreach()
        if kind == 'WHILE':
            return self.parse_while()
        if kind == 'IF':
            return self.parse_if()
        if kind == 'IDENTIFIER':
            return self.parse_assignment_or_expression()
        if kind in ('END', 'ELSE', 'ELSEIF', 'THEN', 'TO', 'IN'):
            if self.open_blocks:
                raise ParseError(f"unexpected {describe(token)} inside '{self.open_blocks[-1]}'")
            raise ParseError(f"unexpected {describe(token)} outside of any block")
        return self.parse_expression()

    def parse_import(self) -> ImportStmt:
        self.consume('IMPORT')
        name = self.consume('IDENTIFIER').value
        return ImportStmt(name)

    def parse_println(self) -> PrintStmt:
        self.consume('PRINTLN')
        return PrintStmt(self.parse_expression())

    def parse_type_name(self) -> str:
        token = self.consume('IDENTIFIER')
        type_name = canonical_type(token.value)
        if type_name is None:
            raise ParseError(f"unknown type {describe(token)}")
        return type_name

    def parse_var_decl(self) -> VarDecl:
        is_mutable = self.consume(['VAR', 'VAL']).type == 'VAR'
        name = self.consume('IDENTIFIER').value
        type_name = None
        if self.match(':'):
            self.consume(':')
            type_name = self.parse_type_name()
        self.consume('EQUALS')
        expr = self.parse_expression()
        if type_name is None:
            type_name = self.infer_type(name, expr)
        if is_mutable:
            self.immutable.discard(name)
        else:
            self.immutable.add(name)
        return VarDecl(name, expr, is_mutable, type_name)

    def infer_type(self, name: str, expr: Node) -> str:
        if isinstance(expr, IntLiteral):
            return INT
        if isinstance(expr, FloatLiteral):
            return FLOAT
        if isinstance(expr, StringLiteral):
            return STRING
        if isinstance(expr, ArrayLit):
            return ARRAY
        raise ParseError(f"cannot infer the type of '{name}' from its initializer; "
                         f"declare it as '{name}: <type>'")

    def parse_later_decl(self) -> LaterDecl:
        self.consume('LATER')
        self.consume('VAR')
        name = self.consume('IDENTIFIER').value
        if not self.match(':'):
            raise ParseError(f"deferred variable '{name}' needs a type, got {describe(self.peek())}")
        self.consume(':')
        type_name = self.parse_type_name()
        self.immutable.discard(name)
        return LaterDecl(name, type_name)

    def parse_func_decl(self) -> FuncDecl:
        self.consume('FN')
        name = self.consume('IDENTIFIER').value
        self.consume('(')
        params: List[FuncParam] = []
        if not self.match(')'):
            params.append(self.parse_param())
            while self.match(','):
                self.consume(',')
                params.append(self.parse_param())
        self.consume(')')
        # parameters shadow outer `val` names inside the body
        outer_immutable = set(self.immutable)
        self.immutable.difference_update(p.name for p in params)
        body = self.parse_block('fn', BLOCK_CLOSERS)
        self.immutable = outer_immutable
        self.consume_end('fn')
        return FuncDecl(name, params, body)

    def parse_param(self) -> FuncParam:
        name = self.consume('IDENTIFIER').value
        self.consume(':')
        return FuncParam(name, self.parse_type_name())

    def parse_block(self, construct: str, closers: List[str]) -> Block:
        self.open_blocks.append(construct)
        statements: List[Node] = []
        while self.peek() is not None and not self.match(closers):
            statements.append(self.parse_statement())
        self.open_blocks.pop()
        return Block(statements)

    def consume_end(self, construct: str) -> None:
        if not self.match('END'):
            raise ParseError(f"missing 'end' to close '{construct}', got {describe(self.peek())}")
        self.consume('END')

    def parse_loop_variable(self) -> str:
        token = self.consume('IDENTIFIER')
        if token.value in self.immutable:
            raise ParseError(f"cannot use immutable variable '{token.value}' as a loop variable "
                             f"at {token.line}:{token.column}", name='ImmutableError')
        return token.value

    def parse_for(self) -> ForRange:
        self.consume('FOR')
        var = self.parse_loop_variable()
        self.consume('EQUALS')
        start = self.parse_expression()
        self.consume('TO')
        end = self.parse_expression()
        body = self.parse_block('for', BLOCK_CLOSERS)
        self.consume_end('for')
        return ForRange(var, start, end, body)

    def parse_foreach(self) -> ForEach:
        self.consume('FOREACH')
        var = self.parse_loop_variable()
        self.consume('IN')
        iterable = self.parse_expression()
        body = self.parse_block('foreach', BLOCK_CLOSERS)
        self.consume_end('foreach')
        return ForEach(var, iterable, body)

    def parse_while(self) -> WhileStmt:
        self.consume('WHILE')
        condition = self.parse_expression()
        body = self.parse_block('while', BLOCK_CLOSERS)
        self.consume_end('while')
        return WhileStmt(condition, body)

    def parse_if(self) -> IfStmt:
        self.consume('IF')
        condition = self.parse_expression()
        self.consume('THEN')
        node = IfStmt(condition, self.parse_block('if', CONDITIONAL_CLOSERS))
        while self.match('ELSEIF'):
            self.consume('ELSEIF')
            elif_condition = self.parse_expression()
            self.consume('THEN')
            node.elif_branches.append((elif_condition, self.parse_block('elseif', CONDITIONAL_CLOSERS)))
        if self.match('ELSE'):
            self.consume('ELSE')
            node.else_block = self.parse_block('else', CONDITIONAL_CLOSERS)
            if self.match(['ELSE', 'ELSEIF']):
                raise ParseError(f"unexpected {describe(self.peek())} after 'else' block")
        if self.match('END'):
            self.consume('END')
        return node

    def parse_assignment_or_expression(self) -> Node:
        token = self.consume('IDENTIFIER')
        name = token.value
        if self.match('EQUALS'):
            self.consume('EQUALS')
            if name in self.immutable:
                raise ParseError(f"cannot assign to immutable variable '{name}' at {token.line}:{token.column}",
                                 name='ImmutableError')
            return Assign(name, self.parse_expression())
        # not an assignment: reparse from the identifier as an expression
        self.pos -= 1
        return self.parse_expression()

    def parse_arguments(self) -> List[Node]:
        self.consume('(')
        args: List[Node] = []
        if not self.match(')'):
            args.append(self.parse_expression())
            while self.match(','):
                self.consume(',')
                args.append(self.parse_expression())
        self.consume(')')
        return args

    # Expressions

    def parse_expression(self) -> Node:
        node = self.parse_term()
        while self.match(ADDITIVE_OPS):
            op_token = self.consume(ADDITIVE_OPS)
            right = self.parse_term()
            node = BinaryOp(op_token.value, node, right)
        return node

    def parse_term(self) -> Node:
        node = self.parse_factor()
        while self.match(MULTIPLICATIVE_OPS):
            op_token = self.consume(MULTIPLICATIVE_OPS)
            right = self.parse_factor()
            node = BinaryOp(op_token.value, node, right)
        return node

    def parse_factor(self) -> Node:
        token = self.peek()
        if token is None:
            raise ParseError("unexpected end of input in expression")
        if token.type == 'INTEGER':
            self.consume('INTEGER')
            return IntLiteral(int(token.value))
        if token.type == 'FLOAT':
            self.consume('FLOAT')
            return FloatLiteral(float(token.value))
        if token.type == 'STRING':
            self.consume('STRING')
            return StringLiteral(token.value)
        if token.type == 'IDENTIFIER':
            self.consume('IDENTIFIER')
            if self.match('('):
                return Call(token.value, self.parse_arguments())
            return Ident(token.value)
        if token.type == 'ARRAY':
            self.consume('ARRAY')
            return self.parse_array(token)
        if self.match('('):
            self.consume('(')
            expr = self.parse_expression()
            self.consume(')')
            return expr
        raise ParseError(f"unexpected token {describe(token)}")

    def parse_array(self, token: Token) -> ArrayLit:
        elements: List[Node] = []
        for piece in split_array_elements(token.value):
            if not piece.strip():
                raise ParseError(f"empty element in array literal at {token.line}:{token.column}")
            elements.append(parse_expression_source(piece))
        return ArrayLit(elements)


def parse_program_source(source: str) -> List[Node]:
    """Tokenize and parse source text into its top-level statements."""
    return Parser(tokenize(source)).parse_program()


def parse_expression_source(text: str) -> Node:
    """Tokenize and parse a standalone expression fragment.

    Used for array-literal elements and string interpolation spans. The
    whole fragment must be a single expression.
    """
    tokens = tokenize(text)
    if not tokens:
        raise ParseError(f"empty expression {text!r}")
    parser = Parser(tokens)
    expr = parser.parse_expression()
    if parser.peek() is not None:
        raise ParseError(f"unexpected {describe(parser.peek())} in expression {text!r}")
    return expr
