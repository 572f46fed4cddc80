"""Abstract Syntax Tree (AST) definitions for the Grubby language.

The node set is closed: the interpreter's ``execute`` and ``evaluate``
handle exactly these classes and fail loudly on anything else. Nodes are
frozen, except :class:`IfStmt`, whose ``else_block`` slot is filled in by
the parser once it reaches an ``else`` arm.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


class Node:
    """Base class for all AST nodes."""


@dataclass(frozen=True)
class IntLiteral(Node):
    value: int


@dataclass(frozen=True)
class FloatLiteral(Node):
    value: float


@dataclass(frozen=True)
class StringLiteral(Node):
    value: str  # raw text; {...} spans are resolved at evaluation time


@dataclass(frozen=True)
class Ident(Node):
    name: str


@dataclass(frozen=True)
class ArrayLit(Node):
    elements: List[Node]


@dataclass(frozen=True)
class BinaryOp(Node):
    op: str
    left: Node
    right: Node


@dataclass(frozen=True)
class PrintStmt(Node):
    expr: Node


@dataclass(frozen=True)
class ImportStmt(Node):
    name: str


@dataclass(frozen=True)
class VarDecl(Node):
    name: str
    expr: Node
    is_mutable: bool
    type_name: Optional[str] = None  # declared, or inferred by the parser


@dataclass(frozen=True)
class LaterDecl(Node):
    name: str
    type_name: str


@dataclass(frozen=True)
class FuncParam:
    name: str
    type_name: str


@dataclass(frozen=True)
class Block(Node):
    statements: List[Node]


@dataclass(frozen=True)
class FuncDecl(Node):
    name: str
    params: List[FuncParam]
    body: Block


@dataclass(frozen=True)
class Call(Node):
    name: str
    args: List[Node]


@dataclass(frozen=True)
class ForRange(Node):
    var: str
    start: Node
    end: Node
    body: Block


@dataclass(frozen=True)
class ForEach(Node):
    var: str
    iterable: Node
    body: Block


@dataclass(frozen=True)
class WhileStmt(Node):
    condition: Node
    body: Block


@dataclass(frozen=True)
class Assign(Node):
    name: str
    value: Node


@dataclass
class IfStmt(Node):
    condition: Node
    then_block: Block
    elif_branches: List[Tuple[Node, Block]] = field(default_factory=list)
    else_block: Optional[Block] = None
