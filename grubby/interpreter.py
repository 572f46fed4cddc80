"""Tree-walking interpreter for the Grubby language.

The interpreter executes top-level statements against an
:class:`ExecutionState` it owns. Every block (function body, loop
iteration, conditional branch) runs against a fresh snapshot of its
enclosing scope; declarations inside a block never leak out of it, and
assignments to globals go through the global environment so they persist.

Imported modules and string interpolation spans are handled by calling back
into the tokenizer and parser.
"""

from __future__ import annotations

import re
import sys
from typing import Any, Callable, List, Optional

from .ast import (
    Node, IntLiteral, FloatLiteral, StringLiteral, Ident, ArrayLit, BinaryOp,
    PrintStmt, ImportStmt, VarDecl, LaterDecl, FuncDecl, Block, Call,
    ForRange, ForEach, WhileStmt, Assign, IfStmt,
)
from .environment import Environment, ExecutionState
from .errors import GrubbyError
from .loader import ScriptLoader
from .parser import parse_expression_source, parse_program_source
from .types import (
    BOOL, FLOAT, INT, ErrorVal, check_value, equal_values, to_string, type_tag,
)


INTERPOLATION = re.compile(r'\{([^}]+)\}')

ARITHMETIC_OPS = ('+', '-', '*', '/')
ORDERING_OPS = ('<', '>', '<=', '>=')
EQUALITY_OPS = ('==', '!=')


class Interpreter:
    """Core interpreter that executes Grubby statements."""
    def __init__(self,
                 loader: Optional[Callable[[str], str]] = None,
                 output: Optional[Callable[[str], None]] = None,
                 debug_level: int = 0,
                 debug_file: Optional[str] = 'debug.txt'):
        self.state = ExecutionState()
        self.loader = loader if loader is not None else ScriptLoader()
        self.output = output if output is not None else print
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 and debug_file else None

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg, file=sys.stderr)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    def __enter__(self) -> 'Interpreter':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Entry points

    def run(self, statements: List[Node]) -> None:
        for stmt in statements:
            self.execute(stmt)

    def run_source(self, source: str) -> None:
        self.run(parse_program_source(source))

    def run_module(self, name: str = 'main') -> None:
        """Run the entry script. It counts as imported, so cycles back to it stop."""
        self.state.imported.add(name)
        if self.debug_level >= 1:
            self.debug(f"run module {name}")
        self.run_source(self.loader(name))

    # Statements

    def execute_block(self, block: Block, env: Environment) -> None:
        for stmt in block.statements:
            self.execute(stmt, env)

    def execute(self, node: Node, env: Optional[Environment] = None) -> None:
        if env is None:
            env = self.state.globals
        is_global = env is self.state.globals
        if isinstance(node, PrintStmt):
            self.output(to_string(self.evaluate(node.expr, env)))
            return
        if isinstance(node, ImportStmt):
            self.import_module(node.name)
            return
        if isinstance(node, FuncDecl):
            self.state.functions[node.name] = node
            if self.debug_level >= 2:
                self.debug(f"define function {node.name}({', '.join(p.name for p in node.params)})")
            return
        if isinstance(node, VarDecl):
            value = self.evaluate(node.expr, env)
            if is_global:
                self.state.declare_global(node.name, node.type_name, value, node.is_mutable)
            else:
                env.declare(node.name, node.type_name, value, node.is_mutable, local=True)
            if self.debug_level >= 2:
                kind = 'var' if node.is_mutable else 'val'
                self.debug(f"declare {kind} {node.name}: {env.types[node.name]} = {to_string(value)}")
            return
        if isinstance(node, LaterDecl):
            self.state.declare_deferred(node.name, node.type_name)
            if self.debug_level >= 2:
                self.debug(f"declare later var {node.name}: {node.type_name}")
            return
        if isinstance(node, Assign):
            self.assign(node, env)
            return
        if isinstance(node, ForRange):
            start = self.evaluate(node.start, env)
            end = self.evaluate(node.end, env)
            for bound in (start, end):
                if type_tag(bound) != INT:
                    raise GrubbyError(ErrorVal('TypeError', f"for range bounds must be Int, got {type_tag(bound)} ({to_string(bound)})"))
            for i in range(start, end + 1):
                self.bind_loop_variable(node.var, i, env)
                if self.debug_level >= 3:
                    self.debug(f"for {node.var} = {i}")
                self.execute_block(node.body, env.snapshot())
            return
        if isinstance(node, ForEach):
            items = self.evaluate(node.iterable, env)
            if not isinstance(items, list):
                raise GrubbyError(ErrorVal('TypeError', f"foreach expects an Array, got {type_tag(items)} ({to_string(items)})"))
            for item in items:
                self.bind_loop_variable(node.var, item, env)
                if self.debug_level >= 3:
                    self.debug(f"foreach {node.var} = {to_string(item)}")
                self.execute_block(node.body, env.snapshot())
            return
        if isinstance(node, WhileStmt):
            while self.condition(node.condition, env, 'while'):
                self.execute_block(node.body, env.snapshot())
            return
        if isinstance(node, IfStmt):
            if self.condition(node.condition, env, 'if'):
                self.execute_block(node.then_block, env.snapshot())
                return
            for elif_condition, elif_block in node.elif_branches:
                if self.condition(elif_condition, env, 'elseif'):
                    self.execute_block(elif_block, env.snapshot())
                    return
            if node.else_block is not None:
                self.execute_block(node.else_block, env.snapshot())
            return
        if isinstance(node, Call):
            self.call_function(node, env)
            return
        if isinstance(node, Block):
            self.execute_block(node, env.snapshot())
            return
        if isinstance(node, (Ident, IntLiteral, FloatLiteral, StringLiteral, ArrayLit, BinaryOp)):
            self.evaluate(node, env)
            return
        raise GrubbyError(ErrorVal('TypeError', f"unknown statement: {node!r}"))

    def assign(self, node: Assign, env: Environment) -> None:
        value = self.evaluate(node.value, env)
        name = node.name
        if name in env.local_names:
            env.set(name, value)
        else:
            self.state.assign_global(name, value)
            if env is not self.state.globals:
                # keep the snapshot in step with the global it copied
                env.values[name] = value
                env.types[name] = self.state.globals.types[name]
                if name in self.state.globals.mutable:
                    env.mutable.add(name)
        if self.debug_level >= 2:
            self.debug(f"assign {name} = {to_string(value)}")

    def bind_loop_variable(self, name: str, value: Any, env: Environment) -> None:
        """Write a loop variable into the globals, and into ``env`` when it is a snapshot."""
        if env is not self.state.globals:
            env.check_bind(name)
        self.state.bind_loop_variable(name, value)
        if env is not self.state.globals:
            env.bind(name, value)
            # now a global: later assignments in the body go through the globals
            env.local_names.discard(name)

    def condition(self, node: Node, env: Environment, construct: str) -> bool:
        value = self.evaluate(node, env)
        if type_tag(value) != BOOL:
            raise GrubbyError(ErrorVal('TypeError', f"{construct} condition must be Bool, got {type_tag(value)} ({to_string(value)})"))
        if self.debug_level >= 3:
            self.debug(f"{construct} condition -> {to_string(value)}")
        return value

    def call_function(self, node: Call, env: Environment) -> None:
        func = self.state.functions.get(node.name)
        if func is None:
            raise GrubbyError(ErrorVal('NameError', f"unknown function: {node.name}"))
        call_env = self.state.globals.snapshot()
        for index, param in enumerate(func.params):
            if index >= len(node.args):
                raise GrubbyError(ErrorVal('TypeError', f"{node.name}: missing argument for parameter '{param.name}'"))
            value = self.evaluate(node.args[index], env)
            try:
                check_value(value, param.type_name)
            except TypeError as e:
                raise GrubbyError(ErrorVal('TypeError', f"{node.name}: argument '{param.name}': {e}"))
            call_env.declare(param.name, param.type_name, value, is_mutable=True, local=True)
        self.execute_block(func.body, call_env)

    def import_module(self, name: str) -> None:
        if name in self.state.imported:
            return
        self.state.imported.add(name)
        if self.debug_level >= 1:
            self.debug(f"import {name}")
        self.run_source(self.loader(name))

    # Expressions

    def evaluate(self, node: Node, env: Optional[Environment] = None) -> Any:
        if env is None:
            env = self.state.globals
        if isinstance(node, (IntLiteral, FloatLiteral)):
            return node.value
        if isinstance(node, StringLiteral):
            return self.interpolate(node.value, env)
        if isinstance(node, Ident):
            return self.lookup(node.name, env)
        if isinstance(node, ArrayLit):
            return [self.evaluate(el, env) for el in node.elements]
        if isinstance(node, BinaryOp):
            left = self.evaluate(node.left, env)
            right = self.evaluate(node.right, env)
            return self.apply_binary_op(node.op, left, right)
        if isinstance(node, Call):
            raise GrubbyError(ErrorVal('TypeError', f"function {node.name} produces no value"))
        raise GrubbyError(ErrorVal('TypeError', f"unknown expression: {node!r}"))

    def lookup(self, name: str, env: Environment) -> Any:
        if name in env:
            return env.get(name)
        if name in self.state.deferred:
            raise GrubbyError(ErrorVal('DeferredError', f"variable '{name}' was declared deferred but never initialized"))
        raise GrubbyError(ErrorVal('NameError', f"unknown identifier '{name}': variable was never declared"))

    def interpolate(self, text: str, env: Environment) -> str:
        def replace(match):
            expr = parse_expression_source(match.group(1))
            return to_string(self.evaluate(expr, env))
        return INTERPOLATION.sub(replace, text)

    def apply_binary_op(self, op: str, a: Any, b: Any) -> Any:
        if op in EQUALITY_OPS:
            eq = equal_values(a, b)
            return eq if op == '==' else not eq
        if op not in ARITHMETIC_OPS and op not in ORDERING_OPS:
            raise GrubbyError(ErrorVal('OperatorError', f"unknown operator {op}"))
        left_type, right_type = type_tag(a), type_tag(b)
        if left_type != right_type or left_type not in (INT, FLOAT):
            raise GrubbyError(ErrorVal(
                'TypeError',
                f"unsupported {op} for {to_string(a)} ({left_type}) and {to_string(b)} ({right_type})"))
        if op == '+':
            return a + b
        if op == '-':
            return a - b
        if op == '*':
            return a * b
        if op == '/':
            if b == 0:
                raise GrubbyError(ErrorVal('ZeroDivisionError', f"division by zero: {to_string(a)} / {to_string(b)}"))
            if left_type == INT:
                # integer division truncating toward zero
                quotient = abs(a) // abs(b)
                return quotient if (a < 0) == (b < 0) else -quotient
            return a / b
        if op == '<':
            return a < b
        if op == '>':
            return a > b
        if op == '<=':
            return a <= b
        return a >= b


def run_program(source: str, output: Optional[Callable[[str], None]] = None,
                loader: Optional[Callable[[str], str]] = None, debug_level: int = 0) -> Interpreter:
    """Convenience function to parse and run a Grubby program from source text."""
    statements = parse_program_source(source)
    with Interpreter(loader=loader, output=output, debug_level=debug_level) as interpreter:
        interpreter.run(statements)
    return interpreter


def run_file(root: str = '.', name: str = 'main', debug_level: int = 0) -> Interpreter:
    """Run the entry script ``name`` found under ``root``, returning the interpreter."""
    with Interpreter(loader=ScriptLoader(root), debug_level=debug_level) as interpreter:
        interpreter.run_module(name)
    return interpreter
