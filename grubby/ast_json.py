"""JSON serialization/deserialization for the Grubby AST.

This module converts between Grubby AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. A parsed module is a list
of statements and is encoded as a JSON list.
"""

from __future__ import annotations

from typing import Any

from .ast import (
    IntLiteral,
    FloatLiteral,
    StringLiteral,
    Ident,
    ArrayLit,
    BinaryOp,
    PrintStmt,
    ImportStmt,
    VarDecl,
    LaterDecl,
    FuncParam,
    FuncDecl,
    Block,
    Call,
    ForRange,
    ForEach,
    WhileStmt,
    Assign,
    IfStmt,
)


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None:
        return None
    if isinstance(node, (int, float, str, bool)):
        return node
    if isinstance(node, list):
        return [ast_to_obj(n) for n in node]

    # Node types
    if isinstance(node, IntLiteral):
        return {"type": "IntLiteral", "value": node.value}
    if isinstance(node, FloatLiteral):
        return {"type": "FloatLiteral", "value": node.value}
    if isinstance(node, StringLiteral):
        return {"type": "StringLiteral", "value": node.value}
    if isinstance(node, Ident):
        return {"type": "Ident", "name": node.name}
    if isinstance(node, ArrayLit):
        return {"type": "ArrayLit", "elements": [ast_to_obj(e) for e in node.elements]}
    if isinstance(node, BinaryOp):
        return {"type": "BinaryOp", "op": node.op, "left": ast_to_obj(node.left), "right": ast_to_obj(node.right)}
    if isinstance(node, PrintStmt):
        return {"type": "PrintStmt", "expr": ast_to_obj(node.expr)}
    if isinstance(node, ImportStmt):
        return {"type": "ImportStmt", "name": node.name}
    if isinstance(node, VarDecl):
        return {
            "type": "VarDecl",
            "name": node.name,
            "expr": ast_to_obj(node.expr),
            "is_mutable": node.is_mutable,
            "type_name": node.type_name,
        }
    if isinstance(node, LaterDecl):
        return {"type": "LaterDecl", "name": node.name, "type_name": node.type_name}
    if isinstance(node, FuncParam):
        return {"type": "FuncParam", "name": node.name, "type_name": node.type_name}
    if isinstance(node, FuncDecl):
        return {
            "type": "FuncDecl",
            "name": node.name,
            "params": [ast_to_obj(p) for p in node.params],
            "body": ast_to_obj(node.body),
        }
    if isinstance(node, Block):
        return {"type": "Block", "statements": [ast_to_obj(s) for s in node.statements]}
    if isinstance(node, Call):
        return {"type": "Call", "name": node.name, "args": [ast_to_obj(a) for a in node.args]}
    if isinstance(node, ForRange):
        return {
            "type": "ForRange",
            "var": node.var,
            "start": ast_to_obj(node.start),
            "end": ast_to_obj(node.end),
            "body": ast_to_obj(node.body),
        }
    if isinstance(node, ForEach):
        return {"type": "ForEach", "var": node.var, "iterable": ast_to_obj(node.iterable), "body": ast_to_obj(node.body)}
    if isinstance(node, WhileStmt):
        return {"type": "WhileStmt", "condition": ast_to_obj(node.condition), "body": ast_to_obj(node.body)}
    if isinstance(node, Assign):
        return {"type": "Assign", "name": node.name, "value": ast_to_obj(node.value)}
    if isinstance(node, IfStmt):
        return {
            "type": "IfStmt",
            "condition": ast_to_obj(node.condition),
            "then_block": ast_to_obj(node.then_block),
            "elif_branches": [[ast_to_obj(c), ast_to_obj(b)] for (c, b) in node.elif_branches],
            "else_block": ast_to_obj(node.else_block),
        }

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (int, float, str, bool)):
        return obj
    if isinstance(obj, list):
        return [ast_from_obj(n) for n in obj]
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "IntLiteral":
        return IntLiteral(int(obj["value"]))
    if t == "FloatLiteral":
        return FloatLiteral(float(obj["value"]))
    if t == "StringLiteral":
        return StringLiteral(obj["value"])
    if t == "Ident":
        return Ident(name=obj["name"])
    if t == "ArrayLit":
        return ArrayLit(elements=[ast_from_obj(e) for e in obj["elements"]])
    if t == "BinaryOp":
        return BinaryOp(op=obj["op"], left=ast_from_obj(obj["left"]), right=ast_from_obj(obj["right"]))
    if t == "PrintStmt":
        return PrintStmt(expr=ast_from_obj(obj["expr"]))
    if t == "ImportStmt":
        return ImportStmt(name=obj["name"])
    if t == "VarDecl":
        return VarDecl(
            name=obj["name"],
            expr=ast_from_obj(obj["expr"]),
            is_mutable=bool(obj.get("is_mutable", False)),
            type_name=obj.get("type_name"),
        )
    if t == "LaterDecl":
        return LaterDecl(name=obj["name"], type_name=obj["type_name"])
    if t == "FuncParam":
        return FuncParam(name=obj["name"], type_name=obj["type_name"])
    if t == "FuncDecl":
        return FuncDecl(
            name=obj["name"],
            params=[ast_from_obj(p) for p in obj["params"]],
            body=ast_from_obj(obj["body"]),
        )
    if t == "Block":
        return Block(statements=[ast_from_obj(s) for s in obj["statements"]])
    if t == "Call":
        return Call(name=obj["name"], args=[ast_from_obj(a) for a in obj["args"]])
    if t == "ForRange":
        return ForRange(
            var=obj["var"],
            start=ast_from_obj(obj["start"]),
            end=ast_from_obj(obj["end"]),
            body=ast_from_obj(obj["body"]),
        )
    if t == "ForEach":
        return ForEach(var=obj["var"], iterable=ast_from_obj(obj["iterable"]), body=ast_from_obj(obj["body"]))
    if t == "WhileStmt":
        return WhileStmt(condition=ast_from_obj(obj["condition"]), body=ast_from_obj(obj["body"]))
    if t == "Assign":
        return Assign(name=obj["name"], value=ast_from_obj(obj["value"]))
    if t == "IfStmt":
        return IfStmt(
            condition=ast_from_obj(obj["condition"]),
            then_block=ast_from_obj(obj["then_block"]),
            elif_branches=[(ast_from_obj(c), ast_from_obj(b)) for (c, b) in obj.get("elif_branches", [])],
            else_block=ast_from_obj(obj.get("else_block")),
        )

    raise ValueError(f"Unknown AST node type: {t}")
