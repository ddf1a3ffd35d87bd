"""JSON serialization/deserialization for the Nea AST.

This module converts between Nea AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. It supports a full
round-trip for all node types, including source line numbers. A `nil`
literal is encoded as JSON `null`.
"""

from __future__ import annotations

from typing import Any

from .ast import (
    Program,
    ExprStmt,
    PrintStmt,
    VarDecl,
    Block,
    IfStmt,
    WhileStmt,
    FuncDecl,
    ReturnStmt,
    BreakStmt,
    Literal,
    Variable,
    Assign,
    BinaryOp,
    Logical,
    UnaryOp,
    Grouping,
    Call,
    ArrayLit,
    DictLit,
    Index,
    Member,
)
from .types import NIL


def literal_to_obj(value: Any) -> Any:
    return None if value is NIL else value


def literal_from_obj(value: Any) -> Any:
    if value is None:
        return NIL
    if isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    return value


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None

    if isinstance(node, Program):
        return {"type": "Program", "body": [ast_to_obj(n) for n in node.body]}
    if isinstance(node, ExprStmt):
        return {"type": "ExprStmt", "expr": ast_to_obj(node.expr), "line": node.line}
    if isinstance(node, PrintStmt):
        return {"type": "PrintStmt", "expr": ast_to_obj(node.expr), "line": node.line}
    if isinstance(node, VarDecl):
        return {"type": "VarDecl", "name": node.name, "expr": ast_to_obj(node.expr), "line": node.line}
    if isinstance(node, Block):
        return {"type": "Block", "statements": [ast_to_obj(s) for s in node.statements], "line": node.line}
    if isinstance(node, IfStmt):
        return {
            "type": "IfStmt",
            "condition": ast_to_obj(node.condition),
            "then_branch": ast_to_obj(node.then_branch),
            "else_branch": ast_to_obj(node.else_branch),
            "line": node.line,
        }
    if isinstance(node, WhileStmt):
        return {
            "type": "WhileStmt",
            "condition": ast_to_obj(node.condition),
            "body": ast_to_obj(node.body),
            "line": node.line,
        }
    if isinstance(node, FuncDecl):
        return {
            "type": "FuncDecl",
            "name": node.name,
            "params": list(node.params),
            "body": ast_to_obj(node.body),
            "line": node.line,
        }
    if isinstance(node, ReturnStmt):
        return {"type": "ReturnStmt", "value": ast_to_obj(node.value), "line": node.line}
    if isinstance(node, BreakStmt):
        return {"type": "BreakStmt", "line": node.line}
    if isinstance(node, Literal):
        return {"type": "Literal", "value": literal_to_obj(node.value), "line": node.line}
    if isinstance(node, Variable):
        return {"type": "Variable", "name": node.name, "line": node.line}
    if isinstance(node, Assign):
        return {
            "type": "Assign",
            "target": ast_to_obj(node.target),
            "value": ast_to_obj(node.value),
            "line": node.line,
        }
    if isinstance(node, BinaryOp):
        return {
            "type": "BinaryOp",
            "op": node.op,
            "left": ast_to_obj(node.left),
            "right": ast_to_obj(node.right),
            "line": node.line,
        }
    if isinstance(node, Logical):
        return {
            "type": "Logical",
            "op": node.op,
            "left": ast_to_obj(node.left),
            "right": ast_to_obj(node.right),
            "line": node.line,
        }
    if isinstance(node, UnaryOp):
        return {"type": "UnaryOp", "op": node.op, "operand": ast_to_obj(node.operand), "line": node.line}
    if isinstance(node, Grouping):
        return {"type": "Grouping", "expr": ast_to_obj(node.expr), "line": node.line}
    if isinstance(node, Call):
        return {
            "type": "Call",
            "callee": ast_to_obj(node.callee),
            "args": [ast_to_obj(a) for a in node.args],
            "line": node.line,
        }
    if isinstance(node, ArrayLit):
        return {"type": "ArrayLit", "elements": [ast_to_obj(e) for e in node.elements], "line": node.line}
    if isinstance(node, DictLit):
        return {
            "type": "DictLit",
            "entries": [[ast_to_obj(k), ast_to_obj(v)] for (k, v) in node.entries],
            "line": node.line,
        }
    if isinstance(node, Index):
        return {
            "type": "Index",
            "target": ast_to_obj(node.target),
            "index": ast_to_obj(node.index),
            "line": node.line,
        }
    if isinstance(node, Member):
        return {"type": "Member", "target": ast_to_obj(node.target), "name": node.name, "line": node.line}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    line = obj.get("line", 0)
    if t == "Program":
        return Program(body=[ast_from_obj(n) for n in obj["body"]])
    if t == "ExprStmt":
        return ExprStmt(expr=ast_from_obj(obj["expr"]), line=line)
    if t == "PrintStmt":
        return PrintStmt(expr=ast_from_obj(obj["expr"]), line=line)
    if t == "VarDecl":
        return VarDecl(name=obj["name"], expr=ast_from_obj(obj.get("expr")), line=line)
    if t == "Block":
        return Block(statements=[ast_from_obj(s) for s in obj["statements"]], line=line)
    if t == "IfStmt":
        return IfStmt(
            condition=ast_from_obj(obj["condition"]),
            then_branch=ast_from_obj(obj["then_branch"]),
            else_branch=ast_from_obj(obj.get("else_branch")),
            line=line,
        )
    if t == "WhileStmt":
        return WhileStmt(condition=ast_from_obj(obj["condition"]), body=ast_from_obj(obj["body"]), line=line)
    if t == "FuncDecl":
        return FuncDecl(
            name=obj["name"],
            params=list(obj["params"]),
            body=ast_from_obj(obj["body"]),
            line=line,
        )
    if t == "ReturnStmt":
        return ReturnStmt(value=ast_from_obj(obj.get("value")), line=line)
    if t == "BreakStmt":
        return BreakStmt(line=line)
    if t == "Literal":
        return Literal(value=literal_from_obj(obj["value"]), line=line)
    if t == "Variable":
        return Variable(name=obj["name"], line=line)
    if t == "Assign":
        return Assign(target=ast_from_obj(obj["target"]), value=ast_from_obj(obj["value"]), line=line)
    if t == "BinaryOp":
        return BinaryOp(op=obj["op"], left=ast_from_obj(obj["left"]), right=ast_from_obj(obj["right"]), line=line)
    if t == "Logical":
        return Logical(op=obj["op"], left=ast_from_obj(obj["left"]), right=ast_from_obj(obj["right"]), line=line)
    if t == "UnaryOp":
        return UnaryOp(op=obj["op"], operand=ast_from_obj(obj["operand"]), line=line)
    if t == "Grouping":
        return Grouping(expr=ast_from_obj(obj["expr"]), line=line)
    if t == "Call":
        return Call(callee=ast_from_obj(obj["callee"]), args=[ast_from_obj(a) for a in obj["args"]], line=line)
    if t == "ArrayLit":
        return ArrayLit(elements=[ast_from_obj(e) for e in obj["elements"]], line=line)
    if t == "DictLit":
        return DictLit(entries=[(ast_from_obj(k), ast_from_obj(v)) for (k, v) in obj["entries"]], line=line)
    if t == "Index":
        return Index(target=ast_from_obj(obj["target"]), index=ast_from_obj(obj["index"]), line=line)
    if t == "Member":
        return Member(target=ast_from_obj(obj["target"]), name=obj["name"], line=line)

    raise ValueError(f"Unknown AST node type: {t}")
