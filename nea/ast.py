"""Abstract Syntax Tree (AST) definitions for the Nea language.

Each node owns its children exclusively and records the source line it
starts on, which the interpreter uses for runtime diagnostics. `for` loops
have no node of their own: the parser desugars them into a block holding the
initializer and a `WhileStmt`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Program(Node):
    body: List[Node]


# Statements

@dataclass
class ExprStmt(Node):
    expr: Node
    line: int = 0


@dataclass
class PrintStmt(Node):
    expr: Node
    line: int = 0


@dataclass
class VarDecl(Node):
    name: str
    expr: Optional[Node]  # None binds nil
    line: int = 0


@dataclass
class Block(Node):
    statements: List[Node]
    line: int = 0


@dataclass
class IfStmt(Node):
    condition: Node
    then_branch: Node
    else_branch: Optional[Node]
    line: int = 0


@dataclass
class WhileStmt(Node):
    condition: Node
    body: Node
    line: int = 0


@dataclass
class FuncDecl(Node):
    name: str
    params: List[str]
    body: Block
    line: int = 0


@dataclass
class ReturnStmt(Node):
    value: Optional[Node]
    line: int = 0


@dataclass
class BreakStmt(Node):
    line: int = 0


# Expressions

@dataclass
class Literal(Node):
    value: Any  # float, str, bool or NIL
    line: int = 0


@dataclass
class Variable(Node):
    name: str
    line: int = 0


@dataclass
class Assign(Node):
    target: Node  # Variable, Index or Member
    value: Node
    line: int = 0


@dataclass
class BinaryOp(Node):
    op: str
    left: Node
    right: Node
    line: int = 0


@dataclass
class Logical(Node):
    op: str  # '&&' or '||'
    left: Node
    right: Node
    line: int = 0


@dataclass
class UnaryOp(Node):
    op: str
    operand: Node
    line: int = 0


@dataclass
class Grouping(Node):
    expr: Node
    line: int = 0


@dataclass
class Call(Node):
    callee: Node
    args: List[Node]
    line: int = 0


@dataclass
class ArrayLit(Node):
    elements: List[Node]
    line: int = 0


@dataclass
class DictLit(Node):
    entries: List[Tuple[Node, Node]]
    line: int = 0


@dataclass
class Index(Node):
    target: Node
    index: Node
    line: int = 0


@dataclass
class Member(Node):
    target: Node
    name: str
    line: int = 0
