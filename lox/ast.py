"""Abstract Syntax Tree (AST) definitions for Lox.

Nodes are frozen dataclasses built once by the parser. They compare and
hash by identity (`eq=False`), so two structurally identical expressions at
different places in a program remain distinct keys in the resolver's
binding-distance table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

from .tokens import Token


@dataclass(frozen=True, eq=False)
class Node:
    """Base class for all AST nodes."""
    pass


###############################################################################
# Expressions
###############################################################################


@dataclass(frozen=True, eq=False)
class Literal(Node):
    value: Any  # None, bool, float or str


@dataclass(frozen=True, eq=False)
class Grouping(Node):
    expression: 'Expr'


@dataclass(frozen=True, eq=False)
class UnaryOp(Node):
    operator: Token
    operand: 'Expr'


@dataclass(frozen=True, eq=False)
class BinaryOp(Node):
    left: 'Expr'
    operator: Token
    right: 'Expr'


@dataclass(frozen=True, eq=False)
class LogicalOp(Node):
    left: 'Expr'
    operator: Token  # AND or OR
    right: 'Expr'


@dataclass(frozen=True, eq=False)
class Variable(Node):
    name: Token


@dataclass(frozen=True, eq=False)
class Assign(Node):
    name: Token
    value: 'Expr'


@dataclass(frozen=True, eq=False)
class Call(Node):
    callee: 'Expr'
    paren: Token  # closing paren, for error locations
    arguments: Tuple['Expr', ...]


Expr = Union[Literal, Grouping, UnaryOp, BinaryOp, LogicalOp, Variable, Assign, Call]


###############################################################################
# Statements
###############################################################################


@dataclass(frozen=True, eq=False)
class ExprStmt(Node):
    expression: Expr


@dataclass(frozen=True, eq=False)
class PrintStmt(Node):
    expression: Expr


@dataclass(frozen=True, eq=False)
class VarDecl(Node):
    name: Token
    initializer: Optional[Expr]


@dataclass(frozen=True, eq=False)
class Block(Node):
    statements: Tuple['Stmt', ...]


@dataclass(frozen=True, eq=False)
class IfStmt(Node):
    condition: Expr
    then_branch: 'Stmt'
    else_branch: Optional['Stmt']  # None when there is no else


@dataclass(frozen=True, eq=False)
class WhileStmt(Node):
    condition: Expr
    body: 'Stmt'


@dataclass(frozen=True, eq=False)
class FuncDecl(Node):
    name: Token
    params: Tuple[Token, ...]
    body: Tuple['Stmt', ...]


@dataclass(frozen=True, eq=False)
class ReturnStmt(Node):
    keyword: Token
    value: Optional[Expr]


Stmt = Union[ExprStmt, PrintStmt, VarDecl, Block, IfStmt, WhileStmt, FuncDecl, ReturnStmt]
