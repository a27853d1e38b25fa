"""JSON serialization/deserialization for the Lox AST.

This module converts between AST dataclasses and plain Python dict/list
structures suitable for JSON encoding. Every node and token round-trips;
binding distances are not stored, so a loaded program is resolved again
before it runs.
"""

from __future__ import annotations

from typing import Any, Dict, List

from .ast import (
    Assign,
    BinaryOp,
    Block,
    Call,
    ExprStmt,
    FuncDecl,
    Grouping,
    IfStmt,
    Literal,
    LogicalOp,
    PrintStmt,
    ReturnStmt,
    Stmt,
    UnaryOp,
    VarDecl,
    Variable,
    WhileStmt,
)
from .tokens import Token, TokenType


def token_to_obj(t: Token) -> Dict[str, Any]:
    return {"__type__": "Token", "type": t.type.name, "lexeme": t.lexeme, "literal": t.literal, "line": t.line}


def token_from_obj(o: Dict[str, Any]) -> Token:
    return Token(TokenType[o["type"]], o["lexeme"], o.get("literal"), o["line"])


def program_to_obj(statements: List[Stmt]) -> Dict[str, Any]:
    return {"type": "Program", "body": [ast_to_obj(s) for s in statements]}


def program_from_obj(obj: Dict[str, Any]) -> List[Stmt]:
    if not isinstance(obj, dict) or obj.get("type") != "Program":
        raise ValueError("Invalid AST object: expected a Program")
    return [ast_from_obj(s) for s in obj["body"]]


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None:
        return None
    if isinstance(node, (float, str, bool)):
        return node

    if isinstance(node, Token):
        return token_to_obj(node)

    # Statements
    if isinstance(node, ExprStmt):
        return {"type": "ExprStmt", "expression": ast_to_obj(node.expression)}
    if isinstance(node, PrintStmt):
        return {"type": "PrintStmt", "expression": ast_to_obj(node.expression)}
    if isinstance(node, VarDecl):
        return {"type": "VarDecl", "name": ast_to_obj(node.name), "initializer": ast_to_obj(node.initializer)}
    if isinstance(node, Block):
        return {"type": "Block", "statements": [ast_to_obj(s) for s in node.statements]}
    if isinstance(node, IfStmt):
        return {
            "type": "IfStmt",
            "condition": ast_to_obj(node.condition),
            "then_branch": ast_to_obj(node.then_branch),
            "else_branch": ast_to_obj(node.else_branch),
        }
    if isinstance(node, WhileStmt):
        return {"type": "WhileStmt", "condition": ast_to_obj(node.condition), "body": ast_to_obj(node.body)}
    if isinstance(node, FuncDecl):
        return {
            "type": "FuncDecl",
            "name": ast_to_obj(node.name),
            "params": [ast_to_obj(p) for p in node.params],
            "body": [ast_to_obj(s) for s in node.body],
        }
    if isinstance(node, ReturnStmt):
        return {"type": "ReturnStmt", "keyword": ast_to_obj(node.keyword), "value": ast_to_obj(node.value)}

    # Expressions
    if isinstance(node, Literal):
        return {"type": "Literal", "value": ast_to_obj(node.value)}
    if isinstance(node, Grouping):
        return {"type": "Grouping", "expression": ast_to_obj(node.expression)}
    if isinstance(node, UnaryOp):
        return {"type": "UnaryOp", "operator": ast_to_obj(node.operator), "operand": ast_to_obj(node.operand)}
    if isinstance(node, (BinaryOp, LogicalOp)):
        return {
            "type": type(node).__name__,
            "left": ast_to_obj(node.left),
            "operator": ast_to_obj(node.operator),
            "right": ast_to_obj(node.right),
        }
    if isinstance(node, Variable):
        return {"type": "Variable", "name": ast_to_obj(node.name)}
    if isinstance(node, Assign):
        return {"type": "Assign", "name": ast_to_obj(node.name), "value": ast_to_obj(node.value)}
    if isinstance(node, Call):
        return {
            "type": "Call",
            "callee": ast_to_obj(node.callee),
            "paren": ast_to_obj(node.paren),
            "arguments": [ast_to_obj(a) for a in node.arguments],
        }

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (float, str, bool)):
        return obj
    if isinstance(obj, int):
        # JSON writers may drop the fraction of whole-number floats
        return float(obj)
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    if obj.get("__type__") == "Token":
        return token_from_obj(obj)
    t = obj.get("type")
    if t == "ExprStmt":
        return ExprStmt(ast_from_obj(obj["expression"]))
    if t == "PrintStmt":
        return PrintStmt(ast_from_obj(obj["expression"]))
    if t == "VarDecl":
        return VarDecl(ast_from_obj(obj["name"]), ast_from_obj(obj.get("initializer")))
    if t == "Block":
        return Block(tuple(ast_from_obj(s) for s in obj["statements"]))
    if t == "IfStmt":
        return IfStmt(
            ast_from_obj(obj["condition"]),
            ast_from_obj(obj["then_branch"]),
            ast_from_obj(obj.get("else_branch")),
        )
    if t == "WhileStmt":
        return WhileStmt(ast_from_obj(obj["condition"]), ast_from_obj(obj["body"]))
    if t == "FuncDecl":
        return FuncDecl(
            ast_from_obj(obj["name"]),
            tuple(ast_from_obj(p) for p in obj["params"]),
            tuple(ast_from_obj(s) for s in obj["body"]),
        )
    if t == "ReturnStmt":
        return ReturnStmt(ast_from_obj(obj["keyword"]), ast_from_obj(obj.get("value")))
    if t == "Literal":
        return Literal(ast_from_obj(obj["value"]))
    if t == "Grouping":
        return Grouping(ast_from_obj(obj["expression"]))
    if t == "UnaryOp":
        return UnaryOp(ast_from_obj(obj["operator"]), ast_from_obj(obj["operand"]))
    if t == "BinaryOp":
        return BinaryOp(ast_from_obj(obj["left"]), ast_from_obj(obj["operator"]), ast_from_obj(obj["right"]))
    if t == "LogicalOp":
        return LogicalOp(ast_from_obj(obj["left"]), ast_from_obj(obj["operator"]), ast_from_obj(obj["right"]))
    if t == "Variable":
        return Variable(ast_from_obj(obj["name"]))
    if t == "Assign":
        return Assign(ast_from_obj(obj["name"]), ast_from_obj(obj["value"]))
    if t == "Call":
        return Call(
            ast_from_obj(obj["callee"]),
            ast_from_obj(obj["paren"]),
            tuple(ast_from_obj(a) for a in obj["arguments"]),
        )

    raise ValueError(f"Unknown AST node type: {t}")
