"""Static variable resolution for Lox.

The resolver walks the AST once before it runs and works out, for every
variable read and every assignment, how many scopes lie between the use and
the declaration it refers to. The interpreter then jumps straight to that
frame instead of searching the environment chain at runtime, which keeps
closures bound to the variables that were visible where they were written.

Names that are not found in any local scope are left out of the table and
treated as globals, looked up late at runtime. That makes forward references
between top-level functions legal.

All mutable state lives in a `ResolutionContext` handed down through the
recursive calls, so a `Resolver` can be reused and called re-entrantly.

A top-level statement nested too deeply for the Python stack is reported as
"Too much nesting." at the innermost operator, call or function that still
had room, and resolution carries on with the next statement.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Dict, List, Optional

from .ast import (
    Assign, BinaryOp, Block, Call, Expr, ExprStmt, FuncDecl, Grouping,
    IfStmt, Literal, LogicalOp, PrintStmt, ReturnStmt, Stmt, UnaryOp,
    VarDecl, Variable, WhileStmt,
)
from .errors import Diagnostic, NestingError
from .tokens import Token


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()


@dataclass
class Resolution:
    """Binding distances keyed by expression node, plus resolution errors."""
    locals: Dict[Expr, int] = field(default_factory=dict)
    errors: List[Diagnostic] = field(default_factory=list)

    @property
    def had_error(self) -> bool:
        return bool(self.errors)


@dataclass
class ResolutionContext:
    """Scope stack and enclosing-function kind for one resolution pass.

    Each scope maps a name to False while it is declared but its initializer
    is still being resolved, and to True once it is safe to read. Derived
    contexts made with `dataclasses.replace` share the same scope stack and
    output collections.
    """
    scopes: List[Dict[str, bool]] = field(default_factory=list)
    current_function: FunctionType = FunctionType.NONE
    locals: Dict[Expr, int] = field(default_factory=dict)
    errors: List[Diagnostic] = field(default_factory=list)

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def error(self, token: Token, message: str):
        self.errors.append(Diagnostic.at_token(token, message))

    def declare(self, name: Token):
        # Globals are never tracked
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.error(name, "Already a variable with this name in this scope.")
        scope[name.lexeme] = False

    def define(self, name: Token):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True


class Resolver:
    def resolve(self, statements: List[Stmt]) -> Resolution:
        ctx = ResolutionContext()
        for stmt in statements:
            try:
                self.resolve_statement(stmt, ctx)
            except NestingError as error:
                # Abandon this statement; the next one starts at global scope
                del ctx.scopes[:]
                ctx.error(error.args[0], "Too much nesting.")
        return Resolution(ctx.locals, ctx.errors)

    def resolve_statements(self, statements, ctx: ResolutionContext):
        for stmt in statements:
            self.resolve_statement(stmt, ctx)

    def resolve_statement(self, node: Stmt, ctx: ResolutionContext):
        if isinstance(node, Block):
            ctx.begin_scope()
            self.resolve_statements(node.statements, ctx)
            ctx.end_scope()
            return
        if isinstance(node, VarDecl):
            ctx.declare(node.name)
            if node.initializer is not None:
                self.resolve_expression(node.initializer, ctx)
            ctx.define(node.name)
            return
        if isinstance(node, FuncDecl):
            # Defined before the body is resolved so the function can recurse
            ctx.declare(node.name)
            ctx.define(node.name)
            try:
                self.resolve_function(node, FunctionType.FUNCTION, ctx)
            except RecursionError:
                raise NestingError(node.name)
            return
        if isinstance(node, ExprStmt):
            self.resolve_expression(node.expression, ctx)
            return
        if isinstance(node, PrintStmt):
            self.resolve_expression(node.expression, ctx)
            return
        if isinstance(node, IfStmt):
            # Both branches, whichever one runs
            self.resolve_expression(node.condition, ctx)
            self.resolve_statement(node.then_branch, ctx)
            if node.else_branch is not None:
                self.resolve_statement(node.else_branch, ctx)
            return
        if isinstance(node, WhileStmt):
            self.resolve_expression(node.condition, ctx)
            self.resolve_statement(node.body, ctx)
            return
        if isinstance(node, ReturnStmt):
            if ctx.current_function == FunctionType.NONE:
                ctx.error(node.keyword, "Can't return from top-level code.")
            if node.value is not None:
                self.resolve_expression(node.value, ctx)
            return
        raise NotImplementedError(f"resolve_statement: unexpected node type {type(node)}")

    def resolve_expression(self, node: Expr, ctx: ResolutionContext):
        if isinstance(node, Variable):
            if ctx.scopes and ctx.scopes[-1].get(node.name.lexeme) is False:
                ctx.error(node.name, "Can't read local variable in its own initializer.")
            self.resolve_local(node, node.name, ctx)
            return
        if isinstance(node, Assign):
            try:
                self.resolve_expression(node.value, ctx)
            except RecursionError:
                raise NestingError(node.name)
            self.resolve_local(node, node.name, ctx)
            return
        if isinstance(node, (BinaryOp, LogicalOp)):
            # No short-circuit here: both operands always resolve
            try:
                self.resolve_expression(node.left, ctx)
                self.resolve_expression(node.right, ctx)
            except RecursionError:
                raise NestingError(node.operator)
            return
        if isinstance(node, UnaryOp):
            try:
                self.resolve_expression(node.operand, ctx)
            except RecursionError:
                raise NestingError(node.operator)
            return
        if isinstance(node, Grouping):
            self.resolve_expression(node.expression, ctx)
            return
        if isinstance(node, Call):
            try:
                self.resolve_expression(node.callee, ctx)
                for arg in node.arguments:
                    self.resolve_expression(arg, ctx)
            except RecursionError:
                raise NestingError(node.paren)
            return
        if isinstance(node, Literal):
            return
        raise NotImplementedError(f"resolve_expression: unexpected node type {type(node)}")

    def resolve_local(self, node: Expr, name: Token, ctx: ResolutionContext):
        for i in range(len(ctx.scopes) - 1, -1, -1):
            if name.lexeme in ctx.scopes[i]:
                ctx.locals[node] = len(ctx.scopes) - 1 - i
                return
        # Not found locally: left for global lookup at runtime

    def resolve_function(self, func: FuncDecl, function_type: FunctionType,
                         ctx: ResolutionContext):
        inner = replace(ctx, current_function=function_type)
        inner.begin_scope()
        for param in func.params:
            inner.declare(param)
            inner.define(param)
        self.resolve_statements(func.body, inner)
        inner.end_scope()


def resolve_program(statements: List[Stmt], resolver: Optional[Resolver] = None) -> Resolution:
    """Convenience wrapper running a fresh resolution pass."""
    return (resolver or Resolver()).resolve(statements)
