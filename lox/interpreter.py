"""Tree-walking interpreter for Lox.

The interpreter evaluates the statement list produced by the parser,
using the binding distances computed by the resolver to find each local
variable in exactly the right environment frame. The active frame is passed
explicitly to `execute`/`evaluate`, so leaving a block (normally, through a
`return`, or through an error) automatically goes back to the caller's frame.

`return` is not an exception here: `execute` hands back a `ReturnSignal`
and every construct that runs nested statements passes it straight up until
the enclosing function call unwraps it.

Runtime errors raise `LoxRuntimeError` and stop the program at the first
one. `interpret` catches it and returns it to the caller for reporting.
Running out of Python stack, through deep recursion or deeply nested
operators, becomes a "Stack overflow." error at the call or operator that
overflowed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .ast import (
    Assign, BinaryOp, Block, Call, Expr, ExprStmt, FuncDecl, Grouping,
    IfStmt, Literal, LogicalOp, PrintStmt, ReturnStmt, Stmt, UnaryOp,
    VarDecl, Variable, WhileStmt,
)
from .environment import Environment
from .errors import Diagnostic, LoxRuntimeError, ReturnSignal
from .parser import parse_program
from .resolver import Resolution, resolve_program
from .std import populate_native_environment
from .tokens import Token, TokenType
from .types import LoxCallable, LoxFunction, is_equal, is_truthy, to_string, type_name


@dataclass
class RunResult:
    """Outcome of pushing one source text through the whole pipeline."""
    errors: List[Diagnostic] = field(default_factory=list)
    runtime_error: Optional[LoxRuntimeError] = None

    @property
    def had_error(self) -> bool:
        return bool(self.errors)

    @property
    def had_runtime_error(self) -> bool:
        return self.runtime_error is not None


class Interpreter:
    """Core interpreter that executes a resolved Lox AST."""
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.global_env = populate_native_environment(Environment())
        self.locals: Dict[Expr, int] = {}
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None

    def debug(self, msg: str):
        if self.debug_level > 0 and self.debug_fp:
            self.debug_fp.write(msg + '\n')
            self.debug_fp.flush()

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Resolver hand-off

    def resolve(self, expr: Expr, depth: int):
        self.locals[expr] = depth

    def add_resolution(self, resolution: Resolution):
        for expr, depth in resolution.locals.items():
            self.resolve(expr, depth)

    # Public API

    def run_source(self, source: str) -> RunResult:
        """Lex, parse, resolve and run `source` against this interpreter's globals."""
        parsed = parse_program(source)
        if parsed.had_error:
            self.debug(f"parse: {len(parsed.errors)} error(s)")
            return RunResult(errors=parsed.errors)
        return self.run_statements(parsed.statements)

    def run_statements(self, statements: List[Stmt]) -> RunResult:
        """Resolve and run an already parsed program."""
        resolution = resolve_program(statements)
        if resolution.had_error:
            self.debug(f"resolve: {len(resolution.errors)} error(s)")
            return RunResult(errors=resolution.errors)
        self.debug(f"resolve: {len(resolution.locals)} local reference(s)")
        self.add_resolution(resolution)
        return RunResult(runtime_error=self.interpret(statements))

    def interpret(self, statements: List[Stmt]) -> Optional[LoxRuntimeError]:
        """Run top-level statements, stopping at the first runtime error.

        Returns the error that stopped execution, or None.
        """
        self.debug(f"interpret: {len(statements)} statement(s)")
        try:
            for stmt in statements:
                self.execute(stmt, self.global_env)
        except LoxRuntimeError as error:
            self.debug(f"runtime error at line {error.token.line}: {error.message}")
            return error
        return None

    def execute_block(self, statements, env: Environment) -> Optional[ReturnSignal]:
        for stmt in statements:
            result = self.execute(stmt, env)
            if isinstance(result, ReturnSignal):
                return result
        return None

    def execute(self, node: Stmt, env: Environment) -> Optional[ReturnSignal]:
        if isinstance(node, ExprStmt):
            self.evaluate(node.expression, env)
            return None
        if isinstance(node, PrintStmt):
            value = self.evaluate(node.expression, env)
            print(to_string(value))
            return None
        if isinstance(node, VarDecl):
            value = self.evaluate(node.initializer, env) if node.initializer is not None else None
            env.define(node.name.lexeme, value)
            if self.debug_level >= 2:
                self.debug(f"declare {node.name.lexeme}: {type_name(value)} = {to_string(value)}")
            return None
        if isinstance(node, Block):
            return self.execute_block(node.statements, Environment(parent=env))
        if isinstance(node, IfStmt):
            cond = self.evaluate(node.condition, env)
            truthy = is_truthy(cond)
            if self.debug_level >= 3:
                self.debug(f"if condition {to_string(cond)} -> {truthy}")
            if truthy:
                return self.execute(node.then_branch, env)
            if node.else_branch is not None:
                return self.execute(node.else_branch, env)
            return None
        if isinstance(node, WhileStmt):
            while True:
                cond = self.evaluate(node.condition, env)
                if self.debug_level >= 3:
                    self.debug(f"while condition {to_string(cond)}")
                if not is_truthy(cond):
                    break
                result = self.execute(node.body, env)
                if isinstance(result, ReturnSignal):
                    return result
            return None
        if isinstance(node, FuncDecl):
            # Closes over the frame active at the declaration, not at the call
            env.define(node.name.lexeme, LoxFunction(node, env))
            if self.debug_level >= 2:
                self.debug(f"define function {node.name.lexeme}/{len(node.params)}")
            return None
        if isinstance(node, ReturnStmt):
            value = self.evaluate(node.value, env) if node.value is not None else None
            return ReturnSignal(value)
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def evaluate(self, node: Expr, env: Environment) -> Any:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Grouping):
            return self.evaluate(node.expression, env)
        if isinstance(node, Variable):
            return self.look_up_variable(node.name, node, env)
        if isinstance(node, Assign):
            try:
                value = self.evaluate(node.value, env)
            except RecursionError:
                raise LoxRuntimeError(node.name, "Stack overflow.")
            distance = self.locals.get(node)
            if distance is not None:
                env.assign_at(distance, node.name, value)
            else:
                self.global_env.assign(node.name, value)
            return value
        if isinstance(node, LogicalOp):
            try:
                left = self.evaluate(node.left, env)
                if node.operator.type == TokenType.OR:
                    if is_truthy(left):
                        return left
                elif not is_truthy(left):
                    return left
                return self.evaluate(node.right, env)
            except RecursionError:
                raise LoxRuntimeError(node.operator, "Stack overflow.")
        if isinstance(node, UnaryOp):
            try:
                operand = self.evaluate(node.operand, env)
            except RecursionError:
                raise LoxRuntimeError(node.operator, "Stack overflow.")
            if node.operator.type == TokenType.BANG:
                return not is_truthy(operand)
            if node.operator.type == TokenType.MINUS:
                self.check_number_operand(node.operator, operand)
                return -operand
            raise LoxRuntimeError(node.operator, f"Unknown unary operator {node.operator.lexeme}.")
        if isinstance(node, BinaryOp):
            try:
                left = self.evaluate(node.left, env)
                right = self.evaluate(node.right, env)
            except RecursionError:
                raise LoxRuntimeError(node.operator, "Stack overflow.")
            return self.apply_binary_op(node.operator, left, right)
        if isinstance(node, Call):
            callee = self.evaluate(node.callee, env)
            args = [self.evaluate(arg, env) for arg in node.arguments]
            try:
                return self.call_function(callee, args, node.paren)
            except RecursionError:
                raise LoxRuntimeError(node.paren, "Stack overflow.")
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def look_up_variable(self, name: Token, node: Expr, env: Environment) -> Any:
        distance = self.locals.get(node)
        if distance is not None:
            return env.get_at(distance, name)
        return self.global_env.get(name)

    def call_function(self, func: Any, args: List[Any], paren: Token) -> Any:
        if not isinstance(func, LoxCallable):
            raise LoxRuntimeError(paren, "Can only call functions and classes.")
        if len(args) != func.arity():
            raise LoxRuntimeError(paren, f"Expected {func.arity()} arguments but got {len(args)}.")
        if self.debug_level >= 3:
            self.debug(f"call {func!r} with {len(args)} argument(s)")
        return func.call(self, args)

    def check_number_operand(self, operator: Token, operand: Any):
        if isinstance(operand, float):
            return
        raise LoxRuntimeError(operator, "Operand must be a number.")

    def check_number_operands(self, operator: Token, left: Any, right: Any):
        if isinstance(left, float) and isinstance(right, float):
            return
        raise LoxRuntimeError(operator, "Operands must be numbers.")

    def apply_binary_op(self, operator: Token, a: Any, b: Any) -> Any:
        op = operator.type
        if op == TokenType.PLUS:
            if isinstance(a, float) and isinstance(b, float):
                return a + b
            if isinstance(a, str) and isinstance(b, str):
                return a + b
            raise LoxRuntimeError(operator, "Operands must be two numbers or two strings.")
        if op == TokenType.EQUAL_EQUAL:
            return is_equal(a, b)
        if op == TokenType.BANG_EQUAL:
            return not is_equal(a, b)
        self.check_number_operands(operator, a, b)
        if op == TokenType.MINUS:
            return a - b
        if op == TokenType.STAR:
            return a * b
        if op == TokenType.SLASH:
            return divide(a, b)
        if op == TokenType.GREATER:
            return a > b
        if op == TokenType.GREATER_EQUAL:
            return a >= b
        if op == TokenType.LESS:
            return a < b
        if op == TokenType.LESS_EQUAL:
            return a <= b
        raise LoxRuntimeError(operator, f"Unknown operator {operator.lexeme}.")


def divide(a: float, b: float) -> float:
    """IEEE-754 division: a zero divisor gives an infinity or NaN."""
    if b != 0.0:
        return a / b
    if a == 0.0 or math.isnan(a):
        return math.nan
    return math.copysign(math.inf, a) * math.copysign(1.0, b)


def run_program(source: str, debug_level: int = 0) -> RunResult:
    """Convenience function to run a Lox program from a source string."""
    interpreter = Interpreter(debug_level=debug_level)
    try:
        return interpreter.run_source(source)
    finally:
        interpreter.close()
