from dataclasses import dataclass
from typing import Any

from lox.tokens import Token, TokenType


@dataclass(frozen=True)
class Diagnostic:
    """A compile-time problem (lexical, syntax or resolution) tied to a line."""
    line: int
    message: str
    where: str = ''

    @classmethod
    def at_token(cls, token: Token, message: str) -> 'Diagnostic':
        if token.type == TokenType.EOF:
            return cls(token.line, message, ' at end')
        return cls(token.line, message, f" at '{token.lexeme}'")

    def __str__(self) -> str:
        return f"[line {self.line}] Error{self.where}: {self.message}"


class LoxRuntimeError(Exception):
    """Exception type used to abort evaluation at the first runtime error."""
    def __init__(self, token: Token, message: str):
        super().__init__(message)
        self.token = token
        self.message = message

    def __str__(self) -> str:
        return f"{self.message}\n[line {self.token.line}]"


class ParseError(Exception):
    """Internal signal unwinding the parser to the nearest statement boundary."""
    pass


@dataclass
class ReturnSignal:
    """Outcome of executing a `return` statement.

    It is handed back as the result of statement execution (never raised)
    until the enclosing function call picks up `value`.
    """
    value: Any


class NestingError(Exception):
    """Internal signal unwinding the resolver once nesting exhausts the stack.

    `args[0]` is the token the overflow is reported at.
    """
    pass
