from dataclasses import dataclass
from typing import Any, Callable, List

from lox.types import LoxCallable


@dataclass
class BuiltinFunction(LoxCallable):
    """A native callable installed into the global frame by the host."""
    name: str
    n_args: int
    fn: Callable[[List[Any]], Any]

    def arity(self) -> int:
        return self.n_args

    def call(self, interpreter, arguments: List[Any]) -> Any:
        return self.fn(arguments)

    def __repr__(self) -> str:
        return "<native fn>"
