# Lox language package
# This package provides a lexer, parser, resolver and tree-walking interpreter for Lox.
from .errors import Diagnostic, LoxRuntimeError
from .interpreter import Interpreter, RunResult, run_program
from .parser import parse_program
from .resolver import resolve_program

__all__ = [
    'run_program',
    'parse_program',
    'resolve_program',
    'Interpreter',
    'RunResult',
    'Diagnostic',
    'LoxRuntimeError',
]
