"""CLI entry point for the Lox interpreter.

Usage:
    python -m lox [-v|-vv|-vvv] [script]
    python -m lox [-v...] --emit-ast <script>
    python -m lox [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given .lox file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Without a script an interactive prompt is started; globals persist between
entries and errors do not end the session.

Exit codes follow the BSD sysexits convention: 64 for bad usage, 65 for
lexical/syntax/resolution errors, 66 for a missing input file and 70 for a
runtime error. Debug information is written to `debug.txt` in the current
directory when verbosity is greater than zero.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .ast_json import program_from_obj, program_to_obj
from .interpreter import Interpreter, RunResult
from .parser import parse_program

EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_SOFTWARE = 70


class LoxArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EX_USAGE, f"{self.prog}: error: {message}\n")


def read_source(path: Path) -> str:
    if not path.is_file():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(EX_NOINPUT)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def report(result: RunResult) -> int:
    """Print the problems in `result` to stderr and return the exit status."""
    for error in result.errors:
        print(error, file=sys.stderr)
    if result.had_error:
        return EX_DATAERR
    if result.had_runtime_error:
        print(result.runtime_error, file=sys.stderr)
        return EX_SOFTWARE
    return 0


def emit_ast(program_file: Path) -> None:
    parsed = parse_program(read_source(program_file))
    if parsed.had_error:
        for error in parsed.errors:
            print(error, file=sys.stderr)
        sys.exit(EX_DATAERR)
    obj = program_to_obj(parsed.statements)
    out_path = program_file.with_name(program_file.name + '.ast.json')
    with open(out_path, 'w', encoding='utf-8') as out:
        json.dump(obj, out, ensure_ascii=False, indent=2)
    print(str(out_path))


def run_prompt(interpreter: Interpreter) -> None:
    while True:
        try:
            line = input('> ')
        except EOFError:
            print()
            return
        report(interpreter.run_source(line))


def main(argv: Optional[List[str]] = None) -> None:
    parser = LoxArgumentParser(prog='lox', description="Lox language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='LOX_FILE', help='emit AST JSON for the given .lox file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('script', nargs='?', help='Lox script (.lox) to execute')
    args = parser.parse_args(argv)

    if args.emit_ast:
        emit_ast(Path(args.emit_ast))
        return

    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.is_file():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(EX_NOINPUT)
        try:
            with open(ast_path, 'r', encoding='utf-8') as f:
                statements = program_from_obj(json.load(f))
        except (KeyError, TypeError, ValueError, RecursionError) as e:
            print(f"Error: invalid AST file {ast_path}: {e}", file=sys.stderr)
            sys.exit(EX_DATAERR)
        interpreter = Interpreter(debug_level=args.v)
        try:
            status = report(interpreter.run_statements(statements))
        finally:
            interpreter.close()
        if status:
            sys.exit(status)
        return

    interpreter = Interpreter(debug_level=args.v)
    try:
        if not args.script:
            run_prompt(interpreter)
            return
        status = report(interpreter.run_source(read_source(Path(args.script))))
    finally:
        interpreter.close()
    if status:
        sys.exit(status)


if __name__ == '__main__':
    main()
