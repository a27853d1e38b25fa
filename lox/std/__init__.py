import time
from typing import Any, List

from lox.builtin_function import BuiltinFunction
from lox.environment import Environment


def std_clock(args: List[Any]) -> Any:
    # Seconds as a float from a clock that never goes backwards
    return time.monotonic()


NATIVES = [
    BuiltinFunction('clock', 0, std_clock),
]


def populate_native_environment(env: Environment) -> Environment:
    """Install every native callable into `env` (normally the global frame)."""
    for native in NATIVES:
        env.define(native.name, native)
    return env
