"""
Code execution against an externally supplied namespace.

The shell never builds the namespace it runs code in; callers inject it, and
``NamespaceExecutor`` runs each line inside it while capturing stdout.
"""

from __future__ import annotations

import ast
import contextlib
import io
import re
import types
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Set

FILENAME = "<live-shell>"
RETURN_PATTERN = re.compile(r"^return(?=[(\s])")


@dataclass
class ExecutionResult:
    """Captured stdout plus the produced value (None for statements)."""

    output: str
    value: Any = None


class Executor(Protocol):
    """Capability that runs one normalized line of code."""

    def execute(self, code: str) -> ExecutionResult:
        ...


class NamespaceExecutor:
    """
    Runs code in a caller-owned namespace.

    A line starting with ``return`` is evaluated for its value: every
    statement in it runs, and the value of the final expression (if the last
    statement is one) is returned. Any other line is executed for its effects.
    Exceptions raised by the code propagate to the caller.
    """

    def __init__(self, namespace: Optional[Dict[str, Any]] = None):
        self.namespace: Dict[str, Any] = (
            namespace if namespace is not None else {"__name__": "__console__"}
        )

    def execute(self, code: str) -> ExecutionResult:
        buffer = io.StringIO()
        with contextlib.redirect_stdout(buffer):
            match = RETURN_PATTERN.match(code)
            if match:
                value = self._evaluate(code[match.end():].lstrip())
            else:
                self._run(code)
                value = None
        return ExecutionResult(output=buffer.getvalue(), value=value)

    def _run(self, code: str) -> None:
        exec(compile(code, FILENAME, "exec"), self.namespace)

    def _evaluate(self, body: str) -> Any:
        # "return" on its own, or followed by nothing but separators
        if not body.strip().strip(";").strip():
            return None

        tree = ast.parse(body, FILENAME, "exec")
        if not tree.body:
            return None

        last = tree.body[-1]
        if not isinstance(last, ast.Expr):
            exec(compile(tree, FILENAME, "exec"), self.namespace)
            return None

        head = ast.Module(body=tree.body[:-1], type_ignores=[])
        exec(compile(head, FILENAME, "exec"), self.namespace)
        return eval(compile(ast.Expression(last.value), FILENAME, "eval"), self.namespace)


def dump_value(value: Any) -> str:
    """
    Return a verbose dump of a value's type and contents.

    Scalars print as ``type(value)``, strings with their length
    (``str(6) "WP-CLI"``), modules as ``module(name)`` and containers
    recursively with one entry per line. A container reached a second time,
    through a cycle or another path, prints as ``*RECURSION*``.
    The result always ends with a newline.
    """
    lines: List[str] = []
    _dump(value, 0, lines, set())
    return "\n".join(lines) + "\n"


def _dump(value: Any, depth: int, lines: List[str], seen: Set[int]) -> None:
    pad = "  " * depth

    if value is None:
        lines.append(f"{pad}None")
    elif isinstance(value, bool):
        lines.append(f"{pad}bool({value})")
    elif isinstance(value, (int, float, complex)):
        lines.append(f"{pad}{type(value).__name__}({value!r})")
    elif isinstance(value, str):
        lines.append(f'{pad}str({len(value)}) "{value}"')
    elif isinstance(value, (bytes, bytearray)):
        lines.append(f"{pad}{type(value).__name__}({len(value)}) {value!r}")
    elif isinstance(value, types.ModuleType):
        lines.append(f"{pad}module({value.__name__})")
    elif id(value) in seen:
        lines.append(f"{pad}*RECURSION*")
    elif isinstance(value, dict):
        _dump_items(value, list(value.items()), "{", "}", depth, lines, seen)
    elif isinstance(value, (list, tuple)):
        _dump_items(value, list(enumerate(value)), "[", "]", depth, lines, seen)
    elif isinstance(value, (set, frozenset)):
        _dump_items(value, list(enumerate(sorted(value, key=repr))), "{", "}", depth, lines, seen)
    elif hasattr(value, "__dict__") and not callable(value):
        attributes = vars(value)
        name = f"object({type(value).__qualname__})#{id(value)} ({len(attributes)})"
        _dump_items(value, list(attributes.items()), "{", "}", depth, lines, seen, header=name)
    else:
        lines.append(f"{pad}{type(value).__qualname__}: {value!r}")


def _dump_items(container, items, opening, closing, depth, lines, seen, header=None) -> None:
    pad = "  " * depth
    if header is None:
        header = f"{type(container).__name__}({len(container)})"
    lines.append(f"{pad}{header} {opening}")

    if items:
        seen.add(id(container))
    for key, item in items:
        label = f'"{key}"' if isinstance(key, str) else repr(key)
        lines.append(f"{pad}  [{label}]=>")
        _dump(item, depth + 1, lines, seen)

    lines.append(f"{pad}{closing}")
