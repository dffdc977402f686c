"""
Live shell - an interactive Python console inside a running process.

Provides:
- A read-eval-print loop with statement/expression dispatch
- Shell-backed line reading with persisted history and continuation lines
- Restart on request or when a watched path changes
- Deferred start until a host action fires
"""

__version__ = "0.1.0"

from .command import ShellCommand, select_implementation
from .exceptions import ShellError, ConfigurationError
from .executor import Executor, ExecutionResult, NamespaceExecutor, dump_value
from .hooks import ActionRegistry, add_action, did_action, do_action, get_global_actions
from .line_reader import LineReader
from .repl import REPL, EXIT_CODE_NORMAL, EXIT_CODE_RESTART, LineKind, classify_line
from .session import Session
from .settings import ShellOptions, load_settings

__all__ = [
    "__version__",
    "ShellCommand",
    "select_implementation",
    "ShellError",
    "ConfigurationError",
    "Executor",
    "ExecutionResult",
    "NamespaceExecutor",
    "dump_value",
    "ActionRegistry",
    "add_action",
    "did_action",
    "do_action",
    "get_global_actions",
    "LineReader",
    "REPL",
    "EXIT_CODE_NORMAL",
    "EXIT_CODE_RESTART",
    "LineKind",
    "classify_line",
    "Session",
    "ShellOptions",
    "load_settings",
]
