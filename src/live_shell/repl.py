"""
Read-eval-print loop for the live shell.

Reads logical lines, decides whether each is a statement or an expression,
runs it through an injected executor and prints captured output plus, for
expressions, a dump of the produced value.
"""

from __future__ import annotations

import logging
import re
import sys
from enum import Enum
from pathlib import Path
from typing import Optional, TextIO, Union

from .executor import Executor, dump_value
from .line_reader import EXIT_COMMAND, LineReader
from .session import Session
from .watch import configure_watch, has_changed

logger = logging.getLogger(__name__)

EXIT_CODE_NORMAL = 0
EXIT_CODE_RESTART = 10
RESTART_COMMAND = "restart"

STATEMENT_KEYWORDS = (
    "echo",
    "global",
    "unset",
    "function",
    "do",
    "while",
    "for",
    "foreach",
    "if",
    "switch",
    "include",
    "include_once",
    "require",
    "require_once",
    "import",
    "from",
    "def",
    "class",
    "with",
    "try",
    "del",
    "raise",
    "assert",
    "pass",
    "nonlocal",
    "async",
    "print",
)

_STATEMENT_PATTERN = re.compile(
    r"^(" + "|".join(re.escape(keyword) for keyword in STATEMENT_KEYWORDS) + r")[(\s]+"
)
_RETURN_PATTERN = re.compile(r"^return[(\s]+")


class LineKind(str, Enum):
    STATEMENT = "statement"
    EXPRESSION = "expression"


def normalize_line(line: str) -> str:
    """Drop leading indentation and end the line with exactly one semicolon."""
    return line.lstrip().rstrip(";") + ";"


def classify_line(line: str) -> LineKind:
    """Classify a normalized line by its leading keyword (case-sensitive)."""
    if _STATEMENT_PATTERN.match(line):
        return LineKind.STATEMENT
    return LineKind.EXPRESSION


def as_return(line: str) -> str:
    """Prefix ``return`` unless the line already starts with it."""
    if _RETURN_PATTERN.match(line):
        return line
    return "return " + line


def _normalize_output(output: str) -> str:
    if not output:
        return ""
    return output.rstrip("\n") + "\n"


class REPL:
    """
    Interactive evaluator loop.

    ``start`` returns EXIT_CODE_NORMAL when the operator exits and
    EXIT_CODE_RESTART when a restart was requested or the watched path changed.
    """

    def __init__(
        self,
        prompt: str,
        executor: Executor,
        line_reader: Optional[LineReader] = None,
        stdout: Optional[TextIO] = None,
        quiet: bool = False,
        history_file: Optional[Path] = None,
    ):
        """
        Initialize the loop.

        Args:
            prompt: Prompt for each new logical line
            executor: Runs code in the caller's namespace
            line_reader: Reader for input (defaults to a shell-backed LineReader)
            stdout: Primary output stream (defaults to sys.stdout)
            quiet: Suppress status lines and the ``=> `` value display
            history_file: Optional explicit history file

        Raises:
            ConfigurationError: If the default reader has no valid shell binary
        """
        self.session = Session.create(prompt, history_file=history_file)
        self.executor = executor
        self.line_reader = line_reader or LineReader(self.session.history_file)
        self.quiet = quiet
        self._stdout = stdout

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    def set_watch_path(self, path: Union[str, Path]) -> None:
        """
        Set a path to watch for changes.

        Raises:
            ConfigurationError: If the path does not exist
        """
        configure_watch(self.session, path)

    def start(self) -> int:
        """
        Run the loop until exit or restart.

        Exceptions raised by evaluated code are not caught.

        Returns:
            EXIT_CODE_NORMAL or EXIT_CODE_RESTART
        """
        while True:
            if self.session.watching and has_changed(self.session):
                self._log(f"Detected changes in {self.session.watch_path}, restarting shell...")
                return EXIT_CODE_RESTART

            line = self.line_reader.read_line(self.session.prompt)

            if line == "":
                continue

            if line.strip() == EXIT_COMMAND:
                return EXIT_CODE_NORMAL

            if line.strip() == RESTART_COMMAND:
                self._log("Restarting shell...")
                return EXIT_CODE_RESTART

            self.evaluate(line)

    def evaluate(self, line: str) -> None:
        """Run one logical line and write its output."""
        line = normalize_line(line)
        kind = classify_line(line)
        logger.debug("Evaluating %s: %s", kind.value, line)

        if kind is LineKind.STATEMENT:
            result = self.executor.execute(line)
            self._write(_normalize_output(result.output))
            return

        result = self.executor.execute(as_return(line))
        self._write(_normalize_output(result.output))
        if not self.quiet:
            self._write("=> " + dump_value(result.value))

    def _write(self, text: str) -> None:
        if not text:
            return
        self.stdout.write(text)
        self.stdout.flush()

    def _log(self, message: str) -> None:
        if self.quiet:
            return
        self._write(message + "\n")
