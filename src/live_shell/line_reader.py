"""
Line reader for the live shell.

Reads one logical line of input through an interactive shell's ``read -e`` so
that line editing and persisted history come from the shell itself.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import IO, Callable, List, Optional, Union

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SHELL_ENV_VAR = "LIVE_SHELL_CUSTOM_SHELL"
DEFAULT_SHELL = "/bin/bash"
CONTINUATION_PROMPT = "--> "
EXIT_COMMAND = "exit"

Runner = Callable[[List[str]], Optional[str]]


def resolve_shell_binary(shell_binary: Optional[str] = None) -> str:
    """
    Return the shell used for reading input.

    Priority:
        1. Explicit ``shell_binary`` argument.
        2. LIVE_SHELL_CUSTOM_SHELL environment variable.
        3. /bin/bash.

    Raises:
        ConfigurationError: If the binary is not an existing, readable file
    """
    binary = shell_binary or os.getenv(SHELL_ENV_VAR) or DEFAULT_SHELL

    if not os.path.isfile(binary) or not os.access(binary, os.R_OK):
        raise ConfigurationError(
            f"The shell binary '{binary}' is not valid. You can override the shell "
            f"to be used through the {SHELL_ENV_VAR} environment variable.",
            setting=SHELL_ENV_VAR,
        )
    return binary


def build_prompt_command(
    prompt: str, history_path: Union[str, Path], shell_binary: str
) -> List[str]:
    """
    Build the argv that reads a single line with history support.

    Args:
        prompt: Prompt text shown by ``read -p``
        history_path: File the shell loads history from and writes it back to
        shell_binary: Path to the shell

    Returns:
        Argument vector for subprocess
    """
    prompt_arg = shlex.quote(prompt)
    history_arg = shlex.quote(str(history_path))

    script = (
        "set -f; "
        f"history -r {history_arg}; "
        'LINE=""; '
        f"read -re -p {prompt_arg} LINE; "
        "[ $? -eq 0 ] || exit; "
        'history -s "$LINE"; '
        f"history -w {history_arg}; "
        "printf '%s\\n' \"$LINE\"; "
    )
    return [shell_binary, "-c", script]


def run_prompt_command(argv: List[str], stdin: Optional[Union[int, IO]] = None) -> Optional[str]:
    """
    Run the prompt command and return what it printed, or None if it failed.

    Bytes that do not decode in the locale encoding become U+FFFD.
    """
    try:
        completed = subprocess.run(
            argv, stdin=stdin, stdout=subprocess.PIPE, text=True, errors="replace"
        )
    except OSError as exc:
        logger.debug("Could not run %s: %s", argv[0], exc)
        return None

    if completed.returncode != 0:
        return None
    return completed.stdout


class LineReader:
    """
    Reads logical lines, joining backslash continuations.

    End of input is reported as the ``exit`` command.
    """

    def __init__(
        self,
        history_file: Union[str, Path],
        shell_binary: Optional[str] = None,
        runner: Optional[Runner] = None,
    ):
        """
        Initialize the reader.

        Args:
            history_file: History file shared with other sessions of the same cwd/user
            shell_binary: Optional shell override (else environment, else /bin/bash)
            runner: Callable executing the prompt argv and returning its stdout

        Raises:
            ConfigurationError: If the shell binary is not valid
        """
        self.history_file = Path(history_file)
        self.shell_binary = resolve_shell_binary(shell_binary)
        self._runner = runner or run_prompt_command

    def read_line(self, prompt: str) -> str:
        """
        Read one logical line.

        Args:
            prompt: Prompt for the first physical line

        Returns:
            The assembled line, or ``exit`` if nothing could be read
        """
        full_line: Optional[str] = None

        while True:
            current_prompt = CONTINUATION_PROMPT if full_line is not None else prompt
            line = self._runner(
                build_prompt_command(current_prompt, self.history_file, self.shell_binary)
            )

            if not line:
                break

            line = line.rstrip("\n")
            done = not line.endswith("\\")
            if not done:
                line = line[:-1]

            full_line = (full_line or "") + line
            if done:
                break

        if full_line is None:
            return EXIT_COMMAND

        return full_line
