"""Replace the running shell process with a fresh one carrying the same flags."""

from __future__ import annotations

import logging
import os
import sys
from typing import Callable, List, Optional, Sequence

from .settings import ShellOptions

logger = logging.getLogger(__name__)

Exec = Callable[[str, Sequence[str]], None]


def supports_process_replacement() -> bool:
    """Whether the platform replaces the process image in place."""
    return os.name == "posix" and hasattr(os, "execv")


def _entry_point() -> List[str]:
    """Return how the interpreter was told to run this program."""
    main = sys.modules.get("__main__")
    spec = getattr(main, "__spec__", None)
    if spec is not None and spec.name:
        module = spec.name
        if module.endswith(".__main__"):
            module = module[: -len(".__main__")]
        return ["-m", module]

    script = sys.argv[0] if sys.argv and sys.argv[0] else "live-shell"
    return [os.path.realpath(script)]


def build_restart_argv(options: ShellOptions, entry: Optional[List[str]] = None) -> List[str]:
    """
    Reconstruct the command line for a fresh shell process.

    Args:
        options: Options of the running shell
        entry: Optional override for the program part (``["-m", "pkg"]`` or a script path)

    Returns:
        Full argv, starting with the interpreter binary
    """
    interpreter = os.path.realpath(sys.executable)
    return [interpreter] + (entry if entry is not None else _entry_point()) + options.to_args()


def attempt_process_restart(argv: List[str], execv: Optional[Exec] = None) -> bool:
    """
    Replace the current process with ``argv``.

    Returns only when the replacement did not happen; the caller then restarts
    the loop in the current process.

    Args:
        argv: Full argument vector, ``argv[0]`` being the interpreter binary
        execv: Replacement function (defaults to os.execv)

    Returns:
        False when the process was not replaced
    """
    if not supports_process_replacement():
        logger.debug("Process replacement unsupported on %s; restarting in-process", os.name)
        return False

    execv = execv or os.execv
    sys.stdout.flush()
    sys.stderr.flush()

    try:
        execv(argv[0], argv)
    except OSError as exc:
        logger.warning("Could not restart the shell process (%s); restarting in-process.", exc)
        return False

    logger.warning("Process replacement did not take effect; restarting in-process.")
    return False
