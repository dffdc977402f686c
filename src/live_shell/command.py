"""
The live shell command.

Picks a console implementation, optionally defers start until an action
fires, and drives restarts of the basic REPL.
"""

from __future__ import annotations

import importlib
import importlib.util
import logging
import os
import sys
from typing import Any, Callable, Dict, Optional

from .executor import NamespaceExecutor
from .exceptions import ConfigurationError
from .hooks import ActionRegistry, get_global_actions
from .repl import EXIT_CODE_NORMAL, EXIT_CODE_RESTART, REPL
from .restart import attempt_process_restart, build_restart_argv
from .settings import ShellOptions

logger = logging.getLogger(__name__)

IMPLEMENTATION_IPYTHON = "ipython"
IMPLEMENTATION_PTPYTHON = "ptpython"
IMPLEMENTATION_BASIC = "basic"

# Preference order; the first importable candidate wins
IMPLEMENTATIONS = (
    (IMPLEMENTATION_IPYTHON, "IPython"),
    (IMPLEMENTATION_PTPYTHON, "ptpython"),
)


def select_implementation(basic: bool = False, watching: bool = False) -> str:
    """
    Choose the console implementation.

    Args:
        basic: Force the built-in REPL
        watching: A watch path is configured (only the built-in REPL restarts on change)

    Returns:
        One of "ipython", "ptpython", "basic"
    """
    if basic or watching:
        return IMPLEMENTATION_BASIC

    for name, module in IMPLEMENTATIONS:
        if importlib.util.find_spec(module) is not None:
            return name

    return IMPLEMENTATION_BASIC


class ShellCommand:
    """
    Opens an interactive Python console inside the running process.

    Code typed at the prompt runs against ``namespace``, so everything the
    host process has loaded is reachable.
    """

    def __init__(
        self,
        options: ShellOptions,
        namespace: Optional[Dict[str, Any]] = None,
        actions: Optional[ActionRegistry] = None,
        repl_factory: Optional[Callable[..., REPL]] = None,
        restarter: Callable[..., bool] = attempt_process_restart,
    ):
        """
        Initialize the command.

        Args:
            options: Validated shell options
            namespace: Execution context (defaults to the bootstrap module's globals)
            actions: Action registry consulted for --hook (defaults to the global one)
            repl_factory: Builds the basic REPL (defaults to REPL)
            restarter: Attempts process replacement, returns False when it did not happen
        """
        self.options = options
        self._namespace = namespace
        self.actions = actions or get_global_actions()
        self.repl_factory = repl_factory or REPL
        self.restarter = restarter
        self.exit_code: Optional[int] = None

    def invoke(self) -> Optional[int]:
        """
        Start the shell now, or once the configured hook fires.

        Returns:
            The shell's exit code, or None if start was deferred

        Raises:
            ConfigurationError: If the hook name is blank
        """
        hook = self.options.hook
        if hook is None:
            return self.run()

        if not hook.strip():
            raise ConfigurationError("The hook name cannot be empty.", setting="hook")

        if self.actions.did_action(hook):
            return self.run()

        logger.debug("Deferring shell until '%s' fires", hook)
        self.actions.add_action(hook, self._run_deferred)
        return None

    def _run_deferred(self, *args: Any) -> None:
        self.run()

    @property
    def namespace(self) -> Dict[str, Any]:
        """The context evaluated code runs in."""
        if self._namespace is None:
            self._namespace = self._bootstrap_namespace()
        return self._namespace

    def _bootstrap_namespace(self) -> Dict[str, Any]:
        name = self.options.bootstrap
        if not name:
            return {"__name__": "__console__", "__doc__": None}

        # A hook fired while the bootstrap module imports sees its partial globals
        module = sys.modules.get(name) or importlib.import_module(name)
        return vars(module)

    def run(self) -> int:
        """
        Run the selected console.

        Returns:
            EXIT_CODE_NORMAL once the operator exits
        """
        implementation = select_implementation(
            basic=self.options.basic, watching=self.options.watch is not None
        )
        logger.debug("Using %s console", implementation)

        if implementation == IMPLEMENTATION_IPYTHON:
            self.exit_code = self._run_ipython()
        elif implementation == IMPLEMENTATION_PTPYTHON:
            self.exit_code = self._run_ptpython()
        else:
            self.exit_code = self._run_basic()
        return self.exit_code

    def _run_basic(self) -> int:
        executor = NamespaceExecutor(self.namespace)

        while True:
            repl = self.repl_factory(self.options.prompt, executor, quiet=self.options.quiet)
            if self.options.watch is not None:
                repl.set_watch_path(self.options.watch)

            exit_code = repl.start()
            if exit_code != EXIT_CODE_RESTART:
                return exit_code

            self.restarter(build_restart_argv(self.options))
            logger.info("Process was not replaced; restarting shell in-process")

    def _run_ipython(self) -> int:
        from IPython import start_ipython

        start_ipython(argv=[], user_ns=self.namespace)
        return EXIT_CODE_NORMAL

    def _run_ptpython(self) -> int:
        from ptpython.repl import embed

        embed(globals=self.namespace, locals=self.namespace)
        return EXIT_CODE_NORMAL


def prepare_host(options: ShellOptions) -> None:
    """Move into the host project so its modules import as in production."""
    if options.path is None:
        return
    os.chdir(options.path)
    if str(options.path) not in sys.path:
        sys.path.insert(0, str(options.path))
