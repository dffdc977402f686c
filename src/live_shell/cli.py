"""Command-line entry point for the live shell."""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .command import ShellCommand, prepare_host
from .exceptions import ConfigurationError
from .settings import ShellOptions, load_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="live-shell",
        description=(
            "Opens an interactive Python console for running and testing code "
            "inside the running process. Type a statement or expression and see "
            "it execute; type 'restart' to reload code, 'exit' to leave."
        ),
    )
    parser.add_argument(
        "--basic",
        action="store_true",
        default=None,
        help="Force the built-in REPL, even if IPython or ptpython are available.",
    )
    parser.add_argument("--quiet", action="store_true", default=None, help="Suppress status lines and '=> ' values.")
    parser.add_argument("--hook", help="Start the shell once this action has fired.")
    parser.add_argument("--watch", help="Restart the shell when this file or directory changes.")
    parser.add_argument("--path", help="Host project directory to run from.")
    parser.add_argument("--bootstrap", help="Module whose globals become the shell namespace.")
    parser.add_argument("--config", dest="config_dir", help="Directory containing shell.yaml.")
    parser.add_argument("--prompt", help="Prompt for each new line.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    return parser


def build_options(args: argparse.Namespace) -> ShellOptions:
    """
    Merge shell.yaml defaults with command-line flags.

    Raises:
        ConfigurationError: If settings are malformed or invalid
    """
    config_dir = Path(args.config_dir or ".").expanduser().resolve()
    values = load_settings(str(config_dir))
    values["config_dir"] = config_dir
    for key in ("basic", "quiet", "hook", "watch", "path", "bootstrap", "prompt"):
        value = getattr(args, key)
        if value is not None:
            values[key] = value
    return ShellOptions.build(**values)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        options = build_options(args)
        prepare_host(options)

        command = ShellCommand(options)
        exit_code = command.invoke()
        if exit_code is not None:
            return exit_code

        # Deferred: give the host a chance to fire the hook
        if options.bootstrap:
            importlib.import_module(options.bootstrap)
        if command.exit_code is None:
            raise ConfigurationError(
                f"The hook '{options.hook}' never fired.", setting="hook"
            )
        return command.exit_code
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

