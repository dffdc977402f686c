"""
Session state for the live shell.

A session is created once per loop invocation and discarded on exit or restart.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .paths import history_file_path


@dataclass
class Session:
    """Prompt, history location and watch state of one loop invocation."""

    prompt: str
    history_file: Path
    watch_path: Optional[Path] = None
    watch_mtime: float = 0.0

    @classmethod
    def create(cls, prompt: str, history_file: Optional[Path] = None) -> "Session":
        """
        Create a session for the current working directory and user.

        Args:
            prompt: Prompt shown for the first physical line of input
            history_file: Optional explicit history file (defaults to the per-cwd/user file)

        Returns:
            Session object
        """
        return cls(
            prompt=prompt,
            history_file=Path(history_file) if history_file else history_file_path(),
        )

    @property
    def watching(self) -> bool:
        """Whether a watch target is configured."""
        return self.watch_path is not None

