"""Centralized path utilities for live shell state."""

from __future__ import annotations

import getpass
import hashlib
import os
import tempfile
from pathlib import Path
from typing import Optional

HISTORY_PREFIX = "live-shell-history-"


def get_temp_dir() -> Path:
    """Return the host's temporary-file directory."""
    return Path(tempfile.gettempdir())


def get_current_user() -> str:
    """Return the invoking user's login name, or an empty string if unknown."""
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return ""


def history_file_path(cwd: Optional[str] = None, user: Optional[str] = None) -> Path:
    """Return the history file for a (working directory, user) pair.

    The name is derived from an md5 of the two values so that every session
    started from the same directory by the same user shares its history.
    """
    if cwd is None:
        cwd = os.getcwd()
    if user is None:
        user = get_current_user()

    digest = hashlib.md5(f"{cwd}{user}".encode("utf-8")).hexdigest()
    return get_temp_dir() / f"{HISTORY_PREFIX}{digest}"
