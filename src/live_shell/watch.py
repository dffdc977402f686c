"""Modification-time snapshots for a watched file or directory tree."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Union

from .exceptions import ConfigurationError
from .session import Session

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def resolve_watch_path(path: PathLike) -> Path:
    """Return the absolute, canonical form of ``path``.

    Raises:
        ConfigurationError: If the path does not exist
    """
    if not str(path).strip():
        raise ConfigurationError("The watch path cannot be empty.", setting="watch")

    candidate = Path(path).expanduser()
    if not candidate.exists():
        raise ConfigurationError(
            f"The watch path '{path}' does not exist.", setting="watch"
        )
    return candidate.resolve()


def _mtime(path: PathLike) -> float:
    try:
        return os.stat(path).st_mtime
    except OSError:
        return 0.0


def compute_snapshot(path: PathLike) -> float:
    """
    Return the most recent modification time under ``path``.

    For a file this is its own mtime. For a directory it is the maximum mtime
    of the directory itself and of every file and subdirectory below it.
    Unreadable entries count as 0.
    """
    if os.path.isfile(path):
        return _mtime(path)

    if not os.path.isdir(path):
        return 0.0

    latest = _mtime(path)
    pending: List[str] = [os.fspath(path)]

    while pending:
        current = pending.pop()
        try:
            with os.scandir(current) as entries:
                children = list(entries)
        except OSError as exc:
            logger.debug("Skipping unreadable directory %s: %s", current, exc)
            continue

        for entry in children:
            try:
                mtime = entry.stat().st_mtime
                is_dir = entry.is_dir()
            except OSError:
                continue
            if mtime > latest:
                latest = mtime
            if is_dir:
                pending.append(entry.path)

    return latest


def configure_watch(session: Session, path: PathLike) -> None:
    """Point ``session`` at ``path`` and record its initial snapshot."""
    resolved = resolve_watch_path(path)
    session.watch_path = resolved
    session.watch_mtime = compute_snapshot(resolved)
    logger.debug("Watching %s (snapshot %s)", resolved, session.watch_mtime)


def has_changed(session: Session) -> bool:
    """
    Check whether the watched path changed since the stored snapshot.

    The stored snapshot is left untouched; a new session re-arms the watch.
    """
    if session.watch_path is None:
        return False

    return compute_snapshot(session.watch_path) != session.watch_mtime
