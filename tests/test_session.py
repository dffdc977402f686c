"""Tests for the session data model."""

from pathlib import Path

from live_shell.paths import history_file_path
from live_shell.session import Session


class TestSession:
    def test_create_uses_per_directory_history(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        session = Session.create("py> ")

        assert session.prompt == "py> "
        assert session.history_file == history_file_path()
        assert session.watching is False

    def test_explicit_history_file(self, tmp_path):
        session = Session.create("py> ", history_file=tmp_path / "hist")

        assert session.history_file == tmp_path / "hist"

    def test_watching_follows_watch_path(self, tmp_path):
        session = Session("py> ", tmp_path / "hist", watch_path=tmp_path, watch_mtime=12.5)

        assert session.watching is True
        assert isinstance(session.history_file, Path)
