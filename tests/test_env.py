"""Tests für utils.env (.env-Laden und typisierte Env-Werte)."""

import os

import pytest

from utils.env import get_env_float, get_env_str, load_environment


@pytest.fixture(autouse=True)
def restore_env(monkeypatch, tmp_path):
    """load_environment() schreibt direkt in os.environ – Werte nach dem Test zurücksetzen."""
    for key in ("OPENAI_API_KEY", "FLOATSCRIBE_LANGUAGE"):
        monkeypatch.setenv(key, "placeholder")
        monkeypatch.delenv(key)
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)


class TestGetEnv:
    def test_str_strips_and_ignores_blank(self, monkeypatch):
        monkeypatch.setenv("FLOATSCRIBE_LANGUAGE", "  nl ")
        assert get_env_str("FLOATSCRIBE_LANGUAGE") == "nl"
        monkeypatch.setenv("FLOATSCRIBE_LANGUAGE", "   ")
        assert get_env_str("FLOATSCRIBE_LANGUAGE") is None

    def test_float_default_when_unset(self, clean_env):
        assert get_env_float("FLOATSCRIBE_OPEN_TIMEOUT", 3.0) == 3.0

    def test_float_parses(self, monkeypatch):
        monkeypatch.setenv("FLOATSCRIBE_OPEN_TIMEOUT", "1.5")
        assert get_env_float("FLOATSCRIBE_OPEN_TIMEOUT", 3.0) == 1.5

    def test_float_invalid_uses_default(self, monkeypatch, caplog):
        monkeypatch.setenv("FLOATSCRIBE_OPEN_TIMEOUT", "soon")
        assert get_env_float("FLOATSCRIBE_OPEN_TIMEOUT", 3.0) == 3.0
        assert "Ungültiger" in caplog.text

    def test_float_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("FLOATSCRIBE_REQUEST_TIMEOUT", "-1")
        assert get_env_float("FLOATSCRIBE_REQUEST_TIMEOUT", 60.0) == 60.0


class TestLoadEnvironment:
    def test_user_env_wins_over_local(self, tmp_path, monkeypatch, clean_env):
        user_dir = tmp_path / "user"
        user_dir.mkdir()
        (user_dir / ".env").write_text("OPENAI_API_KEY=sk-user\n")
        project = tmp_path / "project"
        project.mkdir()
        (project / ".env").write_text(
            "OPENAI_API_KEY=sk-local\nFLOATSCRIBE_LANGUAGE=nl\n"
        )
        monkeypatch.chdir(project)

        load_environment(user_dir=user_dir)

        assert os.environ["OPENAI_API_KEY"] == "sk-user"
        assert os.environ["FLOATSCRIBE_LANGUAGE"] == "nl"

    def test_process_env_wins_by_default(self, tmp_path, monkeypatch, clean_env):
        (tmp_path / ".env").write_text("OPENAI_API_KEY=sk-file\n")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-process")

        load_environment(user_dir=tmp_path)

        assert os.environ["OPENAI_API_KEY"] == "sk-process"

    def test_override_existing(self, tmp_path, monkeypatch, clean_env):
        (tmp_path / ".env").write_text("OPENAI_API_KEY=sk-file\n")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-process")

        load_environment(override_existing=True, user_dir=tmp_path)

        assert os.environ["OPENAI_API_KEY"] == "sk-file"

    def test_missing_files_are_ignored(self, tmp_path, clean_env):
        load_environment(user_dir=tmp_path / "nope")
        assert "OPENAI_API_KEY" not in os.environ
