"""Unit tests for startup initialization."""

import pytest

from claims_timeline import startup
from claims_timeline.config.loader import CONFIG_ENV_VAR


@pytest.fixture
def clean_startup(monkeypatch):
    # setenv first so teardown removes whatever .env loading adds
    monkeypatch.setenv(CONFIG_ENV_VAR, "placeholder")
    monkeypatch.delenv(CONFIG_ENV_VAR)
    startup.reset_for_testing()
    yield
    startup.reset_for_testing()


class TestEnsureInitialized:
    """Tests for ensure_initialized."""

    def test_loads_env_file(self, tmp_path, monkeypatch, clean_startup):
        (tmp_path / ".env").write_text(f"{CONFIG_ENV_VAR}=claims.yaml\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        state = startup.ensure_initialized()
        assert state.project_root == tmp_path
        assert state.env_loaded
        assert state.config_path.name == "claims.yaml"

    def test_idempotent(self, tmp_path, monkeypatch, clean_startup):
        monkeypatch.chdir(tmp_path)
        assert startup.ensure_initialized() is startup.ensure_initialized()

    def test_project_root_from_pyproject(self, tmp_path, clean_startup):
        (tmp_path / "pyproject.toml").write_text("", encoding="utf-8")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert startup._find_project_root(nested) == tmp_path
