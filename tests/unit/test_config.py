"""Tests for configuration helpers."""

from pathlib import Path

from bookmark_manager.config import WORKSPACE_ROOT_ENV, resolve_workspace_root


def test_explicit_path_wins(tmp_path, monkeypatch):
    monkeypatch.setenv(WORKSPACE_ROOT_ENV, "/somewhere/else")
    assert resolve_workspace_root(tmp_path) == tmp_path.resolve()


def test_environment_variable(tmp_path, monkeypatch):
    monkeypatch.setenv(WORKSPACE_ROOT_ENV, str(tmp_path))
    assert resolve_workspace_root() == tmp_path.resolve()


def test_defaults_to_cwd(tmp_path, monkeypatch):
    monkeypatch.delenv(WORKSPACE_ROOT_ENV, raising=False)
    monkeypatch.chdir(tmp_path)
    assert resolve_workspace_root() == Path(tmp_path).resolve()
