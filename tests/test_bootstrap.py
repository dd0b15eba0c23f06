# tests/test_bootstrap.py

from __future__ import annotations

from pathlib import Path

import pytest

from duoserver.cli.bootstrap import create_initial_state
from duoserver.config import Settings
from duoserver.errors import StartupError

from .fakes import sample_projects_doc, write_json


def test_state_is_wired_from_settings(state) -> None:
    assert [p.id for p in state.workflow.list_projects()] == ["p1", "p2"]
    assert state.streak.get().current_streak == 4
    assert state.submissions.list() == []


def test_missing_projects_file_aborts(settings) -> None:
    with pytest.raises(StartupError):
        create_initial_state(settings=settings)


def test_missing_streak_file_aborts_unless_allowed(settings) -> None:
    write_json(settings.projects_path, sample_projects_doc())
    with pytest.raises(StartupError):
        create_initial_state(settings=settings)

    settings.streak_create_missing = True
    state = create_initial_state(settings=settings)
    assert state.streak.get().current_streak == 0
    assert settings.streak_path.exists()


def test_settings_from_env(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DUO_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("DUO_PORT", "9090")
    monkeypatch.setenv("DUO_STREAK_PATH", str(tmp_path / "other" / "s.json"))
    monkeypatch.setenv("DUO_STREAK_CREATE_MISSING", "yes")
    monkeypatch.delenv("DUO_PROJECTS_PATH", raising=False)
    monkeypatch.delenv("DUO_SUBMISSIONS_PATH", raising=False)

    s = Settings.from_env()

    assert s.port == 9090
    assert s.projects_path == tmp_path / "projects.json"
    assert s.submissions_path == tmp_path / "data.json"
    assert s.streak_path == tmp_path / "other" / "s.json"
    assert s.streak_create_missing is True


def test_settings_bad_port_falls_back(monkeypatch) -> None:
    monkeypatch.setenv("DUO_PORT", "eighty")
    assert Settings.from_env().port == 8080
