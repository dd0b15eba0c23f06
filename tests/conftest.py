# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from duoserver.cli.bootstrap import create_initial_state
from duoserver.core.state import AppState

from .fakes import sample_projects_doc, sample_streak_doc, write_json


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the web app.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any .env file.
    """
    return SimpleNamespace(
        app_name="duoserver",
        data_dir=tmp_path,
        projects_path=tmp_path / "projects.json",
        streak_path=tmp_path / "streak.json",
        submissions_path=tmp_path / "data.json",
        streak_create_missing=False,
    )


@pytest.fixture()
def seeded(settings: SimpleNamespace) -> SimpleNamespace:
    """Provision the two required files (the ledger file is left missing)."""
    write_json(settings.projects_path, sample_projects_doc())
    write_json(settings.streak_path, sample_streak_doc())
    return settings


@pytest.fixture()
def state(seeded: SimpleNamespace) -> AppState:
    return create_initial_state(settings=seeded)
