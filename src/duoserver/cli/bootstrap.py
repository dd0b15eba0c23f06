# src/duoserver/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the data directory exists,
- loads the three stores from their files and wires them into AppState.

Any StartupError propagates: the server must not start with a partial state.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..streak.streak_store import StreakTracker
from ..submissions.submission_ledger import SubmissionLedger
from ..workflow.workflow_store import WorkflowStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    # Only the ledger may be created from nothing; its directory must exist.
    settings.submissions_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    state = AppState(
        settings=settings,
        workflow=WorkflowStore(settings.projects_path),
        streak=StreakTracker(
            settings.streak_path,
            create_missing=bool(getattr(settings, "streak_create_missing", False)),
        ),
        submissions=SubmissionLedger(settings.submissions_path),
    )
    logger.info("State loaded from %s", getattr(settings, "data_dir", "."))
    return state
