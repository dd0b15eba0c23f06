# src/duoserver/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from .ports import StreakRepo, SubmissionRepo, WorkflowRepo


@dataclass
class AppState:
    # Settings are kept on the state so handlers can read paths/app name.
    settings: object

    workflow: WorkflowRepo
    streak: StreakRepo
    submissions: SubmissionRepo
