# src/duoserver/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the HTTP surface.

The surface depends on Protocols instead of the concrete stores, which keeps
persistence swappable and lets tests wire in-memory fakes.
"""

from typing import Protocol

from ..streak.streak_store import StreakRecord
from ..submissions.submission_ledger import SubmissionRecord
from ..workflow.workflow_models import Project, Task
from ..workflow.workflow_store import ReviewOutcome


class WorkflowRepo(Protocol):
    def list_projects(self) -> list[Project]: ...
    def get_task(self, project_id: str, task_id: str) -> Task: ...
    def status_snapshot(self) -> dict[str, dict[str, str]]: ...
    def request_review(self, project_id: str, task_id: str) -> ReviewOutcome: ...


class StreakRepo(Protocol):
    def get(self) -> StreakRecord: ...
    def set(self, record: StreakRecord) -> StreakRecord: ...


class SubmissionRepo(Protocol):
    def put(self, key: str, record: SubmissionRecord) -> None: ...
    def get(self, key: str) -> SubmissionRecord: ...
    def list(self) -> list[SubmissionRecord]: ...
