# src/duoserver/workflow/workflow_store.py

from __future__ import annotations

import logging
import threading
from enum import StrEnum
from pathlib import Path

from ..errors import NotFound, StartupError, ValidationError
from ..storage.json_codec import read_json, write_json_atomic
from .workflow_models import (
    Project,
    Task,
    TaskStatus,
    projects_from_document,
    projects_to_document,
)

logger = logging.getLogger(__name__)


class ReviewOutcome(StrEnum):
    SUBMITTED = "submitted"
    ALREADY_SUBMITTED = "already_submitted"

    @property
    def message(self) -> str:
        if self is ReviewOutcome.SUBMITTED:
            return "submitted for review"
        return "already submitted"


class WorkflowStore:
    """
    In-memory project/task collection persisted as one JSON file.

    Thread-safety:
    - one lock guards both reads and writes of the collection
    - the durable write happens while the lock is held

    Mutations are persist-then-commit: the new collection is written to disk
    first and only swapped into memory once the atomic rename succeeded.
    Projects and tasks are frozen dataclasses, so readers can keep the objects
    they got without seeing later changes.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self._projects: list[Project] = self._load()
        logger.info(
            "WorkflowStore ready file=%s projects=%d tasks=%d",
            self._path,
            len(self._projects),
            sum(len(p.tasks) for p in self._projects),
        )

    @property
    def path(self) -> Path:
        return self._path

    # ---- low-level helpers ----

    def _load(self) -> list[Project]:
        doc = read_json(self._path)
        try:
            return projects_from_document(doc)
        except ValidationError as e:
            raise StartupError(f"malformed workflow file {self._path}: {e}") from e

    def _find(self, project_id: str, task_id: str) -> tuple[int, Project, Task]:
        for idx, p in enumerate(self._projects):
            if p.id == project_id:
                task = p.find_task(task_id)
                if task is None:
                    break
                return idx, p, task
        raise NotFound(f"task not found: project={project_id!r} task={task_id!r}")

    # ---- public API ----

    def reload(self) -> None:
        """Re-read the durable file, replacing the in-memory copy."""
        with self._lock:
            self._projects = self._load()

    def list_projects(self) -> list[Project]:
        with self._lock:
            return list(self._projects)

    def get_task(self, project_id: str, task_id: str) -> Task:
        with self._lock:
            _, _, task = self._find(project_id, task_id)
            return task

    def status_snapshot(self) -> dict[str, dict[str, str]]:
        with self._lock:
            return {
                p.id: {t.id: t.status.value for t in p.tasks}
                for p in self._projects
            }

    def request_review(self, project_id: str, task_id: str) -> ReviewOutcome:
        """
        Move a task from not-started to under-review.

        Returns SUBMITTED when the transition happened (and was persisted), or
        ALREADY_SUBMITTED when the task is under review or accepted already; in
        that case nothing is written. Raises NotFound / PersistenceFailure.
        """
        with self._lock:
            idx, project, task = self._find(project_id, task_id)

            if task.status is not TaskStatus.NOT_STARTED:
                logger.debug(
                    "Review already requested project=%s task=%s status=%s",
                    project_id,
                    task_id,
                    task.status.value,
                )
                return ReviewOutcome.ALREADY_SUBMITTED

            updated = list(self._projects)
            updated[idx] = project.with_task(task.with_status(TaskStatus.UNDER_REVIEW))

            write_json_atomic(self._path, projects_to_document(updated))
            self._projects = updated

            logger.info("Task submitted for review project=%s task=%s", project_id, task_id)
            return ReviewOutcome.SUBMITTED
