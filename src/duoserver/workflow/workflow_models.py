# src/duoserver/workflow/workflow_models.py

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any

from ..errors import ValidationError


class TaskStatus(StrEnum):
    """
    Task workflow status.

    Values are the spellings written to projects.json:
    todo (not started) -> checking (under review) -> done (accepted).
    """

    NOT_STARTED = "todo"
    UNDER_REVIEW = "checking"
    ACCEPTED = "done"

    @classmethod
    def from_raw(cls, raw: Any, *, legacy_done: Any = None) -> TaskStatus:
        """
        Normalize a stored status.

        Empty / missing status means "not started". Old records without a status
        but with a boolean "done" flag are mapped onto the three-state value.
        """
        if raw is None or raw == "":
            if legacy_done is True:
                return cls.ACCEPTED
            return cls.NOT_STARTED
        if not isinstance(raw, str):
            raise ValidationError(f"status must be a string, got {type(raw).__name__}")
        try:
            return cls(raw)
        except ValueError:
            raise ValidationError(f"unknown task status: {raw!r}") from None


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    title: str
    description: str
    status: TaskStatus = TaskStatus.NOT_STARTED

    @property
    def done(self) -> bool:
        # Legacy boolean view; derived, never stored.
        return self.status is TaskStatus.ACCEPTED

    def with_status(self, status: TaskStatus) -> Task:
        return replace(self, status=status)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
        }

    def to_public_dict(self) -> dict[str, Any]:
        """Wire form for API readers: durable fields plus the derived `done` flag."""
        out = self.to_dict()
        out["done"] = self.done
        return out

    @classmethod
    def from_dict(cls, raw: Any) -> Task:
        if not isinstance(raw, dict):
            raise ValidationError("task must be a JSON object")
        return cls(
            id=_require_str(raw, "id", "task"),
            title=_optional_str(raw, "title", "task"),
            description=_optional_str(raw, "description", "task"),
            status=TaskStatus.from_raw(raw.get("status"), legacy_done=raw.get("done")),
        )


@dataclass(frozen=True, slots=True)
class Project:
    id: str
    name: str
    tasks: tuple[Task, ...] = ()

    def find_task(self, task_id: str) -> Task | None:
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None

    def with_task(self, task: Task) -> Project:
        """Return a copy with the task of the same id replaced (order kept)."""
        return replace(
            self,
            tasks=tuple(task if t.id == task.id else t for t in self.tasks),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "tasks": [t.to_dict() for t in self.tasks],
        }

    @classmethod
    def from_dict(cls, raw: Any) -> Project:
        if not isinstance(raw, dict):
            raise ValidationError("project must be a JSON object")
        project_id = _require_str(raw, "id", "project")
        tasks_raw = raw.get("tasks")
        if tasks_raw is None:
            tasks_raw = []
        if not isinstance(tasks_raw, list):
            raise ValidationError(f"project {project_id!r}: tasks must be a list")

        tasks = tuple(Task.from_dict(t) for t in tasks_raw)
        seen: set[str] = set()
        for t in tasks:
            if t.id in seen:
                raise ValidationError(f"project {project_id!r}: duplicate task id {t.id!r}")
            seen.add(t.id)

        return cls(id=project_id, name=_optional_str(raw, "name", "project"), tasks=tasks)


def projects_from_document(doc: Any) -> list[Project]:
    """Decode the projects.json document: {"projects": [...]}."""
    if not isinstance(doc, dict):
        raise ValidationError("workflow document must be a JSON object")
    raw_projects = doc.get("projects")
    if raw_projects is None:
        raw_projects = []
    if not isinstance(raw_projects, list):
        raise ValidationError("'projects' must be a list")

    projects = [Project.from_dict(p) for p in raw_projects]
    seen: set[str] = set()
    for p in projects:
        if p.id in seen:
            raise ValidationError(f"duplicate project id {p.id!r}")
        seen.add(p.id)
    return projects


def projects_to_document(projects: list[Project]) -> dict[str, Any]:
    return {"projects": [p.to_dict() for p in projects]}


def _require_str(raw: dict[str, Any], key: str, what: str) -> str:
    val = raw.get(key)
    if not isinstance(val, str) or not val:
        raise ValidationError(f"{what} {key!r} must be a non-empty string")
    return val


def _optional_str(raw: dict[str, Any], key: str, what: str) -> str:
    val = raw.get(key, "")
    if val is None:
        return ""
    if not isinstance(val, str):
        raise ValidationError(f"{what} {key!r} must be a string")
    return val
