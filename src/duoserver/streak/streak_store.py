# src/duoserver/streak/streak_store.py

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..errors import PersistenceFailure, StartupError, ValidationError
from ..storage.json_codec import read_json, write_json_atomic

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StreakRecord:
    current_streak: int = 0
    last_completed: str = ""
    streak_freeze: int = 0

    def validate(self) -> None:
        for name in ("current_streak", "streak_freeze"):
            val = getattr(self, name)
            # bool is an int subclass; reject it explicitly.
            if isinstance(val, bool) or not isinstance(val, int):
                raise ValidationError(f"{name} must be an integer")
            if val < 0:
                raise ValidationError(f"{name} must be non-negative")
        if not isinstance(self.last_completed, str):
            raise ValidationError("last_completed must be a string")

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_streak": self.current_streak,
            "last_completed": self.last_completed,
            "streak_freeze": self.streak_freeze,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> StreakRecord:
        if not isinstance(raw, dict):
            raise ValidationError("streak must be a JSON object")
        last = raw.get("last_completed", "")
        rec = cls(
            current_streak=raw.get("current_streak", 0),
            last_completed="" if last is None else last,
            streak_freeze=raw.get("streak_freeze", 0),
        )
        rec.validate()
        return rec


class StreakTracker:
    """
    Single streak record with load/save.

    No business logic lives here: an external collaborator computes the new
    record and hands it to set(), which persists it before it becomes visible.
    """

    def __init__(self, path: str | Path, *, create_missing: bool = False) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self._record = self._load(create_missing=create_missing)
        logger.info(
            "StreakTracker ready file=%s current=%d freeze=%d",
            self._path,
            self._record.current_streak,
            self._record.streak_freeze,
        )

    def _load(self, *, create_missing: bool) -> StreakRecord:
        doc = read_json(self._path, missing_ok=create_missing)
        if doc is None and not self._path.exists():
            rec = StreakRecord()
            try:
                write_json_atomic(self._path, rec.to_dict())
            except PersistenceFailure as e:
                raise StartupError(f"cannot create streak file {self._path}: {e}") from e
            logger.info("Created zero streak record at %s", self._path)
            return rec
        try:
            return StreakRecord.from_dict(doc)
        except ValidationError as e:
            raise StartupError(f"malformed streak file {self._path}: {e}") from e

    def reload(self) -> None:
        with self._lock:
            self._record = self._load(create_missing=False)

    def get(self) -> StreakRecord:
        with self._lock:
            return self._record

    def set(self, record: StreakRecord) -> StreakRecord:
        record.validate()
        with self._lock:
            write_json_atomic(self._path, record.to_dict())
            self._record = record
        logger.info(
            "Streak updated current=%d last=%s freeze=%d",
            record.current_streak,
            record.last_completed,
            record.streak_freeze,
        )
        return record
