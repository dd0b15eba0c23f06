# src/duoserver/submissions/submission_ledger.py

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..errors import NotFound, StartupError, ValidationError
from ..storage.json_codec import read_json, write_json_atomic

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SubmissionRecord:
    """
    One submitted file. The text fields are opaque: they are kept for a human
    (or an external diff tool) to compare, never interpreted here.
    """

    filename: str
    typed: str
    pasted: str
    real: str

    def to_dict(self) -> dict[str, str]:
        return {
            "filename": self.filename,
            "typed": self.typed,
            "pasted": self.pasted,
            "real": self.real,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> SubmissionRecord:
        if not isinstance(raw, dict):
            raise ValidationError("submission must be a JSON object")
        vals: dict[str, str] = {}
        for key in ("filename", "typed", "pasted", "real"):
            val = raw.get(key, "")
            if not isinstance(val, str):
                raise ValidationError(f"submission {key!r} must be a string")
            vals[key] = val
        return cls(**vals)


class SubmissionLedger:
    """
    Mapping filename -> most recent submission, persisted as one JSON object.

    A missing file is an empty ledger (first run). Resubmitting under the same
    key overwrites the previous record.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self._records: dict[str, SubmissionRecord] = self._load()
        logger.info("SubmissionLedger ready file=%s total=%d", self._path, len(self._records))

    def _load(self) -> dict[str, SubmissionRecord]:
        doc = read_json(self._path, missing_ok=True)
        if doc is None:
            return {}
        if not isinstance(doc, dict):
            raise StartupError(f"malformed submissions file {self._path}: expected a JSON object")
        try:
            return {str(k): SubmissionRecord.from_dict(v) for k, v in doc.items()}
        except ValidationError as e:
            raise StartupError(f"malformed submissions file {self._path}: {e}") from e

    def reload(self) -> None:
        with self._lock:
            self._records = self._load()

    def put(self, key: str, record: SubmissionRecord) -> None:
        if not key:
            raise ValidationError("submission key must be non-empty")
        with self._lock:
            updated = dict(self._records)
            updated[key] = record
            write_json_atomic(self._path, {k: r.to_dict() for k, r in updated.items()})
            self._records = updated
        logger.info("Submission stored key=%s", key)

    def get(self, key: str) -> SubmissionRecord:
        with self._lock:
            rec = self._records.get(key)
        if rec is None:
            raise NotFound(f"submission not found: {key!r}")
        return rec

    def list(self) -> list[SubmissionRecord]:
        with self._lock:
            return list(self._records.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
