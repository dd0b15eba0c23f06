# src/duoserver/storage/json_codec.py

"""
Whole-file JSON persistence.

Every collection is stored as one pretty-printed JSON document. Writes go to a
temporary file in the same directory, get fsynced, and are renamed over the
durable file with os.replace, so a crash mid-write leaves the previous version
intact.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from ..errors import PersistenceFailure, StartupError

logger = logging.getLogger(__name__)

JSON_INDENT = 2


def dumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, indent=JSON_INDENT) + "\n"


def read_json(path: str | Path, *, missing_ok: bool = False) -> Any | None:
    """
    Read and decode one JSON document.

    Returns None if the file does not exist and missing_ok is set.
    Raises StartupError for a missing (required) file or an undecodable one.
    """
    path = Path(path)
    try:
        raw = path.read_text("utf-8")
    except FileNotFoundError:
        if missing_ok:
            logger.info("No file at %s, starting empty.", path)
            return None
        raise StartupError(f"required data file is missing: {path}") from None
    except OSError as e:
        raise StartupError(f"cannot read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise StartupError(f"{path} is not valid UTF-8: {e}") from e

    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise StartupError(f"malformed JSON in {path}: {e}") from e


def write_json_atomic(path: str | Path, data: Any) -> None:
    """
    Serialize `data` and atomically replace `path` with it.

    Raises PersistenceFailure if serialization or any filesystem step fails;
    in that case the durable file is untouched and no temp file is left behind.
    """
    path = Path(path)
    try:
        content = dumps(data)
    except (TypeError, ValueError) as e:
        raise PersistenceFailure(f"cannot serialize data for {path}: {e}") from e

    tmp_path: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as e:
        logger.exception("Atomic write failed for %s", path)
        raise PersistenceFailure(f"cannot write {path}: {e}") from e
    finally:
        if tmp_path is not None:
            with contextlib.suppress(OSError):
                os.unlink(tmp_path)

    logger.debug("Wrote %s (%d bytes)", path, len(content))
