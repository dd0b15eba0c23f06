# src/duoserver/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Data file locations are overridable per file, defaulting under DUO_DATA_DIR.
- Nothing here touches the data files; the stores load them in bootstrap.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "DUO"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Path

    # ---- HTTP ----
    host: str
    port: int

    # ---- Data files ----
    data_dir: Path
    projects_path: Path
    streak_path: Path
    submissions_path: Path

    # ---- Startup policy ----
    streak_create_missing: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "duoserver") or "duoserver"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        log_dir = _env_path(_k("LOG_DIR"), Path(".local/duoserver"))

        host = _env(_k("HOST"), "127.0.0.1")
        port = _env_int(_k("PORT"), 8080)

        data_dir = _env_path(_k("DATA_DIR"), Path("."))
        projects_path = _env_path(_k("PROJECTS_PATH"), data_dir / "projects.json")
        streak_path = _env_path(_k("STREAK_PATH"), data_dir / "streak.json")
        submissions_path = _env_path(_k("SUBMISSIONS_PATH"), data_dir / "data.json")

        streak_create_missing = _env_bool(_k("STREAK_CREATE_MISSING"), False)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_dir=log_dir,
            host=host,
            port=port,
            data_dir=data_dir,
            projects_path=projects_path,
            streak_path=streak_path,
            submissions_path=submissions_path,
            streak_create_missing=streak_create_missing,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Load .env (without overriding real env vars) and build Settings once."""
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS
