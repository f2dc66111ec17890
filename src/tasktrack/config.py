# src/tasktrack/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing is read at import time; get_settings() builds the object on first use.
"""

from __future__ import annotations

import getpass
import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKTRACK"


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


def _default_actor() -> str:
    try:
        return getpass.getuser() or "local"
    except (KeyError, OSError):
        return "local"


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_file_path: Path
    log_dir: Path

    # ---- Cache ----
    cache_enabled: bool
    cache_ttl_seconds: int
    list_cache_ttl_seconds: int

    # ---- Audit ----
    actor: str

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(seconds=max(1, self.cache_ttl_seconds))

    @property
    def list_cache_ttl(self) -> timedelta:
        return timedelta(seconds=max(1, self.list_cache_ttl_seconds))

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "tasktrack") or "tasktrack"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/tasktrack"))
        tasks_file_path = _env_path(_k("TASKS_FILE"), data_dir / "tasks.json")
        log_dir = _env_path(_k("LOG_DIR"), data_dir)

        cache_enabled = _env_bool(_k("CACHE_ENABLED"), True)
        cache_ttl_seconds = _env_int(_k("CACHE_TTL_SECONDS"), 300)
        list_cache_ttl_seconds = _env_int(_k("LIST_CACHE_TTL_SECONDS"), 60)

        actor = _env(_k("ACTOR"), "").strip() or _default_actor()

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            tasks_file_path=tasks_file_path,
            log_dir=log_dir,
            cache_enabled=cache_enabled,
            cache_ttl_seconds=cache_ttl_seconds,
            list_cache_ttl_seconds=list_cache_ttl_seconds,
            actor=actor,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # .env never overrides variables already set in the environment.
    load_dotenv(override=False)
    return Settings.from_env()
