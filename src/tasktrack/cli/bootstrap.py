# src/tasktrack/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations (unit of work, cache, audit sink) into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import CacheService
from ..core.state import AppState
from ..infra.audit import LoggingSecurityLogger
from ..infra.memory_cache import MemoryCache
from ..tasks.task_service import TaskService
from ..tasks.unit_of_work import UnitOfWork
from ..tasks.validator import TaskValidator

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_file_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    cache: CacheService | None = MemoryCache() if settings.cache_enabled else None

    uow = UnitOfWork(settings.tasks_file_path)
    service = TaskService(
        uow,
        TaskValidator(),
        cache=cache,
        audit=LoggingSecurityLogger(),
        actor=settings.actor,
        cache_ttl=settings.cache_ttl,
        list_cache_ttl=settings.list_cache_ttl,
    )
    logger.info(
        "State ready file=%s cache=%s actor=%s",
        settings.tasks_file_path,
        "on" if cache is not None else "off",
        settings.actor,
    )
    return AppState(settings=settings, uow=uow, service=service)
