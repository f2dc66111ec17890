# src/tasktrack/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.task_service import TaskService
from ..tasks.unit_of_work import UnitOfWork


@dataclass
class AppState:
    # Settings object (config.Settings or a test stand-in).
    settings: Any

    uow: UnitOfWork
    service: TaskService
