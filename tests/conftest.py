# tests/conftest.py

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
from types import SimpleNamespace

import pytest

from tasktrack.core.state import AppState
from tasktrack.tasks.task_models import Task
from tasktrack.tasks.task_service import TaskService
from tasktrack.tasks.task_store import TaskStore
from tasktrack.tasks.unit_of_work import UnitOfWork

from .fakes import FakeCache, FakeSecurityLogger


@pytest.fixture()
def tasks_file(tmp_path: Path) -> Path:
    return tmp_path / "tasks.json"


@pytest.fixture()
def store(tasks_file: Path) -> TaskStore:
    return TaskStore(tasks_file)


@pytest.fixture()
def uow(tasks_file: Path):
    unit = UnitOfWork(tasks_file)
    yield unit
    unit.close()


@pytest.fixture()
def cache() -> FakeCache:
    return FakeCache()


@pytest.fixture()
def audit() -> FakeSecurityLogger:
    return FakeSecurityLogger()


@pytest.fixture()
def service(uow: UnitOfWork, cache: FakeCache, audit: FakeSecurityLogger) -> TaskService:
    return TaskService(uow, cache=cache, audit=audit, actor="tester")


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="tasktrack-test",
        log_level="INFO",
        data_dir=tmp_path / "data",
        tasks_file_path=tmp_path / "data" / "tasks.json",
        log_dir=tmp_path / "data",
        cache_enabled=True,
        cache_ttl=timedelta(minutes=5),
        list_cache_ttl=timedelta(minutes=1),
        actor="tester",
    )


@pytest.fixture()
def state(uow: UnitOfWork, service: TaskService, settings: SimpleNamespace) -> AppState:
    return AppState(settings=settings, uow=uow, service=service)


def make_task(description: str = "Write the weekly report", **kwargs) -> Task:
    return Task(description=description, **kwargs)


def tomorrow() -> datetime:
    return datetime.now().astimezone() + timedelta(days=1)
