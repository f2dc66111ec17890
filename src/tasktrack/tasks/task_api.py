# src/tasktrack/tasks/task_api.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any

from .task_models import PageParams, Priority, Task, TaskStatus
from .task_service import TaskService

logger = logging.getLogger(__name__)


class AsyncTaskService:
    """
    Coroutine facade over TaskService for asyncio callers.

    Each call runs the synchronous operation in a worker thread. TaskService keeps
    the unit-of-work lock for the whole begin -> validate -> mutate -> save -> commit
    sequence, so concurrent coroutines are serialized exactly like threads are.
    """

    def __init__(self, service: TaskService) -> None:
        self._service = service

    @property
    def service(self) -> TaskService:
        return self._service

    async def create_task(self, task: Task) -> Task:
        return await asyncio.to_thread(self._service.create_task, task)

    async def update_task(self, task: Task) -> None:
        await asyncio.to_thread(self._service.update_task, task)

    async def delete_task(self, task_id: int) -> bool:
        return await asyncio.to_thread(self._service.delete_task, task_id)

    async def add_category_to_task(self, task_id: int, category: str) -> bool:
        return await asyncio.to_thread(self._service.add_category_to_task, task_id, category)

    async def remove_category_from_task(self, task_id: int, category: str) -> bool:
        return await asyncio.to_thread(self._service.remove_category_from_task, task_id, category)

    async def update_task_status(self, task_id: int, status: TaskStatus | str) -> None:
        await asyncio.to_thread(self._service.update_task_status, task_id, status)

    async def update_task_priority(self, task_id: int, priority: Priority | str) -> None:
        await asyncio.to_thread(self._service.update_task_priority, task_id, priority)

    async def update_task_due_date(self, task_id: int, due_date: datetime | None) -> None:
        await asyncio.to_thread(self._service.update_task_due_date, task_id, due_date)

    async def get_task(self, task_id: int) -> Task | None:
        return await asyncio.to_thread(self._service.get_task, task_id)

    async def get_all_tasks(self) -> list[Task]:
        return await asyncio.to_thread(self._service.get_all_tasks)

    async def get_tasks_by_status(self, status: TaskStatus | str) -> list[Task]:
        return await asyncio.to_thread(self._service.get_tasks_by_status, status)

    async def get_tasks_by_priority(self, priority: Priority | str) -> list[Task]:
        return await asyncio.to_thread(self._service.get_tasks_by_priority, priority)

    async def search_tasks(self, term: str) -> list[Task]:
        return await asyncio.to_thread(self._service.search_tasks, term)

    async def list_tasks(self, *, page: PageParams | None = None, **filters: Any) -> list[Task]:
        return await asyncio.to_thread(lambda: self._service.list_tasks(page=page, **filters))


def schedule_task(
    service: TaskService,
    *,
    description: str,
    priority: Priority = Priority.MEDIUM,
    due_date: datetime | None = None,
    categories: list[str] | None = None,
) -> Task:
    """
    Convenience helper: build a Pending task from plain values and create it.
    Returns the stored copy.
    """
    task = Task(
        description=description,
        priority=priority,
        due_date=due_date,
        categories=list(categories or []),
    )
    created = service.create_task(task)
    logger.debug("Scheduled task id=%s priority=%s", created.id, created.priority.value)
    return created
