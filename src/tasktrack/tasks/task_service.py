# src/tasktrack/tasks/task_service.py

"""
Task service: the orchestrator every caller goes through.

Writes:  uow.transaction() -> reload -> validate -> mutate -> save_changes() -> commit.
         Any error rolls back the file snapshot and is re-raised unchanged.
Reads:   cache-aside (get -> hit? return : query store -> set with TTL).
After a successful commit (best effort, outside the atomic unit):
         invalidate cache keys, then write audit records.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Any, TypeVar

from ..core.ports import CacheService, SecurityLogger, TaskRepo
from ..errors import InvalidArgument
from .sanitizer import contains_markup
from .task_models import PageParams, Priority, Task, TaskStatus
from .unit_of_work import UnitOfWork
from .validator import TaskValidator

logger = logging.getLogger(__name__)

T = TypeVar("T")

ENTITY_TYPE = "Task"
DEFAULT_CACHE_TTL = timedelta(minutes=5)
DEFAULT_LIST_CACHE_TTL = timedelta(minutes=1)


def task_key(task_id: int) -> str:
    return f"task:{task_id}"


def _clone(value: Any) -> Any:
    # Cached values must never alias what a caller can mutate.
    if isinstance(value, Task):
        return value.copy()
    if isinstance(value, list):
        return [_clone(v) for v in value]
    return value


class TaskService:
    def __init__(
        self,
        uow: UnitOfWork,
        validator: TaskValidator | None = None,
        *,
        cache: CacheService | None = None,
        audit: SecurityLogger | None = None,
        actor: str = "system",
        cache_ttl: timedelta = DEFAULT_CACHE_TTL,
        list_cache_ttl: timedelta = DEFAULT_LIST_CACHE_TTL,
    ) -> None:
        if uow is None:
            raise InvalidArgument("uow is required", field="uow")
        self._uow = uow
        self._validator = validator or TaskValidator()
        self._cache = cache
        self._audit = audit
        self._actor = actor
        self._cache_ttl = cache_ttl
        self._list_cache_ttl = list_cache_ttl
        self._list_keys: set[str] = set()
        self._cache_lock = threading.Lock()
        # Bumped by every invalidation; a read that saw an older value must not cache it.
        self._generation = 0

    @property
    def unit_of_work(self) -> UnitOfWork:
        return self._uow

    # ---- transactional core ----

    @contextmanager
    def _write(self) -> Iterator[TaskRepo]:
        with self._uow.transaction() as store:
            # Pick up external edits made since the last access.
            store.load()
            yield store

    def _validated(self, input_type: str, value: Any, check: Callable[[], T]) -> T:
        try:
            return check()
        except InvalidArgument as e:
            self._audit_call(
                "log_validation_failure", input_type, str(value)[:200], str(e)
            )
            raise

    def create_task(self, task: Task) -> Task:
        """
        Validate and store a new task; returns the stored copy (with its id).

        Note: `task` itself is sanitized in place by the validator.
        """
        started = time.perf_counter()
        self._check_markup(task)
        with self._write() as store:
            self._validated(ENTITY_TYPE, task, lambda: self._validator.validate_task(task))
            created = store.add(task)
            self._uow.save_changes()

        self._after_change(created.id, f"Created task: {created.description}", "CreateTask", started)
        return created

    def update_task(self, task: Task) -> None:
        started = time.perf_counter()
        self._check_markup(task)
        with self._write() as store:
            self._validated(ENTITY_TYPE, task, lambda: self._validator.validate_task(task))
            store.update(task)
            self._uow.save_changes()

        self._after_change(task.id, f"Updated task: {task.description}", "UpdateTask", started)

    def delete_task(self, task_id: int) -> bool:
        """Returns False when no such task existed (the file is left untouched)."""
        started = time.perf_counter()
        with self._write() as store:
            removed = store.delete(task_id)
            if removed:
                self._uow.save_changes()

        if removed:
            self._after_change(task_id, "Deleted task", "DeleteTask", started)
        else:
            logger.info("Delete requested for missing task id=%s", task_id)
            self._audit_call(
                "log_operation", "DeleteTask", f"task id={task_id} not found", self._actor
            )
        return removed

    def add_category_to_task(self, task_id: int, category: str) -> bool:
        started = time.perf_counter()
        with self._write() as store:
            clean = self._validated(
                "Category", category, lambda: self._validator.validate_category(category)
            )
            added = store.add_category(task_id, clean)
            if added:
                self._uow.save_changes()

        if added:
            self._after_change(task_id, f"Added category: {clean}", "AddCategory", started)
        return added

    def remove_category_from_task(self, task_id: int, category: str) -> bool:
        started = time.perf_counter()
        with self._write() as store:
            removed = store.remove_category(task_id, category)
            if removed:
                self._uow.save_changes()

        if removed:
            self._after_change(task_id, f"Removed category: {category}", "RemoveCategory", started)
        return removed

    def update_task_status(self, task_id: int, status: TaskStatus | str) -> None:
        started = time.perf_counter()
        with self._write() as store:
            member = self._validated(
                "TaskStatus", status, lambda: self._validator.validate_status(status)
            )
            store.update_status(task_id, member)
            self._uow.save_changes()

        self._after_change(task_id, f"Status changed to {member.value}", "UpdateStatus", started)

    def update_task_priority(self, task_id: int, priority: Priority | str) -> None:
        started = time.perf_counter()
        with self._write() as store:
            member = self._validated(
                "Priority", priority, lambda: self._validator.validate_priority(priority)
            )
            store.update_priority(task_id, member)
            self._uow.save_changes()

        self._after_change(task_id, f"Priority changed to {member.value}", "UpdatePriority", started)

    def update_task_due_date(self, task_id: int, due_date: datetime | None) -> None:
        started = time.perf_counter()
        with self._write() as store:
            self._validated(
                "DueDate", due_date, lambda: self._validator.validate_due_date(due_date)
            )
            store.update_due_date(task_id, due_date)
            self._uow.save_changes()

        shown = due_date.isoformat() if due_date is not None else "none"
        self._after_change(task_id, f"Due date changed to {shown}", "UpdateDueDate", started)

    # ---- reads (cache-aside) ----

    def get_task(self, task_id: int) -> Task | None:
        return self._cached(
            task_key(task_id),
            lambda store: store.get_by_id(task_id),
            self._cache_ttl,
        )

    def get_all_tasks(self) -> list[Task]:
        return self._cached_list("tasks:all", lambda store: store.get_all())

    def get_tasks_by_status(self, status: TaskStatus | str) -> list[Task]:
        member = self._validator.validate_status(status)
        return self._cached_list(
            f"tasks:status:{member.value}", lambda store: store.get_by_status(member)
        )

    def get_tasks_by_priority(self, priority: Priority | str) -> list[Task]:
        member = self._validator.validate_priority(priority)
        return self._cached_list(
            f"tasks:priority:{member.value}", lambda store: store.get_by_priority(member)
        )

    def search_tasks(self, term: str) -> list[Task]:
        if not term or not term.strip():
            raise InvalidArgument("Search term cannot be empty", field="term")
        needle = term.strip()
        return self._cached_list(
            f"tasks:search:{needle.casefold()}", lambda store: store.search(needle)
        )

    def list_tasks(
        self,
        *,
        status: TaskStatus | str | None = None,
        search: str | None = None,
        categories: Iterable[str] | None = None,
        sort_by: str | None = None,
        ascending: bool = True,
        page: PageParams | None = None,
    ) -> list[Task]:
        member = self._validator.validate_status(status) if status is not None else None
        return self._read(
            lambda store: store.list_tasks(
                status=member,
                search=search,
                categories=categories,
                sort_by=sort_by,
                ascending=ascending,
                page=page,
            )
        )

    def _read(self, query: Callable[[TaskRepo], T]) -> T:
        with self._uow.lock:
            store = self._uow.task_store
            store.load()
            return query(store)

    def _cached(self, key: str, query: Callable[[TaskRepo], T], ttl: timedelta) -> T:
        hit = self._cache_get(key)
        if hit is not None:
            return _clone(hit)

        with self._cache_lock:
            seen = self._generation
        value = self._read(query)
        if value is not None:
            self._cache_set(key, _clone(value), ttl)
            with self._cache_lock:
                stale = self._generation != seen
            if stale:
                self._cache_remove(key)
        return value

    def _cached_list(self, key: str, query: Callable[[TaskRepo], list[Task]]) -> list[Task]:
        with self._cache_lock:
            self._list_keys.add(key)
        return self._cached(key, query, self._list_cache_ttl)

    # ---- best-effort collaborators ----

    def _cache_get(self, key: str) -> Any | None:
        if self._cache is None:
            return None
        try:
            return self._cache.get(key)
        except Exception:
            logger.warning("Cache get failed key=%s; reading from store", key, exc_info=True)
            return None

    def _cache_set(self, key: str, value: Any, ttl: timedelta) -> None:
        if self._cache is None:
            return
        try:
            self._cache.set(key, value, ttl)
        except Exception:
            logger.warning("Cache set failed key=%s", key, exc_info=True)

    def _invalidate(self, task_id: int) -> None:
        if self._cache is None:
            return
        with self._cache_lock:
            self._generation += 1
            keys = [task_key(task_id), *sorted(self._list_keys)]
        for key in keys:
            self._cache_remove(key)

    def _cache_remove(self, key: str) -> None:
        if self._cache is None:
            return
        try:
            self._cache.remove(key)
        except Exception:
            logger.warning("Cache remove failed key=%s", key, exc_info=True)

    def _audit_call(self, method: str, *args: Any) -> None:
        if self._audit is None:
            return
        try:
            getattr(self._audit, method)(*args)
        except Exception:
            logger.exception("Audit %s failed", method)

    def _after_change(self, task_id: int, description: str, operation: str, started: float) -> None:
        self._invalidate(task_id)
        self._audit_call("log_data_change", ENTITY_TYPE, str(task_id), description, self._actor)
        elapsed = timedelta(seconds=time.perf_counter() - started)
        self._audit_call("log_performance_metric", operation, elapsed, f"task_id={task_id}")
        logger.info("%s ok id=%s (%.1f ms)", operation, task_id, elapsed.total_seconds() * 1000)

    def _check_markup(self, task: Task | None) -> None:
        if task is None:
            return
        fields = [("Task.description", task.description)]
        fields += [("Task.categories", c) for c in task.categories or []]
        for resource, raw in fields:
            if contains_markup(raw):
                self._audit_call(
                    "log_security_violation", resource, self._actor, "markup stripped from input"
                )
