# src/tasktrack/tasks/task_store.py

from __future__ import annotations

import json
import logging
import os
import threading
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from ..errors import Conflict, InvalidArgument, IOFailure, NotFound
from .task_models import PageParams, Priority, Task, TaskStatus

logger = logging.getLogger(__name__)

_SORT_KEYS: dict[str, Callable[[Task], Any]] = {
    "id": lambda t: t.id,
    "description": lambda t: t.description.lower(),
    "status": lambda t: list(TaskStatus).index(t.status),
    "priority": lambda t: list(Priority).index(t.priority),
    "due_date": lambda t: (t.due_date is not None, t.due_date.timestamp() if t.due_date else 0.0),
    "creation_date": lambda t: t.creation_date,
    "last_modified": lambda t: t.last_modified_date,
}


class TaskStore:
    """
    JSON-file task store.

    The file is a single pretty-printed JSON array; a missing file is an empty list.

    Ownership:
    - the in-memory list is authoritative between load() and flush()
    - mutations only touch memory; nothing is written until flush()
    - every read returns copies, never the stored records

    Thread-safety:
    - file reads/writes and list mutations are guarded by one re-entrant lock;
      whole transactions are serialized one level up by the UnitOfWork
    """

    def __init__(self, file_path: str | Path = "tasks.json") -> None:
        self._file_path = Path(file_path)
        self._lock = threading.RLock()
        self._tasks: list[Task] = []
        self._next_id = 1
        self.load()
        logger.info("TaskStore ready file=%s total=%s", self._file_path, len(self._tasks))

    @property
    def file_path(self) -> Path:
        return self._file_path

    # ---- low-level helpers ----

    def _find(self, task_id: int) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def _require(self, task_id: int) -> Task:
        task = self._find(task_id)
        if task is None:
            raise NotFound(task_id)
        return task

    @staticmethod
    def _decode(raw: str) -> list[Task]:
        data = json.loads(raw) if raw.strip() else []
        if not isinstance(data, list):
            raise ValueError(f"expected a JSON array, got {type(data).__name__}")

        out: list[Task] = []
        seen: set[int] = set()
        for i, item in enumerate(data):
            if not isinstance(item, dict):
                logger.warning("Skipping non-object task record at index %s", i)
                continue
            try:
                task = Task.from_dict(item)
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed task record at index %s", i, exc_info=True)
                continue
            if task.id <= 0:
                logger.warning("Skipping task record with invalid id=%s at index %s", task.id, i)
                continue
            if task.id in seen:
                logger.warning("Skipping duplicate task id=%s at index %s", task.id, i)
                continue
            seen.add(task.id)
            out.append(task)
        return out

    # ---- persistence ----

    def load(self) -> None:
        """
        (Re)read the backing file into memory.

        Unflushed in-memory changes are discarded. The id counter never moves
        backwards, so ids handed out earlier are not reissued after a reload.
        """
        with self._lock:
            if not self._file_path.exists():
                tasks: list[Task] = []
            else:
                try:
                    raw = self._file_path.read_text(encoding="utf-8")
                    tasks = self._decode(raw)
                except (OSError, ValueError) as e:
                    raise IOFailure(f"Failed to load tasks from {self._file_path}: {e}") from e

            self._tasks = tasks
            top = max((t.id for t in tasks), default=0)
            self._next_id = max(self._next_id, top + 1)
            logger.debug("Loaded %d tasks from %s", len(tasks), self._file_path)

    def flush(self) -> None:
        """Write the whole list to the backing file (temp file + atomic replace)."""
        with self._lock:
            payload = json.dumps(
                [t.to_dict() for t in self._tasks], ensure_ascii=False, indent=2
            )
            tmp = self._file_path.with_name(self._file_path.name + ".tmp")
            try:
                self._file_path.parent.mkdir(parents=True, exist_ok=True)
                tmp.write_text(payload, encoding="utf-8")
                os.replace(tmp, self._file_path)
            except OSError as e:
                raise IOFailure(f"Failed to save tasks to {self._file_path}: {e}") from e
            logger.debug("Flushed %d tasks to %s", len(self._tasks), self._file_path)

    @property
    def next_id(self) -> int:
        with self._lock:
            return self._next_id

    def rewind_next_id(self, mark: int) -> None:
        """
        Move the id counter back to `mark` (never below max(id) + 1).

        Used after a rolled-back transaction so ids it handed out are issued again.
        """
        with self._lock:
            top = max((t.id for t in self._tasks), default=0)
            self._next_id = max(mark, top + 1)

    # ---- reads ----

    def count_tasks(self) -> int:
        with self._lock:
            return len(self._tasks)

    def get_by_id(self, task_id: int) -> Task | None:
        with self._lock:
            task = self._find(task_id)
            return task.copy() if task is not None else None

    def get_all(self) -> list[Task]:
        with self._lock:
            return [t.copy() for t in self._tasks]

    def get_by_status(self, status: TaskStatus) -> list[Task]:
        with self._lock:
            return [t.copy() for t in self._tasks if t.status == status]

    def get_by_priority(self, priority: Priority) -> list[Task]:
        with self._lock:
            return [t.copy() for t in self._tasks if t.priority == priority]

    def search(self, term: str) -> list[Task]:
        """Case-insensitive substring match against the description."""
        needle = (term or "").casefold()
        with self._lock:
            return [t.copy() for t in self._tasks if needle in t.description.casefold()]

    def list_tasks(
        self,
        *,
        status: TaskStatus | None = None,
        search: str | None = None,
        categories: Iterable[str] | None = None,
        sort_by: str | None = None,
        ascending: bool = True,
        page: PageParams | None = None,
    ) -> list[Task]:
        """
        Filtered/sorted/paged listing.

        Filters combine with AND; `categories` matches a task holding any of them
        (case-insensitive). Unknown sort keys leave insertion order untouched.
        """
        with self._lock:
            rows = [t.copy() for t in self._tasks]

        if status is not None:
            rows = [t for t in rows if t.status == status]
        if search and search.strip():
            needle = search.casefold()
            rows = [t for t in rows if needle in t.description.casefold()]
        if categories:
            wanted = {c.casefold() for c in categories}
            rows = [t for t in rows if any(c.casefold() in wanted for c in t.categories)]

        key = _SORT_KEYS.get((sort_by or "").strip().lower())
        if key is not None:
            rows.sort(key=key, reverse=not ascending)

        if page is not None:
            rows = rows[page.skip : page.skip + page.page_size]

        return rows

    # ---- mutations (memory only; call flush() to persist) ----

    def add(self, task: Task) -> Task:
        """
        Store a copy of `task` and return it.

        id 0 means "assign the next id"; an explicit positive id is kept as-is.
        """
        with self._lock:
            stored = task.copy()
            if stored.id < 0:
                raise InvalidArgument(f"Invalid task id: {stored.id}", field="id")
            if stored.id == 0:
                stored.id = self._next_id
            elif self._find(stored.id) is not None:
                raise Conflict(stored.id)

            self._next_id = max(self._next_id, stored.id + 1)
            self._tasks.append(stored)
            logger.debug(
                "Task added id=%s status=%s priority=%s",
                stored.id,
                stored.status.value,
                stored.priority.value,
            )
            return stored.copy()

    def update(self, task: Task) -> None:
        with self._lock:
            for i, existing in enumerate(self._tasks):
                if existing.id == task.id:
                    self._tasks[i] = task.copy()
                    return
            raise NotFound(task.id)

    def delete(self, task_id: int) -> bool:
        with self._lock:
            task = self._find(task_id)
            if task is None:
                return False
            self._tasks.remove(task)
            logger.debug("Task deleted id=%s", task_id)
            return True

    def add_category(self, task_id: int, category: str) -> bool:
        """Append `category` unless already present (exact match). Returns True if added."""
        with self._lock:
            task = self._require(task_id)
            if task.has_category(category):
                return False
            task.categories.append(category)
            task.touch()
            return True

    def remove_category(self, task_id: int, category: str) -> bool:
        with self._lock:
            task = self._require(task_id)
            if not task.has_category(category):
                return False
            task.categories.remove(category)
            task.touch()
            return True

    def update_status(self, task_id: int, status: TaskStatus) -> None:
        with self._lock:
            task = self._require(task_id)
            task.status = status
            task.touch()

    def update_priority(self, task_id: int, priority: Priority) -> None:
        with self._lock:
            task = self._require(task_id)
            task.priority = priority
            task.touch()

    def update_due_date(self, task_id: int, due_date: datetime | None) -> None:
        with self._lock:
            task = self._require(task_id)
            task.due_date = due_date
            task.touch()
