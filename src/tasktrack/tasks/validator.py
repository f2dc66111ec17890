# src/tasktrack/tasks/validator.py

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

from ..errors import InvalidArgument
from .sanitizer import CATEGORY_MAX_LENGTH, sanitize_category, sanitize_description
from .task_models import Priority, Task, TaskStatus, now_local

MIN_DESCRIPTION_LENGTH = 10
MAX_DESCRIPTION_LENGTH = 100

_CATEGORY_RE = re.compile(r"^[A-Za-z0-9 \-]+$")
_STATUS_NAMES = frozenset(s.value for s in TaskStatus)
_PRIORITY_NAMES = frozenset(p.value for p in Priority)


class TaskValidator:
    """
    Fail-fast validation for tasks entering storage.

    validate_task() stops at the first invalid field and raises InvalidArgument.
    It also rewrites the task in place: description and categories are replaced
    with their sanitized forms (categories deduplicated) and last_modified_date is
    stamped with the current time.
    """

    def validate_task(self, task: Task | None) -> Task:
        if task is None:
            raise InvalidArgument("Task is required", field="task")

        task.description = sanitize_description(task.description)
        self.validate_description(task.description)
        task.status = self.validate_status(task.status)
        task.priority = self.validate_priority(task.priority)

        clean: list[str] = []
        for raw in task.categories or []:
            category = self.validate_category(raw)
            if category not in clean:
                clean.append(category)
        task.categories = clean

        self.validate_due_date(task.due_date)
        task.touch()
        return task

    def validate_description(self, description: str | None) -> str:
        text = sanitize_description(description)
        if not text:
            raise InvalidArgument("Description cannot be empty", field="description")
        if not MIN_DESCRIPTION_LENGTH <= len(text) <= MAX_DESCRIPTION_LENGTH:
            raise InvalidArgument(
                f"Description must be between {MIN_DESCRIPTION_LENGTH} and "
                f"{MAX_DESCRIPTION_LENGTH} characters",
                field="description",
            )
        return text

    def validate_status(self, status: Any) -> TaskStatus:
        match status:
            case TaskStatus():
                return status
            case str() if status in _STATUS_NAMES:
                return TaskStatus(status)
            case _:
                raise InvalidArgument(f"Invalid task status: {status!r}", field="status")

    def validate_priority(self, priority: Any) -> Priority:
        match priority:
            case Priority():
                return priority
            case str() if priority in _PRIORITY_NAMES:
                return Priority(priority)
            case _:
                raise InvalidArgument(f"Invalid priority level: {priority!r}", field="priority")

    def validate_category(self, category: str | None) -> str:
        text = sanitize_category(category)
        if not text:
            raise InvalidArgument("Category cannot be empty", field="category")
        if len(text) > CATEGORY_MAX_LENGTH:
            raise InvalidArgument(
                f"Category name cannot exceed {CATEGORY_MAX_LENGTH} characters",
                field="category",
            )
        if not _CATEGORY_RE.match(text):
            raise InvalidArgument(
                "Category may only contain letters, digits, spaces and hyphens",
                field="category",
            )
        return text

    def validate_due_date(self, due: date | None, *, today: date | None = None) -> None:
        if due is None:
            return
        # Time of day is ignored: a task due earlier today is still valid.
        day = due.date() if isinstance(due, datetime) else due
        if today is None:
            today = now_local().date()
        if day < today:
            raise InvalidArgument("Due date cannot be in the past", field="due_date")
