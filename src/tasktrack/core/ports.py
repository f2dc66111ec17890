# src/tasktrack/core/ports.py

"""
Ports (interfaces) used by the task service.

The service depends on Protocols instead of concrete implementations, so the cache
and the audit sink can be swapped (or faked in tests) without touching the core.
Both collaborators are best-effort: the service never lets their failures change
the outcome of an operation.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Any, Protocol


class CacheService(Protocol):
    """Key/value cache with per-entry expiration."""

    def get(self, key: str) -> Any | None: ...
    def set(self, key: str, value: Any, ttl: timedelta) -> bool: ...
    def remove(self, key: str) -> bool: ...
    def exists(self, key: str) -> bool: ...


class SecurityLogger(Protocol):
    """Audit trail for operations, data changes and validation failures."""

    def log_operation(self, operation: str, details: str, user_id: str) -> None: ...

    def log_data_change(
            self,
            entity_type: str,
            entity_id: str,
            changes: str,
            user_id: str,
    ) -> None: ...

    def log_performance_metric(
            self,
            operation: str,
            duration: timedelta,
            details: str,
    ) -> None: ...

    def log_validation_failure(self, input_type: str, invalid_value: str, error: str) -> None: ...

    def log_security_violation(self, resource: str, source: str, info: str) -> None: ...


class TaskRepo(Protocol):
    """What the service needs from a store (TaskStore implements it)."""

    def load(self) -> None: ...
    def flush(self) -> None: ...

    def get_by_id(self, task_id: int) -> Any | None: ...
    def get_all(self) -> list[Any]: ...
    def get_by_status(self, status: Any) -> list[Any]: ...
    def get_by_priority(self, priority: Any) -> list[Any]: ...
    def search(self, term: str) -> list[Any]: ...
    def list_tasks(
            self,
            *,
            status: Any | None = None,
            search: str | None = None,
            categories: Iterable[str] | None = None,
            sort_by: str | None = None,
            ascending: bool = True,
            page: Any | None = None,
    ) -> list[Any]: ...

    def add(self, task: Any) -> Any: ...
    def update(self, task: Any) -> None: ...
    def delete(self, task_id: int) -> bool: ...
    def add_category(self, task_id: int, category: str) -> bool: ...
    def remove_category(self, task_id: int, category: str) -> bool: ...
    def update_status(self, task_id: int, status: Any) -> None: ...
    def update_priority(self, task_id: int, priority: Any) -> None: ...
    def update_due_date(self, task_id: int, due_date: datetime | None) -> None: ...
