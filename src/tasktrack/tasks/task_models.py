# src/tasktrack/tasks/task_models.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


def now_local() -> datetime:
    return datetime.now().astimezone()


def _aware(ts: datetime) -> datetime:
    # Naive timestamps (old files, callers) are taken as local time.
    return ts if ts.tzinfo is not None else ts.astimezone()


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Values double as the persisted names ("Pending", "InProgress", ...).
    """

    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    @classmethod
    def from_wire(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.PENDING
        try:
            return cls(raw)
        except ValueError:
            logger.warning("Unknown task status %r; using %s", raw, cls.PENDING.value)
            return cls.PENDING


# Files written by older builds used Spanish priority names.
_LEGACY_PRIORITY_NAMES = {
    "Alta": "High",
    "Media": "Medium",
    "Baja": "Low",
}


class Priority(StrEnum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def from_wire(cls, raw: str | None) -> Priority:
        if not raw:
            return cls.MEDIUM
        raw = _LEGACY_PRIORITY_NAMES.get(raw, raw)
        try:
            return cls(raw)
        except ValueError:
            logger.warning("Unknown priority %r; using %s", raw, cls.MEDIUM.value)
            return cls.MEDIUM


def _parse_ts(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return _aware(raw)
    return _aware(datetime.fromisoformat(str(raw)))


@dataclass(slots=True)
class Task:
    """
    A tracked task.

    The store owns the authoritative records and only ever hands out copies, so
    a Task held by a caller can be edited freely and passed back through update().

    Invariant: last_modified_date >= creation_date (enforced on construction and
    by touch()).
    """

    id: int = 0
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING
    priority: Priority = Priority.MEDIUM
    due_date: datetime | None = None
    categories: list[str] = field(default_factory=list)
    creation_date: datetime = field(default_factory=now_local)
    last_modified_date: datetime | None = None

    def __post_init__(self) -> None:
        self.creation_date = _aware(self.creation_date)
        if self.last_modified_date is not None:
            self.last_modified_date = _aware(self.last_modified_date)
        if self.last_modified_date is None or self.last_modified_date < self.creation_date:
            self.last_modified_date = self.creation_date

    def touch(self, now: datetime | None = None) -> None:
        """Stamp last_modified_date (never earlier than creation_date)."""
        ts = _aware(now) if now is not None else now_local()
        self.last_modified_date = max(ts, self.creation_date)

    def has_category(self, category: str) -> bool:
        return category in self.categories

    def copy(self) -> Task:
        return Task(
            id=self.id,
            description=self.description,
            status=self.status,
            priority=self.priority,
            due_date=self.due_date,
            categories=list(self.categories),
            creation_date=self.creation_date,
            last_modified_date=self.last_modified_date,
        )

    # ---- wire format ----

    def to_dict(self) -> dict[str, Any]:
        modified = self.last_modified_date or self.creation_date
        return {
            "id": self.id,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "creationDate": self.creation_date.isoformat(),
            "lastModifiedDate": modified.isoformat(),
            "dueDate": self.due_date.isoformat() if self.due_date is not None else None,
            "categories": list(self.categories),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        created = _parse_ts(data.get("creationDate")) or now_local()
        cats = data.get("categories") or []
        return cls(
            id=int(data["id"]),
            description=str(data.get("description") or ""),
            status=TaskStatus.from_wire(data.get("status")),
            priority=Priority.from_wire(data.get("priority")),
            due_date=_parse_ts(data.get("dueDate")),
            categories=[c for c in cats if isinstance(c, str)],
            creation_date=created,
            last_modified_date=_parse_ts(data.get("lastModifiedDate")),
        )

    def __str__(self) -> str:
        due = f", Due: {self.due_date:%Y-%m-%d}" if self.due_date is not None else ""
        cats = f", Categories: {', '.join(self.categories)}" if self.categories else ""
        modified = self.last_modified_date or self.creation_date
        return (
            f"Task ID: {self.id}, Description: {self.description}, "
            f"Status: {self.status.value}, Priority: {self.priority.value}, "
            f"Created: {self.creation_date:%Y-%m-%d %H:%M:%S}, "
            f"Last Modified: {modified:%Y-%m-%d %H:%M:%S}{due}{cats}"
        )


MAX_PAGE_SIZE = 50
DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True, slots=True)
class PageParams:
    page_number: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        size = self.page_size
        if size < 1:
            size = DEFAULT_PAGE_SIZE
        elif size > MAX_PAGE_SIZE:
            size = MAX_PAGE_SIZE
        object.__setattr__(self, "page_size", size)
        object.__setattr__(self, "page_number", max(1, self.page_number))

    @property
    def skip(self) -> int:
        return (self.page_number - 1) * self.page_size
