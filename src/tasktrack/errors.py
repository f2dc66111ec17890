# src/tasktrack/errors.py

"""
Error taxonomy.

Every error raised by the task core derives from TaskTrackError, and also from the
closest builtin so callers that only know the standard hierarchy still catch it:
- InvalidArgument  -> ValueError   (malformed input, rejected before any mutation)
- NotFound         -> LookupError  (referenced task id does not exist)
- Conflict                         (duplicate id on creation)
- InvalidOperation -> RuntimeError (transaction state machine misuse)
- IOFailure        -> OSError      (backing file read/write/decode failure)
"""

from __future__ import annotations


class TaskTrackError(Exception):
    """Base class for all tasktrack errors."""


class InvalidArgument(TaskTrackError, ValueError):
    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFound(TaskTrackError, LookupError):
    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task with ID {task_id} not found")
        self.task_id = task_id


class Conflict(TaskTrackError):
    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task with ID {task_id} already exists")
        self.task_id = task_id


class InvalidOperation(TaskTrackError, RuntimeError):
    pass


class IOFailure(TaskTrackError, OSError):
    pass
