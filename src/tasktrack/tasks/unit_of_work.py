# src/tasktrack/tasks/unit_of_work.py

"""
Unit of Work over the JSON task file.

Transactions are whole-file snapshots: begin_transaction() captures the file bytes
verbatim, rollback_transaction() writes them back (or removes the file if it did
not exist). There is no log; store mutations stay in memory until save_changes().

State machine: Idle -> Active (begin) -> Idle (commit | rollback).
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from ..errors import InvalidOperation, IOFailure
from .task_store import TaskStore

logger = logging.getLogger(__name__)

# Backup marker for "the file did not exist when the transaction began".
_MISSING = object()


class UnitOfWork:
    def __init__(self, file_path: str | Path = "tasks.json") -> None:
        self._file_path = Path(file_path)
        self._task_store: TaskStore | None = None
        self._active = False
        self._backup: bytes | object | None = None
        self._closed = False
        # Held across begin -> commit by transaction(); readers may take it too.
        self.lock = threading.RLock()

    @property
    def file_path(self) -> Path:
        return self._file_path

    @property
    def task_store(self) -> TaskStore:
        if self._task_store is None:
            self._task_store = TaskStore(self._file_path)
        return self._task_store

    @property
    def is_active(self) -> bool:
        return self._active

    # ---- state machine ----

    def begin_transaction(self) -> None:
        if self._active:
            raise InvalidOperation("A transaction is already active")

        try:
            if self._file_path.exists():
                self._backup = self._file_path.read_bytes()
            else:
                self._backup = _MISSING
        except OSError as e:
            raise IOFailure(f"Failed to begin transaction on {self._file_path}: {e}") from e

        self._active = True
        logger.debug("Transaction begun file=%s", self._file_path)

    def save_changes(self) -> None:
        """Persist the store. Commit never does this implicitly."""
        if self._task_store is not None:
            self._task_store.flush()

    def commit_transaction(self) -> None:
        if not self._active:
            raise InvalidOperation("No active transaction to commit")
        self._active = False
        self._backup = None
        logger.debug("Transaction committed file=%s", self._file_path)

    def rollback_transaction(self) -> None:
        """
        Restore the file snapshot.

        Only the file is repaired; the store's in-memory list is left as-is and
        must be reloaded by the caller. The unit is Idle afterwards even when the
        restore itself fails.
        """
        if not self._active:
            raise InvalidOperation("No active transaction to rollback")

        backup = self._backup
        try:
            if isinstance(backup, bytes):
                self._file_path.write_bytes(backup)
            elif self._file_path.exists():
                self._file_path.unlink()
        except OSError as e:
            raise IOFailure(f"Failed to rollback transaction on {self._file_path}: {e}") from e
        finally:
            self._active = False
            self._backup = None
        logger.info("Transaction rolled back file=%s", self._file_path)

    @contextmanager
    def transaction(self) -> Iterator[TaskStore]:
        """
        begin -> body -> commit, under self.lock for the whole sequence.

        On any exception: rollback, reload the store from the restored file, rewind
        the id counter to where it stood at begin, and re-raise the original exception unchanged. The body must call
        save_changes() itself for its mutations to be durable.
        """
        with self.lock:
            self.begin_transaction()
            mark: int | None = None
            try:
                store = self.task_store
                mark = store.next_id
                yield store
            except BaseException:
                self._rollback_quietly(mark)
                raise
            self.commit_transaction()

    def _rollback_quietly(self, mark: int | None) -> None:
        # A failing rollback/reload must not mask the error that caused it.
        try:
            self.rollback_transaction()
        except Exception:
            logger.exception("Rollback failed file=%s", self._file_path)
        try:
            self.task_store.load()
            if mark is not None:
                self.task_store.rewind_next_id(mark)
        except Exception:
            logger.exception("Reload after rollback failed file=%s", self._file_path)

    # ---- teardown ----

    def close(self) -> None:
        if self._closed:
            return
        try:
            if self._active:
                logger.warning("Closing with an active transaction; rolling back file=%s", self._file_path)
                self.rollback_transaction()
        finally:
            self._closed = True

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
