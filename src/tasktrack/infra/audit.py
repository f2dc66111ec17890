# src/tasktrack/infra/audit.py

from __future__ import annotations

import logging
from datetime import timedelta

AUDIT_LOGGER_NAME = "tasktrack.audit"


class LoggingSecurityLogger:
    """
    SecurityLogger that writes one audit line per event to the `tasktrack.audit`
    logger. logging_setup routes that logger to its own file.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or logging.getLogger(AUDIT_LOGGER_NAME)

    def log_operation(self, operation: str, details: str, user_id: str) -> None:
        self._log.info("OPERATION op=%s user=%s details=%s", operation, user_id, details)

    def log_data_change(self, entity_type: str, entity_id: str, changes: str, user_id: str) -> None:
        self._log.info(
            "DATA_CHANGE entity=%s id=%s user=%s changes=%s",
            entity_type,
            entity_id,
            user_id,
            changes,
        )

    def log_performance_metric(self, operation: str, duration: timedelta, details: str) -> None:
        self._log.debug(
            "PERF op=%s ms=%.2f details=%s",
            operation,
            duration.total_seconds() * 1000,
            details,
        )

    def log_validation_failure(self, input_type: str, invalid_value: str, error: str) -> None:
        self._log.warning(
            "VALIDATION_FAILURE input=%s value=%r error=%s", input_type, invalid_value, error
        )

    def log_security_violation(self, resource: str, source: str, info: str) -> None:
        self._log.warning("SECURITY_VIOLATION resource=%s source=%s info=%s", resource, source, info)
