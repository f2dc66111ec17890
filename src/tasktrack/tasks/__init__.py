"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, Priority, PageParams)
- sanitizer.py: pure input cleaning helpers
- validator.py: fail-fast validation (sanitizes in place)
- task_store.py: JSON-file-backed storage + query/update helpers
- unit_of_work.py: snapshot/restore transactions over the task file
- task_service.py: orchestrator (transactions, cache-aside reads, audit)
- task_api.py: asyncio facade and small high-level helpers
"""
