# tests/test_task_service.py

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from tasktrack.errors import InvalidArgument, IOFailure, NotFound
from tasktrack.tasks.task_models import PageParams, Priority, Task, TaskStatus
from tasktrack.tasks.task_service import TaskService, task_key
from tasktrack.tasks.task_store import TaskStore
from tasktrack.tasks.unit_of_work import UnitOfWork

from .conftest import make_task, tomorrow
from .fakes import BrokenCache, FakeCache, FakeSecurityLogger, InterleavingCache


def test_requires_unit_of_work() -> None:
    with pytest.raises(InvalidArgument):
        TaskService(None)  # type: ignore[arg-type]


def test_create_persists_and_audits(
    service: TaskService, audit: FakeSecurityLogger, tasks_file: Path
) -> None:
    created = service.create_task(make_task(priority=Priority.HIGH))

    assert created.id == 1
    assert created.priority is Priority.HIGH
    assert TaskStore(tasks_file).get_by_id(1) == created

    assert audit.methods() == ["log_data_change", "log_performance_metric"]
    entity, entity_id, changes, user = audit.records[0].args
    assert (entity, entity_id, user) == ("Task", "1", "tester")
    assert "Write the weekly report" in changes
    op, duration, details = audit.records[1].args
    assert op == "CreateTask"
    assert isinstance(duration, timedelta)
    assert details == "task_id=1"


def test_create_sanitizes_and_reports_markup(
    service: TaskService, audit: FakeSecurityLogger
) -> None:
    created = service.create_task(
        make_task("<script>x</script>Review   the budget", categories=["<b>finance</b>"])
    )
    assert created.description == "xReview the budget"
    assert created.categories == ["finance"]

    violations = [r.args for r in audit.records if r.method == "log_security_violation"]
    assert [v[0] for v in violations] == ["Task.description", "Task.categories"]
    assert all(v[1] == "tester" for v in violations)


def test_invalid_create_leaves_file_untouched(
    service: TaskService, audit: FakeSecurityLogger, tasks_file: Path
) -> None:
    service.create_task(make_task())
    before = tasks_file.read_bytes()

    with pytest.raises(InvalidArgument):
        service.create_task(make_task("too short"))
    with pytest.raises(InvalidArgument):
        service.create_task(None)  # type: ignore[arg-type]

    assert tasks_file.read_bytes() == before
    assert not service.unit_of_work.is_active
    assert "log_validation_failure" in audit.methods()
    assert service.create_task(make_task("Another valid description")).id == 2


def test_create_with_past_due_date_is_rejected(service: TaskService) -> None:
    past = datetime.now().astimezone() - timedelta(days=1)
    with pytest.raises(InvalidArgument):
        service.create_task(make_task(due_date=past))
    assert service.get_all_tasks() == []


def test_update_task(service: TaskService) -> None:
    created = service.create_task(make_task())
    created.description = "Write the monthly report"
    created.status = TaskStatus.IN_PROGRESS
    service.update_task(created)

    fetched = service.get_task(created.id)
    assert fetched.description == "Write the monthly report"
    assert fetched.status is TaskStatus.IN_PROGRESS
    assert fetched.last_modified_date >= fetched.creation_date


def test_update_missing_task_rolls_back(service: TaskService, tasks_file: Path) -> None:
    service.create_task(make_task())
    before = tasks_file.read_bytes()

    with pytest.raises(NotFound):
        service.update_task(Task(id=77, description="Nobody has this id"))
    with pytest.raises(NotFound):
        service.update_task_status(77, TaskStatus.COMPLETED)
    with pytest.raises(NotFound):
        service.add_category_to_task(77, "work")

    assert tasks_file.read_bytes() == before
    assert not service.unit_of_work.is_active


def test_delete_task(service: TaskService, audit: FakeSecurityLogger) -> None:
    created = service.create_task(make_task())
    assert service.delete_task(created.id) is True
    assert service.get_task(created.id) is None

    audit.records.clear()
    assert service.delete_task(created.id) is False
    assert audit.methods() == ["log_operation"]


def test_field_updates(service: TaskService) -> None:
    t = service.create_task(make_task())

    service.update_task_status(t.id, "Completed")
    service.update_task_priority(t.id, Priority.LOW)
    due = tomorrow()
    service.update_task_due_date(t.id, due)

    fetched = service.get_task(t.id)
    assert fetched.status is TaskStatus.COMPLETED
    assert fetched.priority is Priority.LOW
    assert fetched.due_date == due

    service.update_task_due_date(t.id, None)
    assert service.get_task(t.id).due_date is None

    with pytest.raises(InvalidArgument):
        service.update_task_status(t.id, "Finished")
    with pytest.raises(InvalidArgument):
        service.update_task_priority(t.id, "Urgent")
    with pytest.raises(InvalidArgument):
        service.update_task_due_date(t.id, datetime.now().astimezone() - timedelta(days=3))


def test_categories(service: TaskService) -> None:
    t = service.create_task(make_task())

    assert service.add_category_to_task(t.id, "  work ") is True
    assert service.add_category_to_task(t.id, "work") is False
    assert service.get_task(t.id).categories == ["work"]

    with pytest.raises(InvalidArgument):
        service.add_category_to_task(t.id, "###")

    assert service.remove_category_from_task(t.id, "home") is False
    assert service.remove_category_from_task(t.id, "work") is True
    assert service.get_task(t.id).categories == []


def test_get_task_is_cache_aside(service: TaskService, cache: FakeCache) -> None:
    t = service.create_task(make_task())
    cache.calls.clear()

    first = service.get_task(t.id)
    second = service.get_task(t.id)

    assert first == second
    assert cache.calls.count(("set", task_key(t.id))) == 1
    assert cache.ttls[task_key(t.id)] == timedelta(minutes=5)


def test_missing_task_is_not_cached(service: TaskService, cache: FakeCache) -> None:
    assert service.get_task(5) is None
    assert task_key(5) not in cache.data


def test_cached_values_are_isolated(service: TaskService) -> None:
    t = service.create_task(make_task(categories=["work"]))
    got = service.get_task(t.id)
    got.categories.append("mutated")
    got.description = "mutated description"

    again = service.get_task(t.id)
    assert again.categories == ["work"]
    assert again.description == "Write the weekly report"

    listing = service.get_all_tasks()
    listing[0].categories.clear()
    assert service.get_all_tasks()[0].categories == ["work"]


def test_mutation_invalidates_cached_reads(service: TaskService, cache: FakeCache) -> None:
    t = service.create_task(make_task())
    service.get_task(t.id)
    service.get_all_tasks()
    service.get_tasks_by_status(TaskStatus.PENDING)
    assert {task_key(t.id), "tasks:all", "tasks:status:Pending"} <= set(cache.data)

    service.update_task_status(t.id, TaskStatus.COMPLETED)

    assert task_key(t.id) not in cache.data
    assert "tasks:all" not in cache.data
    assert "tasks:status:Pending" not in cache.data
    assert service.get_tasks_by_status(TaskStatus.PENDING) == []
    assert [x.id for x in service.get_tasks_by_status("Completed")] == [t.id]


def test_queries(service: TaskService) -> None:
    service.create_task(make_task("Buy milk on the way home", priority=Priority.HIGH))
    service.create_task(make_task("Walk the dog before dinner"))
    service.create_task(make_task("BUY flowers for the party", priority=Priority.HIGH))

    assert [t.id for t in service.search_tasks("buy")] == [1, 3]
    assert [t.id for t in service.get_tasks_by_priority("High")] == [1, 3]
    assert len(service.get_all_tasks()) == 3

    with pytest.raises(InvalidArgument):
        service.search_tasks("   ")
    with pytest.raises(InvalidArgument):
        service.get_tasks_by_priority("Critical")


def test_list_tasks_is_uncached_and_paged(service: TaskService, cache: FakeCache) -> None:
    for i in range(7):
        service.create_task(make_task(f"Numbered task {i:02d}", categories=["batch"]))
    cache.calls.clear()

    page = service.list_tasks(
        status="Pending", categories=["batch"], sort_by="id", ascending=False,
        page=PageParams(page_number=2, page_size=3),
    )
    assert [t.id for t in page] == [4, 3, 2]
    assert not any(op == "set" for op, _ in cache.calls)


def test_reads_see_external_edits(service: TaskService, tasks_file: Path) -> None:
    service.create_task(make_task())
    assert len(service.list_tasks()) == 1

    other = TaskStore(tasks_file)
    other.add(Task(description="Added by another process"))
    other.flush()

    assert len(service.list_tasks()) == 2
    assert service.create_task(make_task("Created after the edit")).id == 3


def test_broken_cache_does_not_break_service(uow: UnitOfWork) -> None:
    service = TaskService(uow, cache=BrokenCache())
    t = service.create_task(make_task())
    assert service.get_task(t.id) == t
    assert [x.id for x in service.get_all_tasks()] == [t.id]
    service.update_task_priority(t.id, Priority.HIGH)
    assert service.get_task(t.id).priority is Priority.HIGH


def test_broken_audit_does_not_break_service(uow: UnitOfWork) -> None:
    service = TaskService(uow, audit=FakeSecurityLogger(fail=True))
    t = service.create_task(make_task("<b>Still</b> works without audit"))
    assert service.delete_task(t.id) is True
    assert service.delete_task(t.id) is False


def test_service_without_collaborators(uow: UnitOfWork) -> None:
    service = TaskService(uow)
    t = service.create_task(make_task())
    assert service.get_task(t.id) == t


def test_write_between_read_and_cache_fill_is_not_masked(uow: UnitOfWork) -> None:
    cache = InterleavingCache()
    service = TaskService(uow, cache=cache)
    t = service.create_task(make_task())

    cache.before_set = lambda: service.update_task_status(t.id, TaskStatus.COMPLETED)
    first = service.get_task(t.id)

    assert first.status is TaskStatus.PENDING
    assert task_key(t.id) not in cache.data
    assert service.get_task(t.id).status is TaskStatus.COMPLETED


def test_write_between_read_and_list_fill_is_not_masked(uow: UnitOfWork) -> None:
    cache = InterleavingCache()
    service = TaskService(uow, cache=cache)
    service.create_task(make_task())

    cache.before_set = lambda: service.create_task(make_task("Second task for the list"))
    assert len(service.get_all_tasks()) == 1
    assert len(service.get_all_tasks()) == 2


def test_failed_save_does_not_burn_an_id(service: TaskService, tasks_file: Path) -> None:
    service.create_task(make_task())
    before = tasks_file.read_bytes()
    blocker = tasks_file.with_name(tasks_file.name + ".tmp")
    blocker.mkdir()

    with pytest.raises(IOFailure):
        service.create_task(make_task("This one cannot be saved"))
    assert tasks_file.read_bytes() == before

    blocker.rmdir()
    assert service.create_task(make_task("Saved on the second try")).id == 2
