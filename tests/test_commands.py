# tests/test_commands.py

from __future__ import annotations

from tasktrack.cli.commands import CommandRegistry, registry
from tasktrack.core.state import AppState
from tasktrack.tasks.task_models import Priority, TaskStatus

from .conftest import tomorrow


def test_command_registry_routes_and_aliases(state: AppState) -> None:
    reg = CommandRegistry()
    called: list[list[str]] = []

    def h(state, args):
        called.append(args)
        return "ok"

    reg.register("ping", h, "ping", aliases=["p"])

    assert reg.handle(state, "/ping a b") == "ok"
    assert reg.handle(state, "/P") == "ok"
    assert called == [["a", "b"], []]
    assert "/ping - ping" in reg.build_help()


def test_command_registry_unknown_and_non_command(state: AppState) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_add_list_show(state: AppState) -> None:
    assert registry.handle(state, "/add high Prepare the team retro") == "Task 1 added."
    assert registry.handle(state, "/add Water the office plants") == "Task 2 added."

    listing = registry.handle(state, "/list")
    assert "Task ID: 1" in listing and "Task ID: 2" in listing
    assert state.service.get_task(1).priority is Priority.HIGH

    assert "Description: Water the office plants" in registry.handle(state, "/show 2")
    assert registry.handle(state, "/show 9") == "Task 9 not found."
    assert registry.handle(state, "/show abc") == "Usage: /show <id>"
    assert registry.handle(state, "/list completed") == "No tasks found."
    assert registry.handle(state, "/list bogus") == "Unknown status: bogus"


def test_validation_errors_are_reported(state: AppState) -> None:
    reply = registry.handle(state, "/add short")
    assert reply.startswith("Error: Description must be between")


def test_status_priority_due_tags_delete(state: AppState) -> None:
    registry.handle(state, "/add Renew the car insurance")

    assert registry.handle(state, "/status 1 done") == "Task 1 is now Completed."
    assert registry.handle(state, "/priority 1 low") == "Task 1 priority is now Low."
    assert state.service.get_task(1).status is TaskStatus.COMPLETED

    day = tomorrow().strftime("%Y-%m-%d")
    assert registry.handle(state, f"/due 1 {day}") == f"Task 1 due date set to {day}."
    assert registry.handle(state, "/due 1 someday") == "Invalid date format. Use YYYY-MM-DD."
    assert registry.handle(state, "/due 1 clear") == "Task 1 due date cleared."

    assert registry.handle(state, "/tag 1 car stuff") == "Category added to task 1."
    assert registry.handle(state, "/tag 1 car stuff") == "Task 1 already has that category."
    assert "Renew" in registry.handle(state, "/find insurance")
    assert registry.handle(state, "/untag 1 car stuff") == "Category removed from task 1."

    assert registry.handle(state, "/status 2 done") == "Error: Task with ID 2 not found"
    assert registry.handle(state, "/rm 1") == "Task 1 deleted."
    assert registry.handle(state, "/delete 1") == "Task 1 not found."


def test_help_lists_commands(state: AppState) -> None:
    text = registry.handle(state, "/help")
    for name in ("add", "list", "status", "delete"):
        assert f"/{name} " in text
