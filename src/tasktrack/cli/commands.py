# src/tasktrack/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..core.state import AppState
from ..errors import TaskTrackError
from ..tasks.sanitizer import is_valid_id
from ..tasks.task_models import PageParams, Priority, Task, TaskStatus

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

_PRIORITY_WORDS = {p.value.lower(): p for p in Priority}
_STATUS_WORDS = {s.value.lower(): s for s in TaskStatus}
_STATUS_WORDS.update({"in_progress": TaskStatus.IN_PROGRESS, "done": TaskStatus.COMPLETED})


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return handler(state, args)
        except TaskTrackError as e:
            logger.info("Command /%s failed: %s", name, e)
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _parse_id(raw: str) -> int | None:
    try:
        task_id = int(raw)
    except ValueError:
        return None
    return task_id if is_valid_id(task_id) else None


def _render(tasks: list[Task]) -> str:
    if not tasks:
        return "No tasks found."
    return "\n".join(str(t) for t in tasks)


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add [high|medium|low] <description>
    """
    if not args:
        return "Usage: /add [high|medium|low] <description>"
    priority = Priority.MEDIUM
    if args[0].lower() in _PRIORITY_WORDS:
        priority = _PRIORITY_WORDS[args[0].lower()]
        args = args[1:]
    created = state.service.create_task(Task(description=" ".join(args), priority=priority))
    return f"Task {created.id} added."


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list            -> first page of all tasks
    /list <status>   -> filter by status
    /list <status> <page>
    """
    status = None
    page_number = 1
    for arg in args:
        if arg.isdigit():
            page_number = int(arg)
        elif arg.lower() in _STATUS_WORDS:
            status = _STATUS_WORDS[arg.lower()]
        else:
            return f"Unknown status: {arg}"
    tasks = state.service.list_tasks(
        status=status, sort_by="id", page=PageParams(page_number=page_number)
    )
    return _render(tasks)


def cmd_show(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args[0]) if args else None
    if task_id is None:
        return "Usage: /show <id>"
    task = state.service.get_task(task_id)
    return str(task) if task is not None else f"Task {task_id} not found."


def cmd_find(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /find <term>"
    return _render(state.service.search_tasks(" ".join(args)))


def cmd_status(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args[0]) if args else None
    if task_id is None or len(args) < 2 or args[1].lower() not in _STATUS_WORDS:
        return "Usage: /status <id> pending|inprogress|completed|cancelled"
    status = _STATUS_WORDS[args[1].lower()]
    state.service.update_task_status(task_id, status)
    return f"Task {task_id} is now {status.value}."


def cmd_priority(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args[0]) if args else None
    if task_id is None or len(args) < 2 or args[1].lower() not in _PRIORITY_WORDS:
        return "Usage: /priority <id> high|medium|low"
    priority = _PRIORITY_WORDS[args[1].lower()]
    state.service.update_task_priority(task_id, priority)
    return f"Task {task_id} priority is now {priority.value}."


def cmd_due(state: AppState, args: list[str]) -> str:
    """
    /due <id> YYYY-MM-DD
    /due <id> clear
    """
    task_id = _parse_id(args[0]) if args else None
    if task_id is None or len(args) < 2:
        return "Usage: /due <id> YYYY-MM-DD|clear"
    if args[1].lower() == "clear":
        due = None
    else:
        try:
            due = datetime.strptime(args[1], "%Y-%m-%d").astimezone()
        except ValueError:
            return "Invalid date format. Use YYYY-MM-DD."
    state.service.update_task_due_date(task_id, due)
    return f"Task {task_id} due date {'cleared' if due is None else 'set to ' + args[1]}."


def cmd_tag(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args[0]) if args else None
    if task_id is None or len(args) < 2:
        return "Usage: /tag <id> <category>"
    if state.service.add_category_to_task(task_id, " ".join(args[1:])):
        return f"Category added to task {task_id}."
    return f"Task {task_id} already has that category."


def cmd_untag(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args[0]) if args else None
    if task_id is None or len(args) < 2:
        return "Usage: /untag <id> <category>"
    if state.service.remove_category_from_task(task_id, " ".join(args[1:])):
        return f"Category removed from task {task_id}."
    return f"Task {task_id} has no such category."


def cmd_delete(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args[0]) if args else None
    if task_id is None:
        return "Usage: /delete <id>"
    if state.service.delete_task(task_id):
        return f"Task {task_id} deleted."
    return f"Task {task_id} not found."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Add a task: /add [high|medium|low] <description>.")
registry.register("list", cmd_list, help_text="List tasks: /list [status] [page].", aliases=["ls"])
registry.register("show", cmd_show, help_text="Show one task: /show <id>.")
registry.register("find", cmd_find, help_text="Search descriptions: /find <term>.")
registry.register("status", cmd_status, help_text="Change status: /status <id> <status>.")
registry.register("priority", cmd_priority, help_text="Change priority: /priority <id> <priority>.")
registry.register("due", cmd_due, help_text="Set due date: /due <id> YYYY-MM-DD|clear.")
registry.register("tag", cmd_tag, help_text="Add a category: /tag <id> <category>.")
registry.register("untag", cmd_untag, help_text="Remove a category: /untag <id> <category>.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"])
