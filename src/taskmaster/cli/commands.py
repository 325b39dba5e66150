# src/taskmaster/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from pathlib import Path
from typing import cast

from ..core.state import AppState
from ..tasks.task_models import Priority, Task, parse_timestamp, to_local_input
from ..tasks.task_view import FilterMode, SortKey, TaskView, has_armed_reminder

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

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

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
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
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return await h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return await h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("Plain text (no slash) is taken as a new task title; a date in it is detected.")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering ----

_PRIORITY_MARK = {Priority.HIGH: "!!!", Priority.MEDIUM: "!! ", Priority.LOW: "!  "}
_ANSI = {"red": "\033[31m", "dim": "\033[2m", "bold": "\033[1m", "reset": "\033[0m"}


def _paint(text: str, style: str, theme: str) -> str:
    # Light theme prints plain text; dark theme adds ANSI colour.
    if theme != "dark":
        return text
    return f"{_ANSI[style]}{text}{_ANSI['reset']}"


def _fmt_when(raw: str | None) -> str:
    dt = parse_timestamp(raw)
    return dt.astimezone().strftime("%Y-%m-%d %H:%M") if dt else "No Date"


def format_task_line(n: int, task: Task, view: TaskView, now: datetime) -> str:
    theme = view.state.theme
    box = "[x]" if task.completed else "[ ]"
    overdue = task.id in view.overdue_ids
    label = "Overdue" if overdue else task.priority.value
    bell = " (reminder)" if has_armed_reminder(task, now) else ""
    line = (
        f"{n:>2}. {box} {_PRIORITY_MARK[task.priority]} {task.title}"
        f"  [{label}] due {_fmt_when(task.due_at)}{bell}  #{task.id[:8]}"
    )
    if overdue:
        return _paint(line, "red", theme)
    if task.completed:
        return _paint(line, "dim", theme)
    return line


def render_view(state: AppState, now: datetime | None = None) -> str:
    """Render the current projection and remember the numbering for /done 2 etc."""
    ctl = state.controller
    ref = now or ctl.now()
    view = ctl.view(ref)
    state.listing = [t.id for t in view.tasks]

    p = view.progress
    header = _paint(
        f"Tasks ({view.state.filter}, {view.state.sort})  {p.completed_count}/{p.total_count}"
        f"  {p.percent}% - {p.message}",
        "bold",
        view.state.theme,
    )
    if view.empty_message:
        return f"{header}\n  {view.empty_message}"
    lines = [header]
    lines.extend(format_task_line(i, t, view, ref) for i, t in enumerate(view.tasks, start=1))
    return "\n".join(lines)


def resolve_task_ref(state: AppState, ref: str) -> str | None:
    """A list number from the last /list, a full id, or a unique id prefix."""
    ref = ref.strip().lstrip("#")
    if not ref:
        return None
    if ref.isdigit():
        idx = int(ref)
        if 1 <= idx <= len(state.listing):
            return state.listing[idx - 1]
    if state.store.get(ref) is not None:
        return ref
    matches = [t.id for t in state.store.tasks if t.id.startswith(ref)]
    return matches[0] if len(matches) == 1 else None


def _form_summary(state: AppState) -> str:
    form = state.controller.form
    prio = form.priority or state.controller.default_priority
    lines = [
        "Draft:",
        f"  Title:    {form.title_text.strip() or '(empty)'}",
        f"  Due:      {form.due_text or '(not set)'}{' (edited)' if form.due_touched else ''}",
        f"  Priority: {prio.value}",
    ]
    if form.preview:
        lines.append(f"  {form.preview}")
    return "\n".join(lines)


# ---- handlers ----


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_status(state: AppState, args: list[str]) -> str:
    s = state.settings
    vs = state.controller.view_state
    notif = "ON" if (state.notifier is not None and state.notifier.available) else "in-app only"
    return (
        "Status:\n"
        f"  Service: {getattr(s, 'api_url', '?')}\n"
        f"  Tasks cached: {len(state.store)}\n"
        f"  View: filter={vs.filter} sort={vs.sort} theme={vs.theme}\n"
        f"  Reminders: every {getattr(s, 'reminder_interval_seconds', 60):g}s, notifications {notif}"
    )


async def cmd_list(state: AppState, args: list[str]) -> str:
    return render_view(state)


async def cmd_reload(state: AppState, args: list[str]) -> str:
    if not await state.controller.reload():
        return "Could not load tasks."
    return render_view(state)


async def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add                -> submit the current draft
    /add <text>         -> set the title (date detected) and submit
    """
    ctl = state.controller
    if args:
        ctl.on_title_input(" ".join(args))
    task = await ctl.submit()
    if task is None:
        return _form_summary(state)
    return f"Added: {task.title} (due {_fmt_when(task.due_at)}, {task.priority.value})"


async def cmd_draft(state: AppState, args: list[str]) -> str:
    return _form_summary(state)


async def cmd_due(state: AppState, args: list[str]) -> str:
    """/due 2025-06-01T10:00 or /due friday 9am (explicit value wins over detection)."""
    ctl = state.controller
    text = " ".join(args).strip()
    if not text:
        ctl.set_due_input("")
        return "Due date cleared."
    if parse_timestamp(text) is None and ctl.extractor is not None:
        match = ctl.extractor.extract(text, now=ctl.now())
        if match is not None:
            text = to_local_input(match.when)
    ctl.set_due_input(text)
    return f"Due set to {ctl.form.due_text}."


async def cmd_priority(state: AppState, args: list[str]) -> str:
    if not args or args[0].lower() not in [p.value for p in Priority]:
        return "Usage: /priority low|medium|high"
    return f"Priority set to {state.controller.set_priority(args[0]).value}."


def _task_arg(state: AppState, args: list[str]) -> str | None:
    if not args:
        return None
    return resolve_task_ref(state, args[0])


async def cmd_done(state: AppState, args: list[str]) -> str:
    task_id = _task_arg(state, args)
    if task_id is None:
        return "Usage: /done <n|id> (numbers refer to the last /list)."
    task = await state.controller.toggle_complete(task_id)
    if task is None:
        return render_view(state)
    return f"{'Completed' if task.completed else 'Reopened'}: {task.title}"


async def cmd_edit(state: AppState, args: list[str]) -> str:
    task_id = _task_arg(state, args)
    if task_id is None or len(args) < 2:
        return "Usage: /edit <n|id> <new title>"
    task = await state.controller.edit_title(task_id, " ".join(args[1:]))
    return f"Renamed: {task.title}" if task is not None else "Title unchanged."


async def cmd_remind(state: AppState, args: list[str]) -> str:
    task_id = _task_arg(state, args)
    if task_id is None:
        return "Usage: /remind <n|id> (toggles a reminder before the due time)."
    await state.controller.toggle_reminder(task_id)
    return render_view(state)


async def cmd_rm(state: AppState, args: list[str]) -> str:
    task_id = _task_arg(state, args)
    if task_id is None:
        return "Usage: /rm <n|id>"
    handle = await state.controller.delete(task_id)
    if handle is None:
        return render_view(state)
    return f"Deleted: {handle.task.title}. Use /undo within {handle.remaining_seconds:.0f}s to restore."


async def cmd_undo(state: AppState, args: list[str]) -> str:
    """/undo -> newest removal, /undo all -> every removal still inside its window."""
    if args and args[0].lower() == "all":
        restored = await state.controller.undo_all()
        return render_view(state) if restored else "Nothing to undo."
    task = await state.controller.undo_delete()
    return render_view(state) if task is not None else "Nothing to undo."


async def cmd_clear(state: AppState, args: list[str]) -> str:
    n = await state.controller.clear_completed()
    return f"Removed {n} completed task(s)." if n else "No completed tasks to clear."


async def cmd_filter(state: AppState, args: list[str]) -> str:
    modes = [m.value for m in FilterMode]
    if not args or args[0].lower() not in modes:
        return f"Usage: /filter {'|'.join(modes)}"
    state.controller.set_filter(args[0].lower())
    return render_view(state)


async def cmd_sort(state: AppState, args: list[str]) -> str:
    keys = [k.value for k in SortKey]
    lowered = {k.lower(): k for k in keys}
    if not args or args[0].lower() not in lowered:
        return f"Usage: /sort {'|'.join(keys)}"
    state.controller.set_sort(lowered[args[0].lower()])
    return render_view(state)


async def cmd_theme(state: AppState, args: list[str]) -> str:
    vs = state.controller.toggle_theme()
    return f"Theme: {vs.theme}"


async def cmd_export(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/export <n> [dir] -> write an .ics calendar file (default: current directory)."""
    task_id = _task_arg(state, args)
    if task_id is None:
        return "Usage: /export <n|id> [directory]"
    exported = state.controller.export_calendar(task_id)
    if exported is None:
        return "Nothing exported."
    filename, content = exported
    target = Path(args[1]).expanduser() if len(args) > 1 else Path.cwd()
    path = target / filename
    try:
        target.mkdir(parents=True, exist_ok=True)
        # newline="" keeps the CRLF line endings iCalendar requires.
        with open(path, "w", encoding="utf-8", newline="") as fh:
            fh.write(content)
    except OSError as e:
        logger.warning("Calendar export to %s failed: %s", path, e)
        return f"Could not write {path}: {e}"
    if emit:
        with contextlib.suppress(Exception):
            emit(f"[EXPORT] {path}")
    return "Event exported! Import the .ics file into your calendar."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show service, view and reminder settings.")
registry.register("list", cmd_list, help_text="Show tasks with the current filter/sort.", aliases=["ls"])
registry.register("reload", cmd_reload, help_text="Reload tasks from the service.")
registry.register("add", cmd_add, help_text="Create a task: /add [title text with a date].")
registry.register("draft", cmd_draft, help_text="Show the task being composed.")
registry.register("due", cmd_due, help_text="Set the draft due date: /due 2025-06-01T10:00.")
registry.register("priority", cmd_priority, help_text="Set the draft priority: low|medium|high.")
registry.register("done", cmd_done, help_text="Toggle completion: /done <n>.", aliases=["x"])
registry.register("edit", cmd_edit, help_text="Rename a task: /edit <n> <title>.")
registry.register("remind", cmd_remind, help_text="Toggle a reminder before due: /remind <n>.")
registry.register("rm", cmd_rm, help_text="Delete a task (undo available briefly): /rm <n>.", aliases=["del"])
registry.register("undo", cmd_undo, help_text="Restore the last deleted task (/undo all: every recent one).")
registry.register("clear", cmd_clear, help_text="Delete all completed tasks.")
registry.register("filter", cmd_filter, help_text="Filter: all|active|completed|failed.")
registry.register("sort", cmd_sort, help_text="Sort: createdAt-desc|createdAt-asc|priority-desc|dueDate-asc.")
registry.register("theme", cmd_theme, help_text="Toggle light/dark output.")
registry.register("export", cmd_export, help_text="Export a task to an .ics file: /export <n> [dir].")
