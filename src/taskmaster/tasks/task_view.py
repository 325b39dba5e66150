# src/taskmaster/tasks/task_view.py

"""
View projection.

Pure functions over a snapshot of the task cache:
- filter_tasks: all / active / completed / failed (overdue)
- sort_tasks: stable ordering by creation time, priority or due date
- progress: completed/total/percent plus an encouragement tier

The view state (filter, sort, theme) is passed in explicitly; nothing here
reads shared state.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum

from .task_models import Task


class FilterMode(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


class SortKey(StrEnum):
    CREATED_DESC = "createdAt-desc"
    CREATED_ASC = "createdAt-asc"
    PRIORITY_DESC = "priority-desc"
    DUE_ASC = "dueDate-asc"


PROGRESS_MESSAGES = (
    "Let's get to work!",
    "Good start!",
    "Keep it up!",
    "Almost there!",
    "You're a productivity machine!",
)

EMPTY_MESSAGES = {
    FilterMode.COMPLETED: "No completed tasks yet.",
    FilterMode.FAILED: "No failed tasks! Great job keeping up!",
}
DEFAULT_EMPTY_MESSAGE = "No tasks found. Add one!"

# Records without a usable timestamp sort as the earliest possible instant.
_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True, slots=True)
class ViewState:
    """Immutable UI flags; the controller replaces it, never mutates it."""

    filter: FilterMode = FilterMode.ALL
    sort: SortKey = SortKey.CREATED_DESC
    theme: str = "light"


@dataclass(frozen=True, slots=True)
class Progress:
    completed_count: int
    total_count: int
    percent: int

    @property
    def message(self) -> str:
        return progress_message(self.percent, self.total_count)


@dataclass(frozen=True, slots=True)
class TaskView:
    """Everything a renderer needs for one frame."""

    tasks: tuple[Task, ...]
    progress: Progress
    overdue_ids: frozenset[str]
    empty_message: str | None
    state: ViewState


def _now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now().astimezone()
    return now if now.tzinfo is not None else now.astimezone()


def is_overdue(task: Task, now: datetime | None = None) -> bool:
    """Not completed, has a due timestamp, and that timestamp is strictly in the past."""
    if task.completed:
        return False
    due = task.due_datetime
    return due is not None and due < _now(now)


def has_armed_reminder(task: Task, now: datetime | None = None) -> bool:
    rem = task.reminder_datetime
    return rem is not None and rem > _now(now)


def filter_tasks(
    tasks: Iterable[Task], mode: FilterMode | str, *, now: datetime | None = None
) -> list[Task]:
    mode = FilterMode(mode)
    items = list(tasks)
    if mode is FilterMode.ACTIVE:
        return [t for t in items if not t.completed]
    if mode is FilterMode.COMPLETED:
        return [t for t in items if t.completed]
    if mode is FilterMode.FAILED:
        ref = _now(now)
        return [t for t in items if is_overdue(t, ref)]
    return items


def sort_tasks(tasks: Iterable[Task], key: SortKey | str) -> list[Task]:
    """Stable sort; ties keep their original relative order."""
    key = SortKey(key)
    items = list(tasks)
    if key is SortKey.CREATED_DESC:
        return sorted(items, key=lambda t: t.created_datetime or _EARLIEST, reverse=True)
    if key is SortKey.CREATED_ASC:
        return sorted(items, key=lambda t: t.created_datetime or _EARLIEST)
    if key is SortKey.PRIORITY_DESC:
        return sorted(items, key=lambda t: t.priority.rank, reverse=True)
    return sorted(items, key=lambda t: t.due_datetime or _EARLIEST)


def progress(tasks: Sequence[Task]) -> Progress:
    total = len(tasks)
    completed = sum(1 for t in tasks if t.completed)
    # Half-up rounding; the builtin round() would send 50.5 to 50.
    percent = 0 if total == 0 else int(math.floor(100 * completed / total + 0.5))
    return Progress(completed_count=completed, total_count=total, percent=percent)


def progress_message(percent: int, total: int | None = None) -> str:
    if total == 0:
        return PROGRESS_MESSAGES[0]
    idx = 0
    if percent > 0:
        idx = 1
    if percent > 30:
        idx = 2
    if percent > 70:
        idx = 3
    if percent == 100:
        idx = 4
    return PROGRESS_MESSAGES[idx]


def project(tasks: Sequence[Task], state: ViewState, *, now: datetime | None = None) -> TaskView:
    """Filter, then sort, then compute overdue markers; progress covers every task."""
    ref = _now(now)
    visible = tuple(sort_tasks(filter_tasks(tasks, state.filter, now=ref), state.sort))
    overdue = frozenset(t.id for t in visible if is_overdue(t, ref))
    empty = None if visible else EMPTY_MESSAGES.get(state.filter, DEFAULT_EMPTY_MESSAGE)
    return TaskView(
        tasks=visible,
        progress=progress(tasks),
        overdue_ids=overdue,
        empty_message=empty,
        state=state,
    )
