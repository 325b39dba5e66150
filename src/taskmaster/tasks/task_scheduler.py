# src/taskmaster/tasks/task_scheduler.py

"""
Reminder scheduler.

A small polling loop that, every interval:
- takes a snapshot of the task cache,
- picks reminders whose firing window covers "now",
- sends an OS notification (best-effort) and always an in-app alert.

A reminder fires when reminder_at <= now and now - reminder_at < window, where
the window is one poll interval wide. Nothing is written back to the task: the
narrow window is what keeps a reminder from firing twice, not a "fired" flag.
If the process is suspended for longer than the window, the reminder is missed
(unless catch-up is enabled, which widens a late tick's window to the real gap).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta

from ..core.ports import AlertSink, Notifier
from .task_models import Task

logger = logging.getLogger(__name__)

SnapshotSource = Callable[[], Iterable[Task]]


def due_reminders(tasks: Iterable[Task], *, now: datetime, window: timedelta) -> list[Task]:
    """Non-completed tasks whose armed reminder falls inside (now - window, now]."""
    ref = now if now.tzinfo is not None else now.astimezone()
    out: list[Task] = []
    for task in tasks:
        if task.completed:
            continue
        rem = task.reminder_datetime
        if rem is None:
            continue
        if rem <= ref and ref - rem < window:
            out.append(task)
    return out


def reminder_text(task: Task) -> tuple[str, str]:
    """(title, body) for a reminder notification."""
    due = task.due_datetime
    due_txt = due.astimezone().strftime("%Y-%m-%d %H:%M") if due else "no date"
    return f"Reminder: {task.title}", f"Due: {due_txt}"


async def fire_due_reminders(
    tasks: Iterable[Task],
    notifier: Notifier | None,
    alerts: AlertSink,
    *,
    now: datetime,
    window: timedelta,
) -> list[Task]:
    """One sweep. Returns the tasks whose reminder fired."""
    fired = due_reminders(tasks, now=now, window=window)
    for task in fired:
        title, body = reminder_text(task)

        if notifier is not None:
            try:
                if notifier.available:
                    await notifier.notify(title, body)
            except Exception:
                logger.exception("Desktop notification failed task_id=%s", task.id)

        try:
            alerts.alert(title, "info")
        except Exception:
            logger.exception("In-app reminder alert failed task_id=%s", task.id)

        logger.info("Reminder fired task_id=%s reminder_at=%s", task.id, task.reminder_at)
    return fired


async def run_reminder_scheduler(
    snapshot: SnapshotSource,
    notifier: Notifier | None,
    alerts: AlertSink,
    *,
    interval_seconds: float = 60.0,
    catch_up: bool = False,
    clock: Callable[[], datetime] | None = None,
) -> None:
    """
    Simple polling scheduler.

    Every interval_seconds:
    - read a point-in-time snapshot of the tasks (never mutated here)
    - fire reminders inside the one-interval window ending now
    - if the tick is late (event loop blocked, machine suspended), log it; with
      catch_up=True the window stretches back to the previous tick

    To stop the scheduler, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))
    window = timedelta(seconds=sleep_s)
    now_fn = clock or (lambda: datetime.now().astimezone())
    last_tick: datetime | None = None

    while True:
        now = now_fn()

        tick_window = window
        if last_tick is not None:
            gap = now - last_tick
            if gap > window * 2:
                logger.warning("Reminder tick late by %.1fs", (gap - window).total_seconds())
                if catch_up:
                    tick_window = gap
        last_tick = now

        try:
            tasks = list(snapshot())
        except Exception:
            logger.exception("Reminder snapshot failed")
            tasks = []

        await fire_due_reminders(tasks, notifier, alerts, now=now, window=tick_window)

        await asyncio.sleep(sleep_s)
