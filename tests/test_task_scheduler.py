# tests/test_task_scheduler.py

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from taskmaster.tasks.task_models import Task
from taskmaster.tasks.task_scheduler import due_reminders, fire_due_reminders, run_reminder_scheduler

from .fakes import FakeNotifier, FixedClock, RecordingAlerts, record

WINDOW = timedelta(seconds=60)
REMIND_AT = datetime(2025, 6, 1, 9, 45, tzinfo=timezone.utc)


def _task(task_id: str = "a", *, completed: bool = False, reminder: str | None = "2025-06-01T09:45:00.000Z") -> Task:
    return Task.from_json(
        record(task_id, "Dentist", due="2025-06-01T10:00:00.000Z", completed=completed, reminder=reminder)
    )


@pytest.mark.parametrize(
    ("now", "fires"),
    [
        (REMIND_AT - timedelta(minutes=15), False),
        (REMIND_AT - timedelta(seconds=1), False),
        (REMIND_AT, True),
        (REMIND_AT + timedelta(seconds=30), True),
        (REMIND_AT + timedelta(seconds=59, milliseconds=999), True),
        (REMIND_AT + timedelta(seconds=60), False),
        (REMIND_AT + timedelta(minutes=1, seconds=30), False),
    ],
)
def test_reminder_window(now: datetime, fires: bool) -> None:
    assert bool(due_reminders([_task()], now=now, window=WINDOW)) is fires


def test_completed_and_unarmed_tasks_never_fire() -> None:
    tasks = [_task("done", completed=True), _task("none", reminder=None)]
    assert due_reminders(tasks, now=REMIND_AT, window=WINDOW) == []


@pytest.mark.asyncio
async def test_fire_notifies_and_always_alerts_in_app() -> None:
    notifier = FakeNotifier()
    alerts = RecordingAlerts()

    fired = await fire_due_reminders([_task()], notifier, alerts, now=REMIND_AT, window=WINDOW)

    assert [t.id for t in fired] == ["a"]
    assert notifier.sent[0][0] == "Reminder: Dentist"
    assert alerts.messages() == ["Reminder: Dentist"]


@pytest.mark.asyncio
async def test_fire_falls_back_when_notifier_is_missing_or_broken() -> None:
    alerts = RecordingAlerts()

    await fire_due_reminders([_task()], FakeNotifier(available=False), alerts, now=REMIND_AT, window=WINDOW)
    await fire_due_reminders([_task()], FakeNotifier(fail=True), alerts, now=REMIND_AT, window=WINDOW)
    await fire_due_reminders([_task()], None, alerts, now=REMIND_AT, window=WINDOW)

    assert alerts.messages() == ["Reminder: Dentist"] * 3


@pytest.mark.asyncio
async def test_slow_notification_does_not_block_the_loop() -> None:
    alerts = RecordingAlerts()
    notifier = FakeNotifier(delay=0.1)
    ticks = 0

    async def ticker() -> None:
        nonlocal ticks
        while True:
            ticks += 1
            await asyncio.sleep(0.01)

    other = asyncio.create_task(ticker())
    await fire_due_reminders([_task()], notifier, alerts, now=REMIND_AT, window=WINDOW)
    other.cancel()
    with pytest.raises(asyncio.CancelledError):
        await other

    assert ticks >= 3
    assert notifier.sent and alerts.messages() == ["Reminder: Dentist"]


@pytest.mark.asyncio
async def test_scheduler_fires_due_reminder_until_cancelled() -> None:
    alerts = RecordingAlerts()
    notifier = FakeNotifier()
    clock = FixedClock(REMIND_AT + timedelta(milliseconds=5))
    snapshot_calls = 0

    def snapshot():
        nonlocal snapshot_calls
        snapshot_calls += 1
        return (_task(),)

    runner = asyncio.create_task(
        run_reminder_scheduler(snapshot, notifier, alerts, interval_seconds=0.01, clock=clock)
    )

    await asyncio.sleep(0.005)
    # Move past the 10ms window: later ticks must not fire again.
    clock.now = REMIND_AT + timedelta(seconds=1)
    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert snapshot_calls >= 2
    assert alerts.messages() == ["Reminder: Dentist"]
    assert len(notifier.sent) == 1


@pytest.mark.asyncio
async def test_scheduler_catch_up_fires_reminder_missed_during_stall() -> None:
    alerts = RecordingAlerts()
    clock = FixedClock(REMIND_AT - timedelta(minutes=5))

    runner = asyncio.create_task(
        run_reminder_scheduler(
            lambda: (_task(),), None, alerts, interval_seconds=0.01, catch_up=True, clock=clock
        )
    )
    await asyncio.sleep(0.005)
    # The next tick sees a ten-minute gap that covers the reminder.
    clock.now = REMIND_AT + timedelta(minutes=5)
    await asyncio.sleep(0.03)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert alerts.messages() == ["Reminder: Dentist"]
