# tests/fakes.py

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from taskmaster.core.errors import RemoteRejection, TransportError

# 2025-06-01 09:00 UTC; every clock-dependent test starts here.
NOW = datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc)


class FakeTaskService:
    """
    In-memory TaskService used by store/controller tests.

    - Records every call for assertions
    - `fail_next[op]` makes the next call of that op raise the given error
    - `gate` (if set) is awaited inside update_task so tests can hold a PUT in flight
    - `delete_gate` does the same for delete_task
    """

    def __init__(self, records: list[dict[str, Any]] | None = None) -> None:
        self.records: dict[str, dict[str, Any]] = {}
        for r in records or []:
            self.records[str(r["id"])] = dict(r)
        self.calls: list[tuple[str, Any]] = []
        self.fail_next: dict[str, Exception] = {}
        self.gate: asyncio.Event | None = None
        self.delete_gate: asyncio.Event | None = None
        self._ids = itertools.count(1)

    def _maybe_fail(self, op: str) -> None:
        err = self.fail_next.pop(op, None)
        if err is not None:
            raise err

    async def list_tasks(self) -> list[dict[str, Any]]:
        self.calls.append(("list", None))
        self._maybe_fail("list")
        return [dict(r) for r in self.records.values()]

    async def create_task(self, body: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(("create", dict(body)))
        self._maybe_fail("create")
        task_id = f"srv-{next(self._ids)}"
        record = {"completed": False, **body, "id": task_id, "createdAt": "2025-06-01T08:00:00.000Z"}
        self.records[task_id] = record
        return dict(record)

    async def update_task(self, task_id: str, patch: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(("update", (task_id, dict(patch))))
        if self.gate is not None:
            await self.gate.wait()
        self._maybe_fail("update")
        if task_id not in self.records:
            raise RemoteRejection("Task not found", status_code=404)
        self.records[task_id] = {**self.records[task_id], **patch}
        return dict(self.records[task_id])

    async def delete_task(self, task_id: str) -> None:
        self.calls.append(("delete", task_id))
        if self.delete_gate is not None:
            await self.delete_gate.wait()
        self._maybe_fail("delete")
        if self.records.pop(task_id, None) is None:
            raise RemoteRejection("Task not found", status_code=404)


def offline() -> TransportError:
    return TransportError("Could not reach the task service (ConnectError).")


@dataclass(slots=True)
class RecordingAlerts:
    """AlertSink that keeps (level, message) pairs."""

    sent: list[tuple[str, str]] = field(default_factory=list)

    def alert(self, message: str, level: str = "info") -> None:
        self.sent.append((level, message))

    def messages(self, level: str | None = None) -> list[str]:
        return [m for lvl, m in self.sent if level is None or lvl == level]


@dataclass(slots=True)
class FakeNotifier:
    """Notifier with a switchable `available` flag; optionally slow or raising."""

    available: bool = True
    fail: bool = False
    delay: float = 0.0
    sent: list[tuple[str, str]] = field(default_factory=list)

    async def notify(self, title: str, body: str) -> bool:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise OSError("notification daemon went away")
        self.sent.append((title, body))
        return True


class FixedClock:
    """Settable wall clock for the controller and scheduler."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class MonotonicClock:
    """Settable monotonic clock for undo windows."""

    def __init__(self, t: float = 1000.0) -> None:
        self.t = t

    def __call__(self) -> float:
        return self.t


def record(
    task_id: str,
    title: str = "Task",
    *,
    priority: str = "medium",
    due: str | None = "2025-06-01T10:00:00.000Z",
    completed: bool = False,
    created: str | None = "2025-05-01T08:00:00.000Z",
    reminder: str | None = None,
) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": task_id,
        "title": title,
        "priority": priority,
        "dueAt": due,
        "completed": completed,
        "createdAt": created,
    }
    if reminder is not None:
        out["reminderAt"] = reminder
    return out
