# src/taskmaster/core/ports.py

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the HTTP client, the notifier and the UI swappable and makes testing easier.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Awaitable, Protocol

TaskRecord = dict[str, Any]
# JSON task record as exchanged with the persistence service (camelCase keys).


class TaskService(Protocol):
    """
    Persistence service contract (REST: /api/tasks).

    Implementations raise TransportError on network/decode failures and
    RemoteRejection when the service answers with an error status.
    """

    def list_tasks(self) -> Awaitable[list[TaskRecord]]: ...
    def create_task(self, body: TaskRecord) -> Awaitable[TaskRecord]: ...
    def update_task(self, task_id: str, patch: TaskRecord) -> Awaitable[TaskRecord]: ...
    def delete_task(self, task_id: str) -> Awaitable[None]: ...


class Notifier(Protocol):
    """
    External (OS-level) notification capability.

    May be absent or denied: `available` is False then, and callers fall back
    to the in-app alert path.
    """

    @property
    def available(self) -> bool: ...

    async def notify(self, title: str, body: str) -> bool: ...


class AlertSink(Protocol):
    """In-app transient alerts (the console prints them; a GUI would toast them)."""

    def alert(self, message: str, level: str = "info") -> None: ...


class DateExtractor(Protocol):
    """Natural-language date extraction: zero-or-one best guess."""

    def extract(self, text: str, *, now: datetime | None = None) -> Any | None: ...
