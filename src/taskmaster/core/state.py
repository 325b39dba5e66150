# src/taskmaster/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..tasks.task_store import TaskStore
from .controller import InteractionController
from .ports import AlertSink, Notifier, TaskService


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any

    client: TaskService
    store: TaskStore
    controller: InteractionController
    alerts: AlertSink
    notifier: Notifier | None

    # Task ids in the order of the last printed list; "/done 2" refers to these.
    listing: list[str] = field(default_factory=list)

    # Background asyncio tasks owned by the app (reminder loop, ...).
    background: list[Any] = field(default_factory=list)
