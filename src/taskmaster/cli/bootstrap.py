# src/taskmaster/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (HTTP client, store, controller, notifier),
- persists UI preferences (theme) as JSON.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path
from typing import Any

from ..config import get_settings
from ..connectors.desktop_notifier import DesktopNotifier
from ..core.controller import InteractionController
from ..core.ports import AlertSink, TaskService
from ..core.state import AppState
from ..nlp.date_extractor import NaturalDateExtractor
from ..tasks.task_api import TaskServiceClient
from ..tasks.task_models import Priority, Task
from ..tasks.task_store import TaskStore
from ..tasks.task_view import ViewState

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.prefs_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    alerts: AlertSink,
    client: TaskService | None = None,
    on_suggestion: Callable[[str | None], None] | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the task service) injectable makes the app easier to
    test and avoids hidden global config reads. If settings is None, falls back
    to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if client is None:
        client = TaskServiceClient(settings.api_url, timeout=settings.request_timeout_seconds)

    def celebrate(task: Task) -> None:
        alerts.alert(f"Completed: {task.title}. Nice work!", "success")

    store = TaskStore(
        client,
        undo_window_seconds=settings.undo_window_seconds,
        on_celebrate=celebrate,
    )

    prefs = load_preferences(settings)
    view_state = ViewState(theme=str(prefs.get("theme") or settings.theme))

    controller = InteractionController(
        store,
        alerts,
        extractor=NaturalDateExtractor(),
        view_state=view_state,
        default_priority=Priority.parse(settings.default_priority),
        debounce_seconds=settings.nlp_debounce_ms / 1000.0,
        reminder_lead=timedelta(minutes=settings.reminder_lead_minutes),
        on_view_change=lambda vs: save_preferences(settings, vs),
        on_suggestion=on_suggestion,
    )

    return AppState(
        settings=settings,
        client=client,
        store=store,
        controller=controller,
        alerts=alerts,
        notifier=DesktopNotifier(enabled=settings.desktop_notifications, app_name=settings.app_name),
    )


def load_preferences(settings) -> dict[str, Any]:
    raw_path = getattr(settings, "prefs_path", None)
    if not raw_path:
        return {}
    path = Path(raw_path)
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text("utf-8"))
        if not isinstance(data, dict):
            return {}
        theme = data.get("theme")
        return {"theme": theme} if theme in ("light", "dark") else {}
    except Exception:
        logger.exception("Failed to load preferences from %s", path)
        return {}


def save_preferences(settings, view_state: ViewState) -> None:
    raw_path = getattr(settings, "prefs_path", None)
    if not raw_path:
        return
    path = Path(raw_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps({"theme": view_state.theme}, indent=2), "utf-8")
        os.replace(tmp, path)
        logger.debug("Saved preferences to %s", path)
    except Exception:
        logger.exception("Failed to save preferences to %s", path)


async def shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    for task in list(state.background):
        task.cancel()
    for task in list(state.background):
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await task
    state.background.clear()

    # Let queued DELETEs reach the service before the client goes away.
    try:
        await state.store.close()
    except Exception:
        logger.exception("Failed to finish pending deletes.")

    aclose = getattr(state.client, "aclose", None)
    if aclose is not None:
        try:
            await aclose()
        except Exception:
            logger.debug("HTTP client close failed.", exc_info=True)
