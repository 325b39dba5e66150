# tests/test_bootstrap.py

from __future__ import annotations

import asyncio
import json

import pytest

from taskmaster.cli.bootstrap import create_initial_state, load_preferences, shutdown
from taskmaster.tasks.task_models import Priority

from .fakes import FakeTaskService, RecordingAlerts, record


def test_initial_state_wires_settings(settings) -> None:
    settings.default_priority = "low"
    state = create_initial_state(settings=settings, alerts=RecordingAlerts(), client=FakeTaskService())

    assert state.controller.default_priority is Priority.LOW
    assert state.controller.view_state.theme == "light"
    assert state.notifier is not None and state.notifier.available is False


def test_theme_preference_is_saved_and_restored(settings) -> None:
    state = create_initial_state(settings=settings, alerts=RecordingAlerts(), client=FakeTaskService())
    state.controller.toggle_theme()

    assert json.loads(settings.prefs_path.read_text("utf-8")) == {"theme": "dark"}
    assert load_preferences(settings) == {"theme": "dark"}

    again = create_initial_state(settings=settings, alerts=RecordingAlerts(), client=FakeTaskService())
    assert again.controller.view_state.theme == "dark"


def test_bad_preferences_file_is_ignored(settings) -> None:
    settings.prefs_path.write_text('{"theme": "neon"}', "utf-8")
    assert load_preferences(settings) == {}
    settings.prefs_path.write_text("not json", "utf-8")
    assert load_preferences(settings) == {}


@pytest.mark.asyncio
async def test_completion_celebration_reaches_alerts(settings) -> None:
    alerts = RecordingAlerts()
    state = create_initial_state(
        settings=settings, alerts=alerts, client=FakeTaskService([record("a", "Laundry")])
    )
    await state.store.load()

    await state.controller.toggle_complete("a")

    assert "Completed: Laundry. Nice work!" in alerts.messages("success")


@pytest.mark.asyncio
async def test_shutdown_cancels_background_tasks(settings) -> None:
    state = create_initial_state(settings=settings, alerts=RecordingAlerts(), client=FakeTaskService())
    bg = asyncio.create_task(asyncio.sleep(3600))
    state.background.append(bg)

    await shutdown(state)

    assert bg.cancelled()
    assert state.background == []
