# tests/conftest.py

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskmaster.core.controller import InteractionController
from taskmaster.core.state import AppState
from taskmaster.nlp.date_extractor import NaturalDateExtractor
from taskmaster.tasks.task_models import Priority
from taskmaster.tasks.task_store import TaskStore

from .fakes import NOW, FakeNotifier, FakeTaskService, FixedClock, MonotonicClock, RecordingAlerts


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskmaster-test",
        api_url="http://testserver/api/tasks",
        data_dir=tmp_path,
        tasks_file=tmp_path / "tasks.json",
        prefs_path=tmp_path / "prefs.json",
        request_timeout_seconds=1.0,
        reminder_interval_seconds=60.0,
        reminder_lead_minutes=15,
        reminder_catch_up=False,
        desktop_notifications=False,
        undo_window_seconds=5.0,
        nlp_debounce_ms=0,
        default_priority="medium",
        theme="light",
    )


@pytest.fixture()
def service() -> FakeTaskService:
    return FakeTaskService()


@pytest.fixture()
def alerts() -> RecordingAlerts:
    return RecordingAlerts()


@pytest.fixture()
def mono() -> MonotonicClock:
    return MonotonicClock()


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture()
def store(service: FakeTaskService, mono: MonotonicClock) -> TaskStore:
    return TaskStore(service, undo_window_seconds=5.0, clock=mono)


@pytest.fixture()
def controller(store: TaskStore, alerts: RecordingAlerts, clock: FixedClock) -> InteractionController:
    return InteractionController(
        store,
        alerts,
        extractor=NaturalDateExtractor(),
        default_priority=Priority.MEDIUM,
        debounce_seconds=0.01,
        reminder_lead=timedelta(minutes=15),
        clock=clock,
    )


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    service: FakeTaskService,
    store: TaskStore,
    controller: InteractionController,
    alerts: RecordingAlerts,
) -> AppState:
    """AppState wired with deterministic fakes."""
    return AppState(
        settings=settings,
        client=service,
        store=store,
        controller=controller,
        alerts=alerts,
        notifier=FakeNotifier(available=False),
    )
