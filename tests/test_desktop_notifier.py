# tests/test_desktop_notifier.py

from __future__ import annotations

import shutil
import sys

import pytest

from taskmaster.connectors import desktop_notifier
from taskmaster.connectors.desktop_notifier import DesktopNotifier

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX true/false/sleep")


def _notifier(monkeypatch, program: str, **kw) -> DesktopNotifier:
    path = shutil.which(program)
    if path is None:
        pytest.skip(f"{program} not on PATH")
    monkeypatch.setattr(desktop_notifier.shutil, "which", lambda name: path)
    return DesktopNotifier(app_name="taskmaster-test", **kw)


def test_disabled_notifier_is_unavailable() -> None:
    assert DesktopNotifier(enabled=False).available is False


@pytest.mark.asyncio
async def test_notify_runs_helper_without_blocking(monkeypatch) -> None:
    notifier = _notifier(monkeypatch, "true")
    assert notifier.available
    assert await notifier.notify("Reminder: Dentist", "Due: 2025-06-01 10:00") is True


@pytest.mark.asyncio
async def test_notify_reports_helper_failure(monkeypatch) -> None:
    notifier = _notifier(monkeypatch, "false")
    assert await notifier.notify("Reminder: Dentist", "Due: soon") is False


@pytest.mark.asyncio
async def test_notify_gives_up_after_timeout(monkeypatch, tmp_path) -> None:
    helper = tmp_path / "notify-send"
    helper.write_text("#!/bin/sh\nsleep 5\n", "utf-8")
    helper.chmod(0o755)
    monkeypatch.setattr(desktop_notifier.shutil, "which", lambda name: str(helper))

    notifier = DesktopNotifier(app_name="taskmaster-test", timeout_seconds=0.1)

    assert await notifier.notify("Reminder: Dentist", "Due: soon") is False
