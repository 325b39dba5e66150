# src/taskmaster/tasks/calendar_export.py

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from ..core.errors import ValidationError
from .task_models import Task

EVENT_DURATION = timedelta(hours=1)
PRODID = "-//TaskMaster//ToDo App//EN"
UID_DOMAIN = "taskmaster.app"

_UNSAFE_FILENAME = re.compile(r"[^a-z0-9]", re.IGNORECASE)


def _ics_datetime(dt: datetime) -> str:
    """UTC basic format, e.g. 20250601T080000Z."""
    return dt.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def _escape_text(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def build_ics(task: Task, *, now: datetime | None = None) -> str:
    """Single-event iCalendar document for a task (start = due, one hour long)."""
    start = task.due_datetime
    if start is None:
        raise ValidationError("No due date to export.", field="due_at")
    stamp = now or datetime.now(timezone.utc)

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "BEGIN:VEVENT",
        f"UID:{task.id}@{UID_DOMAIN}",
        f"DTSTAMP:{_ics_datetime(stamp)}",
        f"DTSTART:{_ics_datetime(start)}",
        f"DTEND:{_ics_datetime(start + EVENT_DURATION)}",
        f"SUMMARY:{_escape_text(task.title)}",
        f"DESCRIPTION:Priority: {task.priority.value}",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\r\n".join(lines)


def ics_filename(task: Task) -> str:
    return f"{_UNSAFE_FILENAME.sub('_', task.title).lower()}.ics"
