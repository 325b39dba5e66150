# src/taskmaster/tasks/task_models.py

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any


# python attribute -> JSON wire name
WIRE_NAMES: dict[str, str] = {
    "id": "id",
    "title": "title",
    "priority": "priority",
    "due_at": "dueAt",
    "completed": "completed",
    "created_at": "createdAt",
    "reminder_at": "reminderAt",
    "nlp_source_text": "nlpSourceText",
}
_ATTR_NAMES = {wire: attr for attr, wire in WIRE_NAMES.items()}

# Fields a patch may change; id and createdAt are immutable once assigned.
PATCHABLE_FIELDS = frozenset(
    {"title", "priority", "due_at", "completed", "reminder_at", "nlp_source_text"}
)


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @classmethod
    def parse(cls, raw: Any, default: Priority | None = None) -> Priority:
        if isinstance(raw, Priority):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except Exception:
            return default if default is not None else cls.MEDIUM


_PRIORITY_RANK = {Priority.LOW: 1, Priority.MEDIUM: 2, Priority.HIGH: 3}


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse an ISO-8601 timestamp into an aware datetime.

    Values without an offset (e.g. "2025-01-01T10:00" from a date input) are
    taken as local time. Anything unparseable yields None ("no date").
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        s = str(value).strip()
        if not s:
            return None
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt


def to_utc_iso(dt: datetime) -> str:
    """Serialize as UTC with millisecond precision and a Z suffix."""
    aware = dt if dt.tzinfo is not None else dt.astimezone()
    return aware.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_local_input(dt: datetime) -> str:
    """Format as a local "YYYY-MM-DDTHH:MM" value, the shape the due-date input holds."""
    aware = dt if dt.tzinfo is not None else dt.astimezone()
    return aware.astimezone().strftime("%Y-%m-%dT%H:%M")


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    title: str
    priority: Priority
    due_at: str | None
    completed: bool = False
    created_at: str | None = None
    reminder_at: str | None = None
    nlp_source_text: str | None = None

    # Unknown wire fields, kept so a round-trip through the client loses nothing.
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def due_datetime(self) -> datetime | None:
        return parse_timestamp(self.due_at)

    @property
    def created_datetime(self) -> datetime | None:
        return parse_timestamp(self.created_at)

    @property
    def reminder_datetime(self) -> datetime | None:
        return parse_timestamp(self.reminder_at)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> Task:
        if not isinstance(data, Mapping):
            raise TypeError(f"task record must be an object, got {type(data).__name__}")
        raw_id = data.get("id")
        if raw_id is None or str(raw_id) == "":
            raise ValueError("task record has no id")

        extra = {k: v for k, v in data.items() if k not in _ATTR_NAMES}
        # Older records used dueDate before dueAt existed.
        due = data.get("dueAt")
        if due in (None, "") and data.get("dueDate"):
            due = data.get("dueDate")

        return cls(
            id=str(raw_id),
            title=str(data.get("title") or ""),
            priority=Priority.parse(data.get("priority")),
            due_at=str(due) if due not in (None, "") else None,
            completed=bool(data.get("completed", False)),
            created_at=_opt_str(data.get("createdAt")),
            reminder_at=_opt_str(data.get("reminderAt")),
            nlp_source_text=_opt_str(data.get("nlpSourceText")),
            extra=extra,
        )

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.extra)
        out.update(
            {
                "id": self.id,
                "title": self.title,
                "priority": self.priority.value,
                "dueAt": self.due_at,
                "completed": self.completed,
                "createdAt": self.created_at,
                "reminderAt": self.reminder_at,
                "nlpSourceText": self.nlp_source_text,
            }
        )
        return out

    def with_changes(self, patch: Mapping[str, Any]) -> Task:
        """Return a copy with `patch` applied (python attribute names)."""
        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"unknown or immutable task fields: {sorted(unknown)}")
        changes = dict(patch)
        if "priority" in changes:
            changes["priority"] = Priority.parse(changes["priority"])
        if "completed" in changes:
            changes["completed"] = bool(changes["completed"])
        return replace(self, **changes)


@dataclass(frozen=True, slots=True)
class TaskDraft:
    """Unvalidated user-provided fields prior to becoming a persisted Task."""

    title: str
    due_at: str | None
    priority: Priority = Priority.MEDIUM
    nlp_source_text: str | None = None
    completed: bool = False
    reminder_at: str | None = None

    @classmethod
    def from_task(cls, task: Task) -> TaskDraft:
        """An equivalent draft for re-creating a removed task (a fresh creation)."""
        return cls(
            title=task.title,
            due_at=task.due_at,
            priority=task.priority,
            nlp_source_text=task.nlp_source_text,
            completed=task.completed,
            reminder_at=task.reminder_at,
        )

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "title": self.title,
            "priority": Priority.parse(self.priority).value,
            "dueAt": self.due_at,
            "completed": self.completed,
        }
        if self.nlp_source_text is not None:
            out["nlpSourceText"] = self.nlp_source_text
        if self.reminder_at is not None:
            out["reminderAt"] = self.reminder_at
        return out


def patch_to_wire(patch: Mapping[str, Any]) -> dict[str, Any]:
    """Translate a patch keyed by attribute names into its JSON body."""
    out: dict[str, Any] = {}
    for key, value in patch.items():
        if key not in PATCHABLE_FIELDS:
            raise ValueError(f"unknown or immutable task field: {key}")
        if isinstance(value, Priority):
            value = value.value
        out[WIRE_NAMES[key]] = value
    return out


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value)
    return s if s else None
