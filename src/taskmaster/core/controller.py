# src/taskmaster/core/controller.py

"""
Interaction controller.

Turns user input (title typing, due-date edits, toggles, deletes, filter/sort/theme
switches) into validated drafts and Task Store mutations. It owns the form state
and the immutable ViewState; the store stays the only writer of the task cache.

Error policy:
- ValidationError: nothing is sent, an alert is shown and the form points at the
  offending field.
- RemoteRejection / TransportError: an alert is shown; the store has already
  rolled back an update, while a delete keeps its optimistic removal.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import StrEnum

from ..tasks.calendar_export import build_ics, ics_filename
from ..tasks.task_models import Priority, Task, TaskDraft, parse_timestamp, to_local_input, to_utc_iso
from ..tasks.task_store import TaskStore, UndoHandle
from ..tasks.task_view import FilterMode, SortKey, TaskView, ViewState, has_armed_reminder, project
from .debounce import Debouncer
from .errors import TaskTrackerError, ValidationError
from .ports import AlertSink, DateExtractor

logger = logging.getLogger(__name__)

ViewListener = Callable[[ViewState], None]


class DraftStatus(StrEnum):
    DRAFT = "draft"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


@dataclass(slots=True)
class TaskForm:
    """The "add task" inputs as the user left them."""

    title_text: str = ""
    due_text: str = ""
    priority: Priority | None = None
    # Set once the user edits the due field; NLP suggestions never override it.
    due_touched: bool = False
    preview: str | None = None
    error_field: str | None = None
    status: DraftStatus = DraftStatus.DRAFT


def build_draft(
    title_text: str,
    due_text: str,
    priority: Priority | str | None = None,
    *,
    default_priority: Priority = Priority.MEDIUM,
    nlp_source_text: str | None = None,
) -> TaskDraft:
    """
    Validate raw input into a TaskDraft.

    - title: trimmed, required
    - due: required, must be a parseable ISO timestamp (kept as typed)
    - priority: falls back to the configured default
    """
    title = (title_text or "").strip()
    if not title:
        raise ValidationError("Please enter a task title.", field="title")

    due = (due_text or "").strip()
    if not due:
        raise ValidationError("Please set a due date and time.", field="due_at")
    if parse_timestamp(due) is None:
        raise ValidationError(f"Unrecognised due date/time: {due}", field="due_at")

    prio = Priority.parse(priority, default_priority) if priority else default_priority
    return TaskDraft(title=title, due_at=due, priority=prio, nlp_source_text=nlp_source_text)


class InteractionController:
    def __init__(
        self,
        store: TaskStore,
        alerts: AlertSink,
        *,
        extractor: DateExtractor | None = None,
        view_state: ViewState | None = None,
        default_priority: Priority = Priority.MEDIUM,
        debounce_seconds: float = 0.5,
        reminder_lead: timedelta = timedelta(minutes=15),
        clock: Callable[[], datetime] | None = None,
        on_view_change: ViewListener | None = None,
        on_suggestion: Callable[[str | None], None] | None = None,
    ) -> None:
        self.store = store
        self.alerts = alerts
        self.extractor = extractor
        self.view_state = view_state or ViewState()
        self.default_priority = default_priority
        self.reminder_lead = reminder_lead
        self.form = TaskForm()
        # Every removal keeps its own undo window; /undo pops the newest live one.
        self.undo_stack: list[UndoHandle] = []

        self._clock = clock or (lambda: datetime.now().astimezone())
        self._on_view_change = on_view_change
        self._on_suggestion = on_suggestion
        self._nlp = Debouncer(debounce_seconds, self.apply_nlp)

    # ---- read side ----

    def now(self) -> datetime:
        return self._clock()

    def view(self, now: datetime | None = None) -> TaskView:
        return project(self.store.tasks, self.view_state, now=now or self.now())

    # ---- add-task form ----

    def on_title_input(self, text: str) -> None:
        """Record typed title text and (re)start the debounced date parse."""
        self.form.title_text = text
        self.form.status = DraftStatus.DRAFT
        if self.form.error_field == "title":
            self.form.error_field = None
        if self.extractor is None:
            return
        if not text.strip():
            self._nlp.cancel()
            self.form.preview = None
            return
        self._nlp.trigger(text)

    def set_due_input(self, text: str) -> None:
        self.form.due_text = (text or "").strip()
        self.form.due_touched = bool(self.form.due_text)
        if self.form.error_field == "due_at":
            self.form.error_field = None

    def set_priority(self, value: Priority | str) -> Priority:
        self.form.priority = Priority.parse(value, self.default_priority)
        return self.form.priority

    def apply_nlp(self, text: str):
        """Debounce target: suggest a due date from the title text."""
        if self.extractor is None or text != self.form.title_text:
            return None
        match = self.extractor.extract(text, now=self.now())
        if match is None:
            self.form.preview = None
            self._suggest(None)
            return None
        self.form.preview = match.describe()
        if not self.form.due_touched:
            self.form.due_text = to_local_input(match.when)
        self._suggest(self.form.preview)
        logger.debug("NLP suggestion %r -> %s", match.matched_text, match.when.isoformat())
        return match

    async def submit(self) -> Task | None:
        """Draft -> Pending -> Confirmed, or Rejected with no partial task."""
        await self._nlp.flush()
        raw_title = self.form.title_text

        try:
            draft = build_draft(
                raw_title,
                self.form.due_text,
                self.form.priority,
                default_priority=self.default_priority,
                nlp_source_text=raw_title,
            )
        except ValidationError as e:
            self.form.status = DraftStatus.REJECTED
            self._report(e)
            return None

        self.form.status = DraftStatus.PENDING
        try:
            task = await self.store.create(draft)
        except TaskTrackerError as e:
            self.form.status = DraftStatus.REJECTED
            self._report(e)
            return None

        self.form = TaskForm(status=DraftStatus.CONFIRMED)
        return task

    # ---- task actions ----

    async def toggle_complete(self, task_id: str) -> Task | None:
        task = self._require(task_id)
        if task is None:
            return None
        return await self._update(task_id, {"completed": not task.completed}, "Error updating task")

    async def edit_title(self, task_id: str, text: str) -> Task | None:
        task = self._require(task_id)
        if task is None:
            return None
        new_title = (text or "").strip()
        # An emptied title just reverts to the stored one.
        if not new_title or new_title == task.title:
            return None
        return await self._update(task_id, {"title": new_title}, "Error updating task")

    async def toggle_reminder(self, task_id: str) -> Task | None:
        """Arm a reminder `reminder_lead` before due, or disarm an armed one."""
        task = self._require(task_id)
        if task is None:
            return None
        now = self.now()

        if has_armed_reminder(task, now):
            updated = await self._update(task_id, {"reminder_at": None}, "Error updating reminder")
            if updated is not None:
                self.alerts.alert("Reminder removed.", "info")
            return updated

        due = task.due_datetime
        if due is None:
            self._report(ValidationError("Set a due date first to add a reminder.", field="due_at"))
            return None
        remind_at = due - self.reminder_lead
        if remind_at < now:
            self.alerts.alert("Task is already due or in the past!", "warning")
            return None

        updated = await self._update(
            task_id, {"reminder_at": to_utc_iso(remind_at)}, "Error updating reminder"
        )
        if updated is not None:
            minutes = int(self.reminder_lead.total_seconds() // 60)
            self.alerts.alert(f"Reminder set for {minutes} mins before due.", "success")
        return updated

    async def delete(self, task_id: str) -> UndoHandle | None:
        try:
            handle = await self.store.remove(task_id)
        except TaskTrackerError as e:
            self._report(e)
            return None
        self._push_undo([handle])
        self.alerts.alert("Task deleted.", "info")
        return handle

    async def undo_delete(self) -> Task | None:
        """Restore the most recently removed task whose window is still open."""
        self._prune_undo()
        if not self.undo_stack:
            self.alerts.alert("Nothing to undo.", "info")
            return None
        handle = self.undo_stack[-1]
        try:
            restored = await handle.undo()
        except TaskTrackerError as e:
            self._report(e)
            return None
        if handle in self.undo_stack:
            self.undo_stack.remove(handle)
        if restored is None:
            self.alerts.alert("Undo window has passed.", "info")
            return None
        self.alerts.alert(f"Restored: {restored.title}", "success")
        return restored

    async def undo_all(self) -> list[Task]:
        """Restore every removal still inside its window, oldest first."""
        self._prune_undo()
        restored: list[Task] = []
        for handle in list(self.undo_stack):
            try:
                task = await handle.undo()
            except TaskTrackerError as e:
                self._report(e)
                continue
            self.undo_stack.remove(handle)
            if task is not None:
                restored.append(task)
        if restored:
            self.alerts.alert(f"Restored {len(restored)} task(s).", "success")
        else:
            self.alerts.alert("Nothing to undo.", "info")
        return restored

    async def clear_completed(self) -> int:
        try:
            handles = await self.store.clear_completed()
        except TaskTrackerError as e:
            self._report(e)
            return 0
        if handles:
            self._push_undo(handles)
            self.alerts.alert(f"Cleared {len(handles)} completed task(s).", "info")
        return len(handles)

    async def reload(self) -> bool:
        try:
            await self.store.load()
        except TaskTrackerError as e:
            self._report(e, prefix="Error loading tasks")
            return False
        return True

    def export_calendar(self, task_id: str, now: datetime | None = None) -> tuple[str, str] | None:
        """Return (filename, ics text) for a task, or None after alerting."""
        task = self._require(task_id)
        if task is None:
            return None
        try:
            content = build_ics(task, now=now or self.now())
        except ValidationError as e:
            self._report(e)
            return None
        return ics_filename(task), content

    # ---- view state ----

    def set_filter(self, mode: FilterMode | str) -> ViewState:
        return self._set_view(replace(self.view_state, filter=FilterMode(mode)))

    def set_sort(self, key: SortKey | str) -> ViewState:
        return self._set_view(replace(self.view_state, sort=SortKey(key)))

    def toggle_theme(self) -> ViewState:
        theme = "light" if self.view_state.theme == "dark" else "dark"
        return self._set_view(replace(self.view_state, theme=theme))

    def _set_view(self, state: ViewState) -> ViewState:
        self.view_state = state
        if self._on_view_change is not None:
            try:
                self._on_view_change(state)
            except Exception:
                logger.exception("View change listener failed")
        return state

    # ---- helpers ----

    def _suggest(self, preview: str | None) -> None:
        if self._on_suggestion is None:
            return
        try:
            self._on_suggestion(preview)
        except Exception:
            logger.exception("Suggestion listener failed")

    def _push_undo(self, handles: list[UndoHandle]) -> None:
        self._prune_undo()
        self.undo_stack.extend(handles)

    def _prune_undo(self) -> None:
        self.undo_stack = [h for h in self.undo_stack if not h.expired]

    def _require(self, task_id: str) -> Task | None:
        task = self.store.get(task_id)
        if task is None:
            self.alerts.alert(f"No task with id {task_id}.", "error")
        return task

    async def _update(self, task_id: str, patch: dict, prefix: str) -> Task | None:
        try:
            return await self.store.update(task_id, patch)
        except TaskTrackerError as e:
            self._report(e, prefix=prefix)
            return None

    def _report(self, e: TaskTrackerError, *, prefix: str | None = None) -> None:
        if isinstance(e, ValidationError):
            self.form.error_field = e.field
            self.alerts.alert(e.message, "error")
            return
        logger.info("%s: %s", prefix or e.__class__.__name__, e.message)
        self.alerts.alert(f"{prefix}: {e.message}" if prefix else e.message, "error")
