# src/taskmaster/tasks/task_store.py

from __future__ import annotations

import asyncio
import logging
import time
from collections import Counter
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from ..core.errors import TaskTrackerError, TransportError, ValidationError
from ..core.ports import TaskService
from .task_models import Task, TaskDraft, patch_to_wire

logger = logging.getLogger(__name__)

ChangeListener = Callable[[tuple[Task, ...]], None]
CelebrateHook = Callable[[Task], None]


@dataclass(frozen=True, slots=True)
class Transaction:
    """
    One optimistic patch: the record before and after, captured at mutation time.

    Reverting restores only the fields this patch changed, and only where the
    cache still holds this patch's value, so a later patch on the same task is
    never clobbered by an earlier one failing.
    """

    task_id: str
    before: Task
    after: Task
    changed: frozenset[str]

    @classmethod
    def begin(cls, current: Task, patch: Mapping[str, Any]) -> Transaction:
        return cls(
            task_id=current.id,
            before=current,
            after=current.with_changes(patch),
            changed=frozenset(patch),
        )

    @property
    def completes(self) -> bool:
        return "completed" in self.changed and self.after.completed and not self.before.completed

    def apply(self, cache: dict[str, Task]) -> None:
        cache[self.task_id] = self.after

    def revert(self, cache: dict[str, Task]) -> bool:
        current = cache.get(self.task_id)
        if current is None:
            return False
        restore = {
            name: getattr(self.before, name)
            for name in self.changed
            if getattr(current, name) == getattr(self.after, name)
        }
        if not restore:
            return False
        cache[self.task_id] = replace(current, **restore)
        return True


@dataclass(slots=True)
class UndoHandle:
    """
    Bounded-time undo for an optimistic delete.

    Undo re-creates an equivalent record; the new task gets a fresh id.
    """

    task: Task
    expires_at: float
    _store: TaskStore = field(repr=False)
    _clock: Callable[[], float] = field(repr=False, default=time.monotonic)
    _used: bool = False

    @property
    def expired(self) -> bool:
        return self._used or self._clock() >= self.expires_at

    @property
    def remaining_seconds(self) -> float:
        return max(0.0, self.expires_at - self._clock())

    async def undo(self) -> Task | None:
        """Return the re-created task, or None once the window has passed."""
        if self.expired:
            logger.debug("Undo ignored for task %s (window over)", self.task.id)
            return None
        self._used = True
        try:
            restored = await self._store.create(TaskDraft.from_task(self.task))
        except Exception:
            # Recovery stays user-initiated: leave the window open for another try.
            self._used = False
            raise
        logger.info("Undo: task %s re-created as %s", self.task.id, restored.id)
        return restored


class TaskStore:
    """
    In-memory cache of tasks mirroring the persistence service.

    - Sole writer of the cache; readers get point-in-time snapshots (`tasks`).
    - Updates and deletes are optimistic: the cache changes and listeners are
      notified before the network call resolves.
    - Remote PUTs are sequenced per task id, in issue order.
    - No automatic retries anywhere.
    """

    def __init__(
        self,
        service: TaskService,
        *,
        undo_window_seconds: float = 5.0,
        on_celebrate: CelebrateHook | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._service = service
        self._undo_window = max(0.0, float(undo_window_seconds))
        self._on_celebrate = on_celebrate
        self._clock = clock

        self._cache: dict[str, Task] = {}
        self._listeners: list[ChangeListener] = []
        self._locks: dict[str, asyncio.Lock] = {}
        self._pending: Counter[str] = Counter()
        # Remote DELETEs run in the background so the undo window starts at removal.
        self._deletes: set[asyncio.Task[None]] = set()

    # ---- read side ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._cache.values())

    def get(self, task_id: str) -> Task | None:
        return self._cache.get(task_id)

    def __len__(self) -> int:
        return len(self._cache)

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a render hook; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        snapshot = self.tasks
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Task store listener failed")

    # ---- operations ----

    async def load(self) -> tuple[Task, ...]:
        """Replace the cache wholesale with the service's collection."""
        try:
            records = await self._service.list_tasks()
            if not isinstance(records, list):
                raise TransportError("Task list response is not an array.")
            loaded = self._parse_records(records)
        except TaskTrackerError:
            self._cache.clear()
            self._notify()
            raise

        self._cache = {t.id: t for t in loaded}
        logger.info("TaskStore loaded total=%d", len(self._cache))
        self._notify()
        return self.tasks

    async def create(self, draft: TaskDraft) -> Task:
        self._validate_draft(draft)

        record = await self._service.create_task(draft.to_json())
        task = self._parse_record(record)

        self._cache[task.id] = task
        logger.debug("Task created id=%s priority=%s due=%s", task.id, task.priority, task.due_at)
        self._notify()
        return task

    async def update(self, task_id: str, patch: Mapping[str, Any]) -> Task:
        current = self._cache.get(task_id)
        if current is None:
            raise ValidationError("Task not found.", field="id")
        if not patch:
            return current

        txn = Transaction.begin(current, patch)
        txn.apply(self._cache)
        self._pending[task_id] += 1
        self._notify()

        try:
            async with self._lock_for(task_id):
                record = await self._service.update_task(task_id, patch_to_wire(patch))
        except BaseException:
            # Cancellation included: an unconfirmed patch must not stay visible.
            self._release(task_id)
            if txn.revert(self._cache):
                logger.info("Task %s patch %s rolled back", task_id, sorted(txn.changed))
                self._notify()
            raise

        self._release(task_id)
        try:
            confirmed: Task | None = self._parse_record(record)
        except TransportError:
            logger.warning("Unreadable update response for task %s; keeping local copy", task_id)
            confirmed = None

        # Later patches still in flight keep their optimistic values visible.
        if confirmed is not None and task_id in self._cache and not self._pending[task_id]:
            self._cache[task_id] = confirmed
            self._notify()

        if txn.completes:
            self._celebrate(self._cache.get(task_id, txn.after))

        return self._cache.get(task_id, txn.after)

    async def remove(self, task_id: str) -> UndoHandle:
        task = self._cache.pop(task_id, None)
        if task is None:
            raise ValidationError("Task not found.", field="id")

        handle = UndoHandle(
            task=task,
            expires_at=self._clock() + self._undo_window,
            _store=self,
            _clock=self._clock,
        )
        self._notify()
        self._spawn_delete(task_id)
        return handle

    async def clear_completed(self) -> list[UndoHandle]:
        done = [t.id for t in self._cache.values() if t.completed]
        handles: list[UndoHandle] = []
        for task_id in done:
            if task_id in self._cache:
                handles.append(await self.remove(task_id))
        return handles

    async def close(self, timeout: float = 2.0) -> None:
        """Give in-flight DELETEs `timeout` seconds, then cancel the rest."""
        pending = set(self._deletes)
        if not pending:
            return
        _, late = await asyncio.wait(pending, timeout=timeout)
        for job in late:
            job.cancel()
        if late:
            logger.warning("Cancelled %d unfinished delete request(s)", len(late))
            await asyncio.gather(*late, return_exceptions=True)

    # ---- helpers ----

    def _spawn_delete(self, task_id: str) -> None:
        job = asyncio.create_task(self._delete_remote(task_id), name=f"delete-{task_id}")
        self._deletes.add(job)
        job.add_done_callback(self._deletes.discard)

    async def _delete_remote(self, task_id: str) -> None:
        # Best-effort: a failed delete is logged and the optimistic removal stands.
        try:
            await self._service.delete_task(task_id)
        except TaskTrackerError as e:
            logger.warning("Delete failed for task %s: %s", task_id, e.message)
        except Exception:
            logger.exception("Delete crashed for task %s", task_id)

    @staticmethod
    def _validate_draft(draft: TaskDraft) -> None:
        if not (draft.title or "").strip():
            raise ValidationError("Please enter a task title.", field="title")
        if not (draft.due_at or "").strip():
            raise ValidationError("Please set a due date and time.", field="due_at")

    def _lock_for(self, task_id: str) -> asyncio.Lock:
        lock = self._locks.get(task_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[task_id] = lock
        return lock

    def _release(self, task_id: str) -> None:
        self._pending[task_id] -= 1
        if self._pending[task_id] <= 0:
            del self._pending[task_id]
            self._locks.pop(task_id, None)

    def _celebrate(self, task: Task) -> None:
        if self._on_celebrate is None:
            return
        try:
            self._on_celebrate(task)
        except Exception:
            logger.exception("Celebrate hook failed for task %s", task.id)

    @staticmethod
    def _parse_record(record: Any) -> Task:
        try:
            return Task.from_json(record)
        except (TypeError, ValueError) as e:
            raise TransportError(f"Malformed task record: {e}") from e

    @staticmethod
    def _parse_records(records: list[Any]) -> list[Task]:
        out: list[Task] = []
        for raw in records:
            try:
                out.append(Task.from_json(raw))
            except (TypeError, ValueError):
                logger.warning("Skipping malformed task record: %r", raw)
        return out
