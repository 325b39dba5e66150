# src/taskmaster/server/routes/tasks.py
"""CRUD endpoints for tasks."""

import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request

from ..models import TaskCreate, TaskUpdate
from ..storage import JsonTaskFile, TaskRecord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tasks", tags=["tasks"])

IMMUTABLE_FIELDS = ("id", "createdAt")


def get_storage(request: Request) -> JsonTaskFile:
    """Task file configured on the app (overridable in tests)."""
    return request.app.state.storage


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@router.get("")
def list_tasks(storage: JsonTaskFile = Depends(get_storage)) -> list[TaskRecord]:
    """List all tasks in stored order."""
    return storage.read_all()


@router.post("", status_code=201)
def create_task(body: TaskCreate, storage: JsonTaskFile = Depends(get_storage)) -> TaskRecord:
    """Create a task. A caller-supplied id is kept as-is (idempotent retry)."""
    data = body.model_dump(exclude_unset=True)
    if not (data.get("title") or "").strip() or not (data.get("dueAt") or "").strip():
        raise HTTPException(status_code=400, detail="Title and Due Date/Time are required.")

    tasks = storage.read_all()

    task_id = str(data.get("id") or "").strip()
    if task_id:
        idx = storage.find(tasks, task_id)
        if idx > -1:
            logger.info("Create retried for existing task id=%s", task_id)
            return tasks[idx]
    else:
        task_id = uuid.uuid4().hex

    task: TaskRecord = {"completed": False, **data, "id": task_id, "createdAt": _now_iso()}
    tasks.append(task)
    storage.write_all(tasks)
    logger.info("Task created id=%s", task_id)
    return task


@router.put("/{task_id}")
def update_task(
    task_id: str, body: TaskUpdate, storage: JsonTaskFile = Depends(get_storage)
) -> TaskRecord:
    """Update an existing task. Only provided fields are changed; dueAt cannot be cleared."""
    tasks = storage.read_all()
    idx = storage.find(tasks, task_id)
    if idx < 0:
        raise HTTPException(status_code=404, detail="Task not found")

    changes = body.model_dump(exclude_unset=True)
    if "dueAt" in changes and not (changes["dueAt"] or "").strip():
        raise HTTPException(status_code=400, detail="Task must have a due date/time.")
    for key in IMMUTABLE_FIELDS:
        changes.pop(key, None)

    tasks[idx] = {**tasks[idx], **changes}
    storage.write_all(tasks)
    logger.debug("Task updated id=%s fields=%s", task_id, sorted(changes))
    return tasks[idx]


@router.delete("/{task_id}")
def delete_task(task_id: str, storage: JsonTaskFile = Depends(get_storage)) -> dict[str, str]:
    """Delete a task by ID."""
    tasks = storage.read_all()
    remaining = [t for t in tasks if str(t.get("id")) != task_id]
    if len(remaining) == len(tasks):
        raise HTTPException(status_code=404, detail="Task not found")
    storage.write_all(remaining)
    logger.info("Task deleted id=%s", task_id)
    return {"message": "Task deleted"}
