# src/taskmaster/server/models.py
"""Request bodies for the task API (camelCase, matching the stored JSON)."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

PriorityName = Literal["low", "medium", "high"]


class TaskFields(BaseModel):
    """Shared fields. Unknown keys are kept and stored as sent."""

    model_config = ConfigDict(extra="allow")

    title: Optional[str] = None
    priority: Optional[PriorityName] = None
    dueAt: Optional[str] = None
    completed: Optional[bool] = None
    reminderAt: Optional[str] = None
    nlpSourceText: Optional[str] = None


class TaskCreate(TaskFields):
    """Schema for creating a task. Title and dueAt are checked by the route."""

    id: Optional[str] = None


class TaskUpdate(TaskFields):
    """Schema for updating a task. Only provided fields are changed."""
