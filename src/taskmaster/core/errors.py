# src/taskmaster/core/errors.py

from __future__ import annotations


class TaskTrackerError(Exception):
    """Base class for every error surfaced to the user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TaskTrackerError):
    """
    Client-side, pre-network rejection (missing title, missing/invalid due date).

    `field` names the offending input so the UI can return focus to it.
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class RemoteRejection(TaskTrackerError):
    """The persistence service declined the request (4xx/5xx with a message)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransportError(TaskTrackerError):
    """Network failure or undecodable response while talking to the service."""
