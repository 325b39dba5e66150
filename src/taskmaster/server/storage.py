# src/taskmaster/server/storage.py
"""Flat-file task storage: one JSON array, rewritten wholesale on every mutation."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

TaskRecord = dict[str, Any]


class JsonTaskFile:
    """
    Ordered task records kept in a single JSON file.

    No locking and no partial writes: every mutation reads the whole array and
    writes it back through a temp file + os.replace. Fine for one client.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self.write_all([])
            logger.info("Created empty task file %s", self.path)

    def read_all(self) -> list[TaskRecord]:
        """Unreadable or malformed files are logged and treated as empty."""
        try:
            data = json.loads(self.path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.exception("Error reading tasks from %s", self.path)
            return []
        if not isinstance(data, list):
            logger.error("Task file %s does not hold an array; ignoring it", self.path)
            return []
        return [r for r in data if isinstance(r, dict)]

    def write_all(self, tasks: list[TaskRecord]) -> None:
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps(tasks, ensure_ascii=False, indent=2), "utf-8")
        os.replace(tmp, self.path)

    def find(self, tasks: list[TaskRecord], task_id: str) -> int:
        for i, t in enumerate(tasks):
            if str(t.get("id")) == task_id:
                return i
        return -1
