# src/taskmaster/connectors/desktop_notifier.py

from __future__ import annotations

import asyncio
import logging
import shutil
import sys

logger = logging.getLogger(__name__)


class DesktopNotifier:
    """
    OS notifications through whatever helper the platform ships:
    - Linux: notify-send
    - macOS: terminal-notifier

    When disabled or when no helper is on PATH, `available` is False and
    callers fall back to in-app alerts.
    """

    def __init__(
        self,
        *,
        enabled: bool = True,
        app_name: str = "taskmaster",
        timeout_seconds: float = 5.0,
    ) -> None:
        self.app_name = app_name
        self.timeout_seconds = timeout_seconds
        self._command = self._detect() if enabled else None
        if enabled and self._command is None:
            logger.info("No desktop notification helper found; using in-app alerts only.")

    @staticmethod
    def _detect() -> str | None:
        candidates = ["terminal-notifier"] if sys.platform == "darwin" else ["notify-send"]
        for name in candidates:
            path = shutil.which(name)
            if path:
                return path
        return None

    @property
    def available(self) -> bool:
        return self._command is not None

    async def notify(self, title: str, body: str) -> bool:
        if self._command is None:
            return False
        if self._command.endswith("terminal-notifier"):
            args = [self._command, "-title", title, "-message", body, "-group", self.app_name]
        else:
            args = [self._command, "--app-name", self.app_name, title, body]
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.warning("Desktop notification failed: %s", e)
            return False

        try:
            _, err = await asyncio.wait_for(proc.communicate(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            logger.warning("Desktop notification timed out after %.0fs", self.timeout_seconds)
            return False

        if proc.returncode != 0:
            logger.warning(
                "Desktop notification exited with %s: %s",
                proc.returncode,
                (err or b"").decode("utf-8", "replace").strip(),
            )
            return False
        return True
