# src/taskmaster/core/debounce.py

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Run `callback` once input has been quiet for `delay_seconds`.

    Every trigger() cancels the pending timer and starts a new one, so rapid
    input produces a single call with the latest arguments. Must be used from
    inside a running event loop. The callback may be sync or async.
    """

    def __init__(self, delay_seconds: float, callback: Callable[..., Any]) -> None:
        self.delay_seconds = max(0.0, float(delay_seconds))
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._args: tuple[Any, ...] = ()
        self._running: asyncio.Task[Any] | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self, *args: Any) -> None:
        self.cancel()
        self._args = args
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay_seconds, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def flush(self) -> None:
        """Run a pending call right away (and wait for it), e.g. before a submit."""
        if self._handle is not None:
            self.cancel()
            self._fire()
        running = self._running
        if running is not None:
            await asyncio.gather(running, return_exceptions=True)

    def _fire(self) -> None:
        self._handle = None
        try:
            result = self._callback(*self._args)
        except Exception:
            logger.exception("Debounced callback failed")
            return
        if inspect.isawaitable(result):
            self._running = asyncio.ensure_future(result)
            self._running.add_done_callback(self._done)

    def _done(self, task: asyncio.Future[Any]) -> None:
        if task is self._running:
            self._running = None
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Debounced callback failed", exc_info=exc)
