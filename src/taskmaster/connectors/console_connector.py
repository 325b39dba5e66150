# src/taskmaster/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..cli.commands import render_view
from ..core.state import AppState

logger = logging.getLogger(__name__)

PROMPT = ">>> "


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleAlerts:
    """In-app alert channel: every alert is printed as a timestamped line."""

    def __init__(self, stream=None) -> None:
        self._stream = stream

    def alert(self, message: str, level: str = "info") -> None:
        out = self._stream or sys.stdout
        print(f"[{_ts_local()}] [{level.upper()}] {message}", file=out, flush=True)


def print_suggestion(preview: str | None) -> None:
    """Debounced date-detection preview for the title being typed."""
    if preview:
        _print_ts(f"[DATE] {preview}")


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Type a task title (dates are detected), or /help for commands. /exit quits.")

    if await state.controller.reload():
        print(render_view(state), flush=True)

    def emit(text: str) -> None:
        _print_ts(text)

    while True:
        try:
            user_input = (await asyncio.to_thread(input, PROMPT)).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            cmd_response = await command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is not None:
            print(cmd_response, flush=True)
            continue

        # Plain text edits the draft title; /add submits it.
        state.controller.on_title_input(user_input)
        _print_ts("[DRAFT] Title set. /due, /priority to adjust, /add to save.")

    logger.info("Console connector finished.")
