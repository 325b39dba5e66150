# src/taskmaster/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs on one asyncio loop:
- the reminder scheduler as a background task,
- the console REPL in the foreground.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state, shutdown
from ..config import get_settings
from ..connectors.console_connector import ConsoleAlerts, print_suggestion, run_console_loop
from ..logging_setup import setup_logging
from ..tasks.task_scheduler import run_reminder_scheduler

logger = logging.getLogger(__name__)


async def run_app(settings) -> None:
    state = create_initial_state(
        settings=settings,
        alerts=ConsoleAlerts(),
        on_suggestion=print_suggestion,
    )

    reminders = asyncio.create_task(
        run_reminder_scheduler(
            lambda: state.store.tasks,
            state.notifier,
            state.alerts,
            interval_seconds=settings.reminder_interval_seconds,
            catch_up=settings.reminder_catch_up,
        ),
        name="reminder-scheduler",
    )
    state.background.append(reminders)

    try:
        await run_console_loop(state)
    finally:
        await shutdown(state)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)
    try:
        asyncio.run(run_app(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down.")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
