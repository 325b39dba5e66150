# src/taskmaster/cli/serve.py

"""Entry point for the task persistence service (taskmaster-server)."""

from __future__ import annotations

import logging

import uvicorn

from ..config import get_settings
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level, log_name="server.log")

    logger.info(
        "Serving tasks from %s on http://%s:%s/api/tasks",
        settings.tasks_file,
        settings.server_host,
        settings.server_port,
    )
    uvicorn.run(
        "taskmaster.server.app:create_app",
        factory=True,
        host=settings.server_host,
        port=settings.server_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
