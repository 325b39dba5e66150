# src/taskmaster/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Minimum level a record needs to reach the console, by logger-name prefix.
# The longest matching prefix wins; unmatched third-party loggers need ERROR.
CONSOLE_THRESHOLDS: dict[str, int] = {
    "taskmaster": logging.DEBUG,
    # Ticks every minute and logs every request; only problems belong on screen.
    "taskmaster.tasks.task_scheduler": logging.WARNING,
    "taskmaster.tasks.task_api": logging.WARNING,
    "uvicorn": logging.INFO,
    "uvicorn.access": logging.WARNING,
}
DEFAULT_CONSOLE_THRESHOLD = logging.ERROR

# Libraries that log every request at INFO/DEBUG.
QUIET_LIBRARIES = ("httpx", "httpcore", "uvicorn.access")


def console_threshold(name: str) -> int:
    best = ""
    for prefix in CONSOLE_THRESHOLDS:
        if (name == prefix or name.startswith(prefix + ".")) and len(prefix) > len(best):
            best = prefix
    return CONSOLE_THRESHOLDS[best] if best else DEFAULT_CONSOLE_THRESHOLD


class ConsoleThresholdFilter(logging.Filter):
    """Keeps the interactive console readable; the log file still gets everything."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= console_threshold(record.name)


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskmaster",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    log_name: str = "taskmaster.log",
) -> Path:
    """
    Console (stderr, filtered) + file (full detail) logging.

    Call once from an entry point, before the first log line. Returns the log file path.
    """
    log_file = Path(log_dir) / log_name
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(ConsoleThresholdFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file
