# tests/test_logging_setup.py

from __future__ import annotations

import logging

from taskmaster.logging_setup import ConsoleThresholdFilter, console_threshold


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_longest_prefix_wins() -> None:
    assert console_threshold("taskmaster.core.controller") == logging.DEBUG
    assert console_threshold("taskmaster.tasks.task_scheduler") == logging.WARNING
    assert console_threshold("uvicorn.error") == logging.INFO
    assert console_threshold("uvicorn.access") == logging.WARNING
    assert console_threshold("httpx") == logging.ERROR
    # Prefixes match whole dotted segments only.
    assert console_threshold("taskmasterish") == logging.ERROR


def test_console_filter_hides_reminder_chatter_but_not_problems() -> None:
    f = ConsoleThresholdFilter()
    assert f.filter(_record("taskmaster.cli.main", logging.INFO))
    assert not f.filter(_record("taskmaster.tasks.task_scheduler", logging.INFO))
    assert f.filter(_record("taskmaster.tasks.task_scheduler", logging.WARNING))
    assert not f.filter(_record("httpcore.connection", logging.WARNING))
