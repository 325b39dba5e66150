# src/taskmaster/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (client and server share it).
- Nothing required at import time; every value has a local default.
- config_local.py may override a few safe values for a single machine.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List

from dotenv import load_dotenv

ENV_PREFIX = "TASKMASTER"

PRIORITIES = ("low", "medium", "high")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


# A local .env fills in anything the real environment leaves unset.
load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    parts = [p.strip() for p in raw.replace(",", " ").split() if p.strip()]
    return parts


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_file: Path
    prefs_path: Path

    # ---- Persistence service ----
    api_url: str
    server_host: str
    server_port: int
    cors_origins: List[str]
    request_timeout_seconds: float

    # ---- Reminders ----
    reminder_interval_seconds: float
    reminder_lead_minutes: int
    reminder_catch_up: bool
    desktop_notifications: bool

    # ---- Interaction ----
    undo_window_seconds: float
    nlp_debounce_ms: int
    default_priority: str
    theme: str

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskmaster") or "taskmaster"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskmaster"))
        tasks_file = _env_path(_k("TASKS_FILE"), data_dir / "tasks.json")
        prefs_path = _env_path(_k("PREFS_PATH"), data_dir / "prefs.json")

        server_host = _env(_k("HOST"), "127.0.0.1").strip() or "127.0.0.1"
        server_port = _env_int(_k("PORT"), 3000)
        api_url = _env(_k("API_URL"), f"http://localhost:{server_port}/api/tasks").strip()
        cors_origins = _env_list(_k("CORS_ORIGINS"), ["*"])
        request_timeout_seconds = max(0.5, _env_float(_k("REQUEST_TIMEOUT_SECONDS"), 10.0))

        reminder_interval_seconds = max(1.0, _env_float(_k("REMINDER_INTERVAL_SECONDS"), 60.0))
        reminder_lead_minutes = max(0, _env_int(_k("REMINDER_LEAD_MINUTES"), 15))
        reminder_catch_up = _env_bool(_k("REMINDER_CATCH_UP"), False)
        desktop_notifications = _env_bool(_k("DESKTOP_NOTIFICATIONS"), True)

        undo_window_seconds = max(0.0, _env_float(_k("UNDO_WINDOW_SECONDS"), 5.0))
        nlp_debounce_ms = max(0, _env_int(_k("NLP_DEBOUNCE_MS"), 500))

        default_priority = _env(_k("DEFAULT_PRIORITY"), "medium").strip().lower()
        if default_priority not in PRIORITIES:
            default_priority = "medium"

        theme = _env(_k("THEME"), "light").strip().lower()
        if theme not in ("light", "dark"):
            theme = "light"

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            tasks_file=tasks_file,
            prefs_path=prefs_path,
            api_url=api_url,
            server_host=server_host,
            server_port=server_port,
            cors_origins=cors_origins,
            request_timeout_seconds=request_timeout_seconds,
            reminder_interval_seconds=reminder_interval_seconds,
            reminder_lead_minutes=reminder_lead_minutes,
            reminder_catch_up=reminder_catch_up,
            desktop_notifications=desktop_notifications,
            undo_window_seconds=undo_window_seconds,
            nlp_debounce_ms=nlp_debounce_ms,
            default_priority=default_priority,
            theme=theme,
        )


SETTINGS = Settings.from_env()

# ---- Optional local overrides (never committed) ----
# Prefer .env; use config_local.py only for a couple of safe overrides.
try:
    import config_local as _config_local  # type: ignore
except ImportError:
    _config_local = None

if _config_local is not None:
    if hasattr(_config_local, "API_URL"):
        object.__setattr__(SETTINGS, "api_url", str(_config_local.API_URL))  # type: ignore[misc]
    if hasattr(_config_local, "DESKTOP_NOTIFICATIONS"):
        object.__setattr__(  # type: ignore[misc]
            SETTINGS, "desktop_notifications", bool(_config_local.DESKTOP_NOTIFICATIONS)
        )


def get_settings() -> Settings:
    return SETTINGS
