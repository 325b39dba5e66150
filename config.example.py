# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening the code.
"""

ENV_VARS = {
    # App / logging
    "TASKMASTER_APP_NAME": "App display name, also used as the notification sender (default: taskmaster).",
    "TASKMASTER_LOG_LEVEL": "Console logging level (default: INFO).",
    # Paths (gitignored)
    "TASKMASTER_DATA_DIR": "Local data directory for logs and preferences (default: .local/taskmaster).",
    "TASKMASTER_TASKS_FILE": "Server task file (default: <data_dir>/tasks.json).",
    "TASKMASTER_PREFS_PATH": "Saved theme preference (default: <data_dir>/prefs.json).",
    # Task service
    "TASKMASTER_HOST": "Server bind address (default: 127.0.0.1).",
    "TASKMASTER_PORT": "Server port (default: 3000).",
    "TASKMASTER_API_URL": "Client base URL (default: http://localhost:<port>/api/tasks).",
    "TASKMASTER_CORS_ORIGINS": "Comma/space separated list of allowed origins (default: *).",
    "TASKMASTER_REQUEST_TIMEOUT_SECONDS": "HTTP request timeout for the client (default: 10).",
    # Reminders
    "TASKMASTER_REMINDER_INTERVAL_SECONDS": "Reminder poll interval and firing window (default: 60).",
    "TASKMASTER_REMINDER_LEAD_MINUTES": "How long before the due time a toggled reminder fires (default: 15).",
    "TASKMASTER_REMINDER_CATCH_UP": "Fire reminders missed while the loop was stalled (true/false, default false).",
    "TASKMASTER_DESKTOP_NOTIFICATIONS": "Try OS notifications before the in-app alert (true/false, default true).",
    # Interaction
    "TASKMASTER_UNDO_WINDOW_SECONDS": "How long a deleted task can be restored (default: 5).",
    "TASKMASTER_NLP_DEBOUNCE_MS": "Quiet period before the title is scanned for a date (default: 500).",
    "TASKMASTER_DEFAULT_PRIORITY": "Priority for new tasks: low|medium|high (default: medium).",
    "TASKMASTER_THEME": "Initial theme when no preference is saved: light|dark (default: light).",
}
