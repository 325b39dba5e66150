# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Prefer `.env`. Only API_URL and DESKTOP_NOTIFICATIONS are read from here.
"""

# Example: talk to a task service on another machine
# API_URL = "http://192.168.1.20:3000/api/tasks"

# Example: headless box without notify-send
# DESKTOP_NOTIFICATIONS = False
