"""taskmaster: personal task tracker (console client + flat-file REST service)."""

__version__ = "0.2.0"
