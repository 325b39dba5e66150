"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskDraft, Priority) and timestamp helpers
- task_store.py: in-memory cache with optimistic updates, rollback and undo
- task_view.py: pure filter/sort/progress projection
- task_scheduler.py: polling reminder scheduler
- task_api.py: async HTTP client for the persistence service
- calendar_export.py: iCalendar export of a single task
"""
