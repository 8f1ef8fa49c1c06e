"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority, Reminder, TaskPatch)
- normalizer.py: defaults and validation on create / partial update
- task_store.py: SQLite-backed storage
- smart_sort.py: display order (completion -> priority -> due date -> recency)
- due_dates.py: overdue / due today / upcoming buckets
- stats.py: productivity summary
- task_api.py: operations used by the rest of the app
"""
