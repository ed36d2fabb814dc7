"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, TaskPriority, QueueStats)
- events.py: listener registry for scheduler notifications
- task_scheduler.py: priority/dependency-aware queue with a polling loop
- task_executor.py: runs handlers for promoted tasks and reports outcomes
- task_api.py: small helpers used by the rest of the app
"""
