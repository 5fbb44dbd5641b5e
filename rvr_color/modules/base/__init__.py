"""Building blocks shared by sensor modules."""

from .task_manager import AsyncTaskManager

__all__ = ["AsyncTaskManager"]
