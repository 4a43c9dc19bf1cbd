"""Execution substrate for orchestration steps."""

from .tasks import ErrorHandler, TaskDispatcher

__all__ = [
    "TaskDispatcher",
    "ErrorHandler",
]
