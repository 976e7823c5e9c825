"""Data backends and tasks."""

from .backend import DataBackend
from .task import Task, TaskClassif, TaskRegr

__all__ = ["DataBackend", "Task", "TaskClassif", "TaskRegr"]
